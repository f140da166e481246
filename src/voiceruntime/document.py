"""Position of an element within a parsed document."""

from __future__ import annotations

from typing import Dict, Optional
import xml.etree.ElementTree as ET

from .locales import string_to_locale
from .phoneset import XML_LANG

VOICE_TAG = "voice"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


class DocumentContext:
    """An element together with the document root it belongs to.

    ElementTree keeps no parent links, so they are indexed once per context.
    ``element`` must belong to the tree under ``root``.
    """

    def __init__(self, element: ET.Element, root: ET.Element) -> None:
        self.element = element
        self.root = root
        self._parents: Dict[int, ET.Element] = {
            id(child): parent for parent in root.iter() for child in parent
        }
        if element is not root and id(element) not in self._parents:
            raise ValueError("Element is not part of the given document")

    @classmethod
    def from_string(cls, text: str, path: Optional[str] = None) -> "DocumentContext":
        """Parse ``text`` and point at the element found by ``path``, or the root."""

        root = ET.fromstring(text)
        element = root.find(path) if path else root
        if element is None:
            raise ValueError(f"No element matches '{path}'")
        return cls(element, root)

    def parent(self, element: ET.Element) -> Optional[ET.Element]:
        return self._parents.get(id(element))

    def enclosing(self, tag: str) -> Optional[ET.Element]:
        """Nearest ancestor-or-self of the element with local name ``tag``."""

        current: Optional[ET.Element] = self.element
        while current is not None:
            if _local_name(current.tag) == tag:
                return current
            current = self.parent(current)
        return None

    def enclosing_voice(self) -> Optional[ET.Element]:
        return self.enclosing(VOICE_TAG)

    def language(self) -> Optional[str]:
        """Declared ``xml:lang`` of the document element, normalized."""
        return string_to_locale(self.root.get(XML_LANG))
