"""Phone sets: the phonetic inventory a locale or voice works with.

The XML format looks like::

    <allophones name="sampa" xml:lang="de" features="vlng vheight ctype">
      <silence ph="_"/>
      <vowel ph="a" vlng="s" vheight="3"/>
      <consonant ph="p" ctype="s"/>
    </allophones>
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Iterator, List, Mapping, Optional, Tuple
import xml.etree.ElementTree as ET

from .locales import string_to_locale

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
ROOT_TAG = "allophones"
PHONE_KINDS = ("vowel", "consonant", "silence", "tone")


@dataclass(frozen=True)
class Phone:
    name: str
    kind: str
    features: Mapping[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_vowel(self) -> bool:
        return self.kind == "vowel"

    @property
    def is_silence(self) -> bool:
        return self.kind == "silence"

    def feature(self, name: str) -> Optional[str]:
        return self.features.get(name)


class PhoneSet:
    """Immutable collection of phones keyed by their symbol."""

    def __init__(
        self,
        name: str,
        locale: str,
        phones: List[Phone],
        identifier: str = "",
        feature_names: Tuple[str, ...] = (),
    ) -> None:
        self.name = name
        self.locale = locale
        self.identifier = identifier or name
        self.feature_names = feature_names
        self._phones: Dict[str, Phone] = {}
        for phone in phones:
            if phone.name in self._phones:
                raise ValueError(f"Duplicate phone '{phone.name}' in phone set '{name}'")
            self._phones[phone.name] = phone
        silences = [phone for phone in phones if phone.is_silence]
        if len(silences) != 1:
            raise ValueError(
                f"Phone set '{name}' must define exactly one silence, found {len(silences)}"
            )
        self.silence = silences[0]

    def phone(self, symbol: str) -> Optional[Phone]:
        return self._phones.get(symbol)

    def vowels(self) -> List[Phone]:
        return [phone for phone in self._phones.values() if phone.is_vowel]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._phones

    def __iter__(self) -> Iterator[Phone]:
        return iter(self._phones.values())

    def __len__(self) -> int:
        return len(self._phones)

    def __repr__(self) -> str:
        return f"PhoneSet({self.identifier!r}, locale={self.locale!r}, phones={len(self)})"


def parse_phone_set(stream: BinaryIO, identifier: str) -> PhoneSet:
    """Parse an allophones XML document; raises ValueError on malformed data."""

    try:
        root = ET.parse(stream).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"Phone set '{identifier}' is not well-formed XML: {exc}") from exc
    if root.tag != ROOT_TAG:
        raise ValueError(f"Expected <{ROOT_TAG}> root element, found <{root.tag}>")
    name = root.get("name")
    if not name:
        raise ValueError(f"Phone set '{identifier}' has no name attribute")
    locale = string_to_locale(root.get(XML_LANG))
    if locale is None:
        raise ValueError(f"Phone set '{identifier}' has no xml:lang attribute")

    phones = []
    for child in root:
        if child.tag not in PHONE_KINDS:
            continue
        symbol = child.get("ph")
        if not symbol:
            raise ValueError(f"<{child.tag}> in phone set '{identifier}' lacks a ph attribute")
        features = {key: value for key, value in child.attrib.items() if key != "ph"}
        phones.append(Phone(name=symbol, kind=child.tag, features=features))

    return PhoneSet(
        name=name,
        locale=locale,
        phones=phones,
        identifier=identifier,
        feature_names=tuple(root.get("features", "").split()),
    )
