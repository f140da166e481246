"""Locale tag helpers.

Locales are plain strings in the ``language[_COUNTRY[_variant]]`` form, e.g.
``de``, ``en_US``. Tags written with hyphens (``en-US``, the ``xml:lang``
convention) are accepted and normalized.
"""

from __future__ import annotations

from typing import Optional


def string_to_locale(tag: Optional[str]) -> Optional[str]:
    """Normalize ``tag`` to ``language[_COUNTRY[_variant]]`` or return None."""

    if tag is None:
        return None
    parts = [part for part in tag.strip().replace("-", "_").split("_") if part]
    if not parts:
        return None
    normalized = [parts[0].lower()]
    if len(parts) > 1:
        normalized.append(parts[1].upper())
    normalized.extend(parts[2:])
    return "_".join(normalized)


def locale_language(locale: str) -> str:
    """Return the language part of a normalized locale."""

    return locale.split("_", 1)[0]
