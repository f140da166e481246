"""Registry of the voices known to the running system."""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import Dict, List, Optional
import xml.etree.ElementTree as ET

from .locales import locale_language, string_to_locale


@dataclass(frozen=True)
class VoiceProfile:
    name: str
    locale: str
    sample_rate: int = 16000
    gender: Optional[str] = None
    resource: Optional[object] = field(default=None, compare=False, repr=False)

    def own_resource(self) -> Optional[object]:
        """The phonetic resource this voice was built with, if any."""
        return self.resource


class VoiceRegistry:
    def __init__(self) -> None:
        self._voices: Dict[str, VoiceProfile] = {}
        self._defaults: Dict[str, VoiceProfile] = {}
        self._lock = threading.Lock()

    def register(self, voice: VoiceProfile, default: bool = False) -> VoiceProfile:
        locale = string_to_locale(voice.locale) or voice.locale
        with self._lock:
            self._voices[voice.name] = voice
            if default or locale not in self._defaults:
                self._defaults[locale] = voice
        return voice

    def get(self, name: str) -> Optional[VoiceProfile]:
        with self._lock:
            return self._voices.get(name)

    def voices(self, locale: Optional[str] = None) -> List[VoiceProfile]:
        with self._lock:
            voices = list(self._voices.values())
        if locale is None:
            return voices
        wanted = string_to_locale(locale)
        return [voice for voice in voices if string_to_locale(voice.locale) == wanted]

    def voice_at(
        self, scope: Optional[ET.Element], locale: Optional[str] = None
    ) -> Optional[VoiceProfile]:
        """Voice selected by a ``<voice name="..." gender="...">`` element.

        Names match any voice. A gender alone only matches voices speaking
        ``locale`` (or its language) when a locale is given.
        """

        if scope is None:
            return None
        for name in scope.get("name", "").split():
            voice = self.get(name)
            if voice is not None:
                return voice
        gender = scope.get("gender")
        if gender:
            for voice in self.voices():
                if voice.gender == gender and _speaks(voice, locale):
                    return voice
        return None

    def default_voice_for(self, locale: Optional[str]) -> Optional[VoiceProfile]:
        """Default voice for ``locale``, falling back to its language."""

        normalized = string_to_locale(locale)
        if normalized is None:
            return None
        with self._lock:
            voice = self._defaults.get(normalized)
            if voice is not None:
                return voice
            language = locale_language(normalized)
            voice = self._defaults.get(language)
            if voice is not None:
                return voice
            for candidate_locale, candidate in self._defaults.items():
                if locale_language(candidate_locale) == language:
                    return candidate
        return None

    def clear(self) -> None:
        with self._lock:
            self._voices.clear()
            self._defaults.clear()


def _speaks(voice: VoiceProfile, locale: Optional[str]) -> bool:
    wanted = string_to_locale(locale)
    if wanted is None:
        return True
    own = string_to_locale(voice.locale)
    if own == wanted:
        return True
    return own is not None and locale_language(own) == locale_language(wanted)


default_voices = VoiceRegistry()
