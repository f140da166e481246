"""Audio file formats the installed libsndfile can produce."""

from __future__ import annotations

from typing import Dict, List

try:
    import soundfile as sf
except Exception:  # pragma: no cover - optional dependency path
    sf = None

STREAMABLE_FORMATS = ("MP3", "OGG")


def _writable_formats() -> Dict[str, str]:
    if sf is None:
        return {}
    return dict(sf.available_formats())


def can_create_mp3() -> bool:
    return "MP3" in _writable_formats()


def can_create_ogg() -> bool:
    if "OGG" not in _writable_formats():
        return False
    return "VORBIS" in sf.available_subtypes("OGG")


def audio_file_format_lines() -> List[str]:
    lines = []
    for name in _writable_formats():
        if name == "OGG" and not can_create_ogg():
            continue
        lines.append(f"{name}_FILE")
        if name in STREAMABLE_FORMATS:
            lines.append(f"{name}_STREAM")
    return lines


def audio_file_format_types() -> str:
    """List writable formats, one per line, as ``NAME_FILE``/``NAME_STREAM``.

    Returns an empty string when no audio backend is installed.
    """

    return "".join(f"{line}\n" for line in audio_file_format_lines())
