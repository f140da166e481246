from voiceruntime import formats


class DummySoundfile:
    def __init__(self, available, ogg_subtypes):
        self._available = available
        self._ogg_subtypes = ogg_subtypes

    def available_formats(self):
        return dict(self._available)

    def available_subtypes(self, format=None):
        return dict(self._ogg_subtypes) if format == "OGG" else {}


def test_format_listing_marks_streamable_formats(monkeypatch):
    monkeypatch.setattr(
        formats,
        "sf",
        DummySoundfile(
            {"WAV": "WAV (Microsoft)", "OGG": "OGG (OGG Container format)", "MP3": "MPEG-1/2 Audio"},
            {"VORBIS": "Vorbis (Xiph Foundation)"},
        ),
    )

    assert formats.audio_file_format_types() == (
        "WAV_FILE\nOGG_FILE\nOGG_STREAM\nMP3_FILE\nMP3_STREAM\n"
    )
    assert formats.can_create_mp3() is True
    assert formats.can_create_ogg() is True


def test_ogg_without_vorbis_is_skipped(monkeypatch):
    monkeypatch.setattr(
        formats,
        "sf",
        DummySoundfile({"WAV": "WAV", "OGG": "OGG"}, {"OPUS": "Opus"}),
    )

    assert formats.can_create_ogg() is False
    assert formats.can_create_mp3() is False
    assert formats.audio_file_format_lines() == ["WAV_FILE"]


def test_no_backend_lists_nothing(monkeypatch):
    monkeypatch.setattr(formats, "sf", None)
    assert formats.audio_file_format_types() == ""
    assert formats.can_create_ogg() is False


def test_real_backend_can_write_wav():
    assert "WAV_FILE" in formats.audio_file_format_lines()
