from voiceruntime import paths
from voiceruntime.paths import (
    VR_CACHE_ENV,
    VR_CONFIG_ENV,
    audio_cache_dir,
    config_dir,
    config_dir_override,
    default_config_dir,
)


def test_config_dir_prefers_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv(VR_CONFIG_ENV, str(tmp_path / "elsewhere"))

    assert config_dir_override() == tmp_path / "elsewhere"
    assert config_dir() == tmp_path / "elsewhere"
    assert not (tmp_path / "elsewhere").exists()


def test_blank_override_falls_back_to_default(monkeypatch, tmp_path):
    monkeypatch.setattr(paths, "_is_windows", lambda: False)
    monkeypatch.setenv(VR_CONFIG_ENV, "  ")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

    assert config_dir_override() is None
    assert config_dir() == tmp_path / "xdg" / "voiceruntime"


def test_audio_cache_dir_is_created(monkeypatch, tmp_path):
    monkeypatch.setenv(VR_CACHE_ENV, str(tmp_path / "spill" / "audio"))

    directory = audio_cache_dir()

    assert directory == tmp_path / "spill" / "audio"
    assert directory.is_dir()


def test_xdg_cache_default(monkeypatch, tmp_path):
    monkeypatch.setattr(paths, "_is_windows", lambda: False)
    monkeypatch.delenv(VR_CACHE_ENV, raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache-home"))

    assert audio_cache_dir() == tmp_path / "cache-home" / "voiceruntime"


def test_windows_defaults_use_roaming_config_and_local_cache(monkeypatch, tmp_path):
    monkeypatch.setattr(paths, "_is_windows", lambda: True)
    monkeypatch.delenv(VR_CACHE_ENV, raising=False)
    monkeypatch.setenv("APPDATA", str(tmp_path / "Roaming"))
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "Local"))

    assert default_config_dir() == tmp_path / "Roaming" / "VoiceRuntime"
    assert audio_cache_dir() == tmp_path / "Local" / "VoiceRuntime" / "Cache"
