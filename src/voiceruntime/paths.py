"""Where the runtime finds its ``*.config`` files and spills audio to disk.

``VR_CONFIG_DIR`` and ``VR_CACHE_DIR`` override the per-user defaults. An
overridden config directory has to exist; the default one may be absent,
which simply means nothing is configured yet.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

VR_CONFIG_ENV = "VR_CONFIG_DIR"
VR_CACHE_ENV = "VR_CACHE_DIR"

APP_DIR = "voiceruntime"
WINDOWS_APP_DIR = "VoiceRuntime"


def _is_windows() -> bool:
    return os.name == "nt"


def _env_dir(name: str) -> Optional[Path]:
    value = os.environ.get(name, "").strip()
    return Path(value).expanduser() if value else None


def _user_base(xdg_env: str, home_subdir: str, windows_env: str, windows_subdir: str) -> Path:
    if _is_windows():
        return _env_dir(windows_env) or Path.home() / "AppData" / windows_subdir
    return _env_dir(xdg_env) or Path.home() / home_subdir


def config_dir_override() -> Optional[Path]:
    """Config directory named by ``VR_CONFIG_DIR``, if set."""
    return _env_dir(VR_CONFIG_ENV)


def default_config_dir() -> Path:
    base = _user_base("XDG_CONFIG_HOME", ".config", "APPDATA", "Roaming")
    return base / (WINDOWS_APP_DIR if _is_windows() else APP_DIR)


def config_dir() -> Path:
    return config_dir_override() or default_config_dir()


def audio_cache_dir() -> Path:
    """Directory for file-backed audio destinations, created on first use."""

    directory = _env_dir(VR_CACHE_ENV)
    if directory is None:
        base = _user_base("XDG_CACHE_HOME", ".cache", "LOCALAPPDATA", "Local")
        directory = base / WINDOWS_APP_DIR / "Cache" if _is_windows() else base / APP_DIR
    directory.mkdir(parents=True, exist_ok=True)
    return directory
