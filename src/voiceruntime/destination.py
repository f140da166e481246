"""Choose where synthesized audio bytes are buffered before delivery."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
import io
import logging
import tempfile
import threading
from typing import BinaryIO, Optional

import numpy as np

from .config import OnceValue, PropertyStore, get_store
from .memory import MemoryPolicy, get_memory_policy
from .paths import audio_cache_dir

log = logging.getLogger(__name__)

AUDIOSTORE_PROPERTY = "synthesis.audiostore"

try:
    import soundfile as sf
except Exception:  # pragma: no cover - optional dependency path
    sf = None

try:
    from scipy.io import wavfile as scipy_wavfile
except Exception:  # pragma: no cover - optional dependency path
    scipy_wavfile = None


class AudioDestinationError(RuntimeError):
    """Raised when buffered audio cannot be exported."""


class DestinationMode(str, Enum):
    RAM = "ram"
    FILE = "file"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DestinationMode":
        if value is None:
            return cls.RAM
        try:
            return cls(value.strip().lower())
        except ValueError:
            log.warning("Unknown %s value '%s', using 'auto'", AUDIOSTORE_PROPERTY, value)
            return cls.AUTO


class AudioDestination:
    """Raw PCM buffer held either in memory or in a temporary file.

    The caller owns the destination and should ``close()`` it, or
    ``discard()`` it to also remove a backing file.
    """

    def __init__(self, in_ram: bool, directory: Optional[Path] = None) -> None:
        self.in_ram = in_ram
        self.path: Optional[Path] = None
        if in_ram:
            self._stream: BinaryIO = io.BytesIO()
        else:
            handle = tempfile.NamedTemporaryFile(
                prefix="audio-",
                suffix=".raw",
                dir=str(directory) if directory is not None else None,
                delete=False,
            )
            self._stream = handle
            self.path = Path(handle.name)

    @property
    def is_in_ram(self) -> bool:
        return self.in_ram

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def write(self, data: bytes) -> int:
        return self._stream.write(data)

    @property
    def size(self) -> int:
        if self.closed:
            return self.path.stat().st_size if self.path is not None else 0
        self._stream.flush()
        return self._stream.seek(0, io.SEEK_END)

    def read_bytes(self) -> bytes:
        if self.in_ram:
            if self.closed:
                raise AudioDestinationError("In-memory destination has been closed.")
            return self._stream.getvalue()  # type: ignore[attr-defined]
        if not self.closed:
            self._stream.flush()
        return self.path.read_bytes()  # type: ignore[union-attr]

    def to_array(self, dtype: str = "int16", channels: int = 1) -> np.ndarray:
        """Interpret the buffered bytes as interleaved PCM samples."""

        data = np.frombuffer(self.read_bytes(), dtype=dtype)
        if channels > 1:
            data = data.reshape(-1, channels)
        return data

    def save(
        self,
        path: Path | str,
        samplerate: int,
        *,
        channels: int = 1,
        format: str = "WAV",
        subtype: str = "PCM_16",
    ) -> Path:
        """Write the buffered 16-bit PCM to an audio file."""

        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        data = self.to_array("int16", channels=channels)
        if sf is not None:
            sf.write(str(target), data, samplerate, subtype=subtype, format=format)
            return target
        if scipy_wavfile is not None and format.upper() == "WAV":
            scipy_wavfile.write(str(target), samplerate, data)
            return target
        raise AudioDestinationError(
            f"Cannot write {format} audio without 'soundfile'. Install soundfile via pip."
        )

    def close(self) -> None:
        if self.in_ram or self.closed:
            return
        self._stream.close()

    def discard(self) -> None:
        if not self.closed:
            self._stream.close()
        if self.path is not None:
            self.path.unlink(missing_ok=True)

    def __enter__(self) -> "AudioDestination":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        where = "ram" if self.in_ram else str(self.path)
        return f"AudioDestination({where})"


class DestinationSelector:
    """Applies the ``synthesis.audiostore`` mode (ram, file or auto)."""

    def __init__(
        self,
        store: Optional[PropertyStore] = None,
        memory_policy: Optional[MemoryPolicy] = None,
        directory: Optional[Path] = None,
    ) -> None:
        self._store = store
        self._memory_policy = memory_policy
        self._directory = directory
        self._mode = OnceValue(self._read_mode)

    def _read_mode(self) -> DestinationMode:
        store = self._store or get_store()
        return DestinationMode.parse(store.get_property(AUDIOSTORE_PROPERTY, DestinationMode.RAM.value))

    @property
    def mode(self) -> DestinationMode:
        return self._mode.get()

    def use_ram(self) -> bool:
        mode = self.mode
        if mode is DestinationMode.RAM:
            return True
        if mode is DestinationMode.FILE:
            return False
        policy = self._memory_policy or get_memory_policy()
        return not policy.is_low_memory()

    def create_destination(self) -> AudioDestination:
        in_ram = self.use_ram()
        directory = None
        if not in_ram:
            directory = self._directory or audio_cache_dir()
        destination = AudioDestination(in_ram, directory=directory)
        log.debug("Created %r (mode=%s)", destination, self.mode.value)
        return destination


_selector: Optional[DestinationSelector] = None
_selector_lock = threading.Lock()


def get_selector() -> DestinationSelector:
    global _selector
    if _selector is None:
        with _selector_lock:
            if _selector is None:
                _selector = DestinationSelector()
    return _selector


def set_selector(selector: Optional[DestinationSelector]) -> None:
    global _selector
    with _selector_lock:
        _selector = selector


def create_audio_destination() -> AudioDestination:
    """Create a destination for audio data according to the configured mode.

    Raises OSError if the buffer or its backing file cannot be created.
    """
    return get_selector().create_destination()
