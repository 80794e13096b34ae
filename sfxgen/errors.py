"""sfxgen error taxonomy.

Codec errors carry the sfxr message text plus the offending path so the
CLI (or any other front end) can show them as-is.
"""

from __future__ import annotations

from pathlib import Path


class SfxGenError(Exception):
    """Base error for the sfxgen library."""


class AllocationError(SfxGenError):
    """Raised when a synth context buffer cannot be allocated."""


class CodecError(SfxGenError):
    """Base error for parameter file I/O."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.message = message
        self.path = Path(path) if path is not None else None
        super().__init__(f"{message} ({self.path})" if self.path else message)


class FileOpenError(CodecError):
    """Raised when a parameter file cannot be opened."""


class LoadError(CodecError):
    """Raised when a parameter file cannot be decoded."""


class FileReadError(LoadError):
    """Raised when a parameter file ends before its record is complete."""


class UnsupportedVersionError(LoadError):
    """Raised for rFX or sfxr versions this codec does not understand."""


class InvalidRecordLengthError(LoadError):
    """Raised when an rFX header announces a record size other than 96."""


class InvalidParameterError(LoadError):
    """Raised when a decoded record holds a value with no meaning (wave type)."""


class SaveError(CodecError):
    """Raised when a parameter file cannot be written."""


class FileWriteError(SaveError):
    """Raised when writing a parameter file fails or is short."""


class EncodeError(SaveError):
    """Raised when a parameter set does not fit the rFX record (float32 overflow)."""
