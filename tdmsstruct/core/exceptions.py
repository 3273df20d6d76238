# tdmsstruct/core/exceptions.py
from __future__ import annotations


class TdmsError(Exception):
    """Base error for all tdmsstruct exceptions."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at byte offset {offset})"
        super().__init__(message)


# ---- I/O errors ----
class IoOpenFailure(TdmsError, OSError):
    """Raised when the input file cannot be opened for reading."""


class TruncatedRead(TdmsError, EOFError):
    """Raised when fewer bytes are available than a structure requires."""


# ---- Structural decoding errors ----
class DecodeError(TdmsError):
    """Base error for violations of the TDMS segment layout."""


class BadMagicTag(DecodeError):
    """Raised when a segment does not start with the `TDSm` tag."""


class UnsupportedVersion(DecodeError):
    """Raised when a segment declares a format version other than 4713."""


class UnknownRawDataIndexSelector(DecodeError):
    """Raised when an object carries an unrecognised raw data index value."""


class InvalidPropertyType(DecodeError):
    """Raised when a property uses Void, a with-unit float or the DAQmx marker."""


class UnknownTypeTag(DecodeError):
    """Raised when a property type tag is not part of the TDMS type catalog."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class MissingPriorDescriptor(DecodeError, KeyError):
    """Raised when an object reuses a raw data layout that was never defined."""

    def __str__(self) -> str:
        # KeyError would quote the message
        return str(self.args[0]) if self.args else ""


# ---- Output / configuration errors ----
class ReportError(TdmsError):
    """Raised when a report sink is used with unbalanced nesting."""


class ConfigError(TdmsError, ValueError):
    """Raised when a DumpConfig is constructed with invalid inputs."""
