"""
Error taxonomy for ELF decoding and patching.

Decoders, the section scanner and the dynamic patcher raise StripError
subclasses. The orchestrator (strip.py) catches them once and turns them into
a failed StripResult; only the command-line tool prints and exits.
"""

from enum import Enum


class ErrorKind(Enum):
    """Category of a fatal condition."""

    MALFORMED_INPUT = "malformed input"  # Bad magic, unsupported ident, bad stride
    TRUNCATED_INPUT = "truncated input"  # Short read at any decode step
    MISSING_STRUCTURE = "missing structure"  # No SHT_DYNAMIC section
    IO = "I/O"  # Seek, write or flush failure


class StripError(Exception):
    """Base class for all fatal conditions during a strip pass."""

    kind: ErrorKind = ErrorKind.IO

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MalformedInputError(StripError):
    """Raised when the file is structurally invalid or unsupported."""

    kind = ErrorKind.MALFORMED_INPUT


class TruncatedInputError(StripError):
    """Raised when the file ends before a structure is fully read."""

    kind = ErrorKind.TRUNCATED_INPUT


class MissingStructureError(StripError):
    """Raised when a required structure is absent from the file."""

    kind = ErrorKind.MISSING_STRUCTURE


class StreamIOError(StripError):
    """Raised when the underlying stream refuses a seek, write or flush."""

    kind = ErrorKind.IO
