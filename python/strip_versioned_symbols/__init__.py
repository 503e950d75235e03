"""
strip-versioned-symbols: remove symbol-versioning metadata from ELF files.

Rewrites an ELF executable or shared object in place, zeroing the
DT_VERSYM, DT_VERNEED and DT_VERNEEDNUM entries of its dynamic section so it
can be loaded against shared libraries lacking matching version definitions.
Both 32-bit and 64-bit little-endian files are supported.

    from strip_versioned_symbols import strip_file

    result = strip_file(Path("libfoo.so"))

For stream-level access (e.g. patching an in-memory image):

    from strip_versioned_symbols import MemoryStream, strip_versioned_symbols

    stream = MemoryStream(image)
    result = strip_versioned_symbols(stream)
"""

from .errors import (
    ErrorKind,
    StripError,
    MalformedInputError,
    TruncatedInputError,
    MissingStructureError,
    StreamIOError,
)
from .stream import (
    ByteStream,
    FileStream,
    MemoryStream,
    SeekOrigin,
)
from .strip import (
    strip_versioned_symbols,
    strip_file,
    StripResult,
    Phase,
)

__all__ = [
    # Errors
    "ErrorKind",
    "StripError",
    "MalformedInputError",
    "TruncatedInputError",
    "MissingStructureError",
    "StreamIOError",
    # Streams
    "ByteStream",
    "FileStream",
    "MemoryStream",
    "SeekOrigin",
    # Strip pass
    "strip_versioned_symbols",
    "strip_file",
    "StripResult",
    "Phase",
]
