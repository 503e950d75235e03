"""
Random-access byte streams.

The ELF patcher never loads a whole file; it walks it with a small set of
blocking primitives (read, seek, position, write, flush). ByteStream is that
contract. FileStream adapts an open binary file object and MemoryStream keeps
everything in a bytearray, which is what the tests use.

Primitives report failure through their return values (short counts, False)
rather than raising, so callers decide which failures are fatal.
"""

import io
from abc import ABC, abstractmethod
from enum import Enum
from typing import BinaryIO


class SeekOrigin(Enum):
    """Reference point for ByteStream.seek()."""

    ABSOLUTE = io.SEEK_SET
    RELATIVE = io.SEEK_CUR
    END = io.SEEK_END


class ByteStream(ABC):
    """Abstract random-access byte stream."""

    @abstractmethod
    def read(self, size: int) -> bytes:
        """Read up to size bytes. Fewer bytes signal EOF or an error."""
        ...

    @abstractmethod
    def seek(self, offset: int, origin: SeekOrigin = SeekOrigin.ABSOLUTE) -> bool:
        """Move the cursor. Returns False if the move is impossible."""
        ...

    @abstractmethod
    def position(self) -> int:
        """Current absolute offset, or -1 if it cannot be determined."""
        ...

    @abstractmethod
    def write(self, data: bytes | bytearray) -> int:
        """Write data at the cursor. Returns the number of bytes written."""
        ...

    @abstractmethod
    def flush(self) -> bool:
        """Push buffered writes to the backing store."""
        ...


class FileStream(ByteStream):
    """ByteStream over an open binary file object.

    Usage:
        with open("libfoo.so", "r+b") as f:
            header = parse_header(FileStream(f))
    """

    def __init__(self, fileobj: BinaryIO):
        self._file = fileobj

    def read(self, size: int) -> bytes:
        try:
            return self._file.read(size)
        except (OSError, ValueError):
            return b""

    def seek(self, offset: int, origin: SeekOrigin = SeekOrigin.ABSOLUTE) -> bool:
        try:
            self._file.seek(offset, origin.value)
        except (OSError, ValueError, OverflowError):
            return False
        return True

    def position(self) -> int:
        try:
            return self._file.tell()
        except (OSError, ValueError):
            return -1

    def write(self, data: bytes | bytearray) -> int:
        try:
            written = self._file.write(data)
        except (OSError, ValueError):
            return 0
        return written or 0

    def flush(self) -> bool:
        try:
            self._file.flush()
        except (OSError, ValueError):
            return False
        return True


class MemoryStream(ByteStream):
    """ByteStream backed by a bytearray.

    Behaves like a regular file: seeking past the end is allowed, reads there
    return nothing, and writes past the end zero-fill the gap.
    """

    def __init__(self, data: bytes | bytearray = b""):
        self._data = bytearray(data)
        self._pos = 0

    @property
    def data(self) -> bytearray:
        """Current contents (mutable)."""
        return self._data

    def read(self, size: int) -> bytes:
        chunk = bytes(self._data[self._pos : self._pos + size])
        self._pos += len(chunk)
        return chunk

    def seek(self, offset: int, origin: SeekOrigin = SeekOrigin.ABSOLUTE) -> bool:
        if origin is SeekOrigin.ABSOLUTE:
            target = offset
        elif origin is SeekOrigin.RELATIVE:
            target = self._pos + offset
        else:
            target = len(self._data) + offset
        if target < 0:
            return False
        self._pos = target
        return True

    def position(self) -> int:
        return self._pos

    def write(self, data: bytes | bytearray) -> int:
        end = self._pos + len(data)
        if self._pos > len(self._data):
            self._data.extend(b"\x00" * (self._pos - len(self._data)))
        self._data[self._pos : end] = data
        self._pos = end
        return len(data)

    def flush(self) -> bool:
        return True
