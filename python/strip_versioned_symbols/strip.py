"""
One-pass removal of symbol-versioning metadata from an ELF file.

Usage:
    from strip_versioned_symbols import strip_file

    result = strip_file(Path("libfoo.so"))
    if not result.success:
        print(result.diagnostic())

The pass is: decode the header, find the first SHT_DYNAMIC section, zero
its DT_VERSYM / DT_VERNEED / DT_VERNEEDNUM entries and write the section back
if anything changed. Nothing is written before the final write-back, so a
failed run leaves the file untouched.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import ErrorKind, StripError
from .elf.dynamic import PatchResult, patch_dynamic_section
from .elf.header import parse_header
from .elf.sections import find_dynamic_section
from .elf.types import ElfClass
from .stream import ByteStream, FileStream

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Step of the pass in which a failure happened."""

    OPEN = "Couldn't open file."
    HEADER = "Couldn't parse elf header."
    SECTION_SCAN = "Couldn't find the dynamic section."
    DYNAMIC_PATCH = "Couldn't patch the dynamic section."


@dataclass
class StripResult:
    """Outcome of one strip pass."""

    success: bool
    path: Path | None = None
    elfclass: ElfClass | None = None
    patch: PatchResult | None = None
    error: str | None = None
    kind: ErrorKind | None = None
    phase: Phase | None = None

    @property
    def entries_stripped(self) -> int:
        return len(self.patch.stripped) if self.patch else 0

    def diagnostic(self) -> str:
        """User-facing text naming the failed phase and the reason."""
        if self.success:
            if self.entries_stripped:
                return f"Stripped {self.entries_stripped} versioning entries."
            return "No versioning entries found."
        return f"{self.phase.value} Reason: {self.error}"


def strip_versioned_symbols(stream: ByteStream) -> StripResult:
    """Strip symbol-versioning entries from the ELF file behind a stream.

    Args:
        stream: Read-write stream positioned at the start of the file

    Returns:
        StripResult; on failure it carries the error kind, phase and reason
    """
    phase = Phase.HEADER
    elfclass = None
    try:
        ehdr = parse_header(stream)
        elfclass = ehdr.elfclass

        phase = Phase.SECTION_SCAN
        dynamic = find_dynamic_section(stream, ehdr)

        phase = Phase.DYNAMIC_PATCH
        patch = patch_dynamic_section(stream, dynamic, elfclass)
    except StripError as e:
        logger.debug("%s failed: %s", phase.name, e.reason)
        return StripResult(
            success=False,
            elfclass=elfclass,
            error=e.reason,
            kind=e.kind,
            phase=phase,
        )

    return StripResult(success=True, elfclass=elfclass, patch=patch)


def strip_file(path: Path) -> StripResult:
    """Strip symbol-versioning entries from an ELF file in place.

    Args:
        path: Path to an ELF executable or shared object

    Returns:
        StripResult for the file
    """
    try:
        f = open(path, "r+b")
    except OSError as e:
        return StripResult(
            success=False,
            path=path,
            error=f"{path}: {e.strerror}",
            kind=ErrorKind.IO,
            phase=Phase.OPEN,
        )

    with f:
        result = strip_versioned_symbols(FileStream(f))
    result.path = path
    return result
