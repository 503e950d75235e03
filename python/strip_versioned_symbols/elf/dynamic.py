"""
Dynamic section reading and symbol-versioning removal.

The dynamic section is an array of (d_tag, d_un) pairs terminated by the
first DT_NULL entry. Versioning entries (DT_VERSYM, DT_VERNEED,
DT_VERNEEDNUM) are overwritten with zeroed DT_NULL entries in place, so the
section keeps its size, its entry count and every entry's offset.

The section is rewritten only when something changed. Running the patcher
on an already patched file reads up to the first DT_NULL, finds nothing to
strip and performs no write at all.
"""

import logging
from dataclasses import dataclass, field

from ..errors import StreamIOError, TruncatedInputError
from ..stream import ByteStream, SeekOrigin
from .types import DynamicEntry, ElfClass, SectionHeader

logger = logging.getLogger(__name__)


@dataclass
class StrippedEntry:
    """Record of one dynamic entry that was zeroed."""

    index: int  # Position in the dynamic section
    file_offset: int
    original: DynamicEntry


@dataclass
class PatchResult:
    """Result of patching a dynamic section."""

    section_offset: int  # sh_offset of the patched section
    entry_count: int  # Entries read, terminator included
    stripped: list[StrippedEntry] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether the section was rewritten."""
        return bool(self.stripped)


def is_strippable(entry: DynamicEntry) -> bool:
    """Check if an entry carries symbol-versioning metadata."""
    return entry.is_version_tag


def read_dynamic_entries(
    stream: ByteStream, section: SectionHeader, elfclass: ElfClass
) -> list[DynamicEntry]:
    """Read dynamic entries up to and including the first DT_NULL.

    The scan is bounded by the terminator only, not by sh_size.

    Args:
        stream: Stream to read from
        section: Header of the SHT_DYNAMIC section
        elfclass: Width of the file's entries

    Returns:
        Entries in file order; the last one is always DT_NULL

    Raises:
        StreamIOError: If sh_offset cannot be reached
        TruncatedInputError: If the file ends before a DT_NULL entry
    """
    if not stream.seek(section.sh_offset, SeekOrigin.ABSOLUTE):
        raise StreamIOError(
            f"Failed to seek to offset {section.sh_offset}; "
            f"this is sh_offset in the SHT_DYNAMIC section header entry."
        )

    entry_size = DynamicEntry.size(elfclass)
    entries: list[DynamicEntry] = []
    while True:
        data = stream.read(entry_size)
        if len(data) < entry_size:
            raise TruncatedInputError(
                "Ran out of bytes while reading a dynamic section entry."
            )
        entry = DynamicEntry.from_bytes(data, elfclass)
        logger.debug("Dynamic section entry found; tag = %s.", entry.tag_name)
        entries.append(entry)
        if entry.is_null:
            return entries


def strip_version_entries(
    entries: list[DynamicEntry], elfclass: ElfClass, section_offset: int = 0
) -> list[StrippedEntry]:
    """Zero every versioning entry in place.

    Args:
        entries: Entries as returned by read_dynamic_entries(); mutated
        elfclass: Width of the entries (for file offsets)
        section_offset: sh_offset of the section (for file offsets)

    Returns:
        One StrippedEntry per replaced entry, in sequence order
    """
    entry_size = DynamicEntry.size(elfclass)
    stripped = []
    for index, entry in enumerate(entries):
        if is_strippable(entry):
            stripped.append(
                StrippedEntry(
                    index=index,
                    file_offset=section_offset + index * entry_size,
                    original=entry,
                )
            )
            entries[index] = DynamicEntry.null()
    return stripped


def write_dynamic_entries(
    stream: ByteStream,
    section: SectionHeader,
    entries: list[DynamicEntry],
    elfclass: ElfClass,
) -> None:
    """Rewrite the whole entry sequence at sh_offset and flush.

    Raises:
        StreamIOError: On seek, short write or flush failure
    """
    if not stream.seek(section.sh_offset, SeekOrigin.ABSOLUTE):
        raise StreamIOError(
            f"While preparing to write: failed to seek to offset "
            f"{section.sh_offset}; this is sh_offset in the SHT_DYNAMIC "
            f"section header entry."
        )

    payload = b"".join(entry.to_bytes(elfclass) for entry in entries)
    written = stream.write(payload)
    if written < len(payload):
        raise StreamIOError("Failure while writing updated .dynamic table.")
    if not stream.flush():
        raise StreamIOError("Failure while flushing I/O output buffers.")


def patch_dynamic_section(
    stream: ByteStream, section: SectionHeader, elfclass: ElfClass
) -> PatchResult:
    """Remove symbol-versioning entries from a dynamic section.

    Args:
        stream: Read-write stream over the ELF file
        section: Header of the SHT_DYNAMIC section
        elfclass: Width of the file

    Returns:
        PatchResult describing what was stripped (possibly nothing)

    Raises:
        StreamIOError: On seek, write or flush failure
        TruncatedInputError: If the entry sequence is not terminated
    """
    entries = read_dynamic_entries(stream, section, elfclass)
    stripped = strip_version_entries(entries, elfclass, section.sh_offset)
    result = PatchResult(
        section_offset=section.sh_offset,
        entry_count=len(entries),
        stripped=stripped,
    )

    if not stripped:
        logger.debug("No symbol-versioning entries found; nothing to write.")
        return result

    for record in stripped:
        logger.debug(
            "Stripping %s at index %d (offset 0x%x)",
            record.original.tag_name,
            record.index,
            record.file_offset,
        )
    write_dynamic_entries(stream, section, entries, elfclass)
    return result
