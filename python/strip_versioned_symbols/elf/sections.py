"""
Section header table scanning.

The table is walked with e_shentsize as the stride. Producers may declare a
stride larger than the structure we know about; the extra trailing bytes of
each entry are skipped, never interpreted.
"""

import logging

from ..errors import (
    MalformedInputError,
    MissingStructureError,
    StreamIOError,
    TruncatedInputError,
)
from ..stream import ByteStream, SeekOrigin
from .types import ElfHeader, SectionHeader, section_type_name

logger = logging.getLogger(__name__)


def read_section_header(stream: ByteStream, ehdr: ElfHeader) -> SectionHeader:
    """Read one section header at the cursor and skip past its stride.

    Args:
        stream: Stream positioned at the start of a section header entry
        ehdr: ELF header providing the width and e_shentsize

    Returns:
        Decoded SectionHeader; the stream is left at the next entry

    Raises:
        MalformedInputError: If e_shentsize cannot hold a section header
        TruncatedInputError: If the file ends inside the entry
        StreamIOError: If skipping the entry's surplus bytes fails
    """
    required_bytes = SectionHeader.size(ehdr.elfclass)
    total_bytes = ehdr.e_shentsize
    if required_bytes > total_bytes:
        raise MalformedInputError(
            f"section header is larger than e_shentsize "
            f"({required_bytes} > {total_bytes})."
        )

    data = stream.read(required_bytes)
    if len(data) < required_bytes:
        raise TruncatedInputError("Ran out of bytes while reading a section header.")

    skip_bytes = total_bytes - required_bytes
    if skip_bytes and not stream.seek(skip_bytes, SeekOrigin.RELATIVE):
        raise StreamIOError(
            "Ran out of bytes while skipping to the end of a section header."
        )

    return SectionHeader.from_bytes(data, ehdr.elfclass)


def find_dynamic_section(stream: ByteStream, ehdr: ElfHeader) -> SectionHeader:
    """Locate the first SHT_DYNAMIC section in the section header table.

    Only the first match in table order is returned. Well-formed files have
    at most one dynamic section.

    Args:
        stream: Stream to scan
        ehdr: Decoded ELF header (e_shoff, e_shnum, e_shentsize)

    Returns:
        Section header of the dynamic section

    Raises:
        StreamIOError: If the table offset cannot be reached
        MissingStructureError: If no SHT_DYNAMIC section exists
        MalformedInputError, TruncatedInputError: From read_section_header()
    """
    logger.debug("e_shnum = %d", ehdr.e_shnum)
    if not stream.seek(ehdr.e_shoff, SeekOrigin.ABSOLUTE):
        raise StreamIOError(
            f"Failed to seek to offset {ehdr.e_shoff}; "
            f"this is e_shoff in the ELF header."
        )

    for index in range(ehdr.e_shnum):
        shdr = read_section_header(stream, ehdr)
        logger.debug(
            "Found section %d: type = %s", index, section_type_name(shdr.sh_type)
        )
        if shdr.is_dynamic:
            return shdr

    raise MissingStructureError("No dynamic section found.")
