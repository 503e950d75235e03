"""
ELF identification and header decoding.

The header is read in two phases: the fixed 16-byte e_ident block, which
tells us the address width, then the width-dependent remainder.
"""

import logging

from ..errors import TruncatedInputError
from ..stream import ByteStream
from .types import EI_NIDENT, ElfHeader, ElfIdent

logger = logging.getLogger(__name__)


def parse_header(stream: ByteStream) -> ElfHeader:
    """Decode the ELF header at the stream's current position.

    The stream is expected to be at offset 0. On return it is positioned
    just past the header.

    Args:
        stream: Stream positioned at file start

    Returns:
        Decoded ElfHeader; its elfclass selects the 32- or 64-bit code path

    Raises:
        TruncatedInputError: If the file ends inside the header
        MalformedInputError: If the identification block is unsupported
    """
    raw_ident = stream.read(EI_NIDENT)
    if len(raw_ident) < EI_NIDENT:
        raise TruncatedInputError("Ran out of bytes while reading e_ident.")

    ident = ElfIdent.from_bytes(raw_ident)
    elfclass = ident.validate()

    remaining_size = ElfHeader.remainder_size(elfclass)
    rest = stream.read(remaining_size)
    if len(rest) < remaining_size:
        raise TruncatedInputError(
            f"Ran out of bytes while reading the rest of the "
            f"{elfclass.bits}-bit ELF header."
        )

    ehdr = ElfHeader.from_bytes(ident, rest, elfclass)
    logger.debug("Found %d-bit ELF executable.", elfclass.bits)
    return ehdr
