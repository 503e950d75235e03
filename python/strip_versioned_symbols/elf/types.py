"""
ELF type definitions for 32-bit and 64-bit little-endian ELF.

Each structure is a single dataclass whose on-disk layout is selected by an
ElfClass value. The 32-bit and 64-bit variants only differ in the width of
address-sized fields, so the field names and order are shared and only the
struct format changes.

We use dataclasses instead of NamedTuples for mutability - the dynamic
section patcher replaces entries in place.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..errors import MalformedInputError

# =============================================================================
# Constants
# =============================================================================

ELF_MAGIC = b"\x7fELF"
EI_NIDENT = 16

# e_ident[EI_CLASS]
ELFCLASSNONE = 0
ELFCLASS32 = 1
ELFCLASS64 = 2

# e_ident[EI_DATA]
ELFDATANONE = 0
ELFDATA2LSB = 1
ELFDATA2MSB = 2

# e_ident[EI_VERSION]
EV_NONE = 0
EV_CURRENT = 1

# e_ident[EI_OSABI]
ELFOSABI_NONE = 0


class ElfClass(IntEnum):
    """Address width of an ELF file (e_ident[EI_CLASS])."""

    ELF32 = ELFCLASS32
    ELF64 = ELFCLASS64

    @property
    def bits(self) -> int:
        return 32 if self is ElfClass.ELF32 else 64


# Section header types (sh_type)
SHT_NULL = 0
SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHT_RELA = 4
SHT_HASH = 5
SHT_DYNAMIC = 6
SHT_NOTE = 7
SHT_NOBITS = 8
SHT_REL = 9
SHT_SHLIB = 10
SHT_DYNSYM = 11
SHT_NUM = 12
SHT_INIT_ARRAY = 14
SHT_FINI_ARRAY = 15
SHT_GNU_HASH = 0x6FFFFFF6
SHT_GNU_VERNEED = 0x6FFFFFFE
SHT_GNU_VERSYM = 0x6FFFFFFF
SHT_LOPROC = 0x70000000
SHT_HIPROC = 0x7FFFFFFF
SHT_LOUSER = 0x80000000
SHT_HIUSER = 0xFFFFFFFF

# Dynamic section tags (d_tag)
DT_NULL = 0
DT_NEEDED = 1
DT_PLTRELSZ = 2
DT_PLTGOT = 3
DT_HASH = 4
DT_STRTAB = 5
DT_SYMTAB = 6
DT_RELA = 7
DT_RELASZ = 8
DT_RELAENT = 9
DT_STRSZ = 10
DT_SYMENT = 11
DT_INIT = 12
DT_FINI = 13
DT_SONAME = 14
DT_RPATH = 15
DT_SYMBOLIC = 16
DT_REL = 17
DT_RELSZ = 18
DT_RELENT = 19
DT_PLTREL = 20
DT_DEBUG = 21
DT_TEXTREL = 22
DT_JMPREL = 23
DT_BIND_NOW = 24
DT_INIT_ARRAY = 25
DT_FINI_ARRAY = 26
DT_INIT_ARRAYSZ = 27
DT_FINI_ARRAYSZ = 28
DT_RUNPATH = 29
DT_FLAGS = 30
DT_ENCODING = 32
DT_LOOS = 0x6000000D
DT_HIOS = 0x6FFFF000
DT_VALRNGLO = 0x6FFFFD00
DT_VALRNGHI = 0x6FFFFDFF
DT_GNU_HASH = 0x6FFFFEF5
DT_ADDRRNGLO = 0x6FFFFE00
DT_ADDRRNGHI = 0x6FFFFEFF
DT_VERSYM = 0x6FFFFFF0
DT_RELACOUNT = 0x6FFFFFF9
DT_RELCOUNT = 0x6FFFFFFA
DT_FLAGS_1 = 0x6FFFFFFB
DT_VERDEF = 0x6FFFFFFC
DT_VERDEFNUM = 0x6FFFFFFD
DT_VERNEED = 0x6FFFFFFE
DT_VERNEEDNUM = 0x6FFFFFFF
DT_LOPROC = 0x70000000
DT_HIPROC = 0x7FFFFFFF

# Dynamic tags that carry symbol-versioning requirements
VERSION_TAGS: frozenset[int] = frozenset({DT_VERSYM, DT_VERNEED, DT_VERNEEDNUM})


_SECTION_TYPE_NAMES: dict[int, str] = {
    SHT_NULL: "SHT_NULL",
    SHT_PROGBITS: "SHT_PROGBITS",
    SHT_SYMTAB: "SHT_SYMTAB",
    SHT_STRTAB: "SHT_STRTAB",
    SHT_RELA: "SHT_RELA",
    SHT_HASH: "SHT_HASH",
    SHT_DYNAMIC: "SHT_DYNAMIC",
    SHT_NOTE: "SHT_NOTE",
    SHT_NOBITS: "SHT_NOBITS",
    SHT_REL: "SHT_REL",
    SHT_SHLIB: "SHT_SHLIB",
    SHT_DYNSYM: "SHT_DYNSYM",
    SHT_NUM: "SHT_NUM",
    SHT_INIT_ARRAY: "SHT_INIT_ARRAY",
    SHT_FINI_ARRAY: "SHT_FINI_ARRAY",
    SHT_GNU_HASH: "SHT_GNU_HASH",
    SHT_GNU_VERNEED: "SHT_GNU_VERNEED",
    SHT_GNU_VERSYM: "SHT_GNU_VERSYM",
    SHT_LOPROC: "SHT_LOPROC",
    SHT_HIPROC: "SHT_HIPROC",
    SHT_LOUSER: "SHT_LOUSER",
    SHT_HIUSER: "SHT_HIUSER",
}

_DYNAMIC_TAG_NAMES: dict[int, str] = {
    DT_NULL: "DT_NULL",
    DT_NEEDED: "DT_NEEDED",
    DT_PLTRELSZ: "DT_PLTRELSZ",
    DT_PLTGOT: "DT_PLTGOT",
    DT_HASH: "DT_HASH",
    DT_STRTAB: "DT_STRTAB",
    DT_SYMTAB: "DT_SYMTAB",
    DT_RELA: "DT_RELA",
    DT_RELASZ: "DT_RELASZ",
    DT_RELAENT: "DT_RELAENT",
    DT_STRSZ: "DT_STRSZ",
    DT_SYMENT: "DT_SYMENT",
    DT_INIT: "DT_INIT",
    DT_FINI: "DT_FINI",
    DT_SONAME: "DT_SONAME",
    DT_RPATH: "DT_RPATH",
    DT_SYMBOLIC: "DT_SYMBOLIC",
    DT_REL: "DT_REL",
    DT_RELSZ: "DT_RELSZ",
    DT_RELENT: "DT_RELENT",
    DT_PLTREL: "DT_PLTREL",
    DT_DEBUG: "DT_DEBUG",
    DT_TEXTREL: "DT_TEXTREL",
    DT_JMPREL: "DT_JMPREL",
    DT_BIND_NOW: "DT_BIND_NOW",
    DT_INIT_ARRAY: "DT_INIT_ARRAY",
    DT_FINI_ARRAY: "DT_FINI_ARRAY",
    DT_INIT_ARRAYSZ: "DT_INIT_ARRAYSZ",
    DT_FINI_ARRAYSZ: "DT_FINI_ARRAYSZ",
    DT_RUNPATH: "DT_RUNPATH",
    DT_FLAGS: "DT_FLAGS",
    DT_ENCODING: "DT_ENCODING",
    DT_LOOS: "DT_LOOS",
    DT_HIOS: "DT_HIOS",
    DT_VALRNGLO: "DT_VALRNGLO",
    DT_VALRNGHI: "DT_VALRNGHI",
    DT_GNU_HASH: "DT_GNU_HASH",
    DT_ADDRRNGLO: "DT_ADDRRNGLO",
    DT_ADDRRNGHI: "DT_ADDRRNGHI",
    DT_VERSYM: "DT_VERSYM",
    DT_RELACOUNT: "DT_RELACOUNT",
    DT_RELCOUNT: "DT_RELCOUNT",
    DT_FLAGS_1: "DT_FLAGS_1",
    DT_VERDEF: "DT_VERDEF",
    DT_VERDEFNUM: "DT_VERDEFNUM",
    DT_VERNEED: "DT_VERNEED",
    DT_VERNEEDNUM: "DT_VERNEEDNUM",
    DT_LOPROC: "DT_LOPROC",
    DT_HIPROC: "DT_HIPROC",
}


def section_type_name(sh_type: int) -> str:
    """Symbolic name of a section header type, for diagnostics."""
    return _SECTION_TYPE_NAMES.get(sh_type, "<unknown section header type>")


def dynamic_tag_name(d_tag: int) -> str:
    """Symbolic name of a dynamic section tag, for diagnostics."""
    return _DYNAMIC_TAG_NAMES.get(d_tag, "<unknown dynamic section tag>")


# =============================================================================
# ELF Structures
# =============================================================================


@dataclass
class ElfIdent:
    """The 16-byte e_ident block at the start of every ELF file."""

    magic: bytes  # 4 bytes, must be ELF_MAGIC
    elfclass: int  # EI_CLASS
    data: int  # EI_DATA (byte order)
    version: int  # EI_VERSION
    osabi: int  # EI_OSABI
    abiversion: int  # EI_ABIVERSION
    padding: bytes  # 7 reserved bytes

    STRUCT_FMT: ClassVar[str] = "<4sBBBBB7s"

    @classmethod
    def from_bytes(cls, data: bytes | bytearray) -> "ElfIdent":
        """Split raw identification bytes into fields without validating them."""
        if len(data) < EI_NIDENT:
            raise ValueError(
                f"Data too short for e_ident: {len(data)} < {EI_NIDENT}"
            )
        return cls(*struct.unpack_from(cls.STRUCT_FMT, data, 0))

    def to_bytes(self) -> bytes:
        return struct.pack(
            self.STRUCT_FMT,
            self.magic,
            self.elfclass,
            self.data,
            self.version,
            self.osabi,
            self.abiversion,
            self.padding,
        )

    def validate(self) -> ElfClass:
        """Check the identification block and return the file's width.

        Fields are checked in on-disk order and the first mismatch wins.

        Returns:
            ElfClass of the file

        Raises:
            MalformedInputError: If any field has an unsupported value
        """
        if self.magic != ELF_MAGIC:
            raise MalformedInputError("magic bytes mismatch; expected 0x7f ELF.")
        if self.elfclass not in (ELFCLASS32, ELFCLASS64):
            raise MalformedInputError(
                "EI_CLASS is neither ELFCLASS32 nor ELFCLASS64."
            )
        if self.data != ELFDATA2LSB:
            raise MalformedInputError("EI_DATA is not ELFDATA2LSB.")
        if self.version != EV_CURRENT:
            raise MalformedInputError("EI_VERSION is not EV_CURRENT.")
        if self.osabi != ELFOSABI_NONE:
            raise MalformedInputError("EI_OSABI is not ELFOSABI_NONE.")
        return ElfClass(self.elfclass)


@dataclass
class ElfHeader:
    """ELF file header (Elf32_Ehdr / Elf64_Ehdr).

    The identification block is decoded separately (see ElfIdent); the
    STRUCT_FMTS describe only the width-dependent remainder that follows it.
    """

    e_ident: ElfIdent
    e_type: int  # Object file type (ET_*)
    e_machine: int  # Architecture (EM_*)
    e_version: int  # ELF version
    e_entry: int  # Entry point virtual address
    e_phoff: int  # Program header table file offset
    e_shoff: int  # Section header table file offset
    e_flags: int  # Processor-specific flags
    e_ehsize: int  # ELF header size
    e_phentsize: int  # Program header entry size
    e_phnum: int  # Number of program headers
    e_shentsize: int  # Section header entry size
    e_shnum: int  # Number of section headers
    e_shstrndx: int  # Section name string table index

    STRUCT_FMTS: ClassVar[dict[ElfClass, str]] = {
        ElfClass.ELF32: "<HHIIIIIHHHHHH",
        ElfClass.ELF64: "<HHIQQQIHHHHHH",
    }

    @classmethod
    def remainder_size(cls, elfclass: ElfClass) -> int:
        """Size of the header after e_ident (36 or 48 bytes)."""
        return struct.calcsize(cls.STRUCT_FMTS[elfclass])

    @classmethod
    def size(cls, elfclass: ElfClass) -> int:
        """Total header size (52 or 64 bytes)."""
        return EI_NIDENT + cls.remainder_size(elfclass)

    @classmethod
    def from_bytes(
        cls, ident: ElfIdent, data: bytes | bytearray, elfclass: ElfClass
    ) -> "ElfHeader":
        """Parse the header remainder that follows an already decoded ident."""
        if len(data) < cls.remainder_size(elfclass):
            raise ValueError("Data too short for ELF header")
        fields = struct.unpack_from(cls.STRUCT_FMTS[elfclass], data, 0)
        return cls(ident, *fields)

    def to_bytes(self) -> bytes:
        """Serialize the full header, identification included."""
        return self.e_ident.to_bytes() + struct.pack(
            self.STRUCT_FMTS[self.elfclass],
            self.e_type,
            self.e_machine,
            self.e_version,
            self.e_entry,
            self.e_phoff,
            self.e_shoff,
            self.e_flags,
            self.e_ehsize,
            self.e_phentsize,
            self.e_phnum,
            self.e_shentsize,
            self.e_shnum,
            self.e_shstrndx,
        )

    @property
    def elfclass(self) -> ElfClass:
        return ElfClass(self.e_ident.elfclass)

    @property
    def is_32(self) -> bool:
        return self.elfclass is ElfClass.ELF32


@dataclass
class SectionHeader:
    """ELF section header (Elf32_Shdr / Elf64_Shdr).

    Only sh_type and sh_offset drive the strip pass; the remaining fields are
    decoded so a header can be logged or re-encoded unchanged.
    """

    sh_name: int  # Offset into section name string table
    sh_type: int  # Section type (SHT_*)
    sh_flags: int  # Section flags (SHF_*)
    sh_addr: int  # Virtual address (if SHF_ALLOC set)
    sh_offset: int  # File offset
    sh_size: int  # Section size
    sh_link: int  # Link to another section (section-type dependent)
    sh_info: int  # Additional info (section-type dependent)
    sh_addralign: int  # Alignment (power of 2, 0 or 1 means none)
    sh_entsize: int  # Entry size if section holds table

    STRUCT_FMTS: ClassVar[dict[ElfClass, str]] = {
        ElfClass.ELF32: "<IIIIIIIIII",
        ElfClass.ELF64: "<IIQQQQIIQQ",
    }

    @classmethod
    def size(cls, elfclass: ElfClass) -> int:
        """Structure size (40 or 64 bytes), excluding any e_shentsize surplus."""
        return struct.calcsize(cls.STRUCT_FMTS[elfclass])

    @classmethod
    def from_bytes(
        cls, data: bytes | bytearray, elfclass: ElfClass, offset: int = 0
    ) -> "SectionHeader":
        """Parse section header from binary data at offset."""
        if len(data) < offset + cls.size(elfclass):
            raise ValueError("Data too short for section header")
        fields = struct.unpack_from(cls.STRUCT_FMTS[elfclass], data, offset)
        return cls(*fields)

    def to_bytes(self, elfclass: ElfClass) -> bytes:
        """Serialize section header to binary data."""
        return struct.pack(
            self.STRUCT_FMTS[elfclass],
            self.sh_name,
            self.sh_type,
            self.sh_flags,
            self.sh_addr,
            self.sh_offset,
            self.sh_size,
            self.sh_link,
            self.sh_info,
            self.sh_addralign,
            self.sh_entsize,
        )

    @property
    def is_dynamic(self) -> bool:
        return self.sh_type == SHT_DYNAMIC


@dataclass
class DynamicEntry:
    """ELF dynamic section entry (Elf32_Dyn / Elf64_Dyn).

    d_val covers both members of the d_un union (d_val and d_ptr); they
    share the same storage and width.
    """

    d_tag: int  # Entry type (DT_*), signed
    d_val: int  # Integer value or address, unsigned

    # Note: d_tag is signed (i/q), d_val is not (I/Q)
    STRUCT_FMTS: ClassVar[dict[ElfClass, str]] = {
        ElfClass.ELF32: "<iI",
        ElfClass.ELF64: "<qQ",
    }

    @classmethod
    def size(cls, elfclass: ElfClass) -> int:
        """Entry size (8 or 16 bytes)."""
        return struct.calcsize(cls.STRUCT_FMTS[elfclass])

    @classmethod
    def null(cls) -> "DynamicEntry":
        """A zeroed entry: d_tag = DT_NULL, d_val = 0."""
        return cls(DT_NULL, 0)

    @classmethod
    def from_bytes(
        cls, data: bytes | bytearray, elfclass: ElfClass, offset: int = 0
    ) -> "DynamicEntry":
        """Parse dynamic entry from binary data at offset."""
        if len(data) < offset + cls.size(elfclass):
            raise ValueError("Data too short for dynamic entry")
        fields = struct.unpack_from(cls.STRUCT_FMTS[elfclass], data, offset)
        return cls(*fields)

    def to_bytes(self, elfclass: ElfClass) -> bytes:
        """Serialize dynamic entry to binary data."""
        return struct.pack(self.STRUCT_FMTS[elfclass], self.d_tag, self.d_val)

    @property
    def is_null(self) -> bool:
        return self.d_tag == DT_NULL

    @property
    def is_version_tag(self) -> bool:
        """Check if this entry carries symbol-versioning metadata."""
        return self.d_tag in VERSION_TAGS

    @property
    def tag_name(self) -> str:
        return dynamic_tag_name(self.d_tag)
