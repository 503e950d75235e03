"""
ELF decoding and patching for strip-versioned-symbols.

This package provides the pieces of one forward pass over an ELF file:
- types: ELF struct definitions, parameterized by address width
- header: identification validation and header decoding
- sections: section header table scan for SHT_DYNAMIC
- dynamic: dynamic entry reading, versioning removal and write-back
"""

from .header import parse_header
from .sections import read_section_header, find_dynamic_section
from .dynamic import (
    read_dynamic_entries,
    strip_version_entries,
    write_dynamic_entries,
    patch_dynamic_section,
    is_strippable,
    PatchResult,
    StrippedEntry,
)
from .types import (
    ElfClass,
    ElfIdent,
    ElfHeader,
    SectionHeader,
    DynamicEntry,
    section_type_name,
    dynamic_tag_name,
    # Constants
    ELF_MAGIC,
    EI_NIDENT,
    ELFCLASS32,
    ELFCLASS64,
    ELFDATA2LSB,
    EV_CURRENT,
    ELFOSABI_NONE,
    VERSION_TAGS,
    # Section header types
    SHT_NULL,
    SHT_PROGBITS,
    SHT_STRTAB,
    SHT_DYNAMIC,
    SHT_DYNSYM,
    SHT_GNU_VERNEED,
    SHT_GNU_VERSYM,
    # Dynamic section tags
    DT_NULL,
    DT_NEEDED,
    DT_STRTAB,
    DT_SYMTAB,
    DT_VERSYM,
    DT_VERDEF,
    DT_VERDEFNUM,
    DT_VERNEED,
    DT_VERNEEDNUM,
)

__all__ = [
    # Operations
    "parse_header",
    "read_section_header",
    "find_dynamic_section",
    "read_dynamic_entries",
    "strip_version_entries",
    "write_dynamic_entries",
    "patch_dynamic_section",
    "is_strippable",
    "PatchResult",
    "StrippedEntry",
    # Structs
    "ElfClass",
    "ElfIdent",
    "ElfHeader",
    "SectionHeader",
    "DynamicEntry",
    "section_type_name",
    "dynamic_tag_name",
    # Constants
    "ELF_MAGIC",
    "EI_NIDENT",
    "ELFCLASS32",
    "ELFCLASS64",
    "ELFDATA2LSB",
    "EV_CURRENT",
    "ELFOSABI_NONE",
    "VERSION_TAGS",
    # Section header types
    "SHT_NULL",
    "SHT_PROGBITS",
    "SHT_STRTAB",
    "SHT_DYNAMIC",
    "SHT_DYNSYM",
    "SHT_GNU_VERNEED",
    "SHT_GNU_VERSYM",
    # Dynamic section tags
    "DT_NULL",
    "DT_NEEDED",
    "DT_STRTAB",
    "DT_SYMTAB",
    "DT_VERSYM",
    "DT_VERDEF",
    "DT_VERDEFNUM",
    "DT_VERNEED",
    "DT_VERNEEDNUM",
]
