"""Tests for dynamic section reading and patching."""

import pytest

from strip_versioned_symbols.errors import (
    ErrorKind,
    StreamIOError,
    TruncatedInputError,
)
from strip_versioned_symbols.elf.dynamic import (
    is_strippable,
    patch_dynamic_section,
    read_dynamic_entries,
    strip_version_entries,
    write_dynamic_entries,
)
from strip_versioned_symbols.elf.header import parse_header
from strip_versioned_symbols.elf.sections import find_dynamic_section
from strip_versioned_symbols.elf.types import (
    DynamicEntry,
    ElfClass,
    DT_NEEDED,
    DT_NULL,
    DT_STRTAB,
    DT_VERDEF,
    DT_VERNEED,
    DT_VERNEEDNUM,
    DT_VERSYM,
)
from strip_versioned_symbols.stream import MemoryStream

from elf_test_utils import (
    ELFCLASS64,
    UNVERSIONED_ENTRIES,
    VERSIONED_ENTRIES,
    FaultyStream,
    RecordingStream,
    build_elf,
    read_dynamic_entries_raw,
)


def _locate(stream):
    ehdr = parse_header(stream)
    return ehdr, find_dynamic_section(stream, ehdr)


class TestReadDynamicEntries:
    def test_reads_through_terminator(self, versioned_elf):
        """Entries are read up to and including DT_NULL."""
        stream = MemoryStream(versioned_elf.data)
        ehdr, dynamic = _locate(stream)

        entries = read_dynamic_entries(stream, dynamic, ehdr.elfclass)

        assert [(e.d_tag, e.d_val) for e in entries] == VERSIONED_ENTRIES
        assert entries[-1].is_null

    def test_stops_at_first_null(self):
        """Entries after the first DT_NULL are not read."""
        image = build_elf(
            ELFCLASS64,
            [(DT_NEEDED, 1), (DT_NULL, 0), (DT_VERSYM, 0x10), (DT_NULL, 0)],
        )
        stream = MemoryStream(image.data)
        ehdr, dynamic = _locate(stream)

        entries = read_dynamic_entries(stream, dynamic, ehdr.elfclass)

        assert len(entries) == 2

    def test_unterminated_section(self, elfclass):
        """EOF before DT_NULL raises TruncatedInputError."""
        image = build_elf(
            elfclass, [(DT_NEEDED, 1), (DT_VERSYM, 0x10)], dynamic_last=True
        )
        stream = MemoryStream(image.data)
        ehdr, dynamic = _locate(stream)

        with pytest.raises(TruncatedInputError, match="dynamic section entry") as e:
            read_dynamic_entries(stream, dynamic, ehdr.elfclass)
        assert e.value.kind is ErrorKind.TRUNCATED_INPUT

    def test_partial_trailing_entry_rejected(self):
        """A half entry at EOF is not decoded."""
        image = build_elf(ELFCLASS64, [(DT_NEEDED, 1)], dynamic_last=True)
        # Append half of a DT_NULL entry
        stream = MemoryStream(image.data + b"\x00" * 8)
        ehdr, dynamic = _locate(stream)

        with pytest.raises(TruncatedInputError):
            read_dynamic_entries(stream, dynamic, ehdr.elfclass)

    def test_seek_failure(self):
        """A refused seek to sh_offset is an I/O error."""
        image = build_elf(ELFCLASS64)
        offset = image.dynamic_offsets[0]
        stream = FaultyStream(image.data, fail_seek_to={offset: 1})
        ehdr, dynamic = _locate(stream)

        with pytest.raises(StreamIOError, match="sh_offset"):
            read_dynamic_entries(stream, dynamic, ehdr.elfclass)


class TestStripVersionEntries:
    def test_zeroes_in_place(self):
        """Versioning entries become DT_NULL at the same index."""
        entries = [DynamicEntry(tag, val) for tag, val in VERSIONED_ENTRIES]

        stripped = strip_version_entries(entries, ElfClass.ELF64, 0x100)

        assert [(e.d_tag, e.d_val) for e in entries] == [
            (DT_NEEDED, 1),
            (DT_NULL, 0),
            (DT_NULL, 0),
            (DT_NULL, 0),
            (DT_STRTAB, 0x2A0),
            (DT_NULL, 0),
        ]
        assert [s.index for s in stripped] == [1, 2, 3]
        assert [s.file_offset for s in stripped] == [0x110, 0x120, 0x130]
        assert [s.original.d_tag for s in stripped] == [
            DT_VERNEED,
            DT_VERNEEDNUM,
            DT_VERSYM,
        ]

    def test_32_bit_offsets(self):
        """File offsets use the 8-byte 32-bit entry size."""
        entries = [DynamicEntry(DT_NEEDED, 1), DynamicEntry(DT_VERSYM, 4)]
        stripped = strip_version_entries(entries, ElfClass.ELF32, 0x200)
        assert stripped[0].file_offset == 0x208

    def test_nothing_to_strip(self):
        """Entries without versioning tags are left alone."""
        entries = [DynamicEntry(tag, val) for tag, val in UNVERSIONED_ENTRIES]
        before = list(entries)

        assert strip_version_entries(entries, ElfClass.ELF64) == []
        assert entries == before

    def test_verdef_is_kept(self):
        """DT_VERDEF is not one of the stripped tags."""
        entries = [DynamicEntry(DT_VERDEF, 0x300), DynamicEntry(DT_NULL, 0)]
        assert strip_version_entries(entries, ElfClass.ELF64) == []
        assert not is_strippable(entries[0])


class TestWriteDynamicEntries:
    def test_short_write(self):
        """A short write is an I/O error."""
        image = build_elf(ELFCLASS64)
        stream = FaultyStream(image.data, short_write=4)
        ehdr, dynamic = _locate(stream)
        entries = read_dynamic_entries(stream, dynamic, ehdr.elfclass)

        with pytest.raises(StreamIOError, match="writing updated .dynamic"):
            write_dynamic_entries(stream, dynamic, entries, ehdr.elfclass)

    def test_flush_failure(self):
        """A failed flush is an I/O error."""
        image = build_elf(ELFCLASS64)
        stream = FaultyStream(image.data, fail_flush=True)
        ehdr, dynamic = _locate(stream)
        entries = read_dynamic_entries(stream, dynamic, ehdr.elfclass)

        with pytest.raises(StreamIOError, match="flushing"):
            write_dynamic_entries(stream, dynamic, entries, ehdr.elfclass)

    def test_seek_failure_before_write(self):
        """A refused write-back seek fails before any write."""
        image = build_elf(ELFCLASS64)
        offset = image.dynamic_offsets[0]
        # First seek (read) succeeds, second (write-back) is refused
        stream = FaultyStream(image.data, fail_seek_to={offset: 2})
        ehdr, dynamic = _locate(stream)
        entries = read_dynamic_entries(stream, dynamic, ehdr.elfclass)

        with pytest.raises(StreamIOError, match="While preparing to write"):
            write_dynamic_entries(stream, dynamic, entries, ehdr.elfclass)
        assert stream.writes == 0


class TestPatchDynamicSection:
    def test_patch_rewrites_whole_sequence(self, versioned_elf):
        """The patched sequence is written once and flushed once."""
        stream = RecordingStream(versioned_elf.data)
        ehdr, dynamic = _locate(stream)

        result = patch_dynamic_section(stream, dynamic, ehdr.elfclass)

        assert result.changed
        assert result.entry_count == 6
        assert result.section_offset == versioned_elf.dynamic_offsets[0]
        assert len(result.stripped) == 3
        assert stream.writes == 1
        assert stream.flushes == 1

        after = read_dynamic_entries_raw(
            stream.data, dynamic.sh_offset, versioned_elf.elfclass, 6
        )
        assert after == [
            (DT_NEEDED, 1),
            (DT_NULL, 0),
            (DT_NULL, 0),
            (DT_NULL, 0),
            (DT_STRTAB, 0x2A0),
            (DT_NULL, 0),
        ]

    def test_unchanged_section_is_not_written(self, unversioned_elf):
        """Nothing is written when no entry was stripped."""
        stream = RecordingStream(unversioned_elf.data)
        ehdr, dynamic = _locate(stream)

        result = patch_dynamic_section(stream, dynamic, ehdr.elfclass)

        assert not result.changed
        assert result.entry_count == 4
        assert stream.writes == 0
        assert stream.flushes == 0
        assert bytes(stream.data) == unversioned_elf.data

    def test_only_dynamic_bytes_change(self, versioned_elf):
        """Bytes outside the dynamic section are unchanged."""
        stream = MemoryStream(versioned_elf.data)
        ehdr, dynamic = _locate(stream)

        patch_dynamic_section(stream, dynamic, ehdr.elfclass)

        start = dynamic.sh_offset
        end = start + dynamic.sh_size
        assert len(stream.data) == len(versioned_elf.data)
        assert stream.data[:start] == versioned_elf.data[:start]
        assert stream.data[end:] == versioned_elf.data[end:]
