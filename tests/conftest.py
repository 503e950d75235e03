import pytest
import pathlib

from elf_test_utils import (
    SyntheticElf,
    build_elf,
    ELFCLASS32,
    ELFCLASS64,
    UNVERSIONED_ENTRIES,
    VERSIONED_ENTRIES,
)


@pytest.fixture(params=[ELFCLASS32, ELFCLASS64], ids=["elf32", "elf64"])
def elfclass(request) -> int:
    """Parameterizes a test over both address widths."""
    return request.param


@pytest.fixture
def versioned_elf(elfclass: int) -> SyntheticElf:
    """Image whose dynamic section carries DT_VERSYM/DT_VERNEED/DT_VERNEEDNUM."""
    return build_elf(elfclass, VERSIONED_ENTRIES)


@pytest.fixture
def unversioned_elf(elfclass: int) -> SyntheticElf:
    """Image whose dynamic section has no versioning entries."""
    return build_elf(elfclass, UNVERSIONED_ENTRIES)


@pytest.fixture
def write_binary(tmp_path: pathlib.Path):
    """Returns a function that writes bytes to a file under tmp_path."""

    def _write(data: bytes, name: str = "libtest.so") -> pathlib.Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
