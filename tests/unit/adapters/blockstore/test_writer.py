"""Unit tests for `BlockWriter`, the landing-file-and-rename upload path."""

from __future__ import annotations

import io
import logging
from datetime import datetime, timezone

import pytest

from lakeblocks.adapters.blockstore.writer import (
    LANDING_SUFFIX,
    WRITE_PERMISSION,
    BlockWriter,
    landing_path,
)
from lakeblocks.adapters.namespace import MemoryNamespace
from lakeblocks.domain.blocks import Block, BlockId, ContentReader
from lakeblocks.domain.errors import RenameConflict
from lakeblocks.interfaces.namespace import NamespaceError, RemoteAlreadyExists

# pylint: disable=redefined-outer-name,protected-access

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
SHA1_1234 = "7110eda4d09e062aa5e4a390b0a572ac0d2c0220"
PATH = f"/blocks/{SHA1_1234}"


class RecordingNamespace(MemoryNamespace):
    """Memory namespace that remembers the arguments of `create_file`."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.created: list[tuple[str, str]] = []

    def create_file(self, path: str, permission: str) -> io.BytesIO:
        self.created.append((path, permission))
        return super().create_file(path, permission)


class ExplodingContent(ContentReader):
    """Content reader whose stream fails halfway through."""

    def read_all(self):
        return self

    def read_range(self, start, end):
        return self

    def read(self, size=-1):  # pylint: disable=unused-argument
        raise OSError("disk on fire")

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


@pytest.fixture
def namespace() -> RecordingNamespace:
    return RecordingNamespace()


@pytest.fixture
def writer(namespace) -> BlockWriter:
    return BlockWriter(namespace, attempts=2, interval=0, clock=lambda: FIXED_NOW)


@pytest.fixture
def block() -> Block:
    return Block.from_bytes(b"1234", "sha1")


def test_landing_path_appends_suffix():
    assert landing_path(PATH) == PATH + LANDING_SUFFIX == PATH + ".ATTEMPT"


def test_write_goes_through_landing_file(namespace, writer, block):
    stats = writer.write(block, PATH)

    assert namespace.created == [(f"{PATH}.ATTEMPT", WRITE_PERMISSION)]
    assert WRITE_PERMISSION == "640"
    assert namespace.paths() == [PATH]
    assert namespace.calls["rename"] == 1
    with namespace.open_read(PATH) as stream:
        assert stream.read() == b"1234"

    assert stats.id == BlockId.from_hex(SHA1_1234)
    assert stats.size == 4
    assert stats.location == PATH
    assert stats.stored_at == FIXED_NOW


def test_empty_block_is_written(namespace, writer):
    block = Block.from_bytes(b"")
    path = f"/{block.id.hex}"
    stats = writer.write(block, path)
    assert stats.size == 0
    assert namespace.paths() == [path]


def test_consistency_timeout_still_commits(block, caplog):
    """Not seeing the size in time is logged; the rename still happens."""
    namespace = MemoryNamespace(visibility_lag=10)
    writer = BlockWriter(namespace, attempts=2, interval=0)
    with caplog.at_level(logging.WARNING):
        writer.write(block, PATH)
    assert namespace.paths() == [PATH]
    assert "Timed out waiting for eventual consistency" in caplog.text


def test_lagging_metadata_is_polled(block):
    namespace = MemoryNamespace(visibility_lag=1)
    BlockWriter(namespace, attempts=5, interval=0).write(block, PATH)
    assert namespace.calls["get_entry"] == 2


def test_existing_landing_file_is_left_alone(namespace, writer, block):
    """A second in-flight upload fails and does not touch the first's landing file."""
    with namespace.create_file(landing_path(PATH), "640") as out:
        out.write(b"12")

    with pytest.raises(RemoteAlreadyExists):
        writer.write(block, PATH)

    assert namespace.paths() == [landing_path(PATH)]
    assert namespace.calls["delete"] == 0


def test_rename_failure_raises_conflict_and_cleans_up(namespace, writer, block):
    original = NamespaceError("lease held", status_code=412)
    namespace.inject_failure("rename", original)

    with pytest.raises(RenameConflict) as excinfo:
        writer.write(block, PATH)

    assert excinfo.value.source == landing_path(PATH)
    assert excinfo.value.target == PATH
    assert excinfo.value.__cause__ is original
    assert namespace.paths() == []


def test_rename_onto_existing_block_is_a_conflict(namespace, writer, block):
    with namespace.create_file(PATH, "640") as out:
        out.write(b"1234")
    with pytest.raises(RenameConflict):
        writer.write(block, PATH)
    assert namespace.paths() == [PATH]


def test_content_failure_removes_landing_file(namespace, writer, block):
    broken = Block(block.id, block.size, block.stored_at, ExplodingContent())
    with pytest.raises(OSError, match="disk on fire"):
        writer.write(broken, PATH)
    assert namespace.paths() == []


def test_cleanup_failure_is_logged_and_original_error_wins(namespace, writer, block, caplog):
    namespace.inject_failure("rename", NamespaceError("rename refused", status_code=500))
    namespace.inject_failure("delete", NamespaceError("delete refused", status_code=500))

    with caplog.at_level(logging.WARNING):
        with pytest.raises(RenameConflict):
            writer.write(block, PATH)

    assert "Failed to remove landing file" in caplog.text
    assert namespace.paths() == [landing_path(PATH)]
