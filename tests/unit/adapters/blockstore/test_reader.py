"""Unit tests for lazy remote content readers."""

from __future__ import annotations

import io

import pytest

from lakeblocks.adapters.blockstore.reader import BoundedReader, RemoteContentReader
from lakeblocks.adapters.namespace import MemoryNamespace
from lakeblocks.interfaces.namespace import RemoteNotFound

# pylint: disable=redefined-outer-name

DATA = b"0123456789abcdef"


@pytest.fixture
def reader() -> RemoteContentReader:
    namespace = MemoryNamespace()
    with namespace.create_file("/blocks/f", "640") as out:
        out.write(DATA)
    return RemoteContentReader(namespace, "/blocks/f")


def test_read_all(reader):
    with reader.read_all() as stream:
        assert stream.read() == DATA


@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (4, None, DATA[4:]),
        (None, 4, DATA[:4]),
        (2, 6, DATA[2:6]),
        (0, 0, DATA),
        (-1, -1, DATA),
        (10, 100, DATA[10:]),
    ],
)
def test_read_range(reader, start, end, expected):
    with reader.read_range(start, end) as stream:
        assert stream.read() == expected


def test_reads_are_lazy_and_independent():
    """Nothing is opened until asked, and each stream has its own position."""
    namespace = MemoryNamespace()
    with namespace.create_file("/f", "640") as out:
        out.write(DATA)
    reader = RemoteContentReader(namespace, "/f")
    assert namespace.calls["open_read"] == 0

    first = reader.read_range(0, 8)
    second = reader.read_range(8, None)
    assert first.read(2) == b"01"
    assert second.read() == DATA[8:]
    assert first.read() == DATA[2:8]
    assert namespace.calls["open_read"] == 2


def test_missing_file_raises_on_open():
    reader = RemoteContentReader(MemoryNamespace(), "/gone")
    with pytest.raises(RemoteNotFound):
        reader.read_all()


def test_bounded_reader_closes_wrapped_stream():
    inner = io.BytesIO(DATA)
    bounded = BoundedReader(inner, 3)
    assert bounded.read() == b"012"
    assert bounded.read() == b""
    bounded.close()
    assert inner.closed
