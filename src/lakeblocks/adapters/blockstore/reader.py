"""Lazy readers over block files in a remote namespace."""

from __future__ import annotations

import io
import logging
from typing import BinaryIO

from lakeblocks.domain.blocks import ContentReader
from lakeblocks.interfaces.namespace import RemoteNamespace

logger = logging.getLogger(__name__)


class BoundedReader(io.RawIOBase):
    """Read-only view of at most ``limit`` bytes of another stream.

    Closing the view closes the wrapped stream.
    """

    def __init__(self, stream: BinaryIO, limit: int) -> None:
        super().__init__()
        self._stream = stream
        self._remaining = max(limit, 0)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[no-untyped-def]
        if self._remaining <= 0:
            return 0
        want = min(len(buffer), self._remaining)
        data = self._stream.read(want)
        n = len(data)
        buffer[:n] = data
        self._remaining -= n
        return n

    def close(self) -> None:
        if not self.closed:
            self._stream.close()
        super().close()


class RemoteContentReader(ContentReader):
    """Content reader bound to a remote file path.

    Holds no stream state: every call opens a fresh remote read stream, so
    concurrent range reads over the same block do not interfere.
    """

    def __init__(self, namespace: RemoteNamespace, path: str) -> None:
        self._namespace = namespace
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def read_all(self) -> BinaryIO:
        logger.debug("Opening file %s", self._path)
        return self._namespace.open_read(self._path)

    def read_range(self, start: int | None, end: int | None) -> BinaryIO:
        logger.debug("Opening file %s byte range %s - %s", self._path, start, end)
        stream = self._namespace.open_read(self._path)
        offset = 0
        if start is not None and start > 0:
            stream.seek(start)
            offset = start
        if end is not None and end > 0:
            return io.BufferedReader(BoundedReader(stream, end - offset))
        return stream

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._path!r})"
