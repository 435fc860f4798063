"""Block store interface definitions."""

from __future__ import annotations

import abc
from concurrent.futures import Future
from dataclasses import dataclass

from lakeblocks.domain.blocks import Block, BlockId, BlockStats

from .stream import BlockStream


@dataclass(frozen=True)
class ListQuery:
    """Bounds for a block listing.

    Attributes:
        limit: Maximum number of directory entries to enumerate.
        after: Only list blocks whose hex id sorts strictly after this.
        before: Only list blocks whose hex id sorts strictly before this.
    """

    limit: int | None = None
    after: str | None = None
    before: str | None = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {self.limit!r}")


class BlockStore(abc.ABC):
    """Content-addressable block storage.

    Point operations return futures that resolve on a worker pool; `list`
    returns a bounded stream fed by a background task.
    """

    @abc.abstractmethod
    def stat(self, block_id: BlockId) -> Future[BlockStats | None]:
        """Look up metadata for a block; resolves to None if it is absent."""

    @abc.abstractmethod
    def list(self, query: ListQuery | None = None) -> BlockStream:
        """Stream stats for stored blocks in ascending id order."""

    @abc.abstractmethod
    def get(self, block_id: BlockId) -> Future[Block | None]:
        """Fetch a lazily-read block; resolves to None if it is absent."""

    @abc.abstractmethod
    def put(self, block: Block) -> Future[Block]:
        """Store a block. Storing a block that is already present is a no-op."""

    @abc.abstractmethod
    def delete(self, block_id: BlockId) -> Future[bool]:
        """Remove a block; resolves to False if it was not present."""

    @abc.abstractmethod
    def erase(self) -> Future[None]:
        """Remove every block in the store (tests and maintenance only)."""
