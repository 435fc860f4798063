"""Staged uploads of new blocks.

A new block is never written at its final path directly. Instead:

1. A landing file ``<path>.ATTEMPT`` is created with create-if-absent
   semantics and the block content is streamed into it.
2. The namespace is polled until the landing file reports the block's size.
3. The landing file is renamed onto the final path.

A reader of the final path therefore only ever sees complete blocks, and two
writers racing on the same block cannot share a landing file. If anything
fails after this writer created its landing file, the landing file is
removed before the error propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from lakeblocks.domain.blocks import Block, BlockStats
from lakeblocks.domain.errors import RenameConflict
from lakeblocks.interfaces.namespace import NamespaceError, RemoteNamespace

from .consistency import DEFAULT_ATTEMPTS, DEFAULT_INTERVAL, await_visible

logger = logging.getLogger(__name__)

LANDING_SUFFIX = ".ATTEMPT"
WRITE_PERMISSION = "640"  # owner read-write, group read
CHUNK_SIZE = 1024 * 1024


def landing_path(path: str) -> str:
    """Return the in-flight upload path for the block file ``path``."""
    return path + LANDING_SUFFIX


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BlockWriter:
    """Uploads blocks through a landing file and an atomic rename.

    Args:
        namespace: Namespace to write into.
        attempts: Metadata polls before giving up on consistency.
        interval: Seconds between metadata polls.
        clock: Source of the local completion timestamp.
    """

    def __init__(
        self,
        namespace: RemoteNamespace,
        *,
        attempts: int = DEFAULT_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._namespace = namespace
        self._attempts = attempts
        self._interval = interval
        self._clock = clock

    def write(self, block: Block, path: str) -> BlockStats:
        """Upload ``block`` to ``path`` and return stats for the committed file.

        Raises:
            RemoteAlreadyExists: If another upload holds the landing file.
            RenameConflict: If the landing file cannot be promoted.
            NamespaceError: For other remote failures.
        """
        landing = landing_path(path)
        logger.debug("Uploading block %s to %s", block.id, landing)
        output = self._namespace.create_file(landing, WRITE_PERMISSION)
        try:
            with output, block.open() as content:
                for chunk in iter(lambda: content.read(CHUNK_SIZE), b""):
                    output.write(chunk)

            await_visible(
                self._namespace,
                landing,
                block.size,
                attempts=self._attempts,
                interval=self._interval,
            )

            try:
                self._namespace.rename(landing, path)
            except NamespaceError as e:
                raise RenameConflict(landing, path) from e
        except BaseException:
            self._discard(landing)
            raise

        return BlockStats(
            id=block.id, size=block.size, stored_at=self._clock(), location=path
        )

    def _discard(self, landing: str) -> None:
        try:
            self._namespace.delete(landing)
        except NamespaceError as e:
            logger.warning("Failed to remove landing file %s: %s", landing, e)
