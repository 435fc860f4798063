"""Mapping between block identifiers and namespace paths.

A block lives at ``root + id.hex``. The root always begins and ends with a
slash, so the mapping is a plain concatenation and its inverse a prefix strip.
"""

from __future__ import annotations

import logging

from lakeblocks.domain.blocks import BlockId, is_hex
from lakeblocks.domain.errors import InvalidBlockId
from lakeblocks.interfaces.namespace import EntryType, RemoteEntry

logger = logging.getLogger(__name__)


def canonical_root(root: str) -> str:
    """Ensure that a root path begins and ends with a slash."""
    if not root.startswith("/"):
        root = "/" + root
    if not root.endswith("/"):
        root = root + "/"
    return root


def id_to_path(root: str, block_id: BlockId) -> str:
    """Return the namespace path of the block ``block_id`` under ``root``."""
    return root + block_id.hex


def path_to_id(root: str, path: str | None) -> BlockId | None:
    """Return the block id stored at ``path``, or None if it is not a block path.

    Non-block files share the directory with blocks, so a path outside
    ``root`` or with a non-hex file name is logged and ignored, not raised.
    """
    if path is None:
        return None
    if not path.startswith(root):
        logger.warning("File %r is not under root %r", path, root)
        return None
    file_name = path[len(root) :]
    if not is_hex(file_name):
        logger.warning("Encountered block filename with invalid hex: %r", file_name)
        return None
    try:
        return BlockId.from_hex(file_name.lower())
    except InvalidBlockId:
        logger.warning("Encountered block filename with invalid digest: %r", file_name)
        return None


def is_block_file(entry: RemoteEntry | None) -> bool:
    """True if the entry is a file whose name looks like a block id."""
    return (
        entry is not None and entry.type is EntryType.FILE and is_hex(entry.name)
    )
