"""Block value objects.

A block is an immutable byte sequence identified by the hash of its content.
This module defines the identifier (`BlockId`), the per-request metadata
record (`BlockStats`), the lazily-read `Block` and the `ContentReader` port
through which block bytes are opened.

Identifiers render as the lowercase hex of their digest; the hash algorithm
is recovered from the digest length, so each supported algorithm must have a
distinct digest size.
"""

from __future__ import annotations

import abc
import hashlib
import io
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import BinaryIO

from .errors import InvalidBlockId

HEX_RE = re.compile(r"^[0-9a-fA-F]+$")

# digest size in bytes -> algorithm name (as understood by hashlib.new)
DIGEST_SIZES = {
    20: "sha1",
    32: "sha256",
    64: "sha512",
}
ALGORITHMS = {name: size for size, name in DIGEST_SIZES.items()}
DEFAULT_ALGORITHM = "sha256"


def is_hex(value: object) -> bool:
    """Return True if ``value`` is a non-empty string of hex digits."""
    return isinstance(value, str) and bool(HEX_RE.match(value))


@dataclass(frozen=True)
class BlockId:
    """Content-hash identifier of a block.

    Attributes:
        algorithm: Name of the hash algorithm, e.g. ``"sha256"``.
        digest: Raw digest bytes.
    """

    algorithm: str
    digest: bytes

    def __post_init__(self) -> None:
        expected = ALGORITHMS.get(self.algorithm)
        if expected is None:
            raise InvalidBlockId(f"Unsupported hash algorithm: {self.algorithm!r}")
        if len(self.digest) != expected:
            raise InvalidBlockId(
                f"{self.algorithm} digest must be {expected} bytes, "
                f"got {len(self.digest)}"
            )

    @property
    def hex(self) -> str:
        """Canonical lowercase hex form of the digest."""
        return self.digest.hex()

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hex}"

    @classmethod
    def from_hex(cls, value: str) -> BlockId:
        """Build an identifier from a bare hex digest.

        Raises:
            InvalidBlockId: If the value is not hex or has an unknown length.
        """
        if not is_hex(value) or len(value) % 2:
            raise InvalidBlockId(f"Not a hex digest: {value!r}")
        algorithm = DIGEST_SIZES.get(len(value) // 2)
        if algorithm is None:
            raise InvalidBlockId(f"Unrecognized digest length: {value!r}")
        return cls(algorithm, bytes.fromhex(value))

    @classmethod
    def parse(cls, value: str) -> BlockId:
        """Parse ``"<algorithm>:<hex>"`` or a bare hex digest."""
        if ":" not in value:
            return cls.from_hex(value)
        algorithm, hex_value = value.split(":", 1)
        if not is_hex(hex_value) or len(hex_value) % 2:
            raise InvalidBlockId(f"Not a hex digest: {value!r}")
        return cls(algorithm.lower(), bytes.fromhex(hex_value))

    @classmethod
    def compute(cls, data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> BlockId:
        """Hash ``data`` with ``algorithm`` and return its identifier."""
        if algorithm not in ALGORITHMS:
            raise InvalidBlockId(f"Unsupported hash algorithm: {algorithm!r}")
        return cls(algorithm, hashlib.new(algorithm, data).digest())


class ContentReader(abc.ABC):
    """Opens independent byte streams over a block's content."""

    @abc.abstractmethod
    def read_all(self) -> BinaryIO:
        """Open a stream over the whole content."""

    @abc.abstractmethod
    def read_range(self, start: int | None, end: int | None) -> BinaryIO:
        """Open a stream over ``[start, end)``.

        A missing or non-positive ``start`` reads from the beginning; a missing
        or non-positive ``end`` reads to the end of the content.
        """


class BytesContent(ContentReader):
    """Content reader over an in-memory byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)

    def read_all(self) -> io.BytesIO:
        return io.BytesIO(self._data)

    def read_range(self, start: int | None, end: int | None) -> io.BytesIO:
        start = start if start and start > 0 else 0
        stop = end if end and end > 0 else len(self._data)
        return io.BytesIO(self._data[start:stop])


@dataclass(frozen=True)
class BlockStats:
    """Metadata about a stored block.

    Produced fresh by every lookup or write and never cached.

    Attributes:
        id: The block identifier.
        size: Content length in bytes.
        stored_at: When the block was stored. Local completion time for a
            block written by this process, remote modification time otherwise.
        location: Backing path in the remote namespace; a locator hint only,
            ignored by equality.
    """

    id: BlockId
    size: int
    stored_at: datetime | None = field(default=None, compare=False)
    location: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Block:
    """An immutable block whose content is read lazily through ``content``."""

    id: BlockId
    size: int
    stored_at: datetime | None = field(compare=False)
    content: ContentReader = field(repr=False, compare=False)
    location: str | None = field(default=None, compare=False)

    @classmethod
    def from_bytes(cls, data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> Block:
        """Build an unstored block from in-memory bytes."""
        return cls(
            id=BlockId.compute(data, algorithm),
            size=len(data),
            stored_at=datetime.now(timezone.utc),
            content=BytesContent(data),
        )

    @classmethod
    def from_stats(cls, stats: BlockStats, content: ContentReader) -> Block:
        """Wrap stats and a reader into a lazy block."""
        return cls(
            id=stats.id,
            size=stats.size,
            stored_at=stats.stored_at,
            content=content,
            location=stats.location,
        )

    @property
    def stats(self) -> BlockStats:
        return BlockStats(
            id=self.id,
            size=self.size,
            stored_at=self.stored_at,
            location=self.location,
        )

    def open(self, start: int | None = None, end: int | None = None) -> BinaryIO:
        """Open a stream over the block content, optionally a byte range.

        The caller must close the returned stream.
        """
        if start is None and end is None:
            return self.content.read_all()
        return self.content.read_range(start, end)

    def read(self) -> bytes:
        """Read the entire block into memory (convenience)."""
        with self.open() as stream:
            return stream.read()
