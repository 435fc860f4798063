"""Bounded stream of listing results.

A `BlockStream` connects a background producer (the directory enumeration
behind `BlockStore.list`) to a consumer draining results at its own pace.

Semantics
---------
- **Backpressure**: the channel holds at most ``capacity`` items; `send()`
  blocks while it is full. There is no unbounded buffering.
- **Termination**: the producer ends the stream with `finish()`, or with
  `fail(exc)` which delivers the exception as the terminal value.
- **Cancellation**: the consumer abandons the stream with `close()`. Any
  blocked or later `send()` then returns False so the producer can stop.

Typical usage
-------------
    with store.list(limit=10) as stream:
        for stats in stream:
            print(stats.id, stats.size)
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator
from types import TracebackType

from lakeblocks.domain.blocks import BlockStats

DEFAULT_CAPACITY = 100
POLL_INTERVAL = 0.05  # seconds between closed-flag checks while blocked

_END = object()


class BlockStream:
    """Bounded, closable channel of `BlockStats` values."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity!r}")
        self._queue: queue.Queue[object] = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        """True once the stream has ended or the consumer abandoned it."""
        return self._closed.is_set()

    # ---- producer side ----

    def send(self, item: BlockStats | BaseException) -> bool:
        """Put an item on the stream, blocking while the stream is full.

        Returns:
            bool: True if the item was queued, False if the stream is (or
            became, while sending) closed.
        """
        while not self._closed.is_set():
            try:
                self._queue.put(item, timeout=POLL_INTERVAL)
            except queue.Full:
                continue
            # close() may have drained the queue and let this put through
            return not self._closed.is_set()
        return False

    def finish(self) -> None:
        """Mark the normal end of the stream."""
        self.send(_END)  # type: ignore[arg-type]

    def fail(self, error: BaseException) -> None:
        """Deliver ``error`` as the terminal value, then end the stream."""
        if self.send(error):
            self.finish()

    # ---- consumer side ----

    def take(self, timeout: float | None = None) -> BlockStats | BaseException | None:
        """Return the next value from the stream.

        Args:
            timeout: Seconds to wait for a value; ``None`` waits indefinitely.

        Returns:
            The next `BlockStats`, the terminal exception delivered by the
            producer, or None once the stream has ended.

        Raises:
            queue.Empty: If ``timeout`` elapses before a value arrives.
        """
        waited = 0.0
        while not self._closed.is_set():
            try:
                item = self._queue.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                waited += POLL_INTERVAL
                if timeout is not None and waited >= timeout:
                    raise
                continue
            if item is _END:
                self._closed.set()
                return None
            return item  # type: ignore[return-value]
        return None

    def close(self) -> None:
        """Abandon the stream; the producer stops at its next send."""
        self._closed.set()
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break

    def collect(self) -> list[BlockStats]:
        """Drain the stream into a list, raising a terminal error if one arrives."""
        return list(self)

    def __iter__(self) -> Iterator[BlockStats]:
        while (item := self.take()) is not None:
            if isinstance(item, BaseException):
                self.close()
                raise item
            yield item

    def __enter__(self) -> BlockStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
