"""Paginated enumeration of a namespace directory.

The remote lists a directory one page at a time: each call returns children
in ascending name order strictly after a cursor name. `DirectoryPager` turns
those calls into a single-pass iterator over entries, fetching the next page
only when the current one is used up. `enumerate_directory` applies the
listing bounds and pushes entries into a sink that may stop the enumeration
at any point.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterator

from lakeblocks.interfaces.blockstore import ListQuery
from lakeblocks.interfaces.namespace import RemoteEntry, RemoteNamespace, RemoteNotFound

logger = logging.getLogger(__name__)

Sink = Callable[[RemoteEntry], bool]


class DirectoryPager(Iterator[RemoteEntry]):
    """Single-pass iterator over the children of a directory.

    State is the page cursor (name of the last entry seen) and the number of
    entries still allowed by ``limit``. A missing directory enumerates as
    empty; any other remote error propagates from `__next__`. Once exhausted
    or closed, the pager stays exhausted.

    Args:
        namespace: Namespace to enumerate.
        path: Directory path.
        limit: Maximum total number of entries, or None for no limit.
        after: Start after this entry name, or None to start at the beginning.
    """

    def __init__(
        self,
        namespace: RemoteNamespace,
        path: str,
        *,
        limit: int | None = None,
        after: str | None = None,
    ) -> None:
        self._namespace = namespace
        self._path = path
        self._cursor = after
        self._remaining = limit
        self._page: deque[RemoteEntry] = deque()
        self._exhausted = False
        self.pages_fetched = 0

    @property
    def cursor(self) -> str | None:
        return self._cursor

    def __next__(self) -> RemoteEntry:
        while not self._page:
            if self._exhausted:
                raise StopIteration
            self._fetch()
        return self._page.popleft()

    def close(self) -> None:
        """Stop the enumeration; no further pages are fetched."""
        self._exhausted = True
        self._page.clear()

    def _fetch(self) -> None:
        if self._remaining is not None and self._remaining <= 0:
            self._exhausted = True
            return

        logger.debug(
            "Enumerating directory %s after %r limit %r",
            self._path,
            self._cursor,
            self._remaining,
        )
        try:
            listing = self._namespace.list_children(
                self._path, after=self._cursor, limit=self._remaining
            )
        except RemoteNotFound:
            logger.debug("Directory %s does not exist; nothing to enumerate", self._path)
            listing = []
        self.pages_fetched += 1

        if self._remaining is not None:
            listing = listing[: self._remaining]
            self._remaining -= len(listing)
        if not listing:
            self._exhausted = True
            return
        self._cursor = listing[-1].name
        self._page.extend(listing)


def enumerate_directory(
    namespace: RemoteNamespace, root: str, query: ListQuery, sink: Sink
) -> None:
    """Feed the entries of ``root`` selected by ``query`` into ``sink``.

    Entries arrive in ascending name order, starting after ``query.after``
    and bounded by ``query.limit``. The first entry named at or past
    ``query.before`` ends the enumeration without being emitted. If ``sink``
    returns False, enumeration stops immediately.
    """
    pager = DirectoryPager(namespace, root, limit=query.limit, after=query.after)
    try:
        for entry in pager:
            if query.before is not None and entry.name >= query.before:
                break
            if not sink(entry):
                break
    finally:
        pager.close()
