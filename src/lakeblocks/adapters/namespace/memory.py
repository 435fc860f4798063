"""In-memory remote namespace.

This module provides a small, dependency-free `RemoteNamespace` meant for
**tests**, examples, and local development. Files and directories live
entirely in RAM; nothing persists across process restarts.

Key behaviors
-------------
- **Remote-like semantics**: `create_file()` never overwrites, `rename()`
  refuses an existing destination, `list_children()` pages through children
  in ascending name order after a cursor.
- **Simulated metadata lag**: with ``visibility_lag=N`` the first N
  `get_entry()` calls after a write report the file's length as 0, which
  exercises callers that must wait for eventual consistency.
- **Paging**: ``page_size`` caps every listing page, so pagination can be
  exercised with small directories.
- **Instrumentation**: every call is counted in ``calls``; `inject_failure()`
  makes a method raise a given error, to exercise remote-fault handling.
- **Thread-safety**: all state changes happen under an `RLock`.

Typical usage
-------------
    namespace = MemoryNamespace(page_size=2, visibility_lag=1)
    with namespace.create_file("/blocks/abc", "640") as out:
        out.write(b"hello")
    namespace.get_entry("/blocks/abc").length  # 0, then 5
"""

from __future__ import annotations

import io
import threading
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from lakeblocks.interfaces.namespace import (
    CONFLICT,
    ContentSummary,
    EntryType,
    NamespaceError,
    RemoteAlreadyExists,
    RemoteEntry,
    RemoteNamespace,
    RemoteNotFound,
)

__all__ = ["MemoryNamespace"]

ROOT = "/"
DEFAULT_PAGE_SIZE = 4000


def _normalize(path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or ROOT
    return path


def _parent(path: str) -> str:
    head = path.rsplit("/", 1)[0]
    return head or ROOT


def _name(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def _join(parent: str, name: str) -> str:
    return f"{parent.rstrip('/')}/{name}"


@dataclass
class _MemFile:
    data: bytes
    modified: datetime
    permission: str


class MemoryNamespace(RemoteNamespace):
    """`RemoteNamespace` backed by in-memory dictionaries.

    Args:
        page_size: Maximum number of entries returned per listing page.
        visibility_lag: Number of metadata lookups that report a stale (zero)
            length after each completed write.
        permissions: Permissions granted to `check_access()`, over ``"rwx"``.
    """

    def __init__(
        self,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        visibility_lag: int = 0,
        permissions: str = "rwx",
    ) -> None:
        self.page_size = page_size
        self.visibility_lag = visibility_lag
        self.permissions = permissions
        self.calls: Counter[str] = Counter()
        self.closed = False
        self._files: dict[str, _MemFile] = {}
        self._dirs: set[str] = {ROOT}
        self._stale: dict[str, int] = {}
        self._failures: dict[str, NamespaceError] = {}
        self._lock = threading.RLock()

    # ---- test helpers ----

    def inject_failure(self, method: str, error: NamespaceError | None) -> None:
        """Make ``method`` raise ``error`` on every call (None clears it)."""
        with self._lock:
            if error is None:
                self._failures.pop(method, None)
            else:
                self._failures[method] = error

    def make_dirs(self, path: str) -> None:
        """Create a directory and its missing parents."""
        with self._lock:
            self._add_dirs(_normalize(path))

    def paths(self) -> list[str]:
        """Return the paths of all files, sorted."""
        with self._lock:
            return sorted(self._files)

    # ---- RemoteNamespace ----

    def get_entry(self, path: str) -> RemoteEntry:
        path = self._enter("get_entry", path)
        with self._lock:
            if (file := self._files.get(path)) is not None:
                length = len(file.data)
                if self._stale.get(path):
                    self._stale[path] -= 1
                    length = 0
                return RemoteEntry(
                    name=_name(path),
                    full_name=path,
                    type=EntryType.FILE,
                    length=length,
                    last_modified=file.modified,
                )
            if self._is_dir(path):
                return RemoteEntry(
                    name=_name(path), full_name=path, type=EntryType.DIRECTORY
                )
        raise RemoteNotFound(path)

    def create_file(self, path: str, permission: str) -> io.BytesIO:
        path = self._enter("create_file", path)
        with self._lock:
            if path in self._files or self._is_dir(path):
                raise RemoteAlreadyExists(path)
            self._add_dirs(_parent(path))
            self._files[path] = _MemFile(b"", datetime.now(timezone.utc), permission)
        return _MemWriter(self, path)

    def open_read(self, path: str) -> io.BytesIO:
        path = self._enter("open_read", path)
        with self._lock:
            try:
                data = self._files[path].data
            except KeyError as e:
                raise RemoteNotFound(path) from e
        return io.BytesIO(data)

    def rename(self, source: str, destination: str) -> None:
        source = self._enter("rename", source)
        destination = _normalize(destination)
        with self._lock:
            if source not in self._files:
                raise RemoteNotFound(source)
            if destination in self._files or self._is_dir(destination):
                raise RemoteAlreadyExists(destination)
            self._add_dirs(_parent(destination))
            self._files[destination] = self._files.pop(source)
            if source in self._stale:
                self._stale[destination] = self._stale.pop(source)

    def delete(self, path: str) -> bool:
        path = self._enter("delete", path)
        with self._lock:
            if path in self._files:
                del self._files[path]
                self._stale.pop(path, None)
                return True
            if not self._is_dir(path):
                return False
            if path == ROOT or self._children(path):
                raise NamespaceError(
                    f"Directory not empty: {path}", status_code=CONFLICT, path=path
                )
            self._dirs.discard(path)
            return True

    def delete_recursive(self, path: str) -> bool:
        path = self._enter("delete_recursive", path)
        with self._lock:
            prefix = _join(path, "")
            doomed = [p for p in self._files if p == path or p.startswith(prefix)]
            dirs = {d for d in self._dirs if d == path or d.startswith(prefix)}
            existed = bool(doomed) or self._is_dir(path)
            for p in doomed:
                del self._files[p]
                self._stale.pop(p, None)
            self._dirs -= dirs
            self._dirs.add(ROOT)
            return existed

    def list_children(
        self, path: str, *, after: str | None = None, limit: int | None = None
    ) -> list[RemoteEntry]:
        path = self._enter("list_children", path)
        with self._lock:
            if not self._is_dir(path):
                raise RemoteNotFound(path)
            names = sorted(n for n in self._children(path) if after is None or n > after)
            page = min(limit, self.page_size) if limit is not None else self.page_size
            entries = []
            for name in names[:page]:
                full = _join(path, name)
                if (file := self._files.get(full)) is not None:
                    entries.append(
                        RemoteEntry(
                            name=name,
                            full_name=full,
                            type=EntryType.FILE,
                            length=len(file.data),
                            last_modified=file.modified,
                        )
                    )
                else:
                    entries.append(
                        RemoteEntry(name=name, full_name=full, type=EntryType.DIRECTORY)
                    )
            return entries

    def check_access(self, path: str, action: str) -> bool:
        self._enter("check_access", path)
        return all(c in self.permissions for c in action)

    def content_summary(self, path: str) -> ContentSummary:
        path = self._enter("content_summary", path)
        with self._lock:
            prefix = _join(path, "")
            sizes = [
                len(f.data)
                for p, f in self._files.items()
                if p == path or p.startswith(prefix)
            ]
            dirs = [d for d in self._dirs if d != path and d.startswith(prefix)]
        return ContentSummary(
            space_consumed=sum(sizes), file_count=len(sizes), directory_count=len(dirs)
        )

    def close(self) -> None:
        self.closed = True

    # ---- internal helpers ----

    def _enter(self, method: str, path: str) -> str:
        with self._lock:
            self.calls[method] += 1
            error = self._failures.get(method)
        if error is not None:
            raise error
        return _normalize(path)

    def _commit(self, path: str, data: bytes) -> None:
        with self._lock:
            file = self._files.get(path)
            if file is None:
                # deleted while being written
                return
            file.data = data
            file.modified = datetime.now(timezone.utc)
            if self.visibility_lag:
                self._stale[path] = self.visibility_lag

    def _add_dirs(self, path: str) -> None:
        while path not in self._dirs:
            self._dirs.add(path)
            path = _parent(path)

    def _is_dir(self, path: str) -> bool:
        return path in self._dirs

    def _children(self, path: str) -> set[str]:
        prefix = _join(path, "")
        names = set()
        for p in (*self._files, *self._dirs):
            if p != ROOT and p.startswith(prefix):
                names.add(p[len(prefix) :].split("/", 1)[0])
        return names


class _MemWriter(io.BytesIO):
    """Write stream for `MemoryNamespace`; content becomes visible on close."""

    def __init__(self, namespace: MemoryNamespace, path: str) -> None:
        super().__init__()
        self._namespace = namespace
        self._path = path

    def close(self) -> None:
        if not self.closed:
            self._namespace._commit(  # pylint: disable=protected-access
                self._path, self.getvalue()
            )
        super().close()
