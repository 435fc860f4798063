"""Remote hierarchical namespace port.

The block store keeps its files in a remote, directory-structured namespace
such as a data lake. Implementations are expected to behave like a remote
service:

- **Eventual consistency**: metadata for a just-written file MAY lag behind
  the write (e.g. report a stale or zero length for a short while).
- **No conditional create on the final path**: files are created with
  create-if-absent semantics and promoted with `rename()`.
- **Conditional rename**: `rename()` MUST refuse to replace an existing
  destination and raise instead.
- **Paginated listing**: `list_children()` returns one page of children in
  ascending name order, strictly after a cursor name.

Errors are reported as `NamespaceError` carrying an HTTP-like status code;
missing files and directories raise `RemoteNotFound` (404).
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import BinaryIO

NOT_FOUND = 404
CONFLICT = 409
FORBIDDEN = 403


class NamespaceError(Exception):
    """Error reported by the remote namespace.

    Attributes:
        status_code (int | None): HTTP-like status of the failed call.
        path (str | None): Remote path the call was about.
    """

    def __init__(
        self, message: str, *, status_code: int | None = None, path: str | None = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.path = path


class RemoteNotFound(NamespaceError):
    """The remote file or directory does not exist."""

    def __init__(self, path: str):
        super().__init__(f"No such file or directory: {path}", status_code=NOT_FOUND, path=path)


class RemoteAlreadyExists(NamespaceError):
    """The remote path is already taken."""

    def __init__(self, path: str):
        super().__init__(f"File already exists: {path}", status_code=CONFLICT, path=path)


class EntryType(Enum):
    """Kinds of namespace entries."""

    FILE = "FILE"
    DIRECTORY = "DIRECTORY"


@dataclass(frozen=True)
class RemoteEntry:
    """Metadata for one namespace entry, as reported by the remote.

    Attributes:
        name: Final path component.
        full_name: Absolute path of the entry.
        type: File or directory.
        length: Content length in bytes (0 for directories).
        last_modified: Remote modification time, if reported.
    """

    name: str
    full_name: str
    type: EntryType
    length: int = 0
    last_modified: datetime | None = None


@dataclass(frozen=True)
class ContentSummary:
    """Aggregate usage below a directory."""

    space_consumed: int
    file_count: int
    directory_count: int = 0


class RemoteNamespace(abc.ABC):
    """Client handle for a remote hierarchical namespace.

    Paths are absolute, ``/``-separated strings.
    """

    @abc.abstractmethod
    def get_entry(self, path: str) -> RemoteEntry:
        """Return metadata for ``path``.

        Raises:
            RemoteNotFound: If nothing exists at ``path``.
            NamespaceError: For any other remote failure.
        """

    @abc.abstractmethod
    def create_file(self, path: str, permission: str) -> BinaryIO:
        """Create a new file and return a writable stream into it.

        Missing parent directories are created. The caller must close the
        stream; the content is committed on close.

        Args:
            path: Absolute path of the file to create.
            permission: Octal permission string, e.g. ``"640"``.

        Raises:
            RemoteAlreadyExists: If ``path`` already exists (never overwrites).
        """

    @abc.abstractmethod
    def open_read(self, path: str) -> BinaryIO:
        """Open a seekable read stream at offset 0.

        Raises:
            RemoteNotFound: If ``path`` does not exist.
        """

    @abc.abstractmethod
    def rename(self, source: str, destination: str) -> None:
        """Atomically rename ``source`` to ``destination``.

        Raises:
            RemoteNotFound: If ``source`` does not exist.
            RemoteAlreadyExists: If ``destination`` already exists.
        """

    @abc.abstractmethod
    def delete(self, path: str) -> bool:
        """Delete a file or empty directory.

        Returns:
            bool: True if something was deleted, False if nothing existed.
        """

    @abc.abstractmethod
    def delete_recursive(self, path: str) -> bool:
        """Delete ``path`` and everything below it.

        Returns:
            bool: True if something was deleted, False if nothing existed.
        """

    @abc.abstractmethod
    def list_children(
        self, path: str, *, after: str | None = None, limit: int | None = None
    ) -> list[RemoteEntry]:
        """Return one page of the children of directory ``path``.

        Args:
            path: Directory to enumerate.
            after: Only return entries whose name sorts strictly after this.
            limit: Maximum page size; ``None`` lets the remote choose.

        Returns:
            list[RemoteEntry]: Entries in ascending name order. An empty list
            means there are no further children.

        Raises:
            RemoteNotFound: If the directory does not exist.
        """

    @abc.abstractmethod
    def check_access(self, path: str, action: str) -> bool:
        """Return True if the caller holds every permission in ``action``.

        ``action`` is a string over ``"rwx"``.
        """

    @abc.abstractmethod
    def content_summary(self, path: str) -> ContentSummary:
        """Return aggregate usage for the tree below ``path``."""

    def close(self) -> None:
        """Release the client handle. Safe to call multiple times."""
