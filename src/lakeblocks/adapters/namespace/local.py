"""Local filesystem-based remote namespace adapter."""

from __future__ import annotations

import os
import shutil
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

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

PathLike = str | os.PathLike[str]

DEFAULT_PAGE_SIZE = 4000
_ACCESS_MODES = {"r": os.R_OK, "w": os.W_OK, "x": os.X_OK}


class LocalNamespace(RemoteNamespace):
    """RemoteNamespace implementation that maps paths into a local directory.

    Remote path ``/a/b`` lives at ``<base>/a/b``. Renames go through a hard
    link so that an existing destination is never replaced.
    """

    def __init__(self, base: PathLike, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._base = Path(base)
        self._base.mkdir(parents=True, exist_ok=True)
        self._page_size = page_size

    @property
    def base(self) -> Path:
        return self._base

    # --- Core Operations ---

    def get_entry(self, path: str) -> RemoteEntry:
        local = self._resolve(path)
        try:
            st = local.stat()
        except (FileNotFoundError, NotADirectoryError):
            raise RemoteNotFound(path) from None
        return self._entry(path, local.name, st)

    def create_file(self, path: str, permission: str) -> BinaryIO:
        local = self._resolve(path)
        local.parent.mkdir(parents=True, exist_ok=True)
        flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0)
        try:
            fd = os.open(local, flags, int(permission, 8))
        except FileExistsError:
            raise RemoteAlreadyExists(path) from None
        return os.fdopen(fd, "wb")

    def open_read(self, path: str) -> BinaryIO:
        local = self._resolve(path)
        try:
            return local.open("rb")
        except FileNotFoundError:
            raise RemoteNotFound(path) from None
        except IsADirectoryError as e:
            raise NamespaceError(f"Not a file: {path}", status_code=400, path=path) from e

    def rename(self, source: str, destination: str) -> None:
        src = self._resolve(source)
        dst = self._resolve(destination)
        dst.parent.mkdir(parents=True, exist_ok=True)
        try:
            os.link(src, dst)
        except FileNotFoundError:
            raise RemoteNotFound(source) from None
        except FileExistsError:
            raise RemoteAlreadyExists(destination) from None
        src.unlink()

    def delete(self, path: str) -> bool:
        local = self._resolve(path)
        try:
            if local.is_dir():
                local.rmdir()
            else:
                local.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise NamespaceError(
                f"Directory not empty: {path}", status_code=CONFLICT, path=path
            ) from e
        return True

    def delete_recursive(self, path: str) -> bool:
        local = self._resolve(path)
        if not local.exists():
            return False
        if local == self._base:
            for child in local.iterdir():
                if child.is_dir():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        elif local.is_dir():
            shutil.rmtree(local)
        else:
            local.unlink()
        return True

    def list_children(
        self, path: str, *, after: str | None = None, limit: int | None = None
    ) -> list[RemoteEntry]:
        local = self._resolve(path)
        try:
            with os.scandir(local) as it:
                names = sorted(e.name for e in it)
        except (FileNotFoundError, NotADirectoryError):
            raise RemoteNotFound(path) from None

        if after is not None:
            names = [n for n in names if n > after]
        page = min(limit, self._page_size) if limit is not None else self._page_size

        entries = []
        for name in names[:page]:
            try:
                st = (local / name).stat()
            except FileNotFoundError:
                # removed since the scan
                continue
            entries.append(self._entry(f"{path.rstrip('/')}/{name}", name, st))
        return entries

    def check_access(self, path: str, action: str) -> bool:
        local = self._resolve(path)
        # files are created with their parents, so judge a missing path by
        # its nearest existing ancestor
        while not local.exists() and local != self._base:
            local = local.parent
        mode = 0
        for c in action:
            mode |= _ACCESS_MODES[c]
        return os.access(local, mode)

    def content_summary(self, path: str) -> ContentSummary:
        local = self._resolve(path)
        space = files = dirs = 0
        for dirpath, dirnames, filenames in os.walk(local):
            dirs += len(dirnames)
            for name in filenames:
                files += 1
                space += (Path(dirpath) / name).stat().st_size
        return ContentSummary(space_consumed=space, file_count=files, directory_count=dirs)

    # --- Internal Helpers ---

    def _resolve(self, path: str) -> Path:
        """Map a remote path to a local one, refusing to escape the base."""
        parts = [p for p in path.split("/") if p]
        if any(p in (".", "..") for p in parts) or "\\" in path:
            raise ValueError(f"Invalid namespace path: {path!r}")
        return self._base.joinpath(*parts)

    @staticmethod
    def _entry(full_name: str, name: str, st: os.stat_result) -> RemoteEntry:
        is_dir = stat.S_ISDIR(st.st_mode)
        return RemoteEntry(
            name=name,
            full_name=full_name if full_name.startswith("/") else "/" + full_name,
            type=EntryType.DIRECTORY if is_dir else EntryType.FILE,
            length=0 if is_dir else st.st_size,
            last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )
