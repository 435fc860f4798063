"""Block store backed by a directory in a remote hierarchical namespace.

Blocks are stored as files named by the hex digest of their id directly
under the store root. The namespace is the only source of truth: every stat
or listing goes to the remote, and nothing is cached in process.

Lifecycle
---------
`LakeBlockStore` moves through ``UNSTARTED -> STARTED -> STOPPED``. `start()`
connects a namespace client, checks that the root is readable, writable and
traversable, and optionally logs the store's usage. Operations other than
`start()`/`stop()` require a started store. `open_store()`/`close_store()`
wrap the two transitions.

Concurrency
-----------
`stat`, `get`, `put`, `delete` and `erase` run on a shared thread pool and
return futures. `list` runs the directory enumeration on a dedicated thread
that feeds a bounded `BlockStream`; a slow consumer blocks the producer and a
closed stream stops it. Concurrent puts of one block are not serialized:
the pre-write existence check short-circuits completed uploads, and the
landing file's create-if-absent check rejects a second in-flight upload.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from enum import Enum
from types import TracebackType
from typing import Any, ParamSpec, TypeVar

from lakeblocks.config import StoreConfig, location_uri
from lakeblocks.domain.blocks import Block, BlockId, BlockStats
from lakeblocks.domain.errors import (
    BlockStoreError,
    ConfigurationError,
    StoreAccessDenied,
    StoreNotStarted,
)
from lakeblocks.interfaces.blockstore import BlockStore, ListQuery
from lakeblocks.interfaces.namespace import (
    NOT_FOUND,
    NamespaceError,
    RemoteEntry,
    RemoteNamespace,
)
from lakeblocks.interfaces.stream import BlockStream

from .enumerator import enumerate_directory
from .paths import canonical_root, id_to_path, is_block_file, path_to_id
from .reader import RemoteContentReader
from .writer import BlockWriter

logger = logging.getLogger(__name__)

NamespaceConnector = Callable[[str, Any], RemoteNamespace]

P = ParamSpec("P")
T = TypeVar("T")

MEGABYTE = 1024.0 * 1024.0


class StoreState(Enum):
    """Lifecycle states of a block store."""

    UNSTARTED = "unstarted"
    STARTED = "started"
    STOPPED = "stopped"


class LakeBlockStore(BlockStore):  # pylint: disable=too-many-instance-attributes
    """Content-addressable block store over a `RemoteNamespace`.

    Args:
        config: Store settings.
        connector: Called as ``connector(account, credential)`` on start to
            obtain the namespace client.
        credentials: Registry of token sources, consulted when
            ``config.credential_key`` is set.
        executor: Worker pool for point operations. When omitted the store
            creates its own pool on start and shuts it down on stop.
    """

    def __init__(
        self,
        config: StoreConfig,
        connector: NamespaceConnector,
        *,
        credentials: Mapping[str, Any] | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._config = config
        self._root = canonical_root(config.root)
        self._connector = connector
        self._credentials = credentials
        self._executor = executor
        self._owns_executor = executor is None
        self._namespace: RemoteNamespace | None = None
        self._writer: BlockWriter | None = None
        self._state = StoreState.UNSTARTED
        self._state_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.uri!r}, state={self._state.value})"

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def root(self) -> str:
        return self._root

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def uri(self) -> str:
        return location_uri(self._config.scheme, self._config.account, self._root)

    @property
    def namespace(self) -> RemoteNamespace:
        """The connected namespace client (started stores only)."""
        return self._require_started()

    # ---- lifecycle ----

    def start(self) -> LakeBlockStore:
        """Connect to the namespace and verify access to the root.

        Starting a started store does nothing.

        Raises:
            StoreAccessDenied: If the root is not readable, writable and
                traversable; the store stays unstarted.
            ConfigurationError: If the credential cannot be resolved.
            BlockStoreError: If the store was already stopped.
        """
        with self._state_lock:
            if self._state is StoreState.STARTED:
                return self
            if self._state is StoreState.STOPPED:
                raise BlockStoreError("A stopped block store cannot be restarted.")

            logger.info("Connecting namespace client to %s", self._config.account)
            namespace = self._connector(self._config.account, self._resolve_credential())
            try:
                if not namespace.check_access(self._root, "rwx"):
                    raise StoreAccessDenied(self.uri)
                if self._config.check_summary:
                    summary = namespace.content_summary(self._root)
                    logger.info(
                        "Store contains %.1f MB in %d blocks",
                        summary.space_consumed / MEGABYTE,
                        summary.file_count,
                    )
            except BaseException:
                namespace.close()
                raise

            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._config.max_workers,
                    thread_name_prefix="lakeblocks",
                )
            self._namespace = namespace
            self._writer = BlockWriter(
                namespace,
                attempts=self._config.probe_attempts,
                interval=self._config.probe_interval,
            )
            self._state = StoreState.STARTED
        return self

    def stop(self) -> None:
        """Release the namespace client. Safe to call multiple times."""
        with self._state_lock:
            if self._state is StoreState.STARTED:
                if self._owns_executor and self._executor is not None:
                    self._executor.shutdown(wait=True)
                    self._executor = None
                if self._namespace is not None:
                    self._namespace.close()
            self._namespace = None
            self._writer = None
            self._state = StoreState.STOPPED

    def __enter__(self) -> LakeBlockStore:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    # ---- BlockStore ----

    def stat(self, block_id: BlockId) -> Future[BlockStats | None]:
        namespace = self._require_started()
        return self._submit(self._file_stats, namespace, block_id)

    def list(self, query: ListQuery | None = None, **bounds: Any) -> BlockStream:
        """Stream stats for stored blocks in ascending id order.

        Bounds may be given as a `ListQuery` or as ``limit``/``after``/``before``
        keywords. Errors during the enumeration arrive as the terminal value
        of the returned stream.
        """
        namespace = self._require_started()
        if query is None:
            query = ListQuery(**bounds)
        elif bounds:
            raise TypeError("Pass either a ListQuery or keyword bounds, not both")

        stream = BlockStream(self._config.list_buffer)
        producer = threading.Thread(
            target=self._produce_listing,
            args=(namespace, query, stream),
            name="lakeblocks-list",
            daemon=True,
        )
        producer.start()
        return stream

    def get(self, block_id: BlockId) -> Future[Block | None]:
        namespace = self._require_started()
        return self._submit(self._get_block, namespace, block_id)

    def put(self, block: Block) -> Future[Block]:
        namespace = self._require_started()
        return self._submit(self._put_block, namespace, block)

    def delete(self, block_id: BlockId) -> Future[bool]:
        namespace = self._require_started()
        return self._submit(self._delete_block, namespace, block_id)

    def erase(self) -> Future[None]:
        namespace = self._require_started()
        return self._submit(self._erase_all, namespace)

    # ---- operation bodies (run on the worker pool) ----

    def _file_stats(
        self, namespace: RemoteNamespace, block_id: BlockId
    ) -> BlockStats | None:
        """Look up a block file; None if it does not exist."""
        path = id_to_path(self._root, block_id)
        try:
            entry = namespace.get_entry(path)
        except NamespaceError as e:
            if e.status_code == NOT_FOUND:
                return None
            raise
        if not is_block_file(entry):
            return None
        return self._entry_stats(entry)

    def _get_block(self, namespace: RemoteNamespace, block_id: BlockId) -> Block | None:
        if (stats := self._file_stats(namespace, block_id)) is None:
            return None
        return self._file_block(namespace, stats)

    def _put_block(self, namespace: RemoteNamespace, block: Block) -> Block:
        if (stats := self._file_stats(namespace, block.id)) is not None:
            # already stored
            return self._file_block(namespace, stats)
        assert self._writer is not None
        stats = self._writer.write(block, id_to_path(self._root, block.id))
        return self._file_block(namespace, stats)

    def _delete_block(self, namespace: RemoteNamespace, block_id: BlockId) -> bool:
        path = id_to_path(self._root, block_id)
        logger.debug("Deleting file %s", self._path_uri(path))
        return namespace.delete(path)

    def _erase_all(self, namespace: RemoteNamespace) -> None:
        logger.debug("Erasing all files under %s", self.uri)
        namespace.delete_recursive(self._root)

    def _produce_listing(
        self, namespace: RemoteNamespace, query: ListQuery, stream: BlockStream
    ) -> None:
        def sink(entry: RemoteEntry) -> bool:
            if stream.closed:
                return False
            if not is_block_file(entry):
                return True
            if (stats := self._entry_stats(entry)) is None:
                return True
            return stream.send(stats)

        try:
            enumerate_directory(namespace, self._root, query, sink)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.debug("Listing %s failed: %r", self.uri, e)
            stream.fail(e)
        else:
            stream.finish()

    # ---- internal helpers ----

    def _require_started(self) -> RemoteNamespace:
        if self._state is not StoreState.STARTED or self._namespace is None:
            raise StoreNotStarted(self._state.value)
        return self._namespace

    def _submit(
        self, fn: Callable[P, T], *args: P.args, **kwargs: P.kwargs
    ) -> Future[T]:
        assert self._executor is not None
        return self._executor.submit(fn, *args, **kwargs)

    def _resolve_credential(self) -> Any:
        key = self._config.credential_key
        if key is None:
            return self._config.credential
        source = (
            self._credentials if self._credentials is not None else self._config.credential
        )
        if not isinstance(source, Mapping) or key not in source:
            raise ConfigurationError(f"No credential registered under {key!r}")
        return source[key]

    def _entry_stats(self, entry: RemoteEntry) -> BlockStats | None:
        if (block_id := path_to_id(self._root, entry.full_name)) is None:
            return None
        return BlockStats(
            id=block_id,
            size=entry.length,
            stored_at=entry.last_modified,
            location=entry.full_name,
        )

    @staticmethod
    def _file_block(namespace: RemoteNamespace, stats: BlockStats) -> Block:
        assert stats.location is not None
        return Block.from_stats(stats, RemoteContentReader(namespace, stats.location))

    def _path_uri(self, path: str) -> str:
        return location_uri(self._config.scheme, self._config.account, path)


def open_store(
    config: StoreConfig,
    connector: NamespaceConnector,
    *,
    credentials: Mapping[str, Any] | None = None,
    executor: Executor | None = None,
) -> LakeBlockStore:
    """Create a block store from ``config`` and start it."""
    store = LakeBlockStore(config, connector, credentials=credentials, executor=executor)
    return store.start()


def close_store(store: LakeBlockStore) -> None:
    """Stop a block store, releasing its namespace client."""
    store.stop()
