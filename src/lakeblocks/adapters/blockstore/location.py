"""Construct block stores from location URIs.

A location has the form ``scheme://account/path``: the scheme picks the
namespace connector, the host names the account and the path becomes the
store root. Connectors are plain callables ``(account, credential) ->
RemoteNamespace``; callers can supply their own per scheme.

Built-in schemes
----------------
- ``local``: a `LocalNamespace` in ``<local base>/<account>``, where the
  local base is `LAKEBLOCKS_LOCAL_BASE` or the user data directory.
- ``memory``: a fresh, empty `MemoryNamespace` on every connect; nothing
  outlives the store.
"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Executor
from typing import Any

from lakeblocks.adapters.namespace.local import LocalNamespace
from lakeblocks.adapters.namespace.memory import MemoryNamespace
from lakeblocks.config import local_base, parse_location
from lakeblocks.domain.errors import ConfigurationError

from .store import LakeBlockStore, NamespaceConnector


def connect_local(account: str, credential: Any = None) -> LocalNamespace:  # pylint: disable=unused-argument
    """Connect to the local-directory namespace of ``account``."""
    return LocalNamespace(local_base() / account)


def connect_memory(account: str, credential: Any = None) -> MemoryNamespace:  # pylint: disable=unused-argument
    """Connect to a fresh in-memory namespace."""
    return MemoryNamespace()


DEFAULT_CONNECTORS: dict[str, NamespaceConnector] = {
    "local": connect_local,
    "memory": connect_memory,
}


def from_location(
    location: str,
    *,
    connectors: Mapping[str, NamespaceConnector] | None = None,
    credentials: Mapping[str, Any] | None = None,
    executor: Executor | None = None,
    **options: Any,
) -> LakeBlockStore:
    """Build an unstarted block store for ``location``.

    Args:
        location: ``scheme://account/path`` URI.
        connectors: Extra or overriding connectors by scheme.
        credentials: Token-source registry for ``credential_key`` lookups.
        executor: Shared worker pool, if any.
        **options: Further `StoreConfig` fields (e.g. ``check_summary``).

    Raises:
        ConfigurationError: If the location is malformed or its scheme has
            no connector.
    """
    config = parse_location(location, **options)
    registry = {**DEFAULT_CONNECTORS, **(connectors or {})}
    if (connector := registry.get(config.scheme)) is None:
        raise ConfigurationError(
            f"No namespace connector for scheme {config.scheme!r}; "
            f"known schemes: {', '.join(sorted(registry))}"
        )
    return LakeBlockStore(config, connector, credentials=credentials, executor=executor)
