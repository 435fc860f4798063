"""Configuration utilities for LAKEBLOCKS.

This module centralizes the store configuration record and the helpers that
read configuration from the environment or from a location URI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from platformdirs import user_data_dir

from lakeblocks.domain.errors import ConfigurationError

LOCATION_ENV = "LAKEBLOCKS_LOCATION"  # pragma: no mutate
LOCAL_BASE_ENV = "LAKEBLOCKS_LOCAL_BASE"  # pragma: no mutate

DEFAULT_ROOT = "/"
DEFAULT_PROBE_ATTEMPTS = 5
DEFAULT_PROBE_INTERVAL = 0.2  # seconds
DEFAULT_LIST_BUFFER = 100


class LocationNotSetError(Exception):
    """Raised when the LAKEBLOCKS_LOCATION environment variable is not set."""


@dataclass(frozen=True)
class StoreConfig:  # pylint: disable=too-many-instance-attributes
    """Immutable settings for a block store.

    Attributes:
        account: Remote account (host) holding the namespace.
        scheme: Location scheme; selects how the namespace is connected.
        root: Directory under which blocks are stored.
        credential: Token source passed to the namespace connector, or a
            registry of token sources when ``credential_key`` is set.
        credential_key: Key selecting the token source from a registry.
        check_summary: Log aggregate usage of the root at startup.
        probe_attempts: Metadata polls after a write before proceeding anyway.
        probe_interval: Seconds between metadata polls.
        list_buffer: Capacity of the stream returned by a listing.
        max_workers: Size of the worker pool; None lets the executor decide.
    """

    account: str
    scheme: str = "lake"
    root: str = DEFAULT_ROOT
    credential: Any = field(default=None, repr=False)
    credential_key: str | None = None
    check_summary: bool = False
    probe_attempts: int = DEFAULT_PROBE_ATTEMPTS
    probe_interval: float = DEFAULT_PROBE_INTERVAL
    list_buffer: int = DEFAULT_LIST_BUFFER
    max_workers: int | None = None

    def __post_init__(self) -> None:
        if not self.account or not self.account.strip():
            raise ConfigurationError(
                f"Store account must be a non-empty string, got: {self.account!r}"
            )
        if self.probe_attempts < 1:
            raise ConfigurationError("probe_attempts must be at least 1")
        if self.probe_interval < 0:
            raise ConfigurationError("probe_interval must not be negative")
        if self.list_buffer < 1:
            raise ConfigurationError("list_buffer must be at least 1")

    @property
    def uri(self) -> str:
        """Location URI of the store root."""
        return location_uri(self.scheme, self.account, self.root)

    def with_options(self, **options: Any) -> StoreConfig:
        """Return a copy with ``options`` replaced."""
        return replace(self, **options)


def location_uri(scheme: str, account: str, path: str) -> str:
    """Construct a URI referencing ``path`` in the remote namespace."""
    return f"{scheme}://{account}{path}"


def parse_location(location: str, **options: Any) -> StoreConfig:
    """Build a `StoreConfig` from a ``scheme://account/path`` URI.

    The host names the remote account and the path becomes the store root.
    Extra keyword arguments set the remaining `StoreConfig` fields.

    Raises:
        ConfigurationError: If the URI has no scheme or no account.
    """
    parts = urlsplit(location)
    if not parts.scheme:
        raise ConfigurationError(f"Store location has no scheme: {location!r}")
    if not parts.netloc:
        raise ConfigurationError(f"Store location has no account: {location!r}")
    return StoreConfig(
        account=parts.netloc,
        scheme=parts.scheme,
        root=parts.path or DEFAULT_ROOT,
        **options,
    )


def get_location() -> str:
    """Get the store location URI from the environment.

    Returns:
        The value of the `LAKEBLOCKS_LOCATION` environment variable.

    Raises:
        LocationNotSetError: If `LAKEBLOCKS_LOCATION` is not set.
    """
    if not (location := os.environ.get(LOCATION_ENV)):
        raise LocationNotSetError
    return location


def local_base() -> Path:
    """Directory holding the accounts of the ``local`` namespace scheme.

    `LAKEBLOCKS_LOCAL_BASE` when set, otherwise the user data directory.
    """
    if base := os.environ.get(LOCAL_BASE_ENV):
        return Path(base)
    return Path(user_data_dir("lakeblocks", appauthor=False)) / "accounts"
