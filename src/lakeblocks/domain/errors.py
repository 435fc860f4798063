"""Exceptions raised by block store operations."""


class BlockStoreError(Exception):
    """Base class for block store errors."""


class InvalidBlockId(BlockStoreError, ValueError):
    """The value cannot be interpreted as a block identifier."""


class ConfigurationError(BlockStoreError):
    """The store configuration is incomplete or inconsistent."""


class StoreNotStarted(BlockStoreError):
    """An operation was attempted on a store that is not started.

    Attributes:
        state (str): The lifecycle state the store was in.
    """

    def __init__(self, state: str):
        super().__init__(f"Block store must be started, but is {state}.")
        self.state = state


class StoreAccessDenied(BlockStoreError):
    """The store root is not readable, writable and traversable.

    Attributes:
        location (str): URI of the store root that was checked.
    """

    def __init__(self, location: str):
        super().__init__(f"Cannot access block store at {location}")
        self.location = location


class RenameConflict(BlockStoreError):
    """A landing file could not be promoted to its final block path.

    Attributes:
        source (str): The landing path that was being renamed.
        target (str): The committed block path.
    """

    def __init__(self, source: str, target: str):
        super().__init__(f"Failed to rename landing file {source!r} to {target!r}.")
        self.source = source
        self.target = target
