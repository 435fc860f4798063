"""Content-addressable block store over a remote hierarchical namespace.

Exports
-------
- LakeBlockStore: the store facade (lifecycle plus stat/list/get/put/delete/erase).
- open_store / close_store: start and stop a store from a `StoreConfig`.
- from_location: build a store from a ``scheme://account/path`` URI.
- StoreState: lifecycle states.
"""

from .location import DEFAULT_CONNECTORS, connect_local, connect_memory, from_location
from .store import LakeBlockStore, StoreState, close_store, open_store

__all__ = [
    "DEFAULT_CONNECTORS",
    "LakeBlockStore",
    "StoreState",
    "close_store",
    "connect_local",
    "connect_memory",
    "from_location",
    "open_store",
]
