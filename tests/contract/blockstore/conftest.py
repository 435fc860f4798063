"""Pytest fixtures for block store contract tests.

Provided fixtures
-----------------
- **store**: A started `LakeBlockStore` rooted at ``/blocks/`` over the
  parametrized ``namespace`` fixture (memory and local backends), with a
  fast consistency probe. Stopped after the test.
- **connect**: Factory turning a namespace into a connector callable, for
  tests that build their own stores.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest

from lakeblocks.adapters.blockstore import LakeBlockStore, open_store
from lakeblocks.config import StoreConfig
from lakeblocks.interfaces.namespace import RemoteNamespace

# pylint: disable=redefined-outer-name

ROOT = "/blocks/"


@pytest.fixture
def store_config() -> StoreConfig:
    return StoreConfig(
        account="testaccount",
        root=ROOT,
        probe_attempts=3,
        probe_interval=0.0,
        list_buffer=4,
        max_workers=4,
    )


@pytest.fixture
def connect() -> Callable[[RemoteNamespace], Callable[..., RemoteNamespace]]:
    def factory(namespace: RemoteNamespace) -> Callable[..., RemoteNamespace]:
        def connector(account, credential):  # pylint: disable=unused-argument
            return namespace

        return connector

    return factory


@pytest.fixture
def store(
    namespace: RemoteNamespace, store_config: StoreConfig, connect
) -> Iterator[LakeBlockStore]:
    store = open_store(store_config, connect(namespace))
    try:
        yield store
    finally:
        store.stop()
