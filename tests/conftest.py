"""Global pytest fixtures for LAKEBLOCKS."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from lakeblocks.adapters.namespace import LocalNamespace, MemoryNamespace
from lakeblocks.domain.blocks import Block
from lakeblocks.interfaces.namespace import RemoteNamespace

# pylint: disable=redefined-outer-name,unused-argument

TESTS_ROOT = Path(__file__).parent.resolve()

# top-level test directory -> mark applied to every test collected below it
DEFAULT_MARKS = {
    "unit": pytest.mark.unit,
    "contract": pytest.mark.contract,
    "integration": pytest.mark.integration,
    "e2e": pytest.mark.e2e,
}


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Mark each item with the name of the test directory it lives in."""
    for item in items:
        path = item.path.resolve()  # pytest>=8: pathlib.Path
        try:
            top = path.relative_to(TESTS_ROOT).parts[0]
        except (ValueError, IndexError):
            continue
        mark = DEFAULT_MARKS.get(top)
        if mark is None:
            continue
        if not any(marker.name == mark.name for marker in item.iter_markers()):
            item.add_marker(mark)


@pytest.fixture(autouse=True)
def isolated_local_base(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point the ``local://`` scheme at a per-test directory.

    Keeps tests away from the user data directory and from any location set
    in the developer's environment.
    """
    base = tmp_path_factory.mktemp("accounts")
    monkeypatch.setenv("LAKEBLOCKS_LOCAL_BASE", str(base))
    monkeypatch.delenv("LAKEBLOCKS_LOCATION", raising=False)
    return base


@pytest.fixture(params=["memory", "local"])
def namespace(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[RemoteNamespace]:
    """Return a fresh, empty namespace for the requested backend.

    Current params:
      - `"memory"` → `MemoryNamespace` (in RAM, small pages)
      - `"local"` → `LocalNamespace` under ``tmp_path`` (small pages)

    Both use a page size of 3 so that listings cross page boundaries.
    """
    match request.param:
        case "memory":
            ns: RemoteNamespace = MemoryNamespace(page_size=3)
        case "local":
            ns = LocalNamespace(tmp_path / "namespace", page_size=3)
        case _:
            raise ValueError(f"unknown namespace type: {request.param}")
    try:
        yield ns
    finally:
        ns.close()


@pytest.fixture
def arbitrary_bytes() -> bytes:
    """Deterministic sample payload for quick round-trip tests."""
    return b"The quick brown fox jumps over the lazy dog"


@pytest.fixture
def arbitrary_block(arbitrary_bytes: bytes) -> Block:
    """An unstored sha256 block over `arbitrary_bytes`."""
    return Block.from_bytes(arbitrary_bytes)
