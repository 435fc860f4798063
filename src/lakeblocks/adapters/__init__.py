"""Adapters (infrastructure) for LAKEBLOCKS.

Provide concrete implementations of the ports in `lakeblocks.interfaces`:
remote namespaces (in-memory, local filesystem) and the block store built on
top of them.

Dependency rule: may import `lakeblocks.domain` and `lakeblocks.interfaces`;
neither of those may import this package.
"""
