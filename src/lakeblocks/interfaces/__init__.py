"""Interfaces (application boundary) for LAKEBLOCKS.

Defines the ports the block store is built against: the remote hierarchical
namespace it stores blocks in, and the block store contract itself.

Dependency rule: this package may import `lakeblocks.domain` only. It is
imported by `lakeblocks.adapters` and the entrypoints.
"""
