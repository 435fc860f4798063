"""Entrypoints (inbound adapters) for LAKEBLOCKS.

Expose the block store to the outside world: currently the `lakeblocks`
command-line interface. Parse and validate inputs, call the store, and
present results.
"""
