"""Domain layer for LAKEBLOCKS.

Holds the block value types (identifiers, stats, lazily-read blocks) and the
store-level exceptions. Nothing here talks to a remote namespace.
"""
