"""LAKEBLOCKS

A content-addressable block store backed by a directory in a remote,
eventually-consistent hierarchical namespace (e.g. a data lake).
Blocks are immutable and identified by the hash of their content.
"""

__all__ = ["__version__"]
__version__ = "0.2.2"
