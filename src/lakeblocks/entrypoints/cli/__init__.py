"""Command-line interface for LAKEBLOCKS."""
