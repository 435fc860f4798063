"""Integration tests.

Purpose
- Exercise the local filesystem backend against a real directory tree.

Guidelines
- Use ``tmp_path`` for every directory the tests touch.
- Assert on what lands on disk, not only on what the API reports.
"""
