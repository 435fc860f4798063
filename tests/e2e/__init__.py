"""End-to-end tests of the ``lakeblocks`` command line."""
