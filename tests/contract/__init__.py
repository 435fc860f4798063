"""Contract tests.

Purpose
- Define namespace and block-store behavior once and run it against every
  namespace backend (`MemoryNamespace`, `LocalNamespace`) so they stay
  interchangeable.

Guidelines
- Parametrize backends via the ``namespace`` fixture.
- Assert only the public contract (inputs/outputs/effects), not internals.
"""
