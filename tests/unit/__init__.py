"""Unit tests.

Purpose
- Verify a single module/class/function in isolation.

Guidelines
- No real filesystem or sleeping; use `MemoryNamespace` and fake clocks.
- Prefer behavior-centric assertions over implementation details.
- Keep tests small, fast, and deterministic.
"""
