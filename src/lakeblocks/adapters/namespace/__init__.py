"""Remote namespace adapters.

- `MemoryNamespace`: in-RAM namespace for tests and examples.
- `LocalNamespace`: namespace rooted in a local directory.
"""

from .local import LocalNamespace
from .memory import MemoryNamespace

__all__ = ["LocalNamespace", "MemoryNamespace"]
