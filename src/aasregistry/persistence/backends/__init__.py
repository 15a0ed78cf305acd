"""
In-memory storage backend.
"""

from .memory import MemoryBackend, MemoryTransaction

__all__ = ["MemoryBackend", "MemoryTransaction"]
