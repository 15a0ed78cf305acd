"""
Registry semantics on top of a storage backend.
"""

from .repository import AasRepository

__all__ = ["AasRepository"]
