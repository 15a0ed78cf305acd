"""
Persistence Layer - Descriptor Storage

💾 Pluggable Storage:
Storage backends (in-memory and SQL), the backend factory and the
transformation layer that copies descriptors across the backend boundary.
"""

from .repositories import (
    StorageBackend, TransactionContext, BaseBackend, RepositoryMetrics,
    SQLBackend, SQLConnectionConfig, create_sqlite_backend,
    BackendRegistry, create_backend,
)
from .backends import MemoryBackend
from . import transform

__all__ = [
    "StorageBackend", "TransactionContext", "BaseBackend", "RepositoryMetrics",
    "MemoryBackend", "SQLBackend", "SQLConnectionConfig", "create_sqlite_backend",
    "BackendRegistry", "create_backend", "transform",
]
