"""
Storage backend contract, shared base and the SQL backend.
"""

from .interface import StorageBackend, TransactionContext
from .base import (
    BaseBackend, RepositoryMetrics,
    RegistryError, ResourceNotFoundError, ResourceAlreadyExistsError,
    InvalidRequestError, PersistenceError, TransactionError, BackendNotFoundError,
)
from .sql import SQLBackend, SQLConnectionConfig, SQLTransactionContext, create_sqlite_backend
from .manager import BackendRegistry, create_backend, create_backend_registry

__all__ = [
    "StorageBackend", "TransactionContext",
    "BaseBackend", "RepositoryMetrics",
    "RegistryError", "ResourceNotFoundError", "ResourceAlreadyExistsError",
    "InvalidRequestError", "PersistenceError", "TransactionError", "BackendNotFoundError",
    "SQLBackend", "SQLConnectionConfig", "SQLTransactionContext", "create_sqlite_backend",
    "BackendRegistry", "create_backend", "create_backend_registry",
]
