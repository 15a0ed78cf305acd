"""
Backend Manager - Backend Factory

🏭 Backend Factory:
This module maps backend names from the configuration to the storage backend
implementations and builds the configured one.
"""

from typing import Callable, Dict, List, Optional
import logging

from sqlalchemy.pool import StaticPool

from .interface import StorageBackend
from .base import BackendNotFoundError
from .sql import SQLBackend, SQLConnectionConfig
from ..backends.memory import MemoryBackend
from ...config import PersistenceConfig

logger = logging.getLogger(__name__)

BackendFactory = Callable[[PersistenceConfig], StorageBackend]

_IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


def _create_memory_backend(config: PersistenceConfig) -> StorageBackend:
    return MemoryBackend()


def _create_sql_backend(config: PersistenceConfig) -> StorageBackend:
    connection = SQLConnectionConfig(database_url=config.database_url, echo=config.echo)
    if config.database_url in _IN_MEMORY_SQLITE_URLS:
        # One shared connection, otherwise every session sees an empty database
        connection.connect_args = {"check_same_thread": False}
        connection.engine_options = {"poolclass": StaticPool}
    backend = SQLBackend(connection)
    backend.create_schema()
    return backend


class BackendRegistry:
    """
    Registry for storage backend implementations.

    Maps the backend names used in configuration files to factories, enabling
    pluggable persistence.
    """

    def __init__(self):
        self._backends: Dict[str, BackendFactory] = {}
        self._default_backends: Dict[str, BackendFactory] = {
            "memory": _create_memory_backend,
            "sql": _create_sql_backend,
        }

    def register_backend(self, name: str, factory: BackendFactory):
        """Register a storage backend factory"""
        self._backends[name] = factory
        logger.info(f"Registered backend: {name}")

    def get_backend_factory(self, name: str) -> Optional[BackendFactory]:
        """Get the factory registered under a backend name"""
        return self._backends.get(name) or self._default_backends.get(name)

    def list_backends(self) -> List[str]:
        """List all registered backend names"""
        return sorted({**self._default_backends, **self._backends})

    def create(self, config: PersistenceConfig) -> StorageBackend:
        """Build the backend named in the configuration"""
        factory = self.get_backend_factory(config.backend)
        if factory is None:
            raise BackendNotFoundError(
                f"Unknown backend '{config.backend}' (available: {', '.join(self.list_backends())})"
            )
        backend = factory(config)
        logger.info(f"Backend {config.backend} initialized successfully")
        return backend


# Convenience functions
def create_backend_registry() -> BackendRegistry:
    """Create a new backend registry with default backends"""
    return BackendRegistry()


def create_backend(config: PersistenceConfig, registry: Optional[BackendRegistry] = None) -> StorageBackend:
    """Create the storage backend described by ``config``"""
    return (registry or create_backend_registry()).create(config)


__all__ = ["BackendRegistry", "BackendFactory", "create_backend_registry", "create_backend"]
