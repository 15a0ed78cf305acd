"""
AAS Registry - Descriptor Registry for Asset Administration Shells

📇 Shell and Submodel Catalog:
A registry for Asset Administration Shell descriptors and submodel
descriptors with an in-memory and a SQL storage backend, a repository core
that keeps identities unique and both submodel views consistent, and a
FastAPI adapter exposing the registry over HTTP.
"""

__version__ = "0.1.0"

from .model.descriptors import (
    AdministrativeInformation, AssetAdministrationShellDescriptor, Endpoint, Key,
    LangString, ProtocolInformation, Reference, ShellDescriptor, SpecificAssetId,
    SubmodelDescriptor,
)
from .persistence.repositories.base import (
    RegistryError, ResourceNotFoundError, ResourceAlreadyExistsError,
    InvalidRequestError, PersistenceError, TransactionError, BackendNotFoundError,
)
from .persistence.repositories.interface import StorageBackend, TransactionContext
from .persistence.backends.memory import MemoryBackend
from .persistence.repositories.sql import SQLBackend, create_sqlite_backend
from .persistence.repositories.manager import create_backend
from .core.repository import AasRepository
from .service.registry_service import RegistryService, encode_id, decode_id
from .config import RegistryConfig

__all__ = [
    "__version__",
    # Model
    "AdministrativeInformation", "AssetAdministrationShellDescriptor", "Endpoint", "Key",
    "LangString", "ProtocolInformation", "Reference", "ShellDescriptor", "SpecificAssetId",
    "SubmodelDescriptor",
    # Errors
    "RegistryError", "ResourceNotFoundError", "ResourceAlreadyExistsError",
    "InvalidRequestError", "PersistenceError", "TransactionError", "BackendNotFoundError",
    # Storage
    "StorageBackend", "TransactionContext", "MemoryBackend", "SQLBackend",
    "create_sqlite_backend", "create_backend",
    # Registry
    "AasRepository", "RegistryService", "encode_id", "decode_id", "RegistryConfig",
]
