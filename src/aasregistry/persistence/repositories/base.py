"""
Base Backend - Common Backend Functionality

🏗️ Shared Backend Foundation:
This module provides the error types of the registry and the base class shared
by all storage backends: metrics collection, logging, identifier checks and
default transaction bookkeeping.
"""

from abc import ABC
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, Optional
import logging
import uuid

from .interface import StorageBackend, TransactionContext


class RegistryError(Exception):
    """Base exception for registry operations"""
    pass


class ResourceNotFoundError(RegistryError):
    """Raised when a shell or submodel does not exist at the requested scope"""
    pass


class ResourceAlreadyExistsError(RegistryError):
    """Raised when creating a descriptor whose id is already taken"""
    pass


class InvalidRequestError(RegistryError):
    """Raised when a request is malformed (missing id, bad identifier encoding)"""
    pass


class PersistenceError(RegistryError):
    """Raised when the storage backend fails"""
    pass


class TransactionError(PersistenceError):
    """Raised when transaction operations fail"""
    pass


class BackendNotFoundError(RegistryError):
    """Raised when a backend name is not registered"""
    pass


@dataclass
class RepositoryMetrics:
    """Metrics collected by backend implementations"""
    total_operations: int = 0
    successful_operations: int = 0
    failed_operations: int = 0
    average_response_time_ms: float = 0.0
    shells_count: int = 0
    submodels_count: int = 0
    transactions_committed: int = 0
    transactions_rolled_back: int = 0
    uptime_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary"""
        return {
            "total_operations": self.total_operations,
            "successful_operations": self.successful_operations,
            "failed_operations": self.failed_operations,
            "success_rate": self.successful_operations / max(self.total_operations, 1),
            "average_response_time_ms": self.average_response_time_ms,
            "shells_count": self.shells_count,
            "submodels_count": self.submodels_count,
            "transactions_committed": self.transactions_committed,
            "transactions_rolled_back": self.transactions_rolled_back,
            "uptime_seconds": self.uptime_seconds,
        }


class BaseBackend(StorageBackend, ABC):
    """
    Base backend implementation providing common functionality.

    This class provides:
    - Metrics collection
    - Identifier checks
    - Transaction context bookkeeping
    - Logging
    """

    def __init__(self):
        self.metrics = RepositoryMetrics()
        self.start_time = datetime.now()
        self._logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    # Metrics and monitoring
    def get_metrics(self) -> Dict[str, Any]:
        """Get backend performance metrics"""
        self.metrics.uptime_seconds = (datetime.now() - self.start_time).total_seconds()
        return self.metrics.to_dict()

    def _record_operation_start(self) -> datetime:
        return datetime.now()

    def _record_operation_success(self, start_time: datetime):
        duration = (datetime.now() - start_time).total_seconds() * 1000
        self.metrics.total_operations += 1
        self.metrics.successful_operations += 1

        total_time = self.metrics.average_response_time_ms * (self.metrics.successful_operations - 1)
        self.metrics.average_response_time_ms = (total_time + duration) / self.metrics.successful_operations

    def _record_operation_failure(self, start_time: datetime, error: Exception):
        self.metrics.total_operations += 1
        self.metrics.failed_operations += 1
        self._logger.error(f"Operation failed: {error}")

    @contextmanager
    def _tracked(self) -> Iterator[None]:
        """Record one backend operation in the metrics"""
        start_time = self._record_operation_start()
        try:
            yield
        except Exception as e:
            self._record_operation_failure(start_time, e)
            raise
        self._record_operation_success(start_time)

    # Identifier helpers
    @staticmethod
    def _is_valid_key(key: Any) -> bool:
        """Only non-empty strings can address a stored descriptor"""
        return isinstance(key, str) and len(key) > 0

    def _require_descriptor_id(self, descriptor: Any):
        if descriptor is None or not self._is_valid_key(descriptor.id):
            raise InvalidRequestError("descriptor id must be non-null")

    # Transaction helpers
    def _generate_id(self) -> str:
        return str(uuid.uuid4())

    def _validate_transaction_context(self, context: Optional[TransactionContext]):
        if context is not None and not context.is_active:
            raise TransactionError(f"Transaction context is not active: {context.transaction_id}")

    def _mark_committed(self, context: TransactionContext):
        context.is_active = False
        context.is_committed = True
        context.committed_at = datetime.now()
        self.metrics.transactions_committed += 1
        self._logger.debug(f"Transaction committed: {context.transaction_id}")

    def _mark_rolled_back(self, context: TransactionContext):
        context.is_active = False
        context.is_rolled_back = True
        self.metrics.transactions_rolled_back += 1
        self._logger.debug(f"Transaction rolled back: {context.transaction_id}")


__all__ = [
    "BaseBackend", "RepositoryMetrics",
    "RegistryError", "ResourceNotFoundError", "ResourceAlreadyExistsError",
    "InvalidRequestError", "PersistenceError", "TransactionError", "BackendNotFoundError",
]
