"""
Storage Backend Interface

💾 Standard Storage Contract:
This module defines the interface that every storage backend must implement.
Backends keep two logical collections, shell descriptors and the flat index of
submodel descriptors, and expose the same eight operations over them so the
repository core never needs to know which backend it runs on.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from ...model.descriptors import AssetAdministrationShellDescriptor, SubmodelDescriptor


class TransactionContext:
    """Context for one backend transaction"""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        self.is_active = False
        self.is_committed = False
        self.is_rolled_back = False
        self.started_at: Optional[datetime] = None
        self.committed_at: Optional[datetime] = None


class StorageBackend(ABC):
    """
    Abstract storage backend for registry descriptors.

    ``get_*`` returns ``None`` when nothing is stored under the id, ``remove_*``
    returns whether something was removed, and ``put_*`` inserts or replaces the
    entry keyed by the descriptor's own id. Every operation accepts an optional
    transaction context; without one the operation runs in its own transaction.

    Descriptors going in and coming out are always copies, never the objects
    the backend keeps internally.
    """

    # Shells
    @abstractmethod
    def list_shells(self, context: Optional[TransactionContext] = None) -> List[AssetAdministrationShellDescriptor]:
        """Return all shell descriptors"""
        pass

    @abstractmethod
    def get_shell(self, shell_id: str,
                  context: Optional[TransactionContext] = None) -> Optional[AssetAdministrationShellDescriptor]:
        """Return the shell stored under ``shell_id`` or None"""
        pass

    @abstractmethod
    def put_shell(self, descriptor: AssetAdministrationShellDescriptor,
                  context: Optional[TransactionContext] = None) -> AssetAdministrationShellDescriptor:
        """
        Store a shell descriptor together with its nested submodels.

        Args:
            descriptor: The shell to store, keyed by ``descriptor.id``
            context: Optional transaction context

        Returns:
            A copy of what was stored
        """
        pass

    @abstractmethod
    def remove_shell(self, shell_id: str, context: Optional[TransactionContext] = None) -> bool:
        """Remove a shell and the flat-index entries of its nested submodels"""
        pass

    # Flat submodel index
    @abstractmethod
    def list_submodels(self, context: Optional[TransactionContext] = None) -> List[SubmodelDescriptor]:
        """Return every submodel in the flat index"""
        pass

    @abstractmethod
    def get_submodel(self, submodel_id: str,
                     context: Optional[TransactionContext] = None) -> Optional[SubmodelDescriptor]:
        """Return the submodel stored under ``submodel_id`` in the flat index or None"""
        pass

    @abstractmethod
    def put_submodel(self, descriptor: SubmodelDescriptor,
                     context: Optional[TransactionContext] = None) -> SubmodelDescriptor:
        """Store a standalone submodel in the flat index"""
        pass

    @abstractmethod
    def remove_submodel(self, submodel_id: str, context: Optional[TransactionContext] = None) -> bool:
        """Remove a submodel from the flat index"""
        pass

    # Transaction support
    @abstractmethod
    def begin_transaction(self) -> TransactionContext:
        """Begin a new transaction"""
        pass

    @abstractmethod
    def commit_transaction(self, context: TransactionContext):
        """Commit a transaction"""
        pass

    @abstractmethod
    def rollback_transaction(self, context: TransactionContext):
        """Rollback a transaction"""
        pass

    @contextmanager
    def transaction(self) -> Iterator[TransactionContext]:
        """
        Run a block inside one transaction.

        Commits when the block exits normally, rolls back and re-raises on any
        exception.

        Usage:
            with backend.transaction() as tx:
                shell = backend.get_shell("aas-1", tx)
                backend.put_shell(shell, tx)
        """
        context = self.begin_transaction()
        try:
            yield context
        except BaseException:
            self.rollback_transaction(context)
            raise
        self.commit_transaction(context)

    @abstractmethod
    def get_metrics(self) -> Dict[str, Any]:
        """Return backend performance metrics"""
        pass


__all__ = ["StorageBackend", "TransactionContext"]
