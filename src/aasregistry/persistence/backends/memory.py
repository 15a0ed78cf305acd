"""
Memory Backend - In-Memory Descriptor Storage

🧠 In-Memory Registry Storage:
This module provides the in-memory storage backend. Shells and the flat
submodel index live in two dictionaries guarded by one re-entrant lock.
Every descriptor is copied through the transformation layer on the way in and
on the way out.
"""

from typing import Dict, List, Optional
from datetime import datetime
import threading
import logging

from ..repositories.interface import TransactionContext
from ..repositories.base import BaseBackend, TransactionError
from ..transform import convert_shell, convert_submodel
from ...model.descriptors import AssetAdministrationShellDescriptor, SubmodelDescriptor

logger = logging.getLogger(__name__)


class MemoryTransaction(TransactionContext):
    """Transaction context for memory operations"""

    def __init__(self, transaction_id: str,
                 shells: Dict[str, AssetAdministrationShellDescriptor],
                 submodels: Dict[str, SubmodelDescriptor]):
        super().__init__(transaction_id)
        self.is_active = True
        self.started_at = datetime.now()

        # Snapshot for rollback; stored values are never mutated in place
        self.shells_snapshot = dict(shells)
        self.submodels_snapshot = dict(submodels)


class MemoryBackend(BaseBackend):
    """
    In-memory storage backend.

    Features:
    - Shell and flat submodel index kept in two dictionaries
    - Nested submodels are mirrored into the flat index on put (first writer wins)
    - Snapshot transactions with rollback
    - Thread-safe operations (one re-entrant lock, held for a whole transaction)
    """

    def __init__(self):
        super().__init__()

        # Core storage
        self._shells: Dict[str, AssetAdministrationShellDescriptor] = {}
        self._submodels: Dict[str, SubmodelDescriptor] = {}

        # Transaction management
        self._lock = threading.RLock()
        self._transactions: Dict[str, MemoryTransaction] = {}

        logger.info("MemoryBackend initialized")

    # Shells
    def list_shells(self, context: Optional[TransactionContext] = None) -> List[AssetAdministrationShellDescriptor]:
        with self._tracked(), self._lock:
            self._validate_transaction_context(context)
            return [convert_shell(shell) for shell in self._shells.values()]

    def get_shell(self, shell_id: str,
                  context: Optional[TransactionContext] = None) -> Optional[AssetAdministrationShellDescriptor]:
        with self._tracked(), self._lock:
            self._validate_transaction_context(context)
            return convert_shell(self._shells.get(shell_id))

    def put_shell(self, descriptor: AssetAdministrationShellDescriptor,
                  context: Optional[TransactionContext] = None) -> AssetAdministrationShellDescriptor:
        self._require_descriptor_id(descriptor)
        for submodel in descriptor.submodel_descriptors or []:
            self._require_descriptor_id(submodel)
        with self._tracked(), self._lock:
            self._validate_transaction_context(context)
            stored = convert_shell(descriptor)
            self._shells[stored.id] = stored
            for submodel in stored.submodel_descriptors or []:
                if submodel.id not in self._submodels:
                    self._submodels[submodel.id] = convert_submodel(submodel)
            self._update_counts()
            logger.debug(f"Stored shell {stored.id}")
            return convert_shell(stored)

    def remove_shell(self, shell_id: str, context: Optional[TransactionContext] = None) -> bool:
        with self._tracked(), self._lock:
            self._validate_transaction_context(context)
            shell = self._shells.pop(shell_id, None)
            if shell is None:
                return False
            # A nested submodel is owned by exactly one shell
            for submodel in shell.submodel_descriptors or []:
                self._submodels.pop(submodel.id, None)
            self._update_counts()
            logger.debug(f"Removed shell {shell_id}")
            return True

    # Flat submodel index
    def list_submodels(self, context: Optional[TransactionContext] = None) -> List[SubmodelDescriptor]:
        with self._tracked(), self._lock:
            self._validate_transaction_context(context)
            return [convert_submodel(submodel) for submodel in self._submodels.values()]

    def get_submodel(self, submodel_id: str,
                     context: Optional[TransactionContext] = None) -> Optional[SubmodelDescriptor]:
        with self._tracked(), self._lock:
            self._validate_transaction_context(context)
            return convert_submodel(self._submodels.get(submodel_id))

    def put_submodel(self, descriptor: SubmodelDescriptor,
                     context: Optional[TransactionContext] = None) -> SubmodelDescriptor:
        self._require_descriptor_id(descriptor)
        with self._tracked(), self._lock:
            self._validate_transaction_context(context)
            stored = convert_submodel(descriptor)
            self._submodels[stored.id] = stored
            self._update_counts()
            return convert_submodel(stored)

    def remove_submodel(self, submodel_id: str, context: Optional[TransactionContext] = None) -> bool:
        with self._tracked(), self._lock:
            self._validate_transaction_context(context)
            removed = self._submodels.pop(submodel_id, None) is not None
            self._update_counts()
            return removed

    def clear(self):
        """Remove every shell and submodel"""
        with self._lock:
            self._shells.clear()
            self._submodels.clear()
            self._update_counts()
        logger.info("MemoryBackend cleared")

    # Transaction support
    def begin_transaction(self) -> TransactionContext:
        """Begin a new memory transaction; the lock is held until commit or rollback"""
        self._lock.acquire()
        transaction = MemoryTransaction(self._generate_id(), self._shells, self._submodels)
        self._transactions[transaction.transaction_id] = transaction
        self._logger.debug(f"Transaction started: {transaction.transaction_id}")
        return transaction

    def commit_transaction(self, context: TransactionContext):
        """Commit a memory transaction"""
        transaction = self._pop_transaction(context)
        try:
            self._mark_committed(transaction)
        finally:
            self._lock.release()

    def rollback_transaction(self, context: TransactionContext):
        """Rollback a memory transaction, restoring both dictionaries"""
        transaction = self._pop_transaction(context)
        try:
            self._shells = transaction.shells_snapshot
            self._submodels = transaction.submodels_snapshot
            self._update_counts()
            self._mark_rolled_back(transaction)
        finally:
            self._lock.release()

    def _pop_transaction(self, context: TransactionContext) -> MemoryTransaction:
        transaction = self._transactions.pop(context.transaction_id, None)
        if transaction is None or not transaction.is_active:
            raise TransactionError(f"Transaction not found or not active: {context.transaction_id}")
        return transaction

    def _update_counts(self):
        self.metrics.shells_count = len(self._shells)
        self.metrics.submodels_count = len(self._submodels)


__all__ = ["MemoryBackend", "MemoryTransaction"]
