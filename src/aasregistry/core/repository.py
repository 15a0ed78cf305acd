"""
Repository Core - Registry Semantics over a Storage Backend

🧭 Identity and Containment:
This module implements the registry operations on top of any storage backend.
It enforces that shell ids and submodel ids are unique across the registry,
keeps a shell's nested submodels and the flat submodel index in agreement,
and runs every operation inside one backend transaction so a failure leaves
storage untouched.
"""

from typing import List, Optional
import logging

from ..model.descriptors import AssetAdministrationShellDescriptor, SubmodelDescriptor
from ..persistence.repositories.interface import StorageBackend, TransactionContext
from ..persistence.repositories.base import (
    InvalidRequestError, ResourceAlreadyExistsError, ResourceNotFoundError,
)

logger = logging.getLogger(__name__)


def _shell_not_found(shell_id: str) -> ResourceNotFoundError:
    return ResourceNotFoundError(f"AAS not found (id: {shell_id})")


def _submodel_not_found(submodel_id: str, shell_id: Optional[str] = None) -> ResourceNotFoundError:
    if shell_id is None:
        return ResourceNotFoundError(f"Submodel not found (id: {submodel_id})")
    return ResourceNotFoundError(f"Submodel not found in AAS (AAS: {shell_id}, submodel: {submodel_id})")


def _find_index(submodels: Optional[List[SubmodelDescriptor]], submodel_id: str) -> Optional[int]:
    for index, submodel in enumerate(submodels or []):
        if submodel.id == submodel_id:
            return index
    return None


class AasRepository:
    """
    Registry operations over a storage backend.

    A submodel is addressed either globally (``shell_id=None``) through the
    flat index, or scoped to one shell through that shell's nested list.
    Updates replace the stored descriptor wholesale; a replaced nested
    submodel moves to the end of its shell's list.
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    # Shells
    def get_shells(self) -> List[AssetAdministrationShellDescriptor]:
        with self.backend.transaction() as tx:
            return self.backend.list_shells(tx)

    def get_shell(self, shell_id: str) -> AssetAdministrationShellDescriptor:
        self._require_id(shell_id, "AAS")
        with self.backend.transaction() as tx:
            return self._load_shell(shell_id, tx)

    def create_shell(self, descriptor: AssetAdministrationShellDescriptor) -> AssetAdministrationShellDescriptor:
        self._require_shell(descriptor)
        with self.backend.transaction() as tx:
            if self.backend.get_shell(descriptor.id, tx) is not None:
                raise ResourceAlreadyExistsError(f"AAS already exists (id: {descriptor.id})")
            self._ensure_submodel_ids_free(descriptor.submodel_descriptors, tx)
            stored = self.backend.put_shell(descriptor, tx)
        logger.info(f"Created AAS {descriptor.id}")
        return stored

    def delete_shell(self, shell_id: str):
        self._require_id(shell_id, "AAS")
        with self.backend.transaction() as tx:
            if not self.backend.remove_shell(shell_id, tx):
                raise _shell_not_found(shell_id)
        logger.info(f"Deleted AAS {shell_id}")

    def update_shell(self, shell_id: str,
                     descriptor: AssetAdministrationShellDescriptor) -> AssetAdministrationShellDescriptor:
        self._require_id(shell_id, "AAS")
        self._require_shell(descriptor)
        with self.backend.transaction() as tx:
            self._load_shell(shell_id, tx)
            self.backend.remove_shell(shell_id, tx)
            if descriptor.id != shell_id and self.backend.get_shell(descriptor.id, tx) is not None:
                raise ResourceAlreadyExistsError(f"AAS already exists (id: {descriptor.id})")
            self._ensure_submodel_ids_free(descriptor.submodel_descriptors, tx)
            stored = self.backend.put_shell(descriptor, tx)
        logger.info(f"Updated AAS {shell_id}")
        return stored

    # Submodels
    def get_submodels_of_shell(self, shell_id: str) -> List[SubmodelDescriptor]:
        self._require_id(shell_id, "AAS")
        with self.backend.transaction() as tx:
            return self._load_shell(shell_id, tx).submodel_descriptors or []

    def get_submodels(self) -> List[SubmodelDescriptor]:
        with self.backend.transaction() as tx:
            return self.backend.list_submodels(tx)

    def get_submodel(self, submodel_id: str, shell_id: Optional[str] = None) -> SubmodelDescriptor:
        self._require_id(submodel_id, "Submodel")
        with self.backend.transaction() as tx:
            if shell_id is not None:
                shell = self._load_shell(shell_id, tx)
                index = _find_index(shell.submodel_descriptors, submodel_id)
                if index is None:
                    raise _submodel_not_found(submodel_id, shell_id)
                return shell.submodel_descriptors[index]

            submodel = self.backend.get_submodel(submodel_id, tx)
            if submodel is None:
                raise _submodel_not_found(submodel_id)
            return submodel

    def add_submodel(self, descriptor: SubmodelDescriptor, shell_id: Optional[str] = None) -> SubmodelDescriptor:
        self._require_submodel(descriptor)
        with self.backend.transaction() as tx:
            if shell_id is not None:
                shell = self._load_shell(shell_id, tx)
                self._ensure_submodel_ids_free([descriptor], tx)
                stored = self._attach(shell, descriptor, tx)
            else:
                self._ensure_submodel_ids_free([descriptor], tx)
                stored = self.backend.put_submodel(descriptor, tx)
        logger.info(f"Added submodel {descriptor.id}" + (f" to AAS {shell_id}" if shell_id else ""))
        return stored

    def delete_submodel(self, submodel_id: str, shell_id: Optional[str] = None):
        self._require_id(submodel_id, "Submodel")
        with self.backend.transaction() as tx:
            owner = self._resolve_owner(submodel_id, shell_id, tx)
            if owner is not None:
                self._detach(owner, submodel_id, tx)
            self.backend.remove_submodel(submodel_id, tx)
        logger.info(f"Deleted submodel {submodel_id}")

    def update_submodel(self, submodel_id: str, descriptor: SubmodelDescriptor,
                        shell_id: Optional[str] = None) -> SubmodelDescriptor:
        self._require_id(submodel_id, "Submodel")
        self._require_submodel(descriptor)
        with self.backend.transaction() as tx:
            owner = self._resolve_owner(submodel_id, shell_id, tx)
            if owner is not None:
                owner = self._detach(owner, submodel_id, tx)
            self.backend.remove_submodel(submodel_id, tx)
            self._ensure_submodel_ids_free([descriptor], tx)
            if owner is not None:
                stored = self._attach(owner, descriptor, tx)
            else:
                stored = self.backend.put_submodel(descriptor, tx)
        logger.info(f"Updated submodel {submodel_id}")
        return stored

    # Helpers
    def _load_shell(self, shell_id: str, tx: TransactionContext) -> AssetAdministrationShellDescriptor:
        shell = self.backend.get_shell(shell_id, tx)
        if shell is None:
            raise _shell_not_found(shell_id)
        return shell

    def _find_owner(self, submodel_id: str, tx: TransactionContext) -> Optional[AssetAdministrationShellDescriptor]:
        for shell in self.backend.list_shells(tx):
            if _find_index(shell.submodel_descriptors, submodel_id) is not None:
                return shell
        return None

    def _resolve_owner(self, submodel_id: str, shell_id: Optional[str],
                       tx: TransactionContext) -> Optional[AssetAdministrationShellDescriptor]:
        """Return the shell owning the addressed submodel, None for a standalone one"""
        if shell_id is not None:
            shell = self._load_shell(shell_id, tx)
            if _find_index(shell.submodel_descriptors, submodel_id) is None:
                raise _submodel_not_found(submodel_id, shell_id)
            return shell

        if self.backend.get_submodel(submodel_id, tx) is None:
            raise _submodel_not_found(submodel_id)
        return self._find_owner(submodel_id, tx)

    def _attach(self, shell: AssetAdministrationShellDescriptor, descriptor: SubmodelDescriptor,
                tx: TransactionContext) -> SubmodelDescriptor:
        submodels = list(shell.submodel_descriptors or []) + [descriptor]
        stored = self.backend.put_shell(shell.model_copy(update={"submodel_descriptors": submodels}), tx)
        return stored.submodel_descriptors[-1]

    def _detach(self, shell: AssetAdministrationShellDescriptor, submodel_id: str,
                tx: TransactionContext) -> AssetAdministrationShellDescriptor:
        submodels = [s for s in shell.submodel_descriptors or [] if s.id != submodel_id]
        return self.backend.put_shell(shell.model_copy(update={"submodel_descriptors": submodels}), tx)

    def _ensure_submodel_ids_free(self, submodels: Optional[List[SubmodelDescriptor]], tx: TransactionContext):
        seen = set()
        for submodel in submodels or []:
            if submodel.id in seen or self.backend.get_submodel(submodel.id, tx) is not None:
                raise ResourceAlreadyExistsError(f"Submodel already exists (id: {submodel.id})")
            seen.add(submodel.id)

    @staticmethod
    def _require_id(value: Optional[str], kind: str):
        if value is None:
            raise InvalidRequestError(f"{kind} id must be non-null")

    def _require_shell(self, descriptor: Optional[AssetAdministrationShellDescriptor]):
        if descriptor is None:
            raise InvalidRequestError("AAS must be non-null")
        self._require_id(descriptor.id, "AAS")
        for submodel in descriptor.submodel_descriptors or []:
            self._require_submodel(submodel)

    def _require_submodel(self, descriptor: Optional[SubmodelDescriptor]):
        if descriptor is None:
            raise InvalidRequestError("Submodel must be non-null")
        self._require_id(descriptor.id, "Submodel")


__all__ = ["AasRepository"]
