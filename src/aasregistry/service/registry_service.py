"""
Registry Service - Request Façade

🚪 Request Boundary:
This module sits between the HTTP adapter and the repository core. Path
identifiers arrive URL-safe base64 encoded and are decoded here; submitted
descriptors are checked for identifiers before anything reaches storage.
"""

from typing import List, Optional
import base64
import binascii
import logging
import re

from ..core.repository import AasRepository
from ..model.descriptors import AssetAdministrationShellDescriptor, SubmodelDescriptor
from ..persistence.repositories.base import InvalidRequestError

logger = logging.getLogger(__name__)

_URL_SAFE_BASE64 = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def encode_id(identifier: str) -> str:
    """Encode an identifier for use in a URL path (URL-safe base64, unpadded)"""
    return base64.urlsafe_b64encode(identifier.encode("utf-8")).decode("ascii").rstrip("=")


def decode_id(encoded: str) -> str:
    """
    Decode a URL-safe base64 path identifier.

    Padding is optional. Raises ``InvalidRequestError`` when the value is not
    valid base64 or does not decode to UTF-8 text.
    """
    if encoded is None:
        raise InvalidRequestError("no identifier provided")
    if not _URL_SAFE_BASE64.fullmatch(encoded):
        raise InvalidRequestError(f"invalid identifier encoding: {encoded}")
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        return base64.urlsafe_b64decode(padded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise InvalidRequestError(f"invalid identifier encoding: {encoded}") from e


def _has_id(descriptor) -> bool:
    return descriptor is not None and descriptor.id is not None and descriptor.id != ""


def _check_submodel_identifiers(submodel: Optional[SubmodelDescriptor]):
    if not _has_id(submodel):
        raise InvalidRequestError("no Submodel identification provided")


def _check_shell_identifiers(shell: Optional[AssetAdministrationShellDescriptor]):
    if not _has_id(shell):
        raise InvalidRequestError("no AAS Identification provided")
    for submodel in shell.submodel_descriptors or []:
        _check_submodel_identifiers(submodel)


class RegistryService:
    """Registry operations addressed by encoded identifiers"""

    def __init__(self, repository: AasRepository):
        self.repository = repository

    # Shells
    def get_shells(self) -> List[AssetAdministrationShellDescriptor]:
        return self.repository.get_shells()

    def get_shell(self, shell_id: str) -> AssetAdministrationShellDescriptor:
        return self.repository.get_shell(decode_id(shell_id))

    def create_shell(self, descriptor: AssetAdministrationShellDescriptor) -> AssetAdministrationShellDescriptor:
        _check_shell_identifiers(descriptor)
        return self.repository.create_shell(descriptor)

    def delete_shell(self, shell_id: str):
        self.repository.delete_shell(decode_id(shell_id))

    def update_shell(self, shell_id: str,
                     descriptor: AssetAdministrationShellDescriptor) -> AssetAdministrationShellDescriptor:
        _check_shell_identifiers(descriptor)
        return self.repository.update_shell(decode_id(shell_id), descriptor)

    # Submodels
    def get_submodels(self, shell_id: Optional[str] = None) -> List[SubmodelDescriptor]:
        if shell_id is None:
            return self.repository.get_submodels()
        return self.repository.get_submodels_of_shell(decode_id(shell_id))

    def get_submodel(self, submodel_id: str, shell_id: Optional[str] = None) -> SubmodelDescriptor:
        return self.repository.get_submodel(decode_id(submodel_id), self._decode_scope(shell_id))

    def create_submodel(self, descriptor: SubmodelDescriptor,
                        shell_id: Optional[str] = None) -> SubmodelDescriptor:
        _check_submodel_identifiers(descriptor)
        return self.repository.add_submodel(descriptor, self._decode_scope(shell_id))

    def delete_submodel(self, submodel_id: str, shell_id: Optional[str] = None):
        self.repository.delete_submodel(decode_id(submodel_id), self._decode_scope(shell_id))

    def update_submodel(self, submodel_id: str, descriptor: SubmodelDescriptor,
                        shell_id: Optional[str] = None) -> SubmodelDescriptor:
        _check_submodel_identifiers(descriptor)
        return self.repository.update_submodel(decode_id(submodel_id), descriptor, self._decode_scope(shell_id))

    @staticmethod
    def _decode_scope(shell_id: Optional[str]) -> Optional[str]:
        return None if shell_id is None else decode_id(shell_id)


__all__ = ["RegistryService", "encode_id", "decode_id"]
