"""
Descriptor model for the registry.
"""

from .descriptors import (
    DescriptorModel, LangString, Key, Reference, AdministrativeInformation,
    ProtocolInformation, Endpoint, SpecificAssetId,
    SubmodelDescriptor, AssetAdministrationShellDescriptor, ShellDescriptor,
)

__all__ = [
    "DescriptorModel", "LangString", "Key", "Reference", "AdministrativeInformation",
    "ProtocolInformation", "Endpoint", "SpecificAssetId",
    "SubmodelDescriptor", "AssetAdministrationShellDescriptor", "ShellDescriptor",
]
