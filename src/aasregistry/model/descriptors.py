"""
Descriptor Model - Shell and Submodel Descriptors

📇 Registry Entities:
This module defines the descriptor shapes stored by the registry. A shell
descriptor is the top-level catalog entry; it owns an ordered list of submodel
descriptors, each of which also has its own global identity.

All models accept both snake_case attribute names and the camelCase names used
on the wire (``idShort``, ``submodelDescriptors`` ...).
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DescriptorModel(BaseModel):
    """Common pydantic configuration for all descriptor types"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class LangString(DescriptorModel):
    """Localized text"""
    language: str
    text: str


class Key(DescriptorModel):
    type: str
    value: str


class Reference(DescriptorModel):
    """Reference made of an ordered list of keys"""
    type: str
    keys: Optional[List[Key]] = None


class AdministrativeInformation(DescriptorModel):
    version: Optional[str] = None
    revision: Optional[str] = None
    template_id: Optional[str] = None
    creator: Optional[Reference] = None


class ProtocolInformation(DescriptorModel):
    """How to reach an endpoint"""
    href: str
    endpoint_protocol: Optional[str] = None
    endpoint_protocol_version: Optional[List[str]] = None
    subprotocol: Optional[str] = None
    subprotocol_body: Optional[str] = None
    subprotocol_body_encoding: Optional[str] = None


class Endpoint(DescriptorModel):
    interface: str
    protocol_information: ProtocolInformation


class SpecificAssetId(DescriptorModel):
    name: str
    value: str
    external_subject_id: Optional[Reference] = None


class SubmodelDescriptor(DescriptorModel):
    """
    Descriptor of a submodel.

    A submodel descriptor can be registered standalone or nested inside a
    shell descriptor. Either way its ``id`` is unique across the registry.
    ``id`` is optional at parse time so that a missing identifier can be
    reported as a bad request instead of a parsing failure.
    """
    id: Optional[str] = None
    id_short: Optional[str] = None
    description: Optional[List[LangString]] = None
    display_name: Optional[List[LangString]] = None
    administration: Optional[AdministrativeInformation] = None
    semantic_id: Optional[Reference] = None
    endpoints: Optional[List[Endpoint]] = None


class AssetAdministrationShellDescriptor(DescriptorModel):
    """
    Descriptor of an Asset Administration Shell.

    ``submodel_descriptors`` is the ordered list of nested submodels owned by
    this shell.
    """
    id: Optional[str] = None
    id_short: Optional[str] = None
    description: Optional[List[LangString]] = None
    display_name: Optional[List[LangString]] = None
    administration: Optional[AdministrativeInformation] = None
    asset_kind: Optional[str] = None
    asset_type: Optional[str] = None
    global_asset_id: Optional[str] = None
    specific_asset_ids: Optional[List[SpecificAssetId]] = None
    endpoints: Optional[List[Endpoint]] = None
    submodel_descriptors: Optional[List[SubmodelDescriptor]] = None


ShellDescriptor = AssetAdministrationShellDescriptor

__all__ = [
    "DescriptorModel", "LangString", "Key", "Reference", "AdministrativeInformation",
    "ProtocolInformation", "Endpoint", "SpecificAssetId",
    "SubmodelDescriptor", "AssetAdministrationShellDescriptor", "ShellDescriptor",
]
