"""
Model Transformation - Descriptor Deep Copies

🔁 Ownership Boundary:
Descriptors that cross the backend boundary are rebuilt field by field into new,
independently owned objects. Whatever the caller does with its descriptor after
handing it to a backend cannot change stored state, and stored state handed back
to a caller is never the backend's own instance.

Rules:
- every nested collection is rebuilt element by element
- ``None`` objects and ``None`` collections stay ``None`` (never become ``[]``)
- no validation is performed, malformed nested data is carried over as is
"""

from typing import Callable, List, Optional, TypeVar

from ..model.descriptors import (
    AdministrativeInformation, AssetAdministrationShellDescriptor, Endpoint, Key,
    LangString, ProtocolInformation, Reference, SpecificAssetId, SubmodelDescriptor,
)

T = TypeVar("T")


def _convert_list(items: Optional[List[T]], convert: Callable[[T], T]) -> Optional[List[T]]:
    if items is None:
        return None
    return [convert(item) for item in items]


def convert_lang_strings(values: Optional[List[LangString]]) -> Optional[List[LangString]]:
    return _convert_list(
        values,
        lambda x: LangString.model_construct(language=x.language, text=x.text),
    )


def convert_keys(keys: Optional[List[Key]]) -> Optional[List[Key]]:
    return _convert_list(keys, lambda x: Key.model_construct(type=x.type, value=x.value))


def convert_reference(reference: Optional[Reference]) -> Optional[Reference]:
    if reference is None:
        return None
    return Reference.model_construct(
        type=reference.type,
        keys=convert_keys(reference.keys),
    )


def convert_administrative_information(
    administration: Optional[AdministrativeInformation],
) -> Optional[AdministrativeInformation]:
    if administration is None:
        return None
    return AdministrativeInformation.model_construct(
        version=administration.version,
        revision=administration.revision,
        template_id=administration.template_id,
        creator=convert_reference(administration.creator),
    )


def convert_protocol_information(
    protocol_information: Optional[ProtocolInformation],
) -> Optional[ProtocolInformation]:
    if protocol_information is None:
        return None
    versions = protocol_information.endpoint_protocol_version
    return ProtocolInformation.model_construct(
        href=protocol_information.href,
        endpoint_protocol=protocol_information.endpoint_protocol,
        endpoint_protocol_version=None if versions is None else list(versions),
        subprotocol=protocol_information.subprotocol,
        subprotocol_body=protocol_information.subprotocol_body,
        subprotocol_body_encoding=protocol_information.subprotocol_body_encoding,
    )


def convert_endpoints(endpoints: Optional[List[Endpoint]]) -> Optional[List[Endpoint]]:
    return _convert_list(
        endpoints,
        lambda x: Endpoint.model_construct(
            interface=x.interface,
            protocol_information=convert_protocol_information(x.protocol_information),
        ),
    )


def convert_specific_asset_ids(
    asset_ids: Optional[List[SpecificAssetId]],
) -> Optional[List[SpecificAssetId]]:
    return _convert_list(
        asset_ids,
        lambda x: SpecificAssetId.model_construct(
            name=x.name,
            value=x.value,
            external_subject_id=convert_reference(x.external_subject_id),
        ),
    )


def convert_submodel(submodel: Optional[SubmodelDescriptor]) -> Optional[SubmodelDescriptor]:
    """Return an independently owned copy of a submodel descriptor."""
    if submodel is None:
        return None
    return SubmodelDescriptor.model_construct(
        id=submodel.id,
        id_short=submodel.id_short,
        description=convert_lang_strings(submodel.description),
        display_name=convert_lang_strings(submodel.display_name),
        administration=convert_administrative_information(submodel.administration),
        semantic_id=convert_reference(submodel.semantic_id),
        endpoints=convert_endpoints(submodel.endpoints),
    )


def convert_submodels(
    submodels: Optional[List[SubmodelDescriptor]],
) -> Optional[List[SubmodelDescriptor]]:
    return _convert_list(submodels, convert_submodel)


def convert_shell(
    shell: Optional[AssetAdministrationShellDescriptor],
) -> Optional[AssetAdministrationShellDescriptor]:
    """Return an independently owned copy of a shell descriptor, nested submodels included."""
    if shell is None:
        return None
    return AssetAdministrationShellDescriptor.model_construct(
        id=shell.id,
        id_short=shell.id_short,
        description=convert_lang_strings(shell.description),
        display_name=convert_lang_strings(shell.display_name),
        administration=convert_administrative_information(shell.administration),
        asset_kind=shell.asset_kind,
        asset_type=shell.asset_type,
        global_asset_id=shell.global_asset_id,
        specific_asset_ids=convert_specific_asset_ids(shell.specific_asset_ids),
        endpoints=convert_endpoints(shell.endpoints),
        submodel_descriptors=convert_submodels(shell.submodel_descriptors),
    )


__all__ = [
    "convert_shell", "convert_submodel", "convert_submodels", "convert_endpoints",
    "convert_protocol_information", "convert_reference", "convert_keys",
    "convert_administrative_information", "convert_lang_strings",
    "convert_specific_asset_ids",
]
