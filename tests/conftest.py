"""
Shared fixtures for the registry test suite.

Repository-level tests run against both storage backends through the
parametrized ``backend`` fixture.
"""

from typing import List, Optional

import pytest

from aasregistry.model.descriptors import (
    AdministrativeInformation, AssetAdministrationShellDescriptor, Endpoint, Key,
    LangString, ProtocolInformation, Reference, SpecificAssetId, SubmodelDescriptor,
)
from aasregistry.core.repository import AasRepository
from aasregistry.persistence.backends.memory import MemoryBackend
from aasregistry.persistence.repositories.sql import create_sqlite_backend
from aasregistry.service.registry_service import RegistryService


def _endpoint(href: str) -> Endpoint:
    return Endpoint(
        interface="AAS-3.0",
        protocol_information=ProtocolInformation(
            href=href,
            endpoint_protocol="HTTP",
            endpoint_protocol_version=["1.1"],
        ),
    )


def build_submodel(submodel_id: str, id_short: Optional[str] = None) -> SubmodelDescriptor:
    return SubmodelDescriptor(
        id=submodel_id,
        id_short=id_short or f"short-{submodel_id}",
        description=[LangString(language="en", text=f"Submodel {submodel_id}")],
        semantic_id=Reference(type="ExternalReference", keys=[Key(type="GlobalReference", value="urn:sem:1")]),
        endpoints=[_endpoint(f"http://localhost:8080/submodels/{submodel_id}")],
    )


def build_shell(shell_id: str, submodels: Optional[List[SubmodelDescriptor]] = None,
                id_short: Optional[str] = None) -> AssetAdministrationShellDescriptor:
    return AssetAdministrationShellDescriptor(
        id=shell_id,
        id_short=id_short or f"short-{shell_id}",
        description=[LangString(language="en", text=f"Shell {shell_id}")],
        administration=AdministrativeInformation(version="1", revision="0"),
        asset_kind="Instance",
        global_asset_id=f"urn:asset:{shell_id}",
        specific_asset_ids=[SpecificAssetId(name="serial", value="0815")],
        endpoints=[_endpoint(f"http://localhost:8080/shells/{shell_id}")],
        submodel_descriptors=submodels,
    )


@pytest.fixture
def make_shell():
    return build_shell


@pytest.fixture
def make_submodel():
    return build_submodel


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def sql_backend():
    backend = create_sqlite_backend()
    yield backend
    backend.dispose()


@pytest.fixture(params=["memory", "sql"])
def backend(request):
    """Every storage backend, one test run each"""
    if request.param == "memory":
        yield MemoryBackend()
    else:
        backend = create_sqlite_backend()
        yield backend
        backend.dispose()


@pytest.fixture
def repository(backend):
    return AasRepository(backend)


@pytest.fixture
def service(repository):
    return RegistryService(repository)
