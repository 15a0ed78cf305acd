"""
FastAPI Web Adapter

Provides a configure_app function exposing a RegistryService over HTTP.
Path identifiers are URL-safe base64 encoded; descriptors are exchanged as
camelCase JSON with null fields omitted.
"""

import logging
from typing import Any, Callable, Dict, Type

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..model.descriptors import AssetAdministrationShellDescriptor, SubmodelDescriptor
from ..persistence.repositories.base import (
    InvalidRequestError, PersistenceError, RegistryError,
    ResourceAlreadyExistsError, ResourceNotFoundError,
)
from ..service.registry_service import RegistryService

logger = logging.getLogger(__name__)

SHELLS_PATH = "/shell-descriptors"
SUBMODELS_PATH = "/submodel-descriptors"

ERROR_STATUS: Dict[Type[RegistryError], int] = {
    ResourceNotFoundError: 404,
    ResourceAlreadyExistsError: 409,
    InvalidRequestError: 400,
    PersistenceError: 500,
}


def _json(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content, by_alias=True, exclude_none=True),
    )


def _no_content() -> Response:
    return Response(status_code=204)


def _error_handler(status_code: int) -> Callable:
    async def handle(request: Request, exc: RegistryError) -> JSONResponse:
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.debug(f"{request.method} {request.url.path} -> {status_code}: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handle


def create_router(service: RegistryService) -> APIRouter:
    """Build the registry routes bound to ``service``"""
    router = APIRouter()

    # Shell descriptors
    @router.get(SHELLS_PATH)
    def get_shells():
        return _json(service.get_shells())

    @router.post(SHELLS_PATH, status_code=201)
    def create_shell(descriptor: AssetAdministrationShellDescriptor):
        return _json(service.create_shell(descriptor), status_code=201)

    @router.get(SHELLS_PATH + "/{aasIdentifier}")
    def get_shell(aasIdentifier: str):
        return _json(service.get_shell(aasIdentifier))

    @router.put(SHELLS_PATH + "/{aasIdentifier}", status_code=204)
    def update_shell(aasIdentifier: str, descriptor: AssetAdministrationShellDescriptor):
        service.update_shell(aasIdentifier, descriptor)
        return _no_content()

    @router.delete(SHELLS_PATH + "/{aasIdentifier}", status_code=204)
    def delete_shell(aasIdentifier: str):
        service.delete_shell(aasIdentifier)
        return _no_content()

    # Submodel descriptors of one shell
    @router.get(SHELLS_PATH + "/{aasIdentifier}" + SUBMODELS_PATH)
    def get_submodels_of_shell(aasIdentifier: str):
        return _json(service.get_submodels(aasIdentifier))

    @router.post(SHELLS_PATH + "/{aasIdentifier}" + SUBMODELS_PATH, status_code=201)
    def create_submodel_of_shell(aasIdentifier: str, descriptor: SubmodelDescriptor):
        return _json(service.create_submodel(descriptor, aasIdentifier), status_code=201)

    @router.get(SHELLS_PATH + "/{aasIdentifier}" + SUBMODELS_PATH + "/{submodelIdentifier}")
    def get_submodel_of_shell(aasIdentifier: str, submodelIdentifier: str):
        return _json(service.get_submodel(submodelIdentifier, aasIdentifier))

    @router.put(SHELLS_PATH + "/{aasIdentifier}" + SUBMODELS_PATH + "/{submodelIdentifier}", status_code=204)
    def update_submodel_of_shell(aasIdentifier: str, submodelIdentifier: str, descriptor: SubmodelDescriptor):
        service.update_submodel(submodelIdentifier, descriptor, aasIdentifier)
        return _no_content()

    @router.delete(SHELLS_PATH + "/{aasIdentifier}" + SUBMODELS_PATH + "/{submodelIdentifier}", status_code=204)
    def delete_submodel_of_shell(aasIdentifier: str, submodelIdentifier: str):
        service.delete_submodel(submodelIdentifier, aasIdentifier)
        return _no_content()

    # Flat submodel descriptors
    @router.get(SUBMODELS_PATH)
    def get_submodels():
        return _json(service.get_submodels())

    @router.post(SUBMODELS_PATH, status_code=201)
    def create_submodel(descriptor: SubmodelDescriptor):
        return _json(service.create_submodel(descriptor), status_code=201)

    @router.get(SUBMODELS_PATH + "/{submodelIdentifier}")
    def get_submodel(submodelIdentifier: str):
        return _json(service.get_submodel(submodelIdentifier))

    @router.put(SUBMODELS_PATH + "/{submodelIdentifier}", status_code=204)
    def update_submodel(submodelIdentifier: str, descriptor: SubmodelDescriptor):
        service.update_submodel(submodelIdentifier, descriptor)
        return _no_content()

    @router.delete(SUBMODELS_PATH + "/{submodelIdentifier}", status_code=204)
    def delete_submodel(submodelIdentifier: str):
        service.delete_submodel(submodelIdentifier)
        return _no_content()

    return router


def configure_app(app: FastAPI, service: RegistryService, base_path: str = "/registry") -> FastAPI:
    """
    Configure a FastAPI app with the registry routes.

    ```python
    from aasregistry.adapters.fastapi import configure_app
    app = FastAPI()
    configure_app(app, service)
    ```

    Args:
        app: FastAPI app instance
        service: Registry service the routes delegate to
        base_path: Base path for all routes

    Returns:
        The configured app instance
    """
    app.include_router(create_router(service), prefix=base_path.rstrip("/"))

    for error_type, status_code in ERROR_STATUS.items():
        app.add_exception_handler(error_type, _error_handler(status_code))

    return app


def create_app(service: RegistryService, base_path: str = "/registry") -> FastAPI:
    """Create a new FastAPI app serving the registry"""
    return configure_app(FastAPI(title="AAS Registry"), service, base_path)


__all__ = ["configure_app", "create_app", "create_router", "ERROR_STATUS"]
