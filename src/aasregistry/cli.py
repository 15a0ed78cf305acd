"""aas-registry CLI: starts the registry HTTP server."""

import logging
from typing import Optional

import click
import uvicorn
from fastapi import FastAPI

from . import __version__
from .adapters.fastapi import create_app
from .config import RegistryConfig, set_config
from .core.repository import AasRepository
from .logging_config import configure_logging, levels_for_verbosity
from .persistence.repositories.base import BackendNotFoundError
from .persistence.repositories.manager import BackendRegistry, create_backend
from .service.registry_service import RegistryService

logger = logging.getLogger(__name__)


def build_app(config: RegistryConfig, registry: Optional[BackendRegistry] = None) -> FastAPI:
    """Wire backend, repository, service and HTTP adapter for ``config``"""
    backend = create_backend(config.persistence, registry)
    service = RegistryService(AasRepository(backend))
    return create_app(service, base_path=config.web.base_path)


@click.command()
@click.version_option(version=__version__)
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False),
              default=None, help="JSON or YAML configuration file")
@click.option("--backend", default=None, help="Storage backend name (memory, sql or a registered backend)")
@click.option("--database-url", default=None, help="SQLAlchemy URL for the sql backend")
@click.option("--host", default=None, help="Host to bind")
@click.option("--port", type=int, default=None, help="Port to bind")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors")
@click.option("--verbose", "-v", count=True,
              help="Increase log output (-v registry INFO, -vv registry DEBUG, -vvv everything DEBUG)")
def main(config_file: Optional[str], backend: Optional[str], database_url: Optional[str],
         host: Optional[str], port: Optional[int], quiet: bool, verbose: int):
    """Start an AAS descriptor registry.

    Settings are read from the configuration file, then from AASREGISTRY_*
    environment variables, then from the options given here.
    """
    config = RegistryConfig.from_file(config_file) if config_file else RegistryConfig()
    config = RegistryConfig.from_environment(config)

    if backend:
        config.persistence.backend = backend
    if database_url:
        config.persistence.database_url = database_url
    if host:
        config.web.host = host
    if port is not None:
        config.web.port = port
    if quiet or verbose:
        config.logging.level, config.logging.external_level = levels_for_verbosity(-1 if quiet else verbose)

    configure_logging(config.logging)
    set_config(config)

    try:
        app = build_app(config)
    except BackendNotFoundError as e:
        raise click.ClickException(str(e)) from e
    logger.info(f"Starting registry on {config.web.host}:{config.web.port} ({config.persistence.backend} backend)")
    uvicorn.run(app, host=config.web.host, port=config.web.port, log_config=None)


if __name__ == "__main__":
    main()
