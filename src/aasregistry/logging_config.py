"""
Logging Setup

Registry loggers (``aasregistry.*``) and third-party loggers (uvicorn,
sqlalchemy, ...) get separate thresholds, so the registry can be made chatty
without flooding the output with library internals.
"""

from typing import Optional, Tuple
import logging
import sys

from .config import LoggingConfig

REGISTRY_LOGGER = "aasregistry"

# (registry level, external level) per verbosity
VERBOSITY_LEVELS = {
    -1: ("ERROR", "ERROR"),
    0: ("WARNING", "WARNING"),
    1: ("INFO", "WARNING"),
    2: ("DEBUG", "INFO"),
    3: ("DEBUG", "DEBUG"),
}


class RegistryLogFilter(logging.Filter):
    """Apply one threshold to registry records and another to everything else"""

    def __init__(self, level: int = logging.WARNING, external_level: int = logging.WARNING):
        super().__init__()
        self.level = level
        self.external_level = external_level

    def filter(self, record: logging.LogRecord) -> bool:
        if self._is_registry_logger(record.name):
            return record.levelno >= self.level
        return record.levelno >= self.external_level

    @staticmethod
    def _is_registry_logger(name: str) -> bool:
        return name == REGISTRY_LOGGER or name.startswith(REGISTRY_LOGGER + ".")


def levels_for_verbosity(verbosity: int) -> Tuple[str, str]:
    """Map -q (-1), default (0) and -v, -vv, -vvv (1..3) to a pair of levels"""
    return VERBOSITY_LEVELS[max(-1, min(verbosity, 3))]


def configure_logging(config: Optional[LoggingConfig] = None) -> RegistryLogFilter:
    """
    Install a stream handler on the root logger carrying a RegistryLogFilter.

    Replaces handlers installed by an earlier call, so calling it twice does
    not duplicate output.
    """
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level.upper())
    external_level = logging.getLevelName(config.external_level.upper())
    if not isinstance(level, int) or not isinstance(external_level, int):
        raise ValueError(f"Unknown log level: {config.level} / {config.external_level}")

    log_filter = RegistryLogFilter(level, external_level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(config.format))
    handler.addFilter(log_filter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if any(isinstance(f, RegistryLogFilter) for f in existing.filters):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(min(level, external_level))

    logging.getLogger(__name__).info(
        f"Using log level {config.level.upper()} for registry, {config.external_level.upper()} for external packages"
    )
    return log_filter


__all__ = ["RegistryLogFilter", "configure_logging", "levels_for_verbosity", "VERBOSITY_LEVELS"]
