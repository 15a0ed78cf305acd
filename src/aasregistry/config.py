"""
Configuration Management for the Registry

🔧 Registry Configuration:
This module provides configuration for the registry: which storage backend to
use, where the HTTP server listens and how verbose logging is. Configuration
can come from a dictionary, a JSON or YAML file, or environment variables.
"""

from typing import Any, Dict, Optional, Union
from dataclasses import asdict, dataclass, field
import json
import os
from pathlib import Path

import yaml


@dataclass
class PersistenceConfig:
    """Persistence layer configuration"""
    backend: str = "memory"
    database_url: str = "sqlite:///aasregistry.db"
    echo: bool = False


@dataclass
class WebConfig:
    """HTTP server configuration"""
    host: str = "localhost"
    port: int = 8090
    base_path: str = "/registry"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "WARNING"
    external_level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class RegistryConfig:
    """Complete registry configuration"""
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'RegistryConfig':
        """Create configuration from dictionary, ignoring unknown keys"""
        config = cls()

        for section in ("persistence", "web", "logging"):
            target = getattr(config, section)
            for key, value in (config_dict.get(section) or {}).items():
                if hasattr(target, key):
                    setattr(target, key, value)

        return config

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'RegistryConfig':
        """Load configuration from a JSON or YAML file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix == '.json':
            with open(config_path) as f:
                config_dict = json.load(f)
        elif config_path.suffix in ('.yml', '.yaml'):
            with open(config_path) as f:
                config_dict = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        return cls.from_dict(config_dict or {})

    @classmethod
    def from_environment(cls, base: Optional['RegistryConfig'] = None) -> 'RegistryConfig':
        """Create configuration from environment variables, on top of ``base`` if given"""
        config = base or cls()

        if os.getenv('AASREGISTRY_BACKEND'):
            config.persistence.backend = os.getenv('AASREGISTRY_BACKEND')

        if os.getenv('AASREGISTRY_DATABASE_URL'):
            config.persistence.database_url = os.getenv('AASREGISTRY_DATABASE_URL')

        if os.getenv('AASREGISTRY_HOST'):
            config.web.host = os.getenv('AASREGISTRY_HOST')

        if os.getenv('AASREGISTRY_PORT'):
            config.web.port = int(os.getenv('AASREGISTRY_PORT'))

        if os.getenv('AASREGISTRY_LOG_LEVEL'):
            config.logging.level = os.getenv('AASREGISTRY_LOG_LEVEL').upper()

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "persistence": asdict(self.persistence),
            "web": asdict(self.web),
            "logging": asdict(self.logging),
        }


# Global configuration management
_current_config: Optional[RegistryConfig] = None


def set_config(config: RegistryConfig):
    """Set the global configuration"""
    global _current_config
    _current_config = config


def get_config() -> RegistryConfig:
    """Get the current global configuration"""
    global _current_config

    if _current_config is None:
        # Auto-create from environment if not set
        _current_config = RegistryConfig.from_environment()

    return _current_config


__all__ = [
    "RegistryConfig", "PersistenceConfig", "WebConfig", "LoggingConfig",
    "set_config", "get_config",
]
