"""
Request façade of the registry.
"""

from .registry_service import RegistryService, encode_id, decode_id

__all__ = ["RegistryService", "encode_id", "decode_id"]
