"""Storage service entry point and lifecycle management."""
from typing import Optional
from functools import lru_cache

from core.config import settings
from core.logging_config import get_logger
from .base import StorageProvider
from .config import StorageConfig, StorageType
from .factory import create_provider, register_provider
from .models import UploadResult, StorageMetadata
from .exceptions import (
    StorageError,
    NotFoundError,
    ConfigurationError,
    ValidationError,
)

logger = get_logger(__name__)

# Global storage client instance
_storage_client: Optional[StorageProvider] = None


@lru_cache
def get_storage_config() -> StorageConfig:
    """Assemble StorageConfig from core.config.settings (single source of truth)."""
    s = settings.storage
    return StorageConfig(
        type=s.type or StorageType.LOCAL,
        bucket=s.bucket,
        region=s.region,
        public_base_url=s.public_base_url,
        local_base_path=s.local_base_path,
    )


async def init_storage_client(config: Optional[StorageConfig] = None) -> StorageProvider:
    """Initialize the process-wide storage client (idempotent)."""
    global _storage_client

    if _storage_client is not None:
        logger.warning("storage_client_already_initialized")
        return _storage_client

    config = config or get_storage_config()
    _storage_client = await create_provider(config)
    logger.info("storage_client_initialized", provider=config.type, bucket=config.bucket)
    return _storage_client


def get_storage_client() -> Optional[StorageProvider]:
    """Get storage client instance, or None if not initialized."""
    return _storage_client


async def shutdown_storage_client() -> None:
    """Drop the storage client; local provider holds no open handles."""
    global _storage_client

    if _storage_client is None:
        return
    _storage_client = None
    logger.info("storage_client_shutdown")


__all__ = [
    "init_storage_client",
    "get_storage_client",
    "shutdown_storage_client",
    "get_storage_config",
    "register_provider",
    "StorageConfig",
    "StorageType",
    "StorageProvider",
    "UploadResult",
    "StorageMetadata",
    "StorageError",
    "NotFoundError",
    "ConfigurationError",
    "ValidationError",
]
