"""Storage provider factory with registry pattern."""
from typing import Callable, Awaitable
import importlib

from core.logging_config import get_logger
from .base import StorageProvider
from .config import StorageConfig, StorageType
from .exceptions import ConfigurationError

logger = get_logger(__name__)

# Provider builder type
ProviderBuilder = Callable[[StorageConfig], Awaitable[StorageProvider]]

# Global registry for storage providers
_provider_registry: dict[StorageType, ProviderBuilder] = {}

_BUILTIN_PROVIDERS = [
    (StorageType.LOCAL, "infrastructure.external.storage.providers.local", "build_local_provider"),
]


def register_provider(
    storage_type: StorageType,
    builder: ProviderBuilder
) -> None:
    """Register a storage provider builder."""
    _provider_registry[StorageType(storage_type)] = builder
    logger.info("storage_provider_registered", provider=StorageType(storage_type).value)


async def create_provider(config: StorageConfig) -> StorageProvider:
    """Create storage provider instance based on config.

    Raises:
        ConfigurationError: If provider type not registered or creation fails
    """
    storage_type = StorageType(config.type)
    if storage_type not in _provider_registry:
        _auto_register_providers()

        if storage_type not in _provider_registry:
            raise ConfigurationError(
                f"Storage provider '{storage_type.value}' not registered. "
                f"Available: {[t.value for t in _provider_registry]}"
            )

    builder = _provider_registry[storage_type]

    try:
        provider = await builder(config)
    except Exception as e:
        logger.error("storage_provider_create_failed", provider=storage_type.value, error=str(e))
        raise ConfigurationError(
            f"Failed to create storage provider '{storage_type.value}': {e}"
        ) from e
    logger.info("storage_provider_created", provider=storage_type.value, bucket=config.bucket)
    return provider


def _auto_register_providers() -> None:
    """Auto-register built-in storage providers."""
    for storage_type, module_path, builder_name in _BUILTIN_PROVIDERS:
        if storage_type in _provider_registry:
            continue
        module = importlib.import_module(module_path)
        register_provider(storage_type, getattr(module, builder_name))
