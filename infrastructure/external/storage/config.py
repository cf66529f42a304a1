"""Storage configuration models."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class StorageType(str, Enum):
    """Storage provider types."""
    LOCAL = "local"


class StorageConfig(BaseModel):
    """Storage configuration model."""

    model_config = ConfigDict(use_enum_values=True)

    type: StorageType = StorageType.LOCAL
    bucket: Optional[str] = None
    region: Optional[str] = None
    public_base_url: Optional[str] = None  # Public/CDN domain

    # Local specific
    local_base_path: str = "/tmp/storage"
