"""Storage data transfer objects."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UploadResult(BaseModel):
    """Upload operation result."""
    key: str
    etag: Optional[str] = None
    size: int
    content_type: Optional[str] = None
    url: Optional[str] = None  # Public/CDN URL if available


class StorageMetadata(BaseModel):
    """File metadata in storage."""
    etag: Optional[str] = None
    content_type: Optional[str] = None
    size: int
    last_modified: Optional[datetime] = None
    custom_metadata: dict[str, str] = Field(default_factory=dict)
