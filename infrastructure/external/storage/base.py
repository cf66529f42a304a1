"""Storage provider protocol definitions."""
from typing import Protocol, Optional, runtime_checkable

from .models import UploadResult, StorageMetadata


@runtime_checkable
class StorageProvider(Protocol):
    """Core storage provider protocol for duck typing."""

    async def upload(
        self,
        file: bytes,
        key: str,
        metadata: Optional[dict] = None,
        content_type: Optional[str] = None
    ) -> UploadResult:
        """Upload file to storage, replacing any object under the same key."""
        ...

    async def download(self, key: str) -> bytes:
        """Download file from storage."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete file from storage."""
        ...

    async def exists(self, key: str) -> bool:
        """Check if file exists in storage."""
        ...

    async def get_metadata(self, key: str) -> StorageMetadata:
        """Get file metadata."""
        ...

    def public_url(self, key: str) -> Optional[str]:
        """Public URL for the key, if the provider exposes one."""
        ...

    async def health_check(self) -> bool:
        """Check provider accessibility."""
        ...
