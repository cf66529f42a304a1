"""Infrastructure adapter that implements the application StoragePort
by delegating to the concrete StorageProvider and translating models.
"""
from __future__ import annotations

from typing import Optional

from application.ports.storage import StoragePort, StorageInfo, UploadOutcome
from infrastructure.external.storage import StorageProvider
from infrastructure.external.storage.exceptions import StorageError


class StorageProviderPortAdapter(StoragePort):
    def __init__(self, provider: StorageProvider):
        self.provider = provider

    def info(self) -> StorageInfo:
        cfg = getattr(self.provider, "config", None)
        stype = getattr(cfg, "type", None)
        bucket = getattr(cfg, "bucket", None)
        region = getattr(cfg, "region", None)
        # (str, Enum).__str__ returns "StorageType.LOCAL" on 3.11+
        stype = getattr(stype, "value", stype)
        return StorageInfo(type=str(stype) if stype is not None else "", bucket=bucket, region=region)

    async def upload(
        self,
        data: bytes,
        key: str,
        metadata: Optional[dict] = None,
        content_type: Optional[str] = None,
    ) -> UploadOutcome:
        result = await self.provider.upload(data, key, metadata=metadata, content_type=content_type)
        return UploadOutcome(
            key=getattr(result, "key", key),
            etag=getattr(result, "etag", None),
            size=int(getattr(result, "size", 0) or 0),
            content_type=getattr(result, "content_type", content_type),
            url=getattr(result, "url", None),
        )

    async def download(self, key: str) -> bytes:
        return await self.provider.download(key)

    async def exists(self, key: str) -> bool:
        return await self.provider.exists(key)

    def public_url(self, key: str) -> Optional[str]:
        return self.provider.public_url(key)


class UnavailableStoragePort(StoragePort):
    """Stands in when no storage client was initialized; every access raises StorageError."""

    def __init__(self, reason: str = "Storage client not initialized"):
        self.reason = reason

    def info(self) -> StorageInfo:
        return StorageInfo(type="unavailable", bucket=None, region=None)

    async def upload(
        self,
        data: bytes,
        key: str,
        metadata: Optional[dict] = None,
        content_type: Optional[str] = None,
    ) -> UploadOutcome:
        raise StorageError(self.reason)

    async def download(self, key: str) -> bytes:
        raise StorageError(self.reason)

    async def exists(self, key: str) -> bool:
        raise StorageError(self.reason)

    def public_url(self, key: str) -> Optional[str]:
        return None
