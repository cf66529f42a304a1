"""Application-owned storage port abstraction (hexagonal architecture).

Defines the minimal methods needed by application use cases so that
the application layer does not depend on infrastructure details.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable
from dataclasses import dataclass


@dataclass
class StorageInfo:
    type: str
    bucket: Optional[str]
    region: Optional[str]


@dataclass
class UploadOutcome:
    key: str
    etag: Optional[str]
    size: int
    content_type: Optional[str] = None
    url: Optional[str] = None


@runtime_checkable
class StoragePort(Protocol):
    def info(self) -> StorageInfo: ...

    async def upload(
        self,
        data: bytes,
        key: str,
        metadata: Optional[dict] = None,
        content_type: Optional[str] = None,
    ) -> UploadOutcome: ...

    async def download(self, key: str) -> bytes: ...

    async def exists(self, key: str) -> bool: ...

    def public_url(self, key: str) -> Optional[str]: ...
