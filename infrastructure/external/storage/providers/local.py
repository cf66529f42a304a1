"""Local file system storage provider implementation."""
import hashlib
import json
import mimetypes
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from core.logging_config import get_logger
from ..config import StorageConfig
from ..models import UploadResult, StorageMetadata
from ..exceptions import StorageError, NotFoundError, ValidationError

logger = get_logger(__name__)


class LocalProvider:
    """Local file system storage provider.

    Writes go to a temporary sibling file and are moved into place, so
    readers never observe a partially written object and re-uploads to the
    same key replace the previous content.
    """

    def __init__(self, config: StorageConfig):
        self.config = config
        self.base_path = Path(config.local_base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    async def upload(
        self,
        file: bytes,
        key: str,
        metadata: Optional[dict] = None,
        content_type: Optional[str] = None
    ) -> UploadResult:
        """Upload file to local storage."""
        file_path = self._safe_path(key)
        tmp_path = file_path.parent / f".{file_path.name}.{uuid.uuid4().hex}.tmp"
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, 'wb') as f:
                await f.write(file)
            await aiofiles.os.replace(tmp_path, file_path)

            if metadata or content_type:
                await self._save_metadata(file_path, metadata, content_type)
        except OSError as e:
            if tmp_path.exists():
                tmp_path.unlink()
            raise StorageError(f"Failed to upload {key}: {e}") from e

        result = UploadResult(
            key=key,
            etag=hashlib.md5(file).hexdigest(),
            size=len(file),
            content_type=content_type or self._guess_content_type(key),
            url=self.public_url(key),
        )
        logger.info("local_storage_uploaded", key=key, size=len(file))
        return result

    async def download(self, key: str) -> bytes:
        """Download file from local storage."""
        file_path = self._safe_path(key)
        if not file_path.is_file():
            raise NotFoundError(f"File not found: {key}")
        try:
            async with aiofiles.open(file_path, 'rb') as f:
                return await f.read()
        except OSError as e:
            raise StorageError(f"Failed to download {key}: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete file from local storage."""
        file_path = self._safe_path(key)
        if not file_path.exists():
            return False
        try:
            await aiofiles.os.remove(file_path)
            meta_path = self._metadata_path(file_path)
            if meta_path.exists():
                await aiofiles.os.remove(meta_path)
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e
        logger.info("local_storage_deleted", key=key)
        return True

    async def exists(self, key: str) -> bool:
        """Check if file exists in local storage."""
        try:
            file_path = self._safe_path(key)
        except ValidationError:
            return False
        return file_path.is_file()

    async def get_metadata(self, key: str) -> StorageMetadata:
        """Get file metadata from local storage."""
        file_path = self._safe_path(key)
        if not file_path.is_file():
            raise NotFoundError(f"File not found: {key}")

        stat = file_path.stat()
        meta = await self._load_metadata(file_path)
        async with aiofiles.open(file_path, 'rb') as f:
            etag = hashlib.md5(await f.read()).hexdigest()
        return StorageMetadata(
            etag=etag,
            content_type=meta.get("content_type") or self._guess_content_type(key),
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            custom_metadata=meta.get("metadata", {}),
        )

    def public_url(self, key: str) -> Optional[str]:
        """Get public URL for file."""
        if self.config.public_base_url:
            return f"{self.config.public_base_url.rstrip('/')}/{key.lstrip('/')}"
        return None

    async def health_check(self) -> bool:
        """Check local storage accessibility."""
        test_file = self.base_path / ".health_check"
        try:
            test_file.touch()
            test_file.unlink()
        except OSError as e:
            logger.error("local_storage_health_check_failed", error=str(e))
            return False
        return True

    def _safe_path(self, key: str) -> Path:
        """Build safe path preventing directory traversal.

        Raises:
            ValidationError: If path escapes the base directory
        """
        clean_key = key.lstrip("/")
        path = (self.base_path / clean_key).resolve()
        try:
            path.relative_to(self.base_path)
        except ValueError:
            raise ValidationError(f"Invalid path: {key}")
        if path == self.base_path:
            raise ValidationError(f"Invalid path: {key}")
        return path

    def _metadata_path(self, file_path: Path) -> Path:
        """Get metadata file path for a file."""
        return file_path.parent / f"{file_path.name}.meta"

    async def _save_metadata(
        self,
        file_path: Path,
        metadata: Optional[dict],
        content_type: Optional[str]
    ) -> None:
        """Save metadata to sidecar file."""
        meta_data: dict = {}
        if metadata:
            meta_data["metadata"] = {str(k): str(v) for k, v in metadata.items()}
        if content_type:
            meta_data["content_type"] = content_type

        async with aiofiles.open(self._metadata_path(file_path), 'w') as f:
            await f.write(json.dumps(meta_data, sort_keys=True))

    async def _load_metadata(self, file_path: Path) -> dict:
        """Load metadata from sidecar file."""
        meta_path = self._metadata_path(file_path)
        if not meta_path.exists():
            return {}
        async with aiofiles.open(meta_path, 'r') as f:
            content = await f.read()
        try:
            return json.loads(content)
        except ValueError:
            logger.warning("local_storage_metadata_corrupt", path=str(meta_path))
            return {}

    def _guess_content_type(self, key: str) -> str:
        """Guess content type from file extension."""
        content_type, _ = mimetypes.guess_type(key)
        return content_type or "application/octet-stream"


async def build_local_provider(config: StorageConfig) -> LocalProvider:
    """Build local storage provider."""
    provider = LocalProvider(config)
    if not await provider.health_check():
        raise StorageError("Failed to access local storage")
    return provider
