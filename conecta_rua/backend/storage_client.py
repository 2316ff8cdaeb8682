"""
Supabase Storage client.

Objects are addressed by bucket and path; public buckets expose a stable URL
under /storage/v1/object/public.
"""

import logging
from typing import Optional
from urllib.parse import quote

from conecta_rua.backend.base import BaseClient
from conecta_rua.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageClient(BaseClient):
    """Client for uploading objects and resolving their public URLs."""

    error_class = StorageError
    service_path = "/storage/v1"

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        access_token: Optional[str] = None,
    ) -> str:
        """
        Upload raw bytes to ``bucket/path``.

        Args:
            bucket: Bucket name
            path: Object path inside the bucket
            data: Raw file bytes
            content_type: MIME type stored with the object
            access_token: User JWT (storage policies are per user)

        Returns:
            The object path

        Raises:
            StorageError: Upload rejected or network failure
        """
        await self._request(
            "POST",
            f"/object/{bucket}/{quote(path)}",
            access_token=access_token,
            headers={"Content-Type": content_type, "x-upsert": "false"},
            content=data,
        )
        logger.info(f"Uploaded {len(data)} bytes to {bucket}/{path}")
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        """Publicly fetchable URL for an object in a public bucket."""
        return f"{self.service_url}/object/public/{bucket}/{quote(path)}"
