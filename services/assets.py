"""
Image CDN client (Cloudinary upload API) for thumbnails and avatars.

Assets are addressed by entity type and id: the folder is the entity type and
the public id is ``i-<id>``.
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from config.settings import settings
from services.errors import GatewayError

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.cloudinary.com/v1_1"


@dataclass
class MediaUpload:
    """An uploaded file, read into memory before the request ends."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


def asset_public_id(entity_id: Any) -> str:
    return f"i-{entity_id}"


class AssetClient:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        cloud_name: str = settings.cloudinary_cloud_name,
        api_key: Optional[str] = settings.cloudinary_api_key,
        api_secret: Optional[str] = settings.cloudinary_api_secret,
    ):
        self.client = client or httpx.AsyncClient(timeout=settings.cloudinary_timeout_seconds)
        self.base_url = f"{API_BASE_URL}/{cloud_name}/image"
        self.api_key = api_key
        self.api_secret = api_secret or ""

    def sign(self, params: Dict[str, Any]) -> str:
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1((to_sign + self.api_secret).encode()).hexdigest()

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        return {**params, "signature": self.sign(params), "api_key": self.api_key}

    async def upload(self, media: MediaUpload, folder: str, entity_id: Any) -> Dict[str, Any]:
        data = self._signed({
            "folder": folder,
            "public_id": asset_public_id(entity_id),
            "overwrite": "true",
        })
        files = {"file": (media.filename, media.content, media.content_type or "application/octet-stream")}
        result = await self._post("upload", data=data, files=files)
        logger.info(f"✅ Uploaded asset {folder}/{asset_public_id(entity_id)}")
        return result

    async def delete(self, folder: str, public_id: str) -> Dict[str, Any]:
        data = self._signed({"public_id": f"{folder}/{public_id}"})
        result = await self._post("destroy", data=data)
        logger.info(f"🗑️ Deleted asset {folder}/{public_id}")
        return result

    async def _post(self, action: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self.client.post(f"{self.base_url}/{action}", **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise GatewayError(f"Image CDN {action} failed: {e}") from e

    async def close(self):
        await self.client.aclose()
