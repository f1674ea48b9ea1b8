"""
S3-compatible blob storage for audio files (Backblaze B2 in production).
"""

import asyncio
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from config.settings import settings
from services.errors import GatewayError

logger = logging.getLogger(__name__)


def song_object_key(artist_name: str, song_title: str) -> str:
    """Audio files are stored as ``<ArtistName>/<SongTitle>.mp3``."""
    return f"{artist_name}/{song_title}.mp3"


class BlobStore:
    def __init__(self, client=None, bucket: str = settings.b2_bucket):
        self.bucket = bucket
        self.client = client or boto3.client(
            "s3",
            endpoint_url=settings.b2_endpoint_url,
            region_name=settings.b2_region,
            aws_access_key_id=settings.b2_key_id,
            aws_secret_access_key=settings.b2_application_key,
            config=Config(signature_version="s3v4", retries={"max_attempts": 3, "mode": "standard"}),
        )

    async def presigned_download_url(self, key: str, expires_in: int) -> str:
        return await self._presign("get_object", key, expires_in)

    async def presigned_upload_url(self, key: str, expires_in: int) -> str:
        return await self._presign("put_object", key, expires_in)

    async def _presign(self, operation: str, key: str, expires_in: int) -> str:
        try:
            return await asyncio.to_thread(
                self.client.generate_presigned_url,
                operation,
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            raise GatewayError(f"Could not presign {operation} for {key}: {e}") from e

    async def delete_object(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise GatewayError(f"Could not delete {key}: {e}") from e
        logger.info(f"🗑️ Deleted blob {key}")

    def close(self):
        self.client.close()
