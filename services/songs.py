"""
Songs: cached reads, artist linking on create, blob cleanup on delete and
presigned audio URLs.
"""

import asyncio
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import insert, select

from models import Artist, ArtistRelation, ArtistSong, Song
from services.assets import AssetClient, MediaUpload
from services.background import TaskRunner
from services.blob_store import BlobStore, song_object_key
from services.cache import CacheClient
from services.entities import EntityService
from services.errors import GatewayError, LinkError, NotFoundError
from services.store import RecordStore

logger = logging.getLogger(__name__)

DOWNLOAD_URL_TTL = 1800
UPLOAD_URL_TTL = 900


class SongPayload(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = None
    release_date: Optional[date] = None
    genre: Optional[str] = None
    views: Optional[int] = None


class SongCreate(SongPayload):
    # Order matters: the first artist is the primary one.
    artists: List[uuid.UUID] = []


def artist_links(song_id: uuid.UUID, artist_ids: List[uuid.UUID]) -> List[Dict[str, Any]]:
    return [
        {
            "song_id": song_id,
            "artist_id": artist_id,
            "relation": ArtistRelation.PRIMARY if index == 0 else ArtistRelation.FEATURED,
        }
        for index, artist_id in enumerate(artist_ids)
    ]


class SongService(EntityService):
    model = Song
    label = "Song"
    folder = "songs"
    required_field = "title"
    list_columns = (
        Song.id, Song.title, Song.thumbnail_url, Song.duration,
        Song.release_date, Song.genre, Song.views,
    )

    def __init__(
        self,
        store: RecordStore,
        assets: AssetClient,
        tasks: TaskRunner,
        blobs: BlobStore,
        cache: CacheClient,
    ):
        super().__init__(store, assets, tasks)
        self.blobs = blobs
        self.cache = cache

    async def list(self, page: Optional[int] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        page, limit = self.paging(page, limit)
        key = f"songs?page={page}&limit={limit}"

        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Serving {key} from cache")
            return cached

        payload = await super().list(page, limit)
        await self.cache.set(key, payload)
        return payload

    async def get(self, entity_id: uuid.UUID) -> Dict[str, Any]:
        key = f"songs?id={entity_id}"

        cached = await self.cache.get(key)
        if cached is not None:
            logger.debug(f"Serving {key} from cache")
            return cached

        payload = await super().get(entity_id)
        await self.cache.set(key, payload)
        return payload

    async def create(self, payload: SongCreate, media: Optional[MediaUpload] = None) -> Dict[str, Any]:
        song_id = await self.insert_row(payload, exclude=("artists",))

        links = artist_links(song_id, payload.artists)
        results = await asyncio.gather(
            *(self.store.execute(insert(ArtistSong).values(**link)) for link in links),
            return_exceptions=True,
        )
        errors = [str(result) for result in results if isinstance(result, Exception)]
        if errors:
            # The song row stays; the caller is told which song is unlinked.
            logger.error(f"Song {song_id} created but {len(errors)} artist links failed")
            raise LinkError(song_id, errors)

        self.sync_media(song_id, media)
        return {"message": f"Song {payload.title} created", "id": str(song_id)}

    async def update(self, entity_id: uuid.UUID, payload: SongPayload, media: Optional[MediaUpload] = None) -> Dict[str, Any]:
        result = await super().update(entity_id, payload, media)
        await self.cache.delete(f"songs?id={entity_id}")
        return result

    async def delete(self, entity_id: uuid.UUID) -> Dict[str, Any]:
        primary = await self.primary_artist(entity_id)
        row = await self.delete_row(entity_id, Song.title)
        await self.cache.delete(f"songs?id={entity_id}")

        if primary is not None:
            key = song_object_key(primary["artist_name"], row["title"])
            self.tasks.submit(self.blobs.delete_object(key), name=f"delete-blob-{entity_id}")
        else:
            logger.warning(f"Song {entity_id} had no primary artist; leaving its audio file in place")
        self.drop_media(entity_id)

        return {"message": f"Song {entity_id} is being deleted"}

    # -------------------------------------------------------------------------
    # Audio file URLs
    # -------------------------------------------------------------------------

    async def primary_artist(self, song_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        stmt = (
            select(Artist.name.label("artist_name"), Song.title.label("song_title"))
            .select_from(ArtistSong)
            .join(Artist, ArtistSong.artist_id == Artist.id)
            .join(Song, ArtistSong.song_id == Song.id)
            .where(ArtistSong.song_id == song_id, ArtistSong.relation == ArtistRelation.PRIMARY)
        )
        return await self.store.fetch_one(stmt)

    async def _object_key(self, song_id: uuid.UUID) -> str:
        primary = await self.primary_artist(song_id)
        if primary is None:
            raise NotFoundError("Artist or Song does not exist")
        return song_object_key(primary["artist_name"], primary["song_title"])

    async def presigned_download_url(self, song_id: uuid.UUID) -> Dict[str, str]:
        key = await self._object_key(song_id)
        try:
            url = await self.blobs.presigned_download_url(key, DOWNLOAD_URL_TTL)
        except GatewayError as e:
            raise GatewayError(f"Error generating pre-signed URL: {e}") from e
        return {"url": url}

    async def presigned_upload_url(self, song_id: uuid.UUID) -> Dict[str, str]:
        key = await self._object_key(song_id)
        try:
            url = await self.blobs.presigned_upload_url(key, UPLOAD_URL_TTL)
        except GatewayError as e:
            raise GatewayError(f"Error generating pre-signed URL: {e}") from e
        return {"url": url}
