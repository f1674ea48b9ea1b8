"""
Playlists and album-like releases (albums, EPs, singles share one table).
"""

import uuid
from typing import Any, Dict, Optional

from pydantic import BaseModel
from sqlalchemy import select

from models import ALBUM_LIKE_TYPES, Playlist, PlaylistType, Profile
from services.entities import EntityService
from services.store import page_bounds


class PlaylistPayload(BaseModel):
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    user_id: Optional[uuid.UUID] = None
    type: Optional[PlaylistType] = None


def _with_owner(*columns):
    return (
        select(*columns, Profile.username)
        .select_from(Playlist)
        .outerjoin(Profile, Playlist.user_id == Profile.id)
    )


def _nest_owner(row: Dict[str, Any]) -> Dict[str, Any]:
    username = row.pop("username", None)
    return {**row, "user": {"username": username}}


class PlaylistService(EntityService):
    model = Playlist
    label = "Playlist"
    folder = "playlists"
    required_field = "title"
    list_columns = (Playlist.id, Playlist.title, Playlist.thumbnail_url, Playlist.type)

    def list_statement(self, album_like: Optional[bool] = None):
        stmt = _with_owner(*self.list_columns)
        if album_like is True:
            stmt = stmt.where(Playlist.type.in_(ALBUM_LIKE_TYPES))
        elif album_like is False:
            stmt = stmt.where(Playlist.type == PlaylistType.PLAYLIST)
        return stmt

    def detail_statement(self, entity_id: uuid.UUID):
        return _with_owner(*Playlist.__table__.columns).where(Playlist.id == entity_id)

    async def list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        album_like: Optional[bool] = None,
    ) -> Dict[str, Any]:
        offset, count = page_bounds(*self.paging(page, limit))
        stmt = self.list_statement(album_like).offset(offset).limit(count)
        rows = await self.store.fetch_all(stmt)
        return {"data": [_nest_owner(row) for row in rows]}

    async def get(self, entity_id: uuid.UUID) -> Dict[str, Any]:
        payload = await super().get(entity_id)
        return {"data": _nest_owner(payload["data"])}
