"""
Artists. Reads are not cached; songs are the hot path.
"""

from typing import Optional

from pydantic import BaseModel

from models import Artist
from services.entities import EntityService


class ArtistPayload(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    country: Optional[str] = None


class ArtistService(EntityService):
    model = Artist
    label = "Artist"
    folder = "artists"
    required_field = "name"
    list_columns = (Artist.id, Artist.name, Artist.avatar_url)
