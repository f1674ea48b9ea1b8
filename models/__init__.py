# models/__init__.py 
from models.artist import Artist
from models.artist_song import ArtistRelation, ArtistSong
from models.playlist import ALBUM_LIKE_TYPES, Playlist, PlaylistType
from models.profile import Profile
from models.song import Song
from models.database import Base, engine, AsyncSessionLocal

__all__ = [
    "Artist",
    "ArtistRelation",
    "ArtistSong",
    "ALBUM_LIKE_TYPES",
    "Playlist",
    "PlaylistType",
    "Profile",
    "Song",
    "Base",
    "engine",
    "AsyncSessionLocal",
]
