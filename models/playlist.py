# models/playlist.py
import enum
import uuid

from sqlalchemy import Column, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from models.database import Base

class PlaylistType(str, enum.Enum):
    PLAYLIST = "Playlist"
    ALBUM = "Album"
    EP = "EP"
    SINGLE = "Single"

# Albums, EPs and singles are stored as playlists and told apart only by type.
ALBUM_LIKE_TYPES = (PlaylistType.ALBUM, PlaylistType.EP, PlaylistType.SINGLE)

class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(500), nullable=False)
    thumbnail_url = Column(Text)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"))
    type = Column(
        Enum(PlaylistType, name="playlist_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PlaylistType.PLAYLIST,
    )

    user = relationship("Profile", back_populates="playlists")
