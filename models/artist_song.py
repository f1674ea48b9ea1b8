# models/artist_song.py
import enum

from sqlalchemy import Column, Enum, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from models.database import Base

class ArtistRelation(str, enum.Enum):
    PRIMARY = "Primary"
    FEATURED = "Featured"

class ArtistSong(Base):
    """Link between a song and one of its artists.

    Every song created through the API gets exactly one ``Primary`` link; the
    primary artist's name is part of the song's blob key.
    """
    __tablename__ = "artists_songs"

    song_id = Column(Uuid, ForeignKey("songs.id", ondelete="CASCADE"), primary_key=True)
    artist_id = Column(Uuid, ForeignKey("artists.id", ondelete="CASCADE"), primary_key=True)
    relation = Column(
        Enum(ArtistRelation, name="artist_relation", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ArtistRelation.FEATURED,
    )

    song = relationship("Song", back_populates="artist_links")
    artist = relationship("Artist", back_populates="song_links")
