# models/artist.py
from sqlalchemy import Column, String, Text, Uuid
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class Artist(Base):
    __tablename__ = "artists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(300), nullable=False)
    description = Column(Text)
    avatar_url = Column(Text)
    country = Column(String(2))

    song_links = relationship("ArtistSong", back_populates="artist", cascade="all, delete-orphan")
