# models/song.py
from sqlalchemy import Column, String, Text, Integer, BigInteger, Date, DateTime, Uuid, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class Song(Base):
    __tablename__ = "songs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    thumbnail_url = Column(Text)
    duration = Column(Integer)
    release_date = Column(Date)
    genre = Column(String(100))
    views = Column(BigInteger, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    artist_links = relationship("ArtistSong", back_populates="song", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(
            "duration IS NULL OR duration > 0",
            name="positive_duration"
        ),
    )
