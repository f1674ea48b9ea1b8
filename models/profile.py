# models/profile.py
from sqlalchemy import Column, String, Text, Uuid
from sqlalchemy.orm import relationship
import uuid

from models.database import Base

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(100), nullable=False)
    avatar_url = Column(Text)

    playlists = relationship("Playlist", back_populates="user")
