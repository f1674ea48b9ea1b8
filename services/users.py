from typing import Optional

from pydantic import BaseModel

from models import Profile
from services.entities import EntityService


class UserPayload(BaseModel):
    username: Optional[str] = None
    avatar_url: Optional[str] = None


class UserService(EntityService):
    model = Profile
    label = "User"
    folder = "users"
    required_field = "username"
    list_columns = (Profile.id, Profile.username, Profile.avatar_url)
