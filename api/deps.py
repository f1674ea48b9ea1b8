from typing import Optional, Type, TypeVar

import pydantic
from fastapi import Depends, Header, Request, UploadFile

from services.assets import MediaUpload
from services.container import ServiceContainer
from services.errors import ValidationError
from services.roles import Role

PayloadT = TypeVar("PayloadT", bound=pydantic.BaseModel)


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_role(
    authorization: Optional[str] = Header(None),
    services: ServiceContainer = Depends(get_services),
) -> Role:
    return services.roles.resolve(authorization)


def parse_payload(model: Type[PayloadT], **fields) -> PayloadT:
    """Build a payload model from form fields, reporting bad values as 400s."""
    try:
        return model(**fields)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid payload: {e}") from e


async def read_media(file: Optional[UploadFile]) -> Optional[MediaUpload]:
    """Read an attachment fully; the upload runs after the request is gone."""
    if file is None or not file.filename:
        return None
    content = await file.read()
    return MediaUpload(filename=file.filename, content=content, content_type=file.content_type)
