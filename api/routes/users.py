import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.deps import get_services, parse_payload, read_media
from services.container import ServiceContainer
from services.users import UserPayload

router = APIRouter(prefix="/users")


@router.get("")
async def list_users(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    services: ServiceContainer = Depends(get_services),
):
    return await services.users.list(page, limit)


@router.get("/{user_id}")
async def get_user(user_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.users.get(user_id)


@router.post("", status_code=201)
async def add_user(
    username: Optional[str] = Form(None),
    avatar_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    services: ServiceContainer = Depends(get_services),
):
    payload = parse_payload(UserPayload, username=username, avatar_url=avatar_url)
    return await services.users.create(payload, await read_media(file))


@router.api_route("/{user_id}", methods=["PUT", "PATCH"])
async def update_user(
    user_id: uuid.UUID,
    username: Optional[str] = Form(None),
    avatar_url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    services: ServiceContainer = Depends(get_services),
):
    payload = parse_payload(UserPayload, username=username, avatar_url=avatar_url)
    return await services.users.update(user_id, payload, await read_media(file))


@router.delete("/{user_id}")
async def delete_user(user_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.users.delete(user_id)
