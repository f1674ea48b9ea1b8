import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.deps import get_services, parse_payload, read_media
from services.container import ServiceContainer
from services.playlists import PlaylistPayload

router = APIRouter()


@router.get("/playlists")
async def list_playlists(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    services: ServiceContainer = Depends(get_services),
):
    return await services.playlists.list(page, limit, album_like=False)


@router.get("/albums")
async def list_albums(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    services: ServiceContainer = Depends(get_services),
):
    return await services.playlists.list(page, limit, album_like=True)


@router.get("/playlists/{playlist_id}")
@router.get("/albums/{playlist_id}")
async def get_playlist(playlist_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.playlists.get(playlist_id)


@router.post("/playlists", status_code=201)
async def add_playlist(
    title: Optional[str] = Form(None),
    thumbnail_url: Optional[str] = Form(None),
    user_id: Optional[uuid.UUID] = Form(None),
    type: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    services: ServiceContainer = Depends(get_services),
):
    payload = parse_payload(PlaylistPayload, title=title, thumbnail_url=thumbnail_url, user_id=user_id, type=type)
    return await services.playlists.create(payload, await read_media(file))


@router.api_route("/playlists/{playlist_id}", methods=["PUT", "PATCH"])
async def update_playlist(
    playlist_id: uuid.UUID,
    title: Optional[str] = Form(None),
    thumbnail_url: Optional[str] = Form(None),
    user_id: Optional[uuid.UUID] = Form(None),
    type: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    services: ServiceContainer = Depends(get_services),
):
    payload = parse_payload(PlaylistPayload, title=title, thumbnail_url=thumbnail_url, user_id=user_id, type=type)
    return await services.playlists.update(playlist_id, payload, await read_media(file))


@router.delete("/playlists/{playlist_id}")
async def delete_playlist(playlist_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.playlists.delete(playlist_id)
