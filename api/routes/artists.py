import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.deps import get_services, parse_payload, read_media
from services.artists import ArtistPayload
from services.container import ServiceContainer

router = APIRouter(prefix="/artists")


@router.get("")
async def list_artists(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    services: ServiceContainer = Depends(get_services),
):
    return await services.artists.list(page, limit)


@router.get("/{artist_id}")
async def get_artist(artist_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.artists.get(artist_id)


@router.post("", status_code=201)
async def add_artist(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    avatar_url: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    services: ServiceContainer = Depends(get_services),
):
    payload = parse_payload(ArtistPayload, name=name, description=description, avatar_url=avatar_url, country=country)
    return await services.artists.create(payload, await read_media(file))


@router.api_route("/{artist_id}", methods=["PUT", "PATCH"])
async def update_artist(
    artist_id: uuid.UUID,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    avatar_url: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    services: ServiceContainer = Depends(get_services),
):
    payload = parse_payload(ArtistPayload, name=name, description=description, avatar_url=avatar_url, country=country)
    return await services.artists.update(artist_id, payload, await read_media(file))


@router.delete("/{artist_id}")
async def delete_artist(artist_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.artists.delete(artist_id)
