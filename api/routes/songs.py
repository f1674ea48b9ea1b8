import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.deps import get_services, parse_payload, read_media
from services.container import ServiceContainer
from services.songs import SongCreate, SongPayload

router = APIRouter(prefix="/songs")


@router.get("")
async def list_songs(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    services: ServiceContainer = Depends(get_services),
):
    return await services.songs.list(page, limit)


@router.get("/{song_id}")
async def get_song(song_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.songs.get(song_id)


@router.get("/{song_id}/url")
async def presigned_download_url(song_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.songs.presigned_download_url(song_id)


@router.get("/{song_id}/upload-url")
async def presigned_upload_url(song_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.songs.presigned_upload_url(song_id)


@router.post("", status_code=201)
async def add_song(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail_url: Optional[str] = Form(None),
    duration: Optional[int] = Form(None),
    release_date: Optional[date] = Form(None),
    genre: Optional[str] = Form(None),
    artists: List[uuid.UUID] = Form([]),
    file: Optional[UploadFile] = File(None),
    services: ServiceContainer = Depends(get_services),
):
    payload = parse_payload(
        SongCreate,
        title=title,
        description=description,
        thumbnail_url=thumbnail_url,
        duration=duration,
        release_date=release_date,
        genre=genre,
        artists=artists,
    )
    return await services.songs.create(payload, await read_media(file))


@router.api_route("/{song_id}", methods=["PUT", "PATCH"])
async def update_song(
    song_id: uuid.UUID,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail_url: Optional[str] = Form(None),
    duration: Optional[int] = Form(None),
    release_date: Optional[date] = Form(None),
    genre: Optional[str] = Form(None),
    views: Optional[int] = Form(None),
    file: Optional[UploadFile] = File(None),
    services: ServiceContainer = Depends(get_services),
):
    payload = parse_payload(
        SongPayload,
        title=title,
        description=description,
        thumbnail_url=thumbnail_url,
        duration=duration,
        release_date=release_date,
        genre=genre,
        views=views,
    )
    return await services.songs.update(song_id, payload, await read_media(file))


@router.delete("/{song_id}", status_code=202)
async def delete_song(song_id: uuid.UUID, services: ServiceContainer = Depends(get_services)):
    return await services.songs.delete(song_id)
