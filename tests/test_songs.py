import logging
import uuid
from datetime import date

import pytest
from sqlalchemy import select

from models import Artist, ArtistRelation, ArtistSong, Song
from services.assets import MediaUpload
from services.errors import GatewayError, LinkError, NotFoundError, ValidationError
from services.songs import SongCreate, SongPayload, artist_links


@pytest.fixture
def songs(services):
    return services.songs


async def _links(store, song_id):
    rows = await store.fetch_all(
        select(ArtistSong.artist_id, ArtistSong.relation).where(ArtistSong.song_id == song_id)
    )
    return {row["artist_id"]: row["relation"] for row in rows}


def test_first_artist_is_primary():
    song_id = uuid.uuid4()
    a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

    links = artist_links(song_id, [a, b, c])

    assert [link["relation"] for link in links] == [
        ArtistRelation.PRIMARY, ArtistRelation.FEATURED, ArtistRelation.FEATURED,
    ]
    assert [link["artist_id"] for link in links] == [a, b, c]


@pytest.mark.asyncio
async def test_create_links_artists_in_order(songs, store, add_row):
    a = await add_row(Artist, name="A")
    b = await add_row(Artist, name="B")
    c = await add_row(Artist, name="C")

    first = await songs.create(SongCreate(title="One", artists=[a, b, c]))
    second = await songs.create(SongCreate(title="Two", artists=[b, a, c]))

    assert first["message"] == "Song One created"
    assert await _links(store, uuid.UUID(first["id"])) == {
        str(a): "Primary", str(b): "Featured", str(c): "Featured",
    }
    assert await _links(store, uuid.UUID(second["id"])) == {
        str(b): "Primary", str(a): "Featured", str(c): "Featured",
    }


@pytest.mark.asyncio
async def test_create_requires_title(songs, store):
    with pytest.raises(ValidationError) as exc_info:
        await songs.create(SongCreate(description="no title"))

    assert exc_info.value.message == "Payload must have field: title"
    assert await store.fetch_all(select(Song.id)) == []


@pytest.mark.asyncio
async def test_link_failure_keeps_song_and_reports_every_error(songs, store, add_row):
    a = await add_row(Artist, name="A")
    ghost = uuid.uuid4()

    with pytest.raises(LinkError) as exc_info:
        await songs.create(SongCreate(title="Half Linked", artists=[a, ghost]))

    error = exc_info.value
    assert len(error.messages) == 1
    payload = error.to_payload()
    assert payload["error"] == f"Failed to link associate artists with current song {error.song_id}"
    assert payload["details"] == error.messages

    rows = await store.fetch_all(select(Song.title).where(Song.id == error.song_id))
    assert rows == [{"title": "Half Linked"}]
    assert await _links(store, error.song_id) == {str(a): "Primary"}


@pytest.mark.asyncio
async def test_create_uploads_media_in_background(songs, assets, tasks):
    media = MediaUpload(filename="cover.png", content=b"png", content_type="image/png")

    result = await songs.create(SongCreate(title="With Cover"), media)
    await tasks.drain()

    assets.upload.assert_awaited_once_with(media, "songs", uuid.UUID(result["id"]))


@pytest.mark.asyncio
async def test_sparse_update_leaves_other_fields(songs, store, add_row):
    song_id = await add_row(
        Song, title="Keep", genre="Pop", duration=180, views=7, release_date=date(2020, 1, 1),
    )

    await songs.update(song_id, SongPayload(description="x"))

    row = await store.fetch_one(select(*Song.__table__.columns).where(Song.id == song_id))
    assert row["description"] == "x"
    assert row["title"] == "Keep"
    assert row["genre"] == "Pop"
    assert row["duration"] == 180
    assert row["views"] == 7
    assert row["release_date"] == "2020-01-01"


@pytest.mark.asyncio
async def test_blank_fields_are_not_written(songs, store, add_row):
    song_id = await add_row(Song, title="Keep", genre="Pop")

    await songs.update(song_id, SongPayload(title="", genre="Rock"))

    row = await store.fetch_one(select(Song.title, Song.genre).where(Song.id == song_id))
    assert row == {"title": "Keep", "genre": "Rock"}


@pytest.mark.asyncio
async def test_update_missing_song(songs):
    with pytest.raises(NotFoundError):
        await songs.update(uuid.uuid4(), SongPayload(title="nope"))


@pytest.mark.asyncio
async def test_update_with_only_media_checks_existence(songs, assets, tasks, add_row):
    song_id = await add_row(Song, title="Cover Me")
    media = MediaUpload(filename="c.jpg", content=b"jpg")

    result = await songs.update(song_id, SongPayload(), media)
    await tasks.drain()

    assert result == {"message": f"Song {song_id} updated successfully"}
    assets.upload.assert_awaited_once_with(media, "songs", song_id)


@pytest.mark.asyncio
async def test_get_and_list_are_cached(songs, store, fake_redis, add_row):
    song_id = await add_row(Song, title="Hot", description="not in list view")

    detail = await songs.get(song_id)
    listing = await songs.list()

    assert detail["data"]["description"] == "not in list view"
    assert "description" not in listing["data"][0]
    assert f"songs?id={song_id}" in fake_redis.data
    assert "songs?page=1&limit=10" in fake_redis.data

    await songs.update(song_id, SongPayload(title="Hotter"))
    assert f"songs?id={song_id}" not in fake_redis.data
    assert (await songs.get(song_id))["data"]["title"] == "Hotter"


@pytest.mark.asyncio
async def test_get_missing_song(songs):
    with pytest.raises(NotFoundError):
        await songs.get(uuid.uuid4())


@pytest.mark.asyncio
async def test_delete_succeeds_when_blob_cleanup_fails(songs, store, blobs, assets, tasks, add_row, caplog):
    artist = await add_row(Artist, name="Den Vau")
    created = await songs.create(SongCreate(title="Di Ve Nha", artists=[artist]))
    song_id = uuid.UUID(created["id"])
    blobs.delete_object.side_effect = GatewayError("bucket unreachable")

    with caplog.at_level(logging.WARNING, logger="services.background"):
        result = await songs.delete(song_id)
        await tasks.drain()

    assert result == {"message": f"Song {song_id} is being deleted"}
    assert await store.fetch_all(select(Song.id)) == []
    blobs.delete_object.assert_awaited_once_with("Den Vau/Di Ve Nha.mp3")
    assets.delete.assert_awaited_once_with("songs", f"i-{song_id}")
    assert "bucket unreachable" in caplog.text


@pytest.mark.asyncio
async def test_delete_missing_song(songs):
    with pytest.raises(NotFoundError):
        await songs.delete(uuid.uuid4())


@pytest.mark.asyncio
async def test_presigned_urls_use_primary_artist_key(songs, blobs, add_row):
    primary = await add_row(Artist, name="Son Tung M-TP")
    featured = await add_row(Artist, name="Snoop Dogg")
    created = await songs.create(SongCreate(title="Hay Trao Cho Anh", artists=[primary, featured]))
    song_id = uuid.UUID(created["id"])

    download = await songs.presigned_download_url(song_id)
    upload = await songs.presigned_upload_url(song_id)

    assert download == {"url": "https://blobs.test/download"}
    assert upload == {"url": "https://blobs.test/upload"}
    blobs.presigned_download_url.assert_awaited_once_with("Son Tung M-TP/Hay Trao Cho Anh.mp3", 1800)
    blobs.presigned_upload_url.assert_awaited_once_with("Son Tung M-TP/Hay Trao Cho Anh.mp3", 900)


@pytest.mark.asyncio
async def test_presigned_url_without_primary_link(songs, add_row):
    song_id = await add_row(Song, title="Unlinked")

    with pytest.raises(NotFoundError) as exc_info:
        await songs.presigned_download_url(song_id)

    assert exc_info.value.message == "Artist or Song does not exist"


@pytest.mark.asyncio
async def test_presigned_url_gateway_failure(songs, blobs, add_row):
    artist = await add_row(Artist, name="A")
    created = await songs.create(SongCreate(title="T", artists=[artist]))
    blobs.presigned_download_url.side_effect = GatewayError("signing failed")

    with pytest.raises(GatewayError) as exc_info:
        await songs.presigned_download_url(uuid.UUID(created["id"]))

    assert exc_info.value.message.startswith("Error generating pre-signed URL: ")
    assert exc_info.value.status_code == 500
