"""
Create the schema and seed a small demo catalogue.

Usage:
    python scripts/seed_db.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path so we can import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from models import (
    Artist,
    ArtistRelation,
    ArtistSong,
    Base,
    Playlist,
    PlaylistType,
    Profile,
    Song,
)


CATALOGUE = [
    {
        "artist": {"name": "Son Tung M-TP", "country": "VN"},
        "songs": ["Lac Troi", "Hay Trao Cho Anh", "Chung Ta Cua Hien Tai"],
    },
    {
        "artist": {"name": "Den Vau", "country": "VN"},
        "songs": ["Mang Tien Ve Cho Me", "Di Ve Nha"],
    },
    {
        "artist": {"name": "Hoang Thuy Linh", "country": "VN"},
        "songs": ["See Tinh", "Bo Xi Bo"],
    },
]

PLAYLISTS = [
    {"title": "Sky Tour", "type": PlaylistType.ALBUM},
    {"title": "Hoang", "type": PlaylistType.ALBUM},
    {"title": "Late Night Drive", "type": PlaylistType.PLAYLIST},
]


async def create_schema(engine: AsyncEngine):
    """Create all tables that do not exist yet"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_catalogue(session: AsyncSession) -> int:
    """Seed artists, their songs and a few playlists"""
    print("\n🎵 Seeding catalogue...")

    created = 0
    skipped = 0

    owner = await session.scalar(select(Profile).where(Profile.username == "musik"))
    if owner is None:
        owner = Profile(username="musik")
        session.add(owner)

    for entry in CATALOGUE:
        existing = await session.scalar(select(Artist).where(Artist.name == entry["artist"]["name"]))
        if existing:
            skipped += 1
            print(f"  ℹ️  Artist already exists: {existing.name}")
            continue

        artist = Artist(**entry["artist"])
        session.add(artist)
        for title in entry["songs"]:
            song = Song(title=title)
            song.artist_links.append(ArtistSong(artist=artist, relation=ArtistRelation.PRIMARY))
            session.add(song)
        created += 1
        print(f"  ✅ Created artist: {artist.name} ({len(entry['songs'])} songs)")

    for data in PLAYLISTS:
        existing = await session.scalar(select(Playlist).where(Playlist.title == data["title"]))
        if not existing:
            session.add(Playlist(user=owner, **data))

    await session.commit()

    if created > 0:
        print(f"\n✅ Successfully created {created} artists")

    if skipped > 0:
        print(f"ℹ️  Skipped {skipped} existing artists")

    return created


async def verify_database(session: AsyncSession):
    """Print row counts after seeding"""
    print("\n🔍 Verifying database...")

    for label, model in (("👤 Artists", Artist), ("🎵 Songs", Song), ("📀 Playlists", Playlist)):
        count = await session.scalar(select(func.count()).select_from(model))
        print(f"  {label}: {count}")


async def main():
    """Main seeding function"""
    from models.database import AsyncSessionLocal, engine

    print("\n" + "="*70)
    print("🌱 MUSIK - DATABASE SEEDING")
    print("="*70)

    try:
        await create_schema(engine)

        async with AsyncSessionLocal() as session:
            created = await seed_catalogue(session)
            await verify_database(session)

        print("\n" + "="*70)
        print("✅ Database seeding completed successfully!")
        print("="*70 + "\n")

        if created == 0:
            print("💡 Tip: Database was already seeded.\n")

    except Exception as e:
        print(f"\n❌ Error seeding database: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
