"""
Federated search across songs, artists, albums, playlists and users.

Responses are cached for non-privileged callers. Admins go through a
cache-bypassing policy so they always see live data.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import Select, select

from models import ALBUM_LIKE_TYPES, Artist, Playlist, PlaylistType, Profile, Song
from services.cache import CacheClient
from services.errors import AggregateError, NotFoundError
from services.roles import Role
from services.store import RecordStore, page_bounds, text_search

logger = logging.getLogger(__name__)


# =============================================================================
# CACHE POLICY
# =============================================================================

class CacheAware:
    """Read-through caching of response bodies."""

    def __init__(self, cache: CacheClient, ttl: Optional[int] = None):
        self.cache = cache
        self.ttl = ttl

    async def read(self, key: str) -> Optional[Any]:
        return await self.cache.get(key)

    async def write(self, key: str, payload: Any) -> None:
        await self.cache.set(key, payload, ttl=self.ttl)


class CacheBypassing:
    """Never reads or writes the cache."""

    async def read(self, key: str) -> Optional[Any]:
        return None

    async def write(self, key: str, payload: Any) -> None:
        return None


def policy_for(role: Role, cache: CacheClient, ttl: Optional[int] = None):
    if role == Role.ADMIN:
        return CacheBypassing()
    return CacheAware(cache, ttl)


def default_cache_key(term: str) -> str:
    return f"searches?term={term}"


def category_cache_key(category: str, term: str, page: int, limit: int) -> str:
    return f"searches?cat={category}&term={term}&page={page}&limit={limit}"


# =============================================================================
# CATEGORIES
# =============================================================================

def _playlists(term: str) -> Select:
    return (
        select(Playlist.id, Playlist.title, Playlist.thumbnail_url, Profile.username)
        .outerjoin(Profile, Playlist.user_id == Profile.id)
        .where(text_search(Playlist.title, term))
    )


def _nest_owner(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Move the joined ``username`` under ``user`` like an embedded relation."""
    return [
        {**{k: v for k, v in row.items() if k != "username"}, "user": {"username": row.get("username")}}
        for row in rows
    ]


@dataclass(frozen=True)
class SearchCategory:
    name: str
    default_limit: int
    statement: Callable[[str], Select]
    shape: Optional[Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]] = None

    def query(self, term: str, page: int, limit: int) -> Select:
        offset, count = page_bounds(page, limit)
        return self.statement(term).offset(offset).limit(count)


CATEGORIES: Dict[str, SearchCategory] = {
    "songs": SearchCategory(
        "songs", 20,
        lambda term: select(Song.id, Song.title, Song.thumbnail_url, Song.duration)
        .where(text_search(Song.title, term)),
    ),
    "artists": SearchCategory(
        "artists", 30,
        lambda term: select(Artist.id, Artist.name, Artist.avatar_url)
        .where(text_search(Artist.name, term)),
    ),
    "albums": SearchCategory(
        "albums", 30,
        lambda term: _playlists(term).where(Playlist.type.in_(ALBUM_LIKE_TYPES)),
        _nest_owner,
    ),
    "playlists": SearchCategory(
        "playlists", 30,
        lambda term: _playlists(term).where(Playlist.type == PlaylistType.PLAYLIST),
        _nest_owner,
    ),
    "users": SearchCategory(
        "users", 30,
        lambda term: select(Profile.id, Profile.username, Profile.avatar_url)
        .where(text_search(Profile.username, term)),
    ),
}


# =============================================================================
# ENGINE
# =============================================================================

class SearchEngine:
    def __init__(self, store: RecordStore, cache: CacheClient, ttl: Optional[int] = None):
        self.store = store
        self.cache = cache
        self.ttl = ttl

    async def _run(self, category: SearchCategory, term: str, page: int, limit: int) -> List[Dict[str, Any]]:
        rows = await self.store.fetch_all(category.query(term, page, limit))
        return category.shape(rows) if category.shape else rows

    async def search_all(self, term: str, role: Role) -> Dict[str, Any]:
        """Search every category at once; fails as a whole if any query fails."""
        policy = policy_for(role, self.cache, self.ttl)
        key = default_cache_key(term)

        cached = await policy.read(key)
        if cached is not None:
            logger.info(f"Serving search '{term}' from cache")
            return cached

        categories = list(CATEGORIES.values())
        results = await asyncio.gather(
            *(self._run(category, term, 1, category.default_limit) for category in categories),
            return_exceptions=True,
        )

        errors = [str(result) for result in results if isinstance(result, Exception)]
        if errors:
            logger.error(f"Search '{term}' failed in {len(errors)} categories")
            raise AggregateError(errors)

        payload = {"data": {category.name: rows for category, rows in zip(categories, results)}}
        await policy.write(key, payload)
        return payload

    async def search_category(
        self,
        category: str,
        term: str,
        role: Role,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        target = CATEGORIES.get(category)
        if target is None:
            raise NotFoundError(f"Unknown search category: {category}")

        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else target.default_limit

        policy = policy_for(role, self.cache, self.ttl)
        key = category_cache_key(category, term, page, limit)

        cached = await policy.read(key)
        if cached is not None:
            logger.info(f"Serving {category} search '{term}' from cache")
            return cached

        payload = {"data": await self._run(target, term, page, limit)}
        await policy.write(key, payload)
        return payload
