"""
Wires the service graph from settings and tears it down again.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import settings
from services.artists import ArtistService
from services.assets import AssetClient
from services.background import TaskRunner
from services.blob_store import BlobStore
from services.cache import CacheClient
from services.payment import PaymentGateway
from services.playlists import PlaylistService
from services.roles import RoleResolver
from services.search import SearchEngine
from services.songs import SongService
from services.store import RecordStore
from services.users import UserService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    store: RecordStore
    cache: CacheClient
    blobs: BlobStore
    assets: AssetClient
    tasks: TaskRunner
    roles: RoleResolver
    payments: PaymentGateway
    search: SearchEngine
    songs: SongService
    artists: ArtistService
    playlists: PlaylistService
    users: UserService

    @classmethod
    def build(
        cls,
        store: RecordStore,
        cache: CacheClient,
        blobs: BlobStore,
        assets: AssetClient,
        payments: PaymentGateway,
        tasks: Optional[TaskRunner] = None,
        roles: Optional[RoleResolver] = None,
    ) -> "ServiceContainer":
        tasks = tasks or TaskRunner()
        return cls(
            store=store,
            cache=cache,
            blobs=blobs,
            assets=assets,
            tasks=tasks,
            roles=roles or RoleResolver(),
            payments=payments,
            search=SearchEngine(store, cache, settings.cache_ttl_seconds),
            songs=SongService(store, assets, tasks, blobs, cache),
            artists=ArtistService(store, assets, tasks),
            playlists=PlaylistService(store, assets, tasks),
            users=UserService(store, assets, tasks),
        )

    @classmethod
    def from_settings(cls, session_factory: async_sessionmaker[AsyncSession]) -> "ServiceContainer":
        return cls.build(
            store=RecordStore(session_factory),
            cache=CacheClient.from_url(settings.redis_url),
            blobs=BlobStore(),
            assets=AssetClient(),
            payments=PaymentGateway(),
        )

    async def aclose(self):
        """Finish background work, then close outbound clients."""
        await self.tasks.drain()
        await self.assets.close()
        await self.payments.close()
        await self.cache.close()
        self.blobs.close()
        logger.info("Services closed")
