# tests/conftest.py
import os

# Point the module-level engine at SQLite before anything imports settings.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-that-is-long-enough-for-hs256")

import uuid
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import event, insert
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from scripts.seed_db import create_schema
from services.assets import AssetClient
from services.background import TaskRunner
from services.blob_store import BlobStore
from services.cache import CacheClient
from services.container import ServiceContainer
from services.payment import OrderSequence, PaymentGateway
from services.roles import RoleResolver
from services.store import RecordStore

JWT_SECRET = os.environ["JWT_SECRET"]
KEY1 = "test-key1"
KEY2 = "test-key2"


class FakeRedis:
    """Just enough of redis.asyncio.Redis for CacheClient."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, Optional[int]] = {}
        self.down = False

    def _check(self):
        if self.down:
            raise RedisConnectionError("Connection refused")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.data[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, key):
        self._check()
        self.data.pop(key, None)

    async def aclose(self):
        pass


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'musik.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def store(session_factory):
    return RecordStore(session_factory)


@pytest.fixture
def add_row(store):
    """Insert a row and return its id."""
    async def _add(model, **values: Any) -> uuid.UUID:
        values.setdefault("id", uuid.uuid4())
        await store.execute(insert(model).values(**values))
        return values["id"]
    return _add


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return CacheClient(fake_redis, default_ttl=300)


@pytest.fixture
def blobs():
    blobs = MagicMock(spec=BlobStore)
    blobs.presigned_download_url = AsyncMock(return_value="https://blobs.test/download")
    blobs.presigned_upload_url = AsyncMock(return_value="https://blobs.test/upload")
    blobs.delete_object = AsyncMock(return_value=None)
    return blobs


@pytest.fixture
def assets():
    assets = MagicMock(spec=AssetClient)
    assets.upload = AsyncMock(return_value={"public_id": "ok"})
    assets.delete = AsyncMock(return_value={"result": "ok"})
    assets.close = AsyncMock()
    return assets


@pytest.fixture
def tasks():
    return TaskRunner()


@pytest.fixture
def gateway_requests():
    return []


@pytest_asyncio.fixture
async def payments(gateway_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        gateway_requests.append(request)
        return httpx.Response(200, json={"return_code": 1, "return_message": "Giao dịch thành công"})

    gateway = PaymentGateway(
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sequence=OrderSequence(seed=500000),
        app_id=2553,
        key1=KEY1,
        key2=KEY2,
    )
    yield gateway
    await gateway.close()


@pytest.fixture
def services(store, cache, blobs, assets, payments, tasks):
    return ServiceContainer.build(
        store=store,
        cache=cache,
        blobs=blobs,
        assets=assets,
        payments=payments,
        tasks=tasks,
        roles=RoleResolver(secret=JWT_SECRET),
    )


@pytest_asyncio.fixture
async def client(services):
    from api.main import create_app

    app = create_app(services)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await services.tasks.drain()
