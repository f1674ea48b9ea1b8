import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routes import artists, health, payments, playlists, search, songs, users
from config.settings import settings
from models.database import AsyncSessionLocal
from services.container import ServiceContainer
from services.errors import ServiceError

logger = logging.getLogger(__name__)


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "services", None) is None
        if owned:
            app.state.services = ServiceContainer.from_settings(AsyncSessionLocal)
        logger.info(f"Musik API starting ({settings.environment})")
        yield
        if owned:
            await app.state.services.aclose()

    app = FastAPI(title="Musik API", version="0.1.0", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    app.include_router(health.router, prefix="/api/v1", tags=["health"])
    app.include_router(songs.router, prefix="/api/v1", tags=["songs"])
    app.include_router(artists.router, prefix="/api/v1", tags=["artists"])
    app.include_router(playlists.router, prefix="/api/v1", tags=["playlists"])
    app.include_router(users.router, prefix="/api/v1", tags=["users"])
    app.include_router(search.router, prefix="/api/v1", tags=["search"])
    app.include_router(payments.router, prefix="/api/v1", tags=["payments"])

    @app.get("/")
    async def root():
        return {"message": "Musik API"}

    return app


app = create_app()
