from fastapi import APIRouter, Depends
from sqlalchemy import literal, select
from datetime import datetime, timezone

from api.deps import get_services
from services.container import ServiceContainer
from services.errors import StoreError

router = APIRouter()

@router.get("/health")
async def health_check(services: ServiceContainer = Depends(get_services)):
    """
    Health check endpoint for load balancers and monitoring.
    """
    checks = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {}
    }
    
    # Check database
    try:
        await services.store.fetch_all(select(literal(1).label("ok")))
        checks["services"]["database"] = "ok"
    except StoreError as e:
        checks["services"]["database"] = f"error: {e}"
        checks["status"] = "unhealthy"

    # The cache is optional; a failed write only degrades it
    if await services.cache.set("health", checks["timestamp"], ttl=10):
        checks["services"]["cache"] = "ok"
    else:
        checks["services"]["cache"] = "degraded"

    checks["services"]["background_tasks"] = services.tasks.pending
    
    return checks
