from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_role, get_services
from services.container import ServiceContainer
from services.roles import Role

router = APIRouter(prefix="/search")


@router.get("/{term}")
async def search_default(
    term: str,
    role: Role = Depends(get_role),
    services: ServiceContainer = Depends(get_services),
):
    return await services.search.search_all(term, role)


@router.get("/{category}/{term}")
async def search_category(
    category: str,
    term: str,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    role: Role = Depends(get_role),
    services: ServiceContainer = Depends(get_services),
):
    return await services.search.search_category(category, term, role, page=page, limit=limit)
