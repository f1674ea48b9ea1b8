from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_services
from services.container import ServiceContainer
from services.payment import CallbackResult, OrderItem

router = APIRouter(prefix="/payments")


class OrderRequest(BaseModel):
    user_id: str
    items: List[OrderItem]


class CallbackRequest(BaseModel):
    data: str
    mac: str


@router.post("/orders")
async def create_order(body: OrderRequest, services: ServiceContainer = Depends(get_services)):
    return await services.payments.create_order(body.user_id, body.items)


@router.post("/callback", response_model=CallbackResult)
async def order_callback(body: CallbackRequest, services: ServiceContainer = Depends(get_services)):
    return services.payments.receive_order_callback(body.data, body.mac)


@router.get("/orders/{app_trans_id}")
async def order_status(app_trans_id: str, services: ServiceContainer = Depends(get_services)):
    return await services.payments.get_order_status(app_trans_id)
