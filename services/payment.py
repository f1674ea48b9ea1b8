"""
ZaloPay sandbox integration: order creation, callback verification and
status queries.
"""

import hashlib
import hmac
import json
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from config.settings import settings
from services.errors import GatewayError

logger = logging.getLogger(__name__)


# =============================================================================
# MODELS
# =============================================================================

class OrderItem(BaseModel):
    itemid: str
    itemname: str
    itemprice: int
    itemquantity: int = 1


class CallbackResult(BaseModel):
    return_code: int
    return_message: str


RETURN_SUCCESS = 1
RETURN_ERROR = 0
RETURN_MAC_MISMATCH = -1


# =============================================================================
# SEQUENCE
# =============================================================================

class OrderSequence:
    """Process-wide counter behind the ``YYMMDD_<n>`` transaction ids.

    Seeded from the last six digits of the current millisecond timestamp, so
    ids are unique within one process but only probably unique across
    restarts, and not coordinated between instances.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = int(str(int(time.time() * 1000))[-6:])
        self.value = seed

    def next(self) -> int:
        self.value += 1
        return self.value


def hmac_sha256(key: str, data: str) -> str:
    return hmac.new(key.encode(), data.encode(), hashlib.sha256).hexdigest()


# =============================================================================
# GATEWAY CLIENT
# =============================================================================

class PaymentGateway:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        sequence: Optional[OrderSequence] = None,
        app_id: int = settings.zalopay_app_id,
        key1: str = settings.zalopay_key1,
        key2: str = settings.zalopay_key2,
    ):
        self.client = client or httpx.AsyncClient()
        self.sequence = sequence or OrderSequence()
        self.app_id = app_id
        self.key1 = key1
        self.key2 = key2
        self.embed_data = {"redirecturl": settings.zalopay_redirect_url}

    def build_order(self, user_id: str, items: List[OrderItem], now: Optional[datetime] = None) -> Dict[str, Any]:
        """Build and sign an order; increments the sequence."""
        now = now or datetime.now()
        order_number = self.sequence.next()
        order = {
            "app_id": self.app_id,
            "app_trans_id": f"{now:%y%m%d}_{order_number}",
            "app_user": user_id,
            "app_time": int(now.timestamp() * 1000),
            "item": json.dumps([item.model_dump() for item in items], separators=(",", ":")),
            "embed_data": json.dumps(self.embed_data, separators=(",", ":")),
            "amount": sum(item.itemprice * item.itemquantity for item in items),
            "description": f"{settings.zalopay_order_description} - Payment for order {order_number}",
            "bank_code": "zalopayapp",
        }
        data = "|".join(str(order[field]) for field in (
            "app_id", "app_trans_id", "app_user", "amount", "app_time", "embed_data", "item",
        ))
        order["mac"] = hmac_sha256(self.key1, data)
        return order

    async def create_order(self, user_id: str, items: List[OrderItem]) -> Dict[str, Any]:
        order = self.build_order(user_id, items)
        logger.info(f"Creating order {order['app_trans_id']} for user {user_id} ({order['amount']})")

        try:
            response = await self.client.post(settings.zalopay_create_url, params=order)
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GatewayError(f"Failed to create order {order['app_trans_id']}: {e}") from e

        # The gateway does not reliably echo the transaction id back.
        return {**result, "app_trans_id": order["app_trans_id"]}

    def receive_order_callback(self, data_str: str, req_mac: str) -> CallbackResult:
        """Authenticate a gateway callback. Never raises and does no I/O."""
        try:
            mac = hmac_sha256(self.key2, data_str)
            if not hmac.compare_digest(mac.encode(), req_mac.encode()):
                logger.warning("Rejected payment callback: mac not equal")
                return CallbackResult(return_code=RETURN_MAC_MISMATCH, return_message="mac not equal")
            return CallbackResult(return_code=RETURN_SUCCESS, return_message="success")
        except Exception as e:
            logger.error(f"Payment callback verification failed: {e}")
            return CallbackResult(return_code=RETURN_ERROR, return_message=str(e))

    async def get_order_status(self, app_trans_id: str) -> Dict[str, Any]:
        order = {"app_id": self.app_id, "app_trans_id": app_trans_id}
        order["mac"] = hmac_sha256(self.key1, f"{self.app_id}|{app_trans_id}|{self.key1}")

        try:
            response = await self.client.post(
                settings.zalopay_query_url,
                data=order,
                timeout=settings.zalopay_timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GatewayError(f"Failed to retrieve order status: {e}") from e

    async def close(self):
        await self.client.aclose()
