"""Order service over HTTP.

POSTs the order request with the user's bearer token. A 400 carrying
``details`` is a validation failure, 401 means the session was rejected, and
every other failure is passed through verbatim as an ExternalServiceError.
"""

from decimal import Decimal

import aiohttp
from protean.exceptions import ValidationError

from checkout.auth import AuthSession
from checkout.errors import AuthError, ExternalServiceError
from checkout.handoff.orders.port import OrderRequest, OrderValidationService, ValidatedItem, ValidatedOrder
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class HttpOrderService(OrderValidationService):
    def __init__(self, url: str, api_key: str | None = None, timeout_seconds: float = 30) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    def _headers(self, session: AuthSession) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {session.access_token}",
            "Content-Type": "application/json",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
        return headers

    async def validate_and_create_order(self, request: OrderRequest, session: AuthSession) -> ValidatedOrder:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as http:
                async with http.post(self.url, json=request.to_payload(), headers=self._headers(session)) as resp:
                    status = resp.status
                    body = await resp.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError) as exc:
            logger.error("order_service_unreachable", error=str(exc))
            raise ExternalServiceError(f"Order service unavailable: {exc}") from exc

        body = body or {}
        if status == 401:
            raise AuthError(body.get("error") or "Session rejected by order service")
        if status == 400 and body.get("details"):
            raise ValidationError({"order": [str(reason) for reason in body["details"]]})
        if status >= 400 or not body.get("order_id"):
            message = body.get("error") or f"Order service returned {status}"
            logger.warning("order_service_rejected", status=status, error=message)
            raise ExternalServiceError(message, status=status)

        return ValidatedOrder(
            order_id=str(body["order_id"]),
            total_amount=Decimal(str(body["total_amount"])),
            validated_items=tuple(ValidatedItem.from_dict(item) for item in body.get("validated_items") or ()),
        )
