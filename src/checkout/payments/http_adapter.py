"""Payment service over HTTP (hosted checkout creation endpoint)."""

import aiohttp

from checkout.auth import AuthSession
from checkout.errors import AuthError, ExternalServiceError
from checkout.payments.port import CheckoutItem, PaymentService, validate_checkout
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class HttpPaymentService(PaymentService):
    def __init__(self, url: str, api_key: str | None = None, timeout_seconds: float = 30) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def create_checkout(
        self,
        pay_type: str,
        items: list[CheckoutItem],
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        session: AuthSession,
    ) -> str:
        validate_checkout(pay_type, items, success_url, cancel_url)
        payload = {
            "payment_type": pay_type,
            "items": [item.to_dict() for item in items],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": dict(metadata),
        }
        headers = {"Authorization": f"Bearer {session.access_token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as http:
                async with http.post(self.url, json=payload, headers=headers) as resp:
                    status = resp.status
                    body = await resp.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError) as exc:
            logger.error("payment_service_unreachable", error=str(exc))
            raise ExternalServiceError(f"Payment service unavailable: {exc}") from exc

        body = body or {}
        if status == 401:
            raise AuthError(body.get("error") or "Session rejected by payment service")
        if status >= 400 or not body.get("url"):
            message = body.get("error") or f"Payment service returned {status}"
            logger.warning("payment_service_rejected", status=status, error=message)
            raise ExternalServiceError(message, status=status)
        return str(body["url"])
