"""
PayPal Orders v2 over REST.

Access tokens come from the client-credentials grant and are cached until
shortly before they expire.
"""
import logging
import time
from typing import Any, Optional

import httpx

from app.core.config import settings
from app.services.money import to_major_units_string
from app.services.payments import PaymentProviderError

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_MARGIN_SECONDS = 60


class PayPalClient:
    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.client_id = client_id if client_id is not None else settings.PAYPAL_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.PAYPAL_CLIENT_SECRET
        self.base_url = (base_url or settings.paypal_base_url).rstrip("/")
        self._transport = transport
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=15, transport=self._transport)

    def _access_token(self) -> str:
        if self._token and time.time() < self._token_expires_at:
            return self._token
        if not self.client_id or not self.client_secret:
            raise PaymentProviderError("PayPal is not configured (PAYPAL_CLIENT_ID, PAYPAL_CLIENT_SECRET)")
        with self._client() as client:
            resp = client.post(
                "/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
                headers={"Accept": "application/json"},
            )
        if resp.status_code != 200:
            logger.warning("PayPal token request returned %s: %s", resp.status_code, resp.text[:200])
            raise PaymentProviderError("PayPal authentication failed")
        body = resp.json()
        self._token = body["access_token"]
        self._token_expires_at = time.time() + int(body.get("expires_in", 0)) - TOKEN_EXPIRY_MARGIN_SECONDS
        return self._token

    def _post(self, path: str, payload: dict, prefer_representation: bool = False) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._access_token()}",
            "Content-Type": "application/json",
        }
        if prefer_representation:
            headers["Prefer"] = "return=representation"
        try:
            with self._client() as client:
                resp = client.post(path, json=payload, headers=headers)
        except httpx.RequestError as e:
            logger.warning("PayPal request %s failed: %s", path, e)
            raise PaymentProviderError("PayPal is unreachable") from e
        if resp.status_code >= 400:
            logger.warning("PayPal %s returned %s: %s", path, resp.status_code, resp.text[:200])
            raise PaymentProviderError(f"PayPal request failed ({resp.status_code})")
        return resp.json()

    def create_order(self, order_id: str, amount: int, currency: str) -> dict[str, Any]:
        """Create a CAPTURE-intent PayPal order referencing our order id."""
        result = self._post(
            "/v2/checkout/orders",
            {
                "intent": "CAPTURE",
                "purchase_units": [
                    {
                        "reference_id": order_id,
                        "custom_id": order_id,
                        "amount": {
                            "currency_code": currency.upper(),
                            "value": to_major_units_string(amount, currency),
                        },
                    }
                ],
            },
            prefer_representation=True,
        )
        logger.info("PayPal order %s created for order %s", result.get("id"), order_id)
        return result

    def capture_order(self, paypal_order_id: str) -> dict[str, Any]:
        result = self._post(f"/v2/checkout/orders/{paypal_order_id}/capture", {}, prefer_representation=True)
        logger.info("PayPal order %s captured: status=%s", paypal_order_id, result.get("status"))
        return result


_client: Optional[PayPalClient] = None


def get_paypal_client() -> PayPalClient:
    global _client
    if _client is None:
        _client = PayPalClient()
    return _client
