"""Stripe PaymentIntents and webhook verification."""
import logging
from typing import Any, Optional

import stripe

from app.core.config import settings
from app.services.money import is_zero_decimal
from app.services.payments import PaymentProviderError

logger = logging.getLogger(__name__)

SUCCEEDED_EVENT = "payment_intent.succeeded"
FAILED_EVENT = "payment_intent.payment_failed"


class WebhookSignatureError(Exception):
    pass


class StripeGateway:
    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        api_version: Optional[str] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET
        self.api_version = api_version or settings.STRIPE_API_VERSION

    def create_payment_intent(self, order_id: str, amount: int, currency: str) -> Any:
        """Create a PaymentIntent for an order. ``amount`` is already in Stripe's smallest unit."""
        if not self.secret_key:
            raise PaymentProviderError("Stripe is not configured (STRIPE_SECRET_KEY)")
        try:
            intent = stripe.PaymentIntent.create(
                amount=int(amount),
                currency=currency.lower(),
                metadata={"orderId": order_id},
                automatic_payment_methods={"enabled": True},
                api_key=self.secret_key,
                stripe_version=self.api_version,
            )
        except stripe.StripeError as e:
            logger.error("Stripe PaymentIntent create failed for order %s: %s", order_id, e)
            raise PaymentProviderError(str(e)) from e
        logger.info(
            "Stripe PaymentIntent %s created for order %s (%s %s%s)",
            intent["id"],
            order_id,
            amount,
            currency.upper(),
            ", zero-decimal" if is_zero_decimal(currency) else "",
        )
        return intent

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Any:
        if not signature:
            raise WebhookSignatureError("Missing stripe-signature")
        if not self.webhook_secret:
            raise WebhookSignatureError("Missing STRIPE_WEBHOOK_SECRET")
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(f"Invalid signature: {e}") from e
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid payload: {e}") from e


def get_stripe_gateway() -> StripeGateway:
    return StripeGateway()
