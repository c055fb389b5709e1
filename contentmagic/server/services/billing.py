"""
Stripe billing gateway.

Thin async wrapper over the Stripe SDK. SDK calls are blocking, so they run
in a worker thread. Stripe failures surface as :class:`PaymentServiceError`.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional

import stripe

from contentmagic.core.errors import AppError, ErrorCode, PaymentServiceError
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.domain import TierPlan
from contentmagic.server.core.config import StripeConfig

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: Optional[str]


class StripeGateway:
    """Checkout, cancellation and webhook verification against Stripe."""

    def __init__(self, config: StripeConfig) -> None:
        self.config = config

    @property
    def configured(self) -> bool:
        return bool(self.config.secret_key)

    def _require_key(self) -> str:
        if not self.config.secret_key:
            raise AppError("Payment service is not configured", code=ErrorCode.SERVICE_UNAVAILABLE, status_code=503)
        return self.config.secret_key

    async def create_checkout_session(
        self,
        *,
        plan: TierPlan,
        customer_email: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutSession:
        """
        Start a subscription checkout for ``plan``.

        The metadata is attached to the checkout session and to the resulting
        subscription, so subscription webhooks can find the user and tier.
        """
        api_key = self._require_key()
        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                api_key=api_key,
                mode="subscription",
                payment_method_types=["card"],
                customer_email=customer_email,
                line_items=[
                    {
                        "price_data": {
                            "currency": self.config.currency,
                            "product_data": {"name": f"ContentMagic {plan.display_name} Plan"},
                            "unit_amount": plan.price_cents,
                            "recurring": {"interval": "month"},
                        },
                        "quantity": 1,
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                subscription_data={"metadata": metadata},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout error: {e}")
            raise PaymentServiceError("Could not create checkout session. Please try again.") from e

        if not session.url:
            raise PaymentServiceError("Failed to create checkout session")
        return CheckoutSession(session_id=session.id, url=session.url)

    async def cancel_subscription(self, stripe_subscription_id: str) -> Any:
        api_key = self._require_key()
        try:
            return await asyncio.to_thread(stripe.Subscription.cancel, stripe_subscription_id, api_key=api_key)
        except stripe.StripeError as e:
            logger.error(f"Stripe cancel error for {stripe_subscription_id}: {e}")
            raise PaymentServiceError("Could not cancel subscription. Please try again.") from e

    def construct_event(self, payload: bytes, signature: str) -> dict[str, Any]:
        """
        Verify a webhook payload and parse it into a Stripe event.

        The signature is checked by the SDK, the verified body is then parsed
        into plain nested dicts. Recent SDK releases no longer make Stripe
        objects dict subclasses.

        Raises:
            AppError: 500 when no webhook secret is configured
            ValueError: When the payload is not valid JSON
            stripe.SignatureVerificationError: When the signature does not match
        """
        if not self.config.webhook_secret:
            raise AppError(
                "Webhook secret not configured", code=ErrorCode.INTERNAL_ERROR, status_code=500
            )
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            body, signature, self.config.webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE
        )
        return json.loads(body)
