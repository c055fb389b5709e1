"""
Subscription and Billing Endpoints.

Quota status, the plan table, Stripe checkout and cancellation, and the
Stripe webhook. The webhook is the only unauthenticated route here; it is
trusted through its signature instead.
"""

from typing import Any

import stripe
from fastapi import APIRouter, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from contentmagic.core.errors import AppError, ValidationError
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.domain import TIER_PLANS
from contentmagic.core.models.io.base import ApiResponse, MessageRead
from contentmagic.core.models.io.subscription import (
    CheckoutRead,
    CheckoutRequest,
    PlanRead,
    PlansRead,
    SubscriptionRead,
    SubscriptionStatusRead,
    UsageStats,
    WebhookAck,
)
from contentmagic.core.monitoring import log_error
from contentmagic.server.api.response import success
from contentmagic.server.services.deps import (
    BillingDep,
    CurrentUserDep,
    SessionDep,
    SubscriptionServiceDep,
)
from contentmagic.server.services.billing import StripeGateway
from contentmagic.server.services.subscription import SubscriptionService

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/status",
    response_model=ApiResponse[SubscriptionStatusRead],
    summary="Subscription Status",
    description="Latest subscription record and current usage of the user.",
)
async def subscription_status(
    request: Request, user: CurrentUserDep, subscriptions: SubscriptionServiceDep
) -> ApiResponse[SubscriptionStatusRead]:
    record = await subscriptions.get_user_subscription(user.id)
    usage = await subscriptions.get_usage_stats(user)
    return success(
        request,
        SubscriptionStatusRead(
            subscription=SubscriptionRead.model_validate(record) if record is not None else None,
            usage=usage,
        ),
    )


@router.get(
    "/usage",
    response_model=ApiResponse[UsageStats],
    summary="Usage Stats",
    description="Posts generated this period against the tier quota.",
)
async def usage(
    request: Request, user: CurrentUserDep, subscriptions: SubscriptionServiceDep
) -> ApiResponse[UsageStats]:
    return success(request, await subscriptions.get_usage_stats(user))


@router.get(
    "/plans",
    response_model=ApiResponse[PlansRead],
    summary="Plans",
    description="Monthly quota and price of every subscription tier.",
)
async def plans(request: Request) -> ApiResponse[PlansRead]:
    return success(
        request,
        PlansRead(
            plans=[
                PlanRead(
                    tier=plan.tier.value,
                    name=plan.display_name,
                    monthly_limit=plan.monthly_limit,
                    price_cents=plan.price_cents,
                )
                for plan in TIER_PLANS.values()
            ]
        ),
    )


@router.post(
    "/checkout",
    response_model=ApiResponse[CheckoutRead],
    summary="Create Checkout Session",
    description="Start a Stripe checkout upgrading the user to a paid tier.",
    responses={
        400: {"description": "Invalid tier or missing redirect URLs"},
        502: {"description": "Stripe rejected the request"},
    },
)
async def create_checkout(
    request: Request, payload: CheckoutRequest, user: CurrentUserDep, subscriptions: SubscriptionServiceDep
) -> ApiResponse[CheckoutRead]:
    if not payload.tier:
        raise ValidationError("Cannot create checkout session for this tier", code="INVALID_TIER")
    if not payload.success_url or not payload.cancel_url:
        raise ValidationError("Success and cancel URLs are required", code="MISSING_URLS")

    checkout = await subscriptions.create_checkout_session(
        user, payload.tier, payload.success_url, payload.cancel_url
    )
    return success(request, CheckoutRead(session_id=checkout.session_id, url=checkout.url))


@router.post(
    "/cancel",
    response_model=ApiResponse[MessageRead],
    summary="Cancel Subscription",
    description="Cancel the user's Stripe subscription. The downgrade is applied when Stripe confirms it.",
    responses={404: {"description": "No active subscription found"}},
)
async def cancel(
    request: Request, user: CurrentUserDep, subscriptions: SubscriptionServiceDep
) -> ApiResponse[MessageRead]:
    await subscriptions.cancel_subscription(user)
    return success(request, MessageRead(message="Subscription will be canceled"))


@router.post(
    "/webhook",
    response_model=WebhookAck,
    summary="Stripe Webhook",
    description="Receive signed Stripe subscription events.",
    responses={
        400: {"description": "Invalid payload or signature"},
        500: {"description": "Webhook secret missing or handler failure"},
    },
)
async def webhook(
    request: Request,
    session: SessionDep,
    billing: BillingDep,
    stripe_signature: str = Header("", alias="Stripe-Signature"),
) -> WebhookAck:
    payload = await request.body()
    try:
        event = billing.construct_event(payload, stripe_signature)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning(f"Rejected Stripe webhook: {e}")
        raise ValidationError(f"Webhook Error: {e}", code="INVALID_WEBHOOK")

    await _dispatch_event(session, billing, event)
    return WebhookAck()


async def _dispatch_event(session: AsyncSession, billing: StripeGateway, event: Any) -> None:
    event_type = event["type"]
    try:
        handled = await SubscriptionService(session, billing).handle_webhook_event(event)
    except Exception as e:
        await session.rollback()
        log_error(error_type=type(e).__name__, error_message=str(e), context={"event_type": event_type})
        logger.error(f"Stripe webhook handler failed for {event_type}", exc_info=True)
        raise AppError("Webhook handler failed", code="WEBHOOK_HANDLER_FAILED", status_code=500) from e
    if handled:
        logger.info(f"Processed Stripe event {event_type}")
