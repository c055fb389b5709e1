"""
API Dependencies.

Services, the authenticated user, guest checks and rate limits for route
handlers. Shared singletons (settings, Stripe gateway, AI service, rate
limiters) live on ``app.state`` and are set up by the application factory.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from contentmagic.core.database import get_session
from contentmagic.core.database.entities import User
from contentmagic.core.errors import AuthenticationError, ErrorCode, RateLimitError, ValidationError
from contentmagic.server.core.config import Settings
from contentmagic.server.core.rate_limit import RateLimiters, client_ip

from .ai import AIService
from .analytics import AnalyticsService
from .auth import AuthService
from .billing import StripeGateway
from .subscription import SubscriptionService

SESSION_USER_KEY = "user_id"

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiters(request: Request) -> RateLimiters:
    return request.app.state.rate_limiters


def get_billing_gateway(request: Request) -> StripeGateway:
    return request.app.state.billing


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service


SettingsDep = Annotated[Settings, Depends(get_settings)]
RateLimitersDep = Annotated[RateLimiters, Depends(get_rate_limiters)]
BillingDep = Annotated[StripeGateway, Depends(get_billing_gateway)]
AIServiceDep = Annotated[AIService, Depends(get_ai_service)]


def get_auth_service(session: SessionDep) -> AuthService:
    return AuthService(session)


def get_subscription_service(session: SessionDep, billing: BillingDep) -> SubscriptionService:
    return SubscriptionService(session, billing)


def get_analytics_service(session: SessionDep) -> AnalyticsService:
    return AnalyticsService(session)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
SubscriptionServiceDep = Annotated[SubscriptionService, Depends(get_subscription_service)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]


async def get_current_user(request: Request, auth: AuthServiceDep) -> User:
    """
    Resolve the user of the session cookie.

    Raises:
        AuthenticationError: When the session is anonymous or its user no longer exists
    """
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        raise AuthenticationError()
    user = await auth.get_user(int(user_id))
    if user is None:
        request.session.clear()
        raise AuthenticationError()
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_guest(request: Request) -> None:
    if request.session.get(SESSION_USER_KEY) is not None:
        raise ValidationError("User is already authenticated", code=ErrorCode.ALREADY_AUTHENTICATED)


GuestOnly = Depends(require_guest)


def auth_rate_limit(request: Request, limiters: RateLimitersDep) -> str:
    """Refuse clients with too many failed auth attempts; returns the client key for recording failures."""
    key = client_ip(request)
    if limiters.enabled and limiters.auth.is_limited(key):
        raise RateLimitError(
            "Too many authentication attempts, please try again later",
            details={"retryAfter": limiters.auth.retry_after(key)},
        )
    return key


def ai_rate_limit(user: CurrentUserDep, limiters: RateLimitersDep) -> User:
    key = str(user.id)
    if limiters.enabled and not limiters.ai.hit(key):
        raise RateLimitError(
            "AI generation rate limit exceeded, please wait before making more requests",
            details={"retryAfter": limiters.ai.retry_after(key)},
        )
    return user


AuthClientDep = Annotated[str, Depends(auth_rate_limit)]
AIUserDep = Annotated[User, Depends(ai_rate_limit)]
