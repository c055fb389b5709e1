"""
Authentication Endpoints.

Registration, login and logout on top of the signed session cookie. Only
failed register/login attempts count against the auth rate limit.
"""

from fastapi import APIRouter, Request, status

from contentmagic.core.errors import AppError, AuthenticationError, ErrorCode
from contentmagic.core.models.io.auth import LoginRequest, RegisterRequest, UserEnvelope, UserRead
from contentmagic.core.models.io.base import ApiResponse, MessageRead
from contentmagic.core.monitoring import log_auth_event
from contentmagic.server.api.response import success
from contentmagic.server.services.deps import (
    SESSION_USER_KEY,
    AuthClientDep,
    AuthServiceDep,
    CurrentUserDep,
    GuestOnly,
    RateLimitersDep,
)

router = APIRouter()


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UserEnvelope],
    dependencies=[GuestOnly],
    summary="Register",
    description="Create an account on the free tier and sign it in.",
    responses={
        400: {"description": "Invalid input, email taken or already signed in"},
        429: {"description": "Too many failed attempts"},
    },
)
async def register(
    request: Request,
    payload: RegisterRequest,
    auth: AuthServiceDep,
    client: AuthClientDep,
    limiters: RateLimitersDep,
) -> ApiResponse[UserEnvelope]:
    try:
        user = await auth.create_user(payload.email, payload.password)
    except AppError:
        limiters.auth.record(client)
        raise

    request.session[SESSION_USER_KEY] = user.id
    log_auth_event("register", user_id=user.id, email=user.email, ip=client)
    return success(request, UserEnvelope(user=UserRead.model_validate(user)))


@router.post(
    "/login",
    response_model=ApiResponse[UserEnvelope],
    dependencies=[GuestOnly],
    summary="Login",
    description="Verify credentials and start a session.",
    responses={401: {"description": "Invalid email or password"}, 429: {"description": "Too many failed attempts"}},
)
async def login(
    request: Request,
    payload: LoginRequest,
    auth: AuthServiceDep,
    client: AuthClientDep,
    limiters: RateLimitersDep,
) -> ApiResponse[UserEnvelope]:
    user = await auth.authenticate(payload.email, payload.password)
    if user is None:
        limiters.auth.record(client)
        log_auth_event("login_failed", email=payload.email, ip=client)
        raise AuthenticationError("Invalid email or password", code=ErrorCode.UNAUTHORIZED)

    # Fresh session for the new login
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    log_auth_event("login", user_id=user.id, email=user.email, ip=client)
    return success(request, UserEnvelope(user=UserRead.model_validate(user)))


@router.post(
    "/logout",
    response_model=ApiResponse[MessageRead],
    summary="Logout",
    description="End the current session.",
)
async def logout(request: Request, user: CurrentUserDep) -> ApiResponse[MessageRead]:
    request.session.clear()
    log_auth_event("logout", user_id=user.id, email=user.email)
    return success(request, MessageRead(message="Logged out successfully"))


@router.get(
    "/me",
    response_model=ApiResponse[UserEnvelope],
    summary="Current User",
    description="Return the signed-in user.",
    responses={401: {"description": "Authentication required"}},
)
async def me(request: Request, user: CurrentUserDep) -> ApiResponse[UserEnvelope]:
    return success(request, UserEnvelope(user=UserRead.model_validate(user)))
