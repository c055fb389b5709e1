"""
Main Application Entry Point.

This module builds the FastAPI application: shared services on ``app.state``,
the middleware stack (CORS, security headers, request context, signed session
cookie), the exception handlers and every API router.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from contentmagic.core.database import close_db, init_db
from contentmagic.core.logging_config import get_logger, setup_logging
from contentmagic.core.monitoring import initialize_logfire
from contentmagic.core.security import describe_service_keys

from .api.v1 import analytics, auth, content, health, schedule, subscription
from .core import constant
from .core.config import Settings, settings as default_settings
from .core.rate_limit import RateLimiters
from .exception_handlers import setup_exception_handlers
from .middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from .services.ai import AIService
from .services.billing import StripeGateway

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Configures logging, prepares the database and reports which external
    service keys are configured. The engine is disposed on shutdown.
    """
    app_settings: Settings = app.state.settings
    setup_logging(log_level=app_settings.log_level)

    # Startup
    logger.info(f"Starting up {constant.PROJECT_NAME} Server ({app_settings.environment})...")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    initialize_logfire(app)

    keys = describe_service_keys(
        {
            "google": app_settings.google_api_key,
            "stripe": app_settings.stripe_secret_key,
            "stripe_webhook": app_settings.stripe_webhook_secret,
        }
    )
    for service, status in keys.items():
        if status == "missing":
            logger.warning(f"API key for {service} is not configured")
        else:
            logger.info(f"API key for {service}: {status}")

    yield

    # Shutdown
    logger.info(f"Shutting down {constant.PROJECT_NAME} Server...")
    await close_db()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the ContentMagic application.

    Args:
        settings: Settings to use; defaults to the environment-bound settings

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings

    app = FastAPI(
        title=constant.PROJECT_NAME,
        description="""
        ContentMagic API

        AI generated captions, images and videos for social media platforms,
        with a content library, scheduling, simulated analytics and Stripe
        subscriptions that raise the monthly generation quota.
        """,
        version=constant.VERSION,
        openapi_url=f"{constant.API_PREFIX}/openapi.json",
        docs_url=f"{constant.API_PREFIX}/docs",
        redoc_url=f"{constant.API_PREFIX}/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.rate_limiters = RateLimiters.from_config(settings.rate_limit)
    app.state.billing = StripeGateway(settings.stripe)
    app.state.ai_service = AIService(settings.google, settings.ai_retry)

    # Added innermost first: the session cookie is decoded closest to the routes
    session_config = settings.session
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_config.secret,
        session_cookie=session_config.cookie_name,
        max_age=session_config.max_age,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    setup_exception_handlers(app)

    prefix = constant.API_PREFIX
    app.include_router(health.router, prefix=f"{prefix}/health", tags=["health"])
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(content.router, prefix=f"{prefix}/content", tags=["content"])
    app.include_router(schedule.router, prefix=f"{prefix}/schedule", tags=["schedule"])
    app.include_router(subscription.router, prefix=f"{prefix}/subscription", tags=["subscription"])
    app.include_router(analytics.router, prefix=f"{prefix}/analytics", tags=["analytics"])

    return app


app = create_app()
