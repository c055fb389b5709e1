"""
Monitoring and Tracing Configuration Module.

Integrates Pydantic Logfire with the ContentMagic backend. When Logfire is
enabled and a token is configured, FastAPI, SQLAlchemy and HTTPX are
instrumented and the helpers below emit structured events for:
- API requests and latency
- authentication events (register, login, logout, failed login)
- AI provider calls, retries and failures
- usage accounting (increments, limit hits)

Every helper also writes to the standard logger, so events are visible
with Logfire switched off.
"""

import logging
import os
from typing import Any, Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "contentmagic-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

_logfire_ready = False


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Initialize Logfire for monitoring and tracing.

    Args:
        app: FastAPI application to instrument (optional).

    Returns:
        True when Logfire was configured, False when it is disabled or failed.
    """
    global _logfire_ready

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set. Monitoring will not work.")
        return False

    try:
        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False

    for name, instrument in (
        ("SQLAlchemy", logfire.instrument_sqlalchemy),
        ("HTTPX", logfire.instrument_httpx),
    ):
        try:
            instrument()
            logger.info(f"Logfire: {name} instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument {name}: {e}")

    if app is not None:
        try:
            logfire.instrument_fastapi(app=app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    _logfire_ready = True
    logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
    return True


def _emit(level: str, message: str, **attributes: Any) -> None:
    if not _logfire_ready:
        return
    try:
        getattr(logfire, "warn" if level == "warning" else level)(message, **attributes)
    except Exception:
        logger.debug(f"Could not log to Logfire: {message}")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    logger.info(f"{method} {path} {status_code} in {duration_ms:.1f}ms")
    _emit("info", "API request completed", method=method, path=path, status_code=status_code, duration_ms=duration_ms)


def log_auth_event(event: str, user_id: Optional[int] = None, email: Optional[str] = None, **extra: Any) -> None:
    """
    Log an authentication event.

    Args:
        event: One of register, login, logout, login_failed
        user_id: Authenticated user, when known
        email: Email used in the attempt, when known
    """
    level = "warning" if event == "login_failed" else "info"
    getattr(logger, level)(f"Auth {event}: user_id={user_id} email={email}")
    _emit(level, f"Auth {event}", user_id=user_id, email=email, **extra)


def log_ai_call(
    service: str,
    operation: str,
    status: str,
    duration_ms: Optional[float] = None,
    attempt: Optional[int] = None,
    error: Optional[str] = None,
) -> None:
    """
    Log a call to the AI provider.

    Args:
        service: Adapter name (gemini, imagen, veo)
        operation: Operation name (generate_content, generate_image, ...)
        status: request, success, retry or error
        duration_ms: Wall time of the call
        attempt: Attempt number for retries
        error: Error message for retries and failures
    """
    message = f"AI {service}.{operation} {status}"
    if attempt is not None:
        message += f" (attempt {attempt})"
    if error:
        message += f": {error}"

    level = {"error": "error", "retry": "warning"}.get(status, "info")
    getattr(logger, level)(message)
    _emit(level, message, service=service, operation=operation, status=status, duration_ms=duration_ms, attempt=attempt)


def log_usage_event(event: str, user_id: int, usage: Optional[int] = None, limit: Optional[int] = None) -> None:
    """
    Log a usage accounting event.

    Args:
        event: increment, reset or limit_exceeded
        user_id: User whose quota changed
        usage: Usage count after the event
        limit: Monthly limit of the user's tier
    """
    level = "warning" if event == "limit_exceeded" else "info"
    getattr(logger, level)(f"Usage {event}: user_id={user_id} usage={usage} limit={limit}")
    _emit(level, f"Usage {event}", user_id=user_id, usage=usage, limit=limit)


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    _emit("error", f"{error_type}: {error_message}", **(context or {}))
