"""
AI Service.

Single entry point for the generation routes. Every adapter call runs under a
timeout and is retried with exponential backoff and jitter; provider failures
are normalised into :class:`AIServiceError`.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from contentmagic.core.errors import AIServiceError, AppError
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.domain import Platform
from contentmagic.core.monitoring import log_ai_call
from contentmagic.server.core.config import AIRetryConfig, GoogleAIConfig

from .client import GoogleClientProvider
from .gemini import GeminiService, TextResult
from .imagen import ImageResult, ImagenService
from .prompts import build_safety_prompt
from .veo import VeoService, VideoResult

logger = get_logger(__name__)

T = TypeVar("T")


def _status_of(error: BaseException) -> Optional[int]:
    for attr in ("code", "status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_error(error: BaseException, service: str) -> AppError:
    """
    Map an adapter failure onto an application error.

    Application errors (including validation failures) pass through unchanged.
    Client errors other than rate limits and quota/billing errors are marked
    as not retryable.
    """
    if isinstance(error, AppError):
        return error

    message = str(error)
    lowered = message.lower()
    status = _status_of(error)
    details: Dict[str, Any] = {"service": service}
    if status is not None:
        details["status"] = status

    if isinstance(error, TimeoutError) or "timeout" in lowered:
        return AIServiceError(f"{service} service timeout", kind="timeout", details=details)
    if status == 429 or "rate limit" in lowered:
        return AIServiceError(f"{service} rate limit exceeded", kind="rate_limit", details=details)
    if "quota" in lowered or "billing" in lowered:
        return AIServiceError(f"{service} quota exceeded", kind="quota", retryable=False, details=details)
    if (status is not None and status >= 500) or "unavailable" in lowered:
        return AIServiceError(f"{service} service unavailable", kind="unavailable", details=details)
    if status is not None and 400 <= status < 500:
        return AIServiceError(f"{service} client error: {message}", kind="client", retryable=False, details=details)
    return AIServiceError(f"{service} service error: {message or 'Unknown error'}", details=details)


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, AIServiceError) and error.retryable


class AIService:
    """Facade over the Gemini, Imagen and Veo adapters."""

    def __init__(
        self,
        google: GoogleAIConfig,
        retry: Optional[AIRetryConfig] = None,
        gemini: Optional[GeminiService] = None,
        imagen: Optional[ImagenService] = None,
        veo: Optional[VeoService] = None,
    ) -> None:
        self.google = google
        self.retry = retry or AIRetryConfig()
        provider = GoogleClientProvider(google)
        self.gemini = gemini or GeminiService(google, provider)
        self.imagen = imagen or ImagenService(google, provider)
        self.veo = veo or VeoService(google, provider)

    async def _run(
        self,
        service: str,
        operation: str,
        call: Callable[[], Awaitable[T]],
        timeout: Optional[float] = None,
    ) -> T:
        limit = timeout or self.retry.timeout
        started = time.perf_counter()

        def log_retry(state: RetryCallState) -> None:
            error = state.outcome.exception() if state.outcome else None
            log_ai_call(service, operation, "retry", attempt=state.attempt_number, error=str(error))

        log_ai_call(service, operation, "request")
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry.max_attempts),
                wait=wait_exponential_jitter(
                    initial=self.retry.base_delay,
                    max=self.retry.max_delay,
                    exp_base=self.retry.multiplier,
                    jitter=self.retry.base_delay * 0.1,
                ),
                retry=retry_if_exception(_is_retryable),
                before_sleep=log_retry,
                reraise=True,
            ):
                with attempt:
                    try:
                        result = await asyncio.wait_for(call(), timeout=limit)
                    except Exception as e:
                        classified = classify_error(e, service)
                        if classified is e:
                            raise
                        raise classified from e
        except AppError as e:
            log_ai_call(
                service,
                operation,
                "error",
                duration_ms=(time.perf_counter() - started) * 1000,
                error=e.message,
            )
            raise

        log_ai_call(service, operation, "success", duration_ms=(time.perf_counter() - started) * 1000)
        return result

    async def generate_text(
        self,
        prompt: str,
        platform: Platform,
        tone: Optional[str] = None,
        include_hashtags: bool = True,
        content_type: str = "caption",
    ) -> TextResult:
        return await self._run(
            "gemini",
            "generate_content",
            lambda: self.gemini.generate_content(
                prompt, platform, content_type=content_type, tone=tone, include_hashtags=include_hashtags
            ),
        )

    async def generate_hashtags(self, content: str, platform: Platform) -> List[str]:
        return await self._run(
            "gemini-hashtags", "generate_hashtags", lambda: self.gemini.generate_hashtags(content, platform)
        )

    async def generate_image(
        self, prompt: str, platform: str, style: str = "photorealistic", aspect_ratio: Optional[str] = None
    ) -> ImageResult:
        return await self._run(
            "imagen", "generate_image", lambda: self.imagen.generate_image(prompt, platform, style, aspect_ratio)
        )

    async def generate_video(
        self, prompt: str, platform: str, duration: Optional[int] = None, style: str = "cinematic"
    ) -> VideoResult:
        # Polling has its own deadline; leave room for one more poll
        return await self._run(
            "veo",
            "generate_video",
            lambda: self.veo.generate_video(prompt, platform, duration, style),
            timeout=self.google.video_timeout + self.google.video_poll_interval,
        )

    async def validate_content(self, content: str) -> Dict[str, Any]:
        """
        Ask Gemini whether ``content`` is safe to publish.

        Returns ``{"safe": bool, "reason": str | None}``. Unclear answers and
        failed checks count as safe so a flaky check never blocks a post.
        """
        try:
            result = await self.gemini.generate_raw(build_safety_prompt(content))
        except Exception as e:
            logger.warning(f"Content validation failed, treating as safe: {e}")
            return {"safe": True, "reason": None}

        verdict = result.content.strip()
        if verdict.upper().startswith("UNSAFE:"):
            return {"safe": False, "reason": verdict[len("UNSAFE:"):].strip()}
        return {"safe": True, "reason": None}

    def get_service_status(self) -> Dict[str, Dict[str, bool]]:
        return {
            name: {"configured": adapter.is_configured(), "available": adapter.is_configured()}
            for name, adapter in (("gemini", self.gemini), ("imagen", self.imagen), ("veo", self.veo))
        }
