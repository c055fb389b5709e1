"""
Veo video adapter.

Video generation is a long-running operation: the adapter starts it, then
polls ``client.aio.operations`` until the operation is done or the configured
wait runs out.
"""

from __future__ import annotations

import asyncio
import base64
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from google.genai import types

from contentmagic.core.errors import AIServiceError, ErrorCode, ValidationError
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.domain.platforms import VIDEO_SPECS, parse_platform, video_duration
from contentmagic.server.core.config import GoogleAIConfig

from .client import GoogleClientProvider
from .prompts import build_video_prompt

logger = get_logger(__name__)

MAX_PROMPT_LENGTH = 500
MIN_DURATION = 1
MAX_DURATION = 300

# Veo renders clips of 5 to 8 seconds
CLIP_MIN_SECONDS = 5
CLIP_MAX_SECONDS = 8

DEFAULT_FPS = 30


@dataclass(frozen=True)
class VideoResult:
    video_url: str
    duration: int
    width: int
    height: int
    fps: int
    format: str
    aspect_ratio: str
    operation_name: Optional[str] = None


class VeoService:
    """Video generation with Veo."""

    def __init__(self, config: GoogleAIConfig, provider: Optional[GoogleClientProvider] = None) -> None:
        self.config = config
        self.provider = provider or GoogleClientProvider(config)

    def is_configured(self) -> bool:
        return self.provider.configured

    @staticmethod
    def validate_request(prompt: Optional[str], platform: Optional[str], duration: Optional[int] = None):
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")
        if len(prompt) > MAX_PROMPT_LENGTH:
            raise ValidationError(f"Prompt is too long (max {MAX_PROMPT_LENGTH} characters)")
        parsed = parse_platform(platform)
        if parsed is None:
            raise ValidationError("Invalid platform specified")
        if duration is not None and not MIN_DURATION <= duration <= MAX_DURATION:
            raise ValidationError(f"Duration must be between {MIN_DURATION} and {MAX_DURATION} seconds")
        return parsed

    async def generate_video(
        self,
        prompt: str,
        platform: str,
        duration: Optional[int] = None,
        style: str = "cinematic",
    ) -> VideoResult:
        """
        Generate a video for ``platform`` and wait for it to finish.

        Raises:
            ValidationError: When the prompt, platform or duration is invalid
            AIServiceError: When the operation fails, times out or yields no video
        """
        target = self.validate_request(prompt, platform, duration)
        spec = VIDEO_SPECS[target]
        seconds = video_duration(target, duration)

        client = self.provider.get()
        operation = await client.aio.models.generate_videos(
            model=self.config.video_model,
            prompt=build_video_prompt(prompt, target, style),
            config=types.GenerateVideosConfig(
                number_of_videos=1,
                aspect_ratio=spec.aspect_ratio,
                duration_seconds=max(CLIP_MIN_SECONDS, min(seconds, CLIP_MAX_SECONDS)),
            ),
        )
        operation = await self._wait(client, operation)

        if operation.error:
            raise AIServiceError(f"Veo generation failed: {operation.error}", kind="generation", retryable=False)
        videos = operation.response.generated_videos if operation.response else None
        video = videos[0].video if videos else None
        if video is None or not (video.uri or video.video_bytes):
            raise AIServiceError(
                "Veo returned no video",
                kind="empty",
                retryable=False,
                code=ErrorCode.AI_GENERATION_FAILED,
                status_code=500,
            )

        if video.uri:
            url = video.uri
        else:
            url = f"data:{video.mime_type or 'video/mp4'};base64,{base64.b64encode(video.video_bytes).decode('ascii')}"
        return VideoResult(
            video_url=url,
            duration=seconds,
            width=spec.width,
            height=spec.height,
            fps=DEFAULT_FPS,
            format="mp4",
            aspect_ratio=spec.aspect_ratio,
            operation_name=operation.name,
        )

    async def _wait(self, client: Any, operation: Any) -> Any:
        deadline = time.monotonic() + self.config.video_timeout
        while not operation.done:
            if time.monotonic() >= deadline:
                raise AIServiceError(
                    f"Veo generation did not finish within {self.config.video_timeout:.0f}s",
                    kind="timeout",
                    retryable=False,
                )
            await asyncio.sleep(self.config.video_poll_interval)
            operation = await client.aio.operations.get(operation)
            logger.debug(f"Veo operation {operation.name} done={operation.done}")
        return operation

    async def get_generation_status(self, operation_name: str) -> Dict[str, Any]:
        """Report the state of a video operation started earlier."""
        client = self.provider.get()
        operation = await client.aio.operations.get(types.GenerateVideosOperation(name=operation_name))
        if not operation.done:
            return {"status": "processing", "progress": None}
        if operation.error:
            return {"status": "failed", "progress": 100, "error": str(operation.error)}
        return {"status": "completed", "progress": 100}
