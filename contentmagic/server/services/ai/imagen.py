"""
Imagen image adapter.

Generated images are returned inline as ``data:`` URLs, so nothing has to be
uploaded to object storage before the post is saved.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Optional

from google.genai import types

from contentmagic.core.errors import AIServiceError, ErrorCode, ValidationError
from contentmagic.core.models.domain import Platform
from contentmagic.core.models.domain.platforms import image_dimensions, parse_platform
from contentmagic.server.core.config import GoogleAIConfig

from .client import GoogleClientProvider
from .prompts import build_image_prompt

MAX_PROMPT_LENGTH = 1000

# Aspect ratios Imagen can render
SUPPORTED_ASPECT_RATIOS = {
    "1:1": 1.0,
    "3:4": 3 / 4,
    "4:3": 4 / 3,
    "9:16": 9 / 16,
    "16:9": 16 / 9,
}


def closest_aspect_ratio(width: int, height: int) -> str:
    target = width / height
    return min(SUPPORTED_ASPECT_RATIOS, key=lambda name: abs(SUPPORTED_ASPECT_RATIOS[name] - target))


@dataclass(frozen=True)
class ImageResult:
    image_url: str
    width: int
    height: int
    format: str
    size: int
    aspect_ratio: str


class ImagenService:
    """Image generation with Imagen."""

    def __init__(self, config: GoogleAIConfig, provider: Optional[GoogleClientProvider] = None) -> None:
        self.config = config
        self.provider = provider or GoogleClientProvider(config)

    def is_configured(self) -> bool:
        return self.provider.configured

    @staticmethod
    def validate_request(prompt: Optional[str], platform: Optional[str]) -> Platform:
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")
        if len(prompt) > MAX_PROMPT_LENGTH:
            raise ValidationError(f"Prompt is too long (max {MAX_PROMPT_LENGTH} characters)")
        parsed = parse_platform(platform)
        if parsed is None:
            raise ValidationError("Invalid platform specified")
        return parsed

    async def generate_image(
        self,
        prompt: str,
        platform: str,
        style: str = "photorealistic",
        aspect_ratio: Optional[str] = None,
    ) -> ImageResult:
        """
        Generate one image sized for ``platform``.

        Raises:
            ValidationError: When the prompt or platform is invalid
            AIServiceError: When Imagen returns no image
        """
        target = self.validate_request(prompt, platform)
        width, height = image_dimensions(target, aspect_ratio)
        ratio = closest_aspect_ratio(width, height)

        client = self.provider.get()
        response = await client.aio.models.generate_images(
            model=self.config.image_model,
            prompt=build_image_prompt(prompt, target, style),
            config=types.GenerateImagesConfig(
                number_of_images=1,
                aspect_ratio=ratio,
                output_mime_type="image/jpeg",
            ),
        )

        images = getattr(response, "generated_images", None) or []
        image = images[0].image if images else None
        if image is None or not image.image_bytes:
            raise AIServiceError(
                "Imagen returned no image",
                kind="empty",
                retryable=False,
                code=ErrorCode.AI_GENERATION_FAILED,
                status_code=500,
            )

        mime_type = image.mime_type or "image/jpeg"
        encoded = base64.b64encode(image.image_bytes).decode("ascii")
        return ImageResult(
            image_url=f"data:{mime_type};base64,{encoded}",
            width=width,
            height=height,
            format=mime_type.split("/")[-1],
            size=len(image.image_bytes),
            aspect_ratio=ratio,
        )
