"""
Gemini text adapter.

Turns caption and hashtag requests into platform-aware prompts and calls the
Gemini text model through ``client.aio``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from google.genai import types

from contentmagic.core.errors import AIServiceError, ErrorCode
from contentmagic.core.models.domain import Platform
from contentmagic.server.core.config import GoogleAIConfig

from .client import GoogleClientProvider
from .prompts import build_caption_prompt, build_hashtag_prompt

SAFETY_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)

_HASHTAG = re.compile(r"#[\w]+", re.UNICODE)


def generation_config() -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=0.7,
        top_k=40,
        top_p=0.95,
        max_output_tokens=1024,
        safety_settings=[
            types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE)
            for category in SAFETY_CATEGORIES
        ],
    )


def parse_hashtags(text: str) -> List[str]:
    """Extract ``#tags`` from a model reply, keeping first-seen order without duplicates."""
    seen = set()
    tags = []
    for tag in _HASHTAG.findall(text or ""):
        key = tag.lower()
        if key not in seen:
            seen.add(key)
            tags.append(tag)
    return tags


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class TextResult:
    content: str
    usage: Optional[TokenUsage] = None


class GeminiService:
    """Caption and hashtag generation with Gemini."""

    def __init__(self, config: GoogleAIConfig, provider: Optional[GoogleClientProvider] = None) -> None:
        self.config = config
        self.provider = provider or GoogleClientProvider(config)

    def is_configured(self) -> bool:
        return self.provider.configured

    async def _generate(self, prompt: str) -> TextResult:
        client = self.provider.get()
        response = await client.aio.models.generate_content(
            model=self.config.text_model,
            contents=prompt,
            config=generation_config(),
        )
        text = (response.text or "").strip() if response is not None else ""
        if not text:
            raise AIServiceError(
                "Empty response from Gemini API",
                kind="empty",
                retryable=False,
                code=ErrorCode.AI_GENERATION_FAILED,
                status_code=500,
            )

        usage = None
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = TokenUsage(
                prompt_tokens=metadata.prompt_token_count or 0,
                completion_tokens=metadata.candidates_token_count or 0,
                total_tokens=metadata.total_token_count or 0,
            )
        return TextResult(content=text, usage=usage)

    async def generate_content(
        self,
        prompt: str,
        platform: Platform,
        content_type: str = "caption",
        max_length: Optional[int] = None,
        tone: Optional[str] = None,
        include_hashtags: bool = True,
    ) -> TextResult:
        """
        Generate platform-specific social media text.

        Raises:
            AIServiceError: When the model returns nothing usable
        """
        return await self._generate(
            build_caption_prompt(prompt, platform, content_type, max_length, tone, include_hashtags)
        )

    async def generate_raw(self, prompt: str) -> TextResult:
        """Send ``prompt`` unchanged, without platform framing."""
        return await self._generate(prompt)

    async def generate_hashtags(self, content: str, platform: Platform) -> List[str]:
        result = await self._generate(build_hashtag_prompt(content, platform))
        return parse_hashtags(result.content)
