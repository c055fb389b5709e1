"""Shared Google GenAI client."""

from __future__ import annotations

from typing import Optional

from google import genai

from contentmagic.core.errors import AIServiceError, ErrorCode
from contentmagic.server.core.config import GoogleAIConfig


class GoogleClientProvider:
    """Creates the ``genai.Client`` on first use.

    Lets the app start without an API key; the first AI call then fails with a
    503 instead of the whole server refusing to boot.
    """

    def __init__(self, config: GoogleAIConfig, client: Optional[genai.Client] = None) -> None:
        self.config = config
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self.config.api_key)

    def get(self) -> genai.Client:
        if self._client is None:
            if not self.config.api_key:
                raise AIServiceError(
                    "Google AI API key is not configured",
                    kind="configuration",
                    retryable=False,
                    code=ErrorCode.SERVICE_UNAVAILABLE,
                    status_code=503,
                )
            self._client = genai.Client(api_key=self.config.api_key)
        return self._client
