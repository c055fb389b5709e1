"""
AI service adapters for Gemini (text), Imagen (images) and Veo (video).

Routes talk to :class:`AIService`, which adds timeouts, retries and error
classification on top of the individual adapters.
"""

from .gemini import GeminiService, TextResult, TokenUsage, parse_hashtags
from .imagen import ImageResult, ImagenService
from .service import AIService, classify_error
from .veo import VeoService, VideoResult

__all__ = [
    "AIService",
    "GeminiService",
    "ImageResult",
    "ImagenService",
    "TextResult",
    "TokenUsage",
    "VeoService",
    "VideoResult",
    "classify_error",
    "parse_hashtags",
]
