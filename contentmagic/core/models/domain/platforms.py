"""Per-platform content requirements.

Static tables describing what each platform accepts: caption lengths and
voice, image dimensions and formats, video length, ratio and formats.
Generation routes use them to fill request defaults and to build
platform-specific metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Platform


@dataclass(frozen=True)
class TextSpec:
    max_length: int
    style: str
    tone: str
    hashtags: str


@dataclass(frozen=True)
class ImageSpec:
    width: int
    height: int
    formats: tuple[str, ...]


@dataclass(frozen=True)
class VideoSpec:
    max_duration: int
    aspect_ratio: str
    width: int
    height: int
    formats: tuple[str, ...]


# Prompt guidance for caption generation
TEXT_SPECS: dict[Platform, TextSpec] = {
    Platform.instagram: TextSpec(2200, "engaging and visual-focused", "casual and authentic", "Use 5-10 relevant hashtags"),
    Platform.tiktok: TextSpec(150, "trendy and energetic", "fun and youthful", "Use 3-5 trending hashtags"),
    Platform.youtube: TextSpec(5000, "informative and engaging", "conversational and helpful", "Use 3-5 relevant hashtags"),
    Platform.linkedin: TextSpec(
        3000, "professional and insightful", "professional and thought-provoking", "Use 3-5 professional hashtags"
    ),
    Platform.twitter: TextSpec(280, "concise and impactful", "witty and engaging", "Use 1-3 relevant hashtags"),
}

# Hard caption limits of each platform
CAPTION_CHAR_LIMITS: dict[Platform, int] = {
    Platform.instagram: 2200,
    Platform.tiktok: 4000,
    Platform.youtube: 5000,
    Platform.linkedin: 3000,
    Platform.twitter: 280,
}

IMAGE_SPECS: dict[Platform, ImageSpec] = {
    Platform.instagram: ImageSpec(1080, 1080, ("JPG", "PNG")),
    Platform.tiktok: ImageSpec(1080, 1920, ("JPG", "PNG")),
    Platform.youtube: ImageSpec(1280, 720, ("JPG", "PNG", "GIF")),
    Platform.linkedin: ImageSpec(1200, 627, ("JPG", "PNG")),
    Platform.twitter: ImageSpec(1200, 675, ("JPG", "PNG", "GIF")),
}

# Explicit aspect ratios override the platform default
ASPECT_RATIO_DIMENSIONS: dict[str, tuple[int, int]] = {
    "vertical": (1080, 1920),
    "horizontal": (1280, 720),
}

VIDEO_SPECS: dict[Platform, VideoSpec] = {
    Platform.instagram: VideoSpec(60, "9:16", 1080, 1920, ("MP4", "MOV")),
    Platform.tiktok: VideoSpec(180, "9:16", 1080, 1920, ("MP4", "MOV")),
    Platform.youtube: VideoSpec(60, "9:16", 1080, 1920, ("MP4", "MOV", "AVI")),
    Platform.linkedin: VideoSpec(600, "16:9", 1920, 1080, ("MP4", "MOV")),
    Platform.twitter: VideoSpec(140, "16:9", 1280, 720, ("MP4", "MOV")),
}

DEFAULT_VIDEO_DURATION = 30


def parse_platform(value: Optional[str]) -> Optional[Platform]:
    """Return the platform for ``value`` or None when it is not supported."""
    if not value:
        return None
    try:
        return Platform(value.lower())
    except ValueError:
        return None


def caption_char_limit(platform: Platform) -> int:
    return CAPTION_CHAR_LIMITS[platform]


def image_dimensions(platform: Platform, aspect_ratio: Optional[str] = None) -> tuple[int, int]:
    """Width and height for an image, honouring an explicit aspect ratio."""
    if aspect_ratio and aspect_ratio in ASPECT_RATIO_DIMENSIONS:
        return ASPECT_RATIO_DIMENSIONS[aspect_ratio]
    spec = IMAGE_SPECS[platform]
    return spec.width, spec.height


def video_duration(platform: Platform, requested: Optional[int]) -> int:
    """Clamp the requested duration to the platform maximum (default 30 s)."""
    return min(requested or DEFAULT_VIDEO_DURATION, VIDEO_SPECS[platform].max_duration)
