"""Prompt builders for the Gemini, Imagen and Veo adapters."""

from __future__ import annotations

from typing import Optional

from contentmagic.core.models.domain import Platform
from contentmagic.core.models.domain.platforms import TEXT_SPECS

IMAGE_STYLES = {
    "photographic": "high-quality photograph, professional lighting, sharp focus",
    "photorealistic": "photorealistic image, natural lighting, sharp focus, true-to-life detail",
    "digital-art": "digital artwork, vibrant colors, modern design",
    "illustration": "detailed illustration, clean lines, artistic style",
    "anime": "anime style artwork, detailed character design, vibrant colors",
}

IMAGE_PLATFORM_CONTEXT = {
    Platform.instagram: "social media ready, eye-catching, trendy aesthetic",
    Platform.tiktok: "dynamic, energetic, youth-oriented, trending style",
    Platform.youtube: "thumbnail-worthy, clear focal point, engaging composition",
    Platform.linkedin: "professional, clean, business-appropriate",
    Platform.twitter: "attention-grabbing, clear message, social media optimized",
}

VIDEO_STYLES = {
    "realistic": "realistic video, natural lighting, high quality footage",
    "animated": "animated style, smooth motion, vibrant colors",
    "cinematic": "cinematic quality, professional cinematography, dramatic lighting",
    "documentary": "documentary style, authentic feel, natural presentation",
}

VIDEO_PLATFORM_CONTEXT = {
    Platform.instagram: "social media optimized, engaging visuals, trendy aesthetic",
    Platform.tiktok: "dynamic movement, energetic pacing, youth-oriented content",
    Platform.youtube: "engaging content, clear narrative, professional quality",
    Platform.linkedin: "professional presentation, business-appropriate, informative",
    Platform.twitter: "concise message, attention-grabbing, social media ready",
}

HASHTAG_COUNTS = {
    Platform.instagram: "5-10",
    Platform.tiktok: "3-5",
    Platform.youtube: "3-5",
    Platform.linkedin: "3-5",
    Platform.twitter: "1-3",
}


def build_caption_prompt(
    prompt: str,
    platform: Platform,
    content_type: str = "caption",
    max_length: Optional[int] = None,
    tone: Optional[str] = None,
    include_hashtags: bool = True,
) -> str:
    spec = TEXT_SPECS[platform]
    hashtags = spec.hashtags if include_hashtags else "Do not include hashtags"
    return f"""Create a {content_type} for {platform.value} based on this topic: "{prompt}"

Platform Requirements:
- Maximum length: {max_length or spec.max_length} characters
- Style: {spec.style}
- Tone: {tone or spec.tone}
- Hashtags: {hashtags}

Guidelines:
- Make it engaging and authentic
- Include relevant emojis where appropriate
- Ensure content is appropriate and safe
- Focus on value and engagement
- Adapt language to the platform's audience

Generate only the {content_type} content, no additional explanations."""


def build_hashtag_prompt(content: str, platform: Platform) -> str:
    return f"""Generate {HASHTAG_COUNTS[platform]} relevant hashtags for this {platform.value} content: "{content}"

Return only the hashtags separated by spaces, each starting with #."""


def build_safety_prompt(content: str) -> str:
    return (
        f'Analyze this content for safety and appropriateness: "{content}". '
        'Respond with only "SAFE" or "UNSAFE: [reason]"'
    )


def build_image_prompt(prompt: str, platform: Platform, style: str) -> str:
    # Unknown styles are passed to the model verbatim
    style_hint = IMAGE_STYLES.get(style, style)
    return (
        f"{prompt}, {style_hint}, {IMAGE_PLATFORM_CONTEXT[platform]}, "
        "high resolution, professional quality, suitable for social media"
    )


def build_video_prompt(prompt: str, platform: Platform, style: str) -> str:
    style_hint = VIDEO_STYLES.get(style, style)
    return (
        f"{prompt}, {style_hint}, {VIDEO_PLATFORM_CONTEXT[platform]}, "
        "smooth motion, high resolution, professional quality"
    )
