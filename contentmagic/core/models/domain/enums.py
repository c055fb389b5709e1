"""Domain enums for content generation, billing and analytics."""

from __future__ import annotations

from enum import Enum


class Platform(str, Enum):
    """Social-media platforms content can be generated for."""

    instagram = "instagram"
    tiktok = "tiktok"
    youtube = "youtube"
    linkedin = "linkedin"
    twitter = "twitter"


class ContentType(str, Enum):
    """Kind of generated content stored in a post."""

    caption = "caption"
    image = "image"
    video = "video"


class SubscriptionTier(str, Enum):
    """
    Subscription tier of a user.

    The tier decides the monthly generation quota, see ``tiers.TIER_PLANS``.
    """

    free = "free"
    pro = "pro"
    creator = "creator"


class SubscriptionStatus(str, Enum):
    """Subset of Stripe subscription statuses the backend reacts to."""

    active = "active"
    trialing = "trialing"
    past_due = "past_due"
    incomplete = "incomplete"
    canceled = "canceled"
    unpaid = "unpaid"


class MetricType(str, Enum):
    """Engagement metrics tracked per post."""

    views = "views"
    likes = "likes"
    shares = "shares"
    comments = "comments"


class SortField(str, Enum):
    """Whitelisted sort keys of the content library, keyed by their API name."""

    createdAt = "createdAt"
    platform = "platform"
    contentType = "contentType"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"
