"""
Unit tests for the platform tables and subscription plans.
"""

import pytest

from contentmagic.core.models.domain import PAID_TIERS, TIER_PLANS, SubscriptionTier, plan_for
from contentmagic.core.models.domain.enums import Platform
from contentmagic.core.models.domain.platforms import (
    CAPTION_CHAR_LIMITS,
    IMAGE_SPECS,
    TEXT_SPECS,
    VIDEO_SPECS,
    caption_char_limit,
    image_dimensions,
    parse_platform,
    video_duration,
)


class TestPlatforms:
    def test_every_platform_has_specs(self):
        for table in (TEXT_SPECS, CAPTION_CHAR_LIMITS, IMAGE_SPECS, VIDEO_SPECS):
            assert set(table) == set(Platform)

    @pytest.mark.parametrize(
        "value, expected",
        [("instagram", Platform.instagram), ("TikTok", Platform.tiktok), ("myspace", None), ("", None), (None, None)],
    )
    def test_parse_platform(self, value, expected):
        assert parse_platform(value) is expected

    def test_caption_limits(self):
        assert caption_char_limit(Platform.twitter) == 280
        assert caption_char_limit(Platform.tiktok) == 4000

    def test_image_dimensions(self):
        assert image_dimensions(Platform.linkedin) == (1200, 627)
        assert image_dimensions(Platform.linkedin, "square") == (1200, 627)
        assert image_dimensions(Platform.instagram, "vertical") == (1080, 1920)
        assert image_dimensions(Platform.tiktok, "horizontal") == (1280, 720)

    @pytest.mark.parametrize(
        "platform, requested, expected",
        [
            (Platform.instagram, None, 30),
            (Platform.instagram, 0, 30),
            (Platform.instagram, 45, 45),
            (Platform.instagram, 120, 60),
            (Platform.linkedin, 900, 600),
        ],
    )
    def test_video_duration(self, platform, requested, expected):
        assert video_duration(platform, requested) == expected


class TestTiers:
    def test_quotas_and_prices(self):
        assert TIER_PLANS[SubscriptionTier.free].monthly_limit == 10
        assert TIER_PLANS[SubscriptionTier.pro].monthly_limit == 100
        assert TIER_PLANS[SubscriptionTier.creator].monthly_limit == 500
        assert TIER_PLANS[SubscriptionTier.creator].price_cents == 4999

    def test_paid_tiers(self):
        assert SubscriptionTier.free not in PAID_TIERS
        assert all(TIER_PLANS[tier].price_cents > 0 for tier in PAID_TIERS)

    def test_plan_for_unknown_tier_falls_back_to_free(self):
        assert plan_for("pro").monthly_limit == 100
        assert plan_for("enterprise").tier is SubscriptionTier.free

    def test_display_name(self):
        assert plan_for("creator").display_name == "Creator"
