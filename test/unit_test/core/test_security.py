"""
Unit tests for input sanitization and key masking.
"""

import pytest

from contentmagic.core.security import describe_service_keys, mask_api_key, sanitize_text


class TestSanitize:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("  hello  ", "hello"),
            ("<b>bold</b> move", "bold move"),
            ("a<script>alert('x')</script>b", "ab"),
            ("<SCRIPT src=x>evil()</SCRIPT>clean", "clean"),
            ("no markup", "no markup"),
        ],
    )
    def test_sanitize_text(self, raw, expected):
        assert sanitize_text(raw) == expected

    def test_non_strings_pass_through(self):
        assert sanitize_text(42) == 42
        assert sanitize_text(None) is None


class TestMaskApiKey:
    def test_mask_keeps_edges(self):
        assert mask_api_key("sk_test_abcdef1234") == "sk_t**********1234"

    @pytest.mark.parametrize("key", [None, "", "short"])
    def test_short_or_missing(self, key):
        assert mask_api_key(key) == "****"

    def test_describe_service_keys(self):
        described = describe_service_keys({"gemini": "AIzaSyExample0000", "stripe": None})
        assert described["stripe"] == "missing"
        assert described["gemini"].startswith("AIza")
        assert described["gemini"].endswith("0000")
        assert "Example" not in described["gemini"]
