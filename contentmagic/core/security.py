"""Input sanitization and API-key helpers."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_HTML_TAG = re.compile(r"<[^>]*>")


def sanitize_text(value: Any) -> Any:
    """Strip script blocks and HTML tags from a string and trim it.

    Non-string values are returned unchanged so the helper can be used as a
    pydantic ``BeforeValidator``.
    """
    if not isinstance(value, str):
        return value
    return _HTML_TAG.sub("", _SCRIPT_BLOCK.sub("", value)).strip()


def mask_api_key(api_key: Optional[str]) -> str:
    """Mask a key for logs, keeping the first and last four characters."""
    if not api_key or len(api_key) < 8:
        return "****"
    return f"{api_key[:4]}{'*' * (len(api_key) - 8)}{api_key[-4:]}"


def describe_service_keys(keys: Mapping[str, Optional[str]]) -> dict[str, str]:
    """Map each external service to its masked key, or ``missing``."""
    return {name: mask_api_key(key) if key else "missing" for name, key in keys.items()}
