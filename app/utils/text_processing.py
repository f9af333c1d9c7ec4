# app/utils/text_processing.py
"""Text normalization for user-supplied appointment fields"""
import re
from typing import Optional

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_text(value: str) -> str:
    """Strip control characters and surrounding whitespace."""
    return _CONTROL_CHARS.sub("", value).strip()


def sanitize_optional(value: Optional[str]) -> Optional[str]:
    """Sanitize an optional field, mapping empty results to None."""
    if value is None:
        return None
    cleaned = sanitize_text(value)
    return cleaned or None
