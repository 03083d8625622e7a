"""
Text utilities for handling tags, option names and titles with accents.

Used for case- and accent-insensitive matching of catalog strings.
"""

import unicodedata
from typing import Optional


def normalize_tag(value: Optional[str]) -> Optional[str]:
    """
    Normalize a catalog string for comparison.

    Handles accents, case and surrounding whitespace:
    - "Beige" → "BEIGE"
    - "  talla " → "TALLA"
    - "Marrón" → "MARRON"

    Args:
        value: Tag, option name or title (may have accents, mixed case)

    Returns:
        Normalized uppercase ASCII string, or None if input is empty
    """
    if not value:
        return None

    value = value.strip()

    if not value:
        return None

    # NFD decomposition separates base chars from accents
    normalized = unicodedata.normalize('NFD', value)

    # Drop accent marks (Unicode category 'Mn')
    ascii_value = ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )

    return ascii_value.upper()


def truncate(text: Optional[str], max_length: int = 60) -> str:
    """Shorten text for log lines, keeping it readable."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - 1] + "…"
