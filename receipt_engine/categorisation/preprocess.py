"""
Preprocessing utilities for receipt categorisation.
Handles text normalization shared by the classifier and the amount extractor.
"""

import re
from typing import Optional

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize receipt text for matching.

    Lowercases, collapses runs of whitespace (including OCR line breaks)
    into single spaces and strips the ends.

    Args:
        text: Raw OCR text

    Returns:
        Normalized lowercase text
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def clamp_confidence(value: float) -> float:
    """Clamp a confidence score to [0, 1]."""
    return max(0.0, min(1.0, float(value)))
