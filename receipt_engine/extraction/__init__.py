"""
Amount extraction for receipt text.
"""

from .amount_extractor import (
    AmountCandidate,
    AmountExtractor,
    calculate_amount_confidence,
    parse_amount,
)

__all__ = [
    "AmountCandidate",
    "AmountExtractor",
    "calculate_amount_confidence",
    "parse_amount",
]
