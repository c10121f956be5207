"""
Amount Extractor for receipt text.

Finds total-amount candidates using every category's amount-label patterns,
falls back to a bare-number scan when no label matches, and ranks candidates
by confidence, position and size.
"""

import logging
import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Dict, List, Optional, Sequence

from ..categorisation.pattern_compiler import CategoryProfile, get_compiled_profiles
from ..categorisation.preprocess import clamp_confidence, normalize_text
from ..config.engine_config import ENGINE_CONFIG

logger = logging.getLogger(__name__)

_NON_NUMERIC_RE = re.compile(r"[^\d.]")


@dataclass
class AmountCandidate:
    """A provisionally extracted amount."""
    amount: float
    category: Optional[str]  # Category whose label matched, None for fallback
    position: int  # Offset of the match in the normalized text
    confidence: float


def parse_amount(amount_str: str) -> Optional[float]:
    """
    Parse a captured amount, stripping thousands separators and stray characters.

    Returns:
        Parsed value, or None if nothing numeric remains
    """
    cleaned = _NON_NUMERIC_RE.sub("", amount_str.replace(",", ""))
    try:
        return float(cleaned)
    except ValueError:
        return None


def calculate_amount_confidence(
    amount: float,
    text: str,
    position: int,
    config: Optional[Dict] = None
) -> float:
    """
    Calculate confidence for an extracted amount.

    Args:
        amount: Parsed amount
        text: Normalized text the amount was found in
        position: Offset of the match
        config: Amount settings (defaults to ENGINE_CONFIG["amount"])

    Returns:
        Confidence in [0, 1]
    """
    config = config or ENGINE_CONFIG["amount"]
    confidence = config["base_confidence"]

    # Amounts near the end are more likely totals
    relative_position = position / len(text) if text else 0.0
    for rule in config["position_bonuses"]:
        if relative_position > rule["min_relative_position"]:
            confidence += rule["bonus"]
            break

    # Reasonable expense range
    for rule in config["range_bonuses"]:
        if rule["min"] <= amount <= rule["max"]:
            confidence += rule["bonus"]
            break

    # Total-indicating words around the match
    window = config["context_window"]
    context = text[max(0, position - window):min(len(text), position + window)]
    if any(word in context for word in config["total_words"]):
        confidence += config["context_bonus"]

    return clamp_confidence(min(confidence, 1.0))


class AmountExtractor:
    """Extracts the most likely total amount from receipt text."""

    def __init__(
        self,
        profiles: Optional[Sequence[CategoryProfile]] = None,
        config: Optional[Dict] = None
    ):
        """
        Initialize the extractor.

        Args:
            profiles: Compiled category profiles (defaults to the packaged table)
            config: Amount settings (defaults to ENGINE_CONFIG["amount"])
        """
        self.profiles = tuple(profiles) if profiles is not None else get_compiled_profiles()
        self.config = config or ENGINE_CONFIG["amount"]
        self.fallback_regex = re.compile(self.config["fallback_pattern"])

    def _label_candidates(self, text: str) -> List[AmountCandidate]:
        """Primary pass: every category's amount-label patterns."""
        max_amount = self.config["max_amount"]
        candidates = []

        for profile in self.profiles:
            for pattern in profile.amount_patterns:
                for match in pattern.finditer(text):
                    amount = parse_amount(match.group(1))
                    if amount is None:
                        logger.debug("Dropped unparsable amount %r", match.group(1))
                        continue
                    if not 0 < amount < max_amount:
                        continue
                    candidates.append(AmountCandidate(
                        amount=amount,
                        category=profile.name,
                        position=match.start(),
                        confidence=calculate_amount_confidence(
                            amount, text, match.start(), self.config
                        ),
                    ))

        return candidates

    def _fallback_candidates(self, text: str) -> List[AmountCandidate]:
        """Fallback pass: bounded-length bare numbers anywhere in the text."""
        min_amount = self.config["fallback_min_amount"]
        max_amount = self.config["max_amount"]
        candidates = []

        for match in self.fallback_regex.finditer(text):
            amount = parse_amount(match.group(1))
            if amount is None or not min_amount <= amount < max_amount:
                continue
            candidates.append(AmountCandidate(
                amount=amount,
                category=None,
                position=match.start(),
                confidence=self.config["fallback_confidence"],
            ))

        return candidates

    def _compare(self, a: AmountCandidate, b: AmountCandidate) -> int:
        """
        Ranking order: confidence (only beyond the tie tolerance), then later
        position, then larger amount.

        The later-position rule assumes totals follow subtotals in the text.
        """
        if abs(a.confidence - b.confidence) > self.config["tie_tolerance"]:
            return -1 if a.confidence > b.confidence else 1
        if a.position != b.position:
            return -1 if a.position > b.position else 1
        if a.amount != b.amount:
            return -1 if a.amount > b.amount else 1
        return 0

    def extract_candidates(self, text: Optional[str]) -> List[AmountCandidate]:
        """
        Generate and rank all amount candidates.

        Args:
            text: Raw receipt text

        Returns:
            Candidates, best first
        """
        clean_text = normalize_text(text)
        candidates = self._label_candidates(clean_text)

        if not candidates:
            candidates = self._fallback_candidates(clean_text)
            logger.debug("No labelled amounts, fallback found %d candidates", len(candidates))
        else:
            logger.debug("Found %d labelled amount candidates", len(candidates))

        return sorted(candidates, key=cmp_to_key(self._compare))

    def extract(self, text: Optional[str]) -> Optional[AmountCandidate]:
        """
        Extract the best amount candidate.

        Args:
            text: Raw receipt text

        Returns:
            Top-ranked AmountCandidate, or None if there are no candidates
        """
        candidates = self.extract_candidates(text)
        return candidates[0] if candidates else None
