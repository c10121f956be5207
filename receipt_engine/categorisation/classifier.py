"""
Receipt Classifier.
Scores receipt text against every category profile and selects the best one.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from ..config.engine_config import ENGINE_CONFIG
from .pattern_compiler import CategoryProfile, get_compiled_profiles
from .preprocess import clamp_confidence, normalize_text

logger = logging.getLogger(__name__)


@dataclass
class ClassificationResult:
    """Result of receipt classification."""
    category: Optional[str]  # Display name, None below the confidence floor
    confidence: float
    raw_scores: Dict[str, float] = field(default_factory=dict)


class ReceiptClassifier:
    """Classifies receipt text into spending categories."""

    def __init__(
        self,
        profiles: Optional[Sequence[CategoryProfile]] = None,
        config: Optional[Dict] = None
    ):
        """
        Initialize the classifier.

        Args:
            profiles: Compiled category profiles (defaults to the packaged table)
            config: Classifier settings (defaults to ENGINE_CONFIG["classifier"])
        """
        self.profiles = tuple(profiles) if profiles is not None else get_compiled_profiles()
        self.config = config or ENGINE_CONFIG["classifier"]
        self.confidence_threshold = self.config["confidence_threshold"]

    def score_category(self, profile: CategoryProfile, text: str) -> float:
        """
        Score normalized text against one category.

        The raw score is divided by the number of signal types that fired,
        not by a fixed denominator. One strong signal can therefore outscore
        several weaker corroborating ones.

        Args:
            profile: Compiled category profile
            text: Normalized text

        Returns:
            Normalized score (0 when no signal fired)
        """
        score = 0.0
        factors = 0

        # Business name matching
        business_matches = len(profile.business_regex.findall(text))
        if business_matches:
            score += business_matches * self.config["business_weight"]
            factors += 1

        # Keyword matching
        keyword_matches = len(profile.keyword_regex.findall(text))
        if keyword_matches:
            score += keyword_matches * self.config["keyword_weight"]
            factors += 1

        # Amount label matching counts distinct patterns, not matches
        label_matches = sum(1 for pattern in profile.amount_patterns if pattern.search(text))
        if label_matches:
            score += label_matches * self.config["amount_label_weight"]
            factors += 1

        # Business names near the top of the receipt
        top_portion = text[:self.config["position_window"]]
        top_matches = len(profile.business_regex.findall(top_portion))
        if top_matches:
            score += top_matches * self.config["position_weight"]
            factors += 1

        return score / factors if factors > 0 else 0.0

    def classify(self, text: Optional[str]) -> ClassificationResult:
        """
        Classify receipt text.

        Args:
            text: Raw receipt text, any casing or whitespace

        Returns:
            ClassificationResult with category, confidence and per-category scores
        """
        clean_text = normalize_text(text)
        scores: Dict[str, float] = {}

        best_category = None
        best_score = 0.0

        for profile in self.profiles:
            score = self.score_category(profile, clean_text)
            scores[profile.name] = score
            # Strictly greater keeps the first-seen category on ties
            if score > best_score:
                best_score = score
                best_category = profile.name

        confidence = clamp_confidence(best_score / self.config["score_scale"])
        category = best_category if confidence >= self.confidence_threshold else None

        logger.debug(
            "Classified receipt: best=%s score=%.2f confidence=%.2f reported=%s",
            best_category, best_score, confidence, category
        )

        return ClassificationResult(
            category=category,
            confidence=confidence,
            raw_scores=scores,
        )
