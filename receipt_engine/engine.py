"""
Receipt Engine.
Combines classification and amount extraction into one result per receipt.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .categorisation.classifier import ReceiptClassifier
from .categorisation.pattern_compiler import compile_rule_table, get_compiled_profiles
from .extraction.amount_extractor import AmountExtractor
from .rules.loader import load_rule_table

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Combined result for one receipt."""
    category: Optional[str]
    category_confidence: float
    amount: Optional[float]
    amount_confidence: float
    raw_scores: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Render the result with the keys callers consume."""
        return {
            "category": self.category,
            "categoryConfidence": self.category_confidence,
            "amount": self.amount,
            "amountConfidence": self.amount_confidence,
            "rawScores": dict(self.raw_scores),
        }


class ReceiptEngine:
    """Classifies receipt text and extracts its total amount."""

    def __init__(self, rules_path: Optional[str] = None):
        """
        Initialize the engine.

        Args:
            rules_path: Optional path to a JSON rule table. The packaged table
                is used (and compiled once per process) when omitted.

        Raises:
            RuleTableError: If the rule table is malformed
        """
        if rules_path:
            self.profiles = compile_rule_table(load_rule_table(rules_path))
        else:
            self.profiles = get_compiled_profiles()

        self.classifier = ReceiptClassifier(self.profiles)
        self.amount_extractor = AmountExtractor(self.profiles)

    @property
    def category_names(self):
        """Category display names in rule-table order."""
        return [profile.name for profile in self.profiles]

    def process(self, text: Optional[str]) -> ProcessResult:
        """
        Process one receipt.

        Args:
            text: OCR text of the receipt (any casing/whitespace, may be empty)

        Returns:
            ProcessResult with category, amount and their confidences
        """
        classification = self.classifier.classify(text)
        best_amount = self.amount_extractor.extract(text)

        result = ProcessResult(
            category=classification.category,
            category_confidence=classification.confidence,
            amount=best_amount.amount if best_amount else None,
            amount_confidence=best_amount.confidence if best_amount else 0.0,
            raw_scores=classification.raw_scores,
        )

        logger.debug(
            "Processed receipt: category=%s (%.2f) amount=%s (%.2f)",
            result.category, result.category_confidence,
            result.amount, result.amount_confidence
        )
        return result
