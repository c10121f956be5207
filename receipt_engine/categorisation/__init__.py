"""
Categorisation Module for the Receipt Categorisation Engine.

Orchestrates receipt classification through:
- Preprocessing (normalization)
- Pattern compilation (whole-word alternations per category)
- Weighted multi-signal scoring
"""

from .classifier import ReceiptClassifier, ClassificationResult
from .pattern_compiler import (
    CategoryProfile,
    build_alternation,
    compile_category,
    compile_rule_table,
    get_compiled_profiles,
)
from .preprocess import normalize_text, clamp_confidence

__all__ = [
    # Main classifier
    "ReceiptClassifier",
    "ClassificationResult",
    # Pattern compilation
    "CategoryProfile",
    "build_alternation",
    "compile_category",
    "compile_rule_table",
    "get_compiled_profiles",
    # Preprocessing utilities
    "normalize_text",
    "clamp_confidence",
]
