"""
Receipt Engine - Rule-based receipt categorisation and total extraction.

Classifies OCR receipt text into spending categories and extracts the most
likely total amount, each with a confidence score.

Main Components:
    - rules: Versioned JSON rule table and its loader
    - config: Signal weights, thresholds and settings keys
    - categorisation: Pattern compilation and weighted classification
    - extraction: Amount candidate generation and ranking
    - settings: Key-value settings store with change notification
"""

from typing import Optional

# Core categorisation components
from .categorisation.classifier import (
    ReceiptClassifier,
    ClassificationResult,
)
from .categorisation.pattern_compiler import (
    CategoryProfile,
    compile_rule_table,
    get_compiled_profiles,
)

# Amount extraction
from .extraction.amount_extractor import (
    AmountExtractor,
    AmountCandidate,
    calculate_amount_confidence,
)

# Engine
from .engine import ReceiptEngine, ProcessResult

# Rules and configuration
from .rules.loader import RuleTableError, load_rule_table
from .config.engine_config import ENGINE_CONFIG, SETTINGS_KEYS
from .settings.settings_manager import SettingsManager


__version__ = "1.1.0"
__all__ = [
    # Categorisation
    "ReceiptClassifier",
    "ClassificationResult",
    "CategoryProfile",
    "compile_rule_table",
    "get_compiled_profiles",
    # Extraction
    "AmountExtractor",
    "AmountCandidate",
    "calculate_amount_confidence",
    # Engine
    "ReceiptEngine",
    "ProcessResult",
    # Rules and configuration
    "RuleTableError",
    "load_rule_table",
    "ENGINE_CONFIG",
    "SETTINGS_KEYS",
    "SettingsManager",
    # Main function
    "process_receipt",
]


_default_engine: Optional[ReceiptEngine] = None


def process_receipt(text: Optional[str]) -> ProcessResult:
    """
    Main entry point for receipt processing.

    This function runs the complete pipeline:
    1. Normalize the text
    2. Score every category and pick the best above the confidence floor
    3. Extract and rank total-amount candidates
    4. Combine both into one result

    Args:
        text: OCR text of the receipt

    Returns:
        ProcessResult (use .to_dict() for the external key format)
    """
    global _default_engine
    if _default_engine is None:
        _default_engine = ReceiptEngine()
    return _default_engine.process(text)
