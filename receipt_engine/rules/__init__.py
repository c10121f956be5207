"""
Receipt rule table.

The rule table is a versioned JSON asset. Each category lists business names,
keywords and amount-label patterns; category order is the tie-break order.
"""

from .loader import (
    DEFAULT_RULES_PATH,
    RuleTableError,
    clean_terms,
    find_similar_terms,
    load_rule_table,
    validate_rule_table,
)

__all__ = [
    "DEFAULT_RULES_PATH",
    "RuleTableError",
    "clean_terms",
    "find_similar_terms",
    "load_rule_table",
    "validate_rule_table",
]
