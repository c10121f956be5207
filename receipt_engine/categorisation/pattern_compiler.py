"""
Pattern compiler for receipt categorisation.

Turns each rule-table category into a CategoryProfile holding whole-word,
case-insensitive alternations over its business names and keywords plus its
compiled amount-label patterns. Profiles are built once and shared.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

from ..rules.loader import clean_terms, load_rule_table, validate_rule_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryProfile:
    """Compiled matchers for one category."""
    category_id: str
    name: str
    business_terms: Tuple[str, ...]
    keyword_terms: Tuple[str, ...]
    business_regex: Pattern
    keyword_regex: Pattern
    amount_patterns: Tuple[Pattern, ...]


def build_alternation(terms: List[str]) -> Pattern:
    """
    Build a whole-word, case-insensitive alternation over terms.

    Terms keep their rule-table order, so at any position the first listed
    term that matches wins.

    Args:
        terms: Cleaned terms

    Returns:
        Compiled pattern matching any term as a whole word
    """
    alternation = "|".join(re.escape(term) for term in terms)
    return re.compile(r"\b(?:" + alternation + r")\b", re.IGNORECASE)


def compile_category(category_id: str, rules: Dict) -> CategoryProfile:
    """Compile one rule-table entry into a CategoryProfile."""
    business_terms = clean_terms(rules["business_names"])
    keyword_terms = clean_terms(rules["keywords"])

    return CategoryProfile(
        category_id=category_id,
        name=rules.get("name") or category_id.title(),
        business_terms=tuple(business_terms),
        keyword_terms=tuple(keyword_terms),
        business_regex=build_alternation(business_terms),
        keyword_regex=build_alternation(keyword_terms),
        amount_patterns=tuple(
            re.compile(pattern, re.IGNORECASE) for pattern in rules["amount_patterns"]
        ),
    )


def compile_rule_table(table: Dict) -> Tuple[CategoryProfile, ...]:
    """
    Compile every category of a rule table, in table order.

    Args:
        table: Parsed rule table

    Returns:
        Tuple of CategoryProfile objects

    Raises:
        RuleTableError: If the table is malformed
    """
    validate_rule_table(table)

    profiles = tuple(
        compile_category(category_id, rules)
        for category_id, rules in table["categories"].items()
    )
    logger.debug(
        "Compiled %d category profiles: %s",
        len(profiles), ", ".join(profile.name for profile in profiles)
    )
    return profiles


# Profiles for the packaged rule table, built on first use
_default_profiles: Optional[Tuple[CategoryProfile, ...]] = None


def get_compiled_profiles() -> Tuple[CategoryProfile, ...]:
    """Get the process-wide compiled profiles for the packaged rule table."""
    global _default_profiles
    if _default_profiles is None:
        _default_profiles = compile_rule_table(load_rule_table())
    return _default_profiles
