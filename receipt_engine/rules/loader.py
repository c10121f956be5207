"""
Receipt rule table loader.
Loads the JSON rule table asset and checks it before any matcher is built.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from rapidfuzz import fuzz, process

from ..config.engine_config import ENGINE_CONFIG

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / ENGINE_CONFIG["rules"]["default_file"]

REQUIRED_TERM_LISTS = ("business_names", "keywords")


class RuleTableError(ValueError):
    """Raised when the rule table is malformed and matchers cannot be built."""
    pass


def clean_terms(terms: List[str]) -> List[str]:
    """
    Lowercase, strip and de-duplicate a term list, keeping first-seen order.

    Args:
        terms: Raw term strings from the rule table

    Returns:
        Cleaned list of terms with blanks removed
    """
    cleaned = []
    seen = set()
    for term in terms:
        if not isinstance(term, str):
            continue
        term = term.strip().lower()
        if term and term not in seen:
            seen.add(term)
            cleaned.append(term)
    return cleaned


def validate_rule_table(table: Dict) -> None:
    """
    Validate rule table structure and patterns.

    Args:
        table: Parsed rule table

    Raises:
        RuleTableError: If a category has no terms, no amount patterns, or a
            pattern that does not compile to exactly one capture group
    """
    if not isinstance(table, dict):
        raise RuleTableError(f"Rule table must be an object, got {type(table).__name__}")

    categories = table.get("categories")
    if not isinstance(categories, dict) or not categories:
        raise RuleTableError("Rule table has no categories")

    for category_id, rules in categories.items():
        if not isinstance(rules, dict):
            raise RuleTableError(f"Category '{category_id}' must be an object")

        for list_name in REQUIRED_TERM_LISTS:
            terms = rules.get(list_name)
            if not isinstance(terms, list) or not clean_terms(terms):
                raise RuleTableError(f"Category '{category_id}' has an empty '{list_name}' list")

        patterns = rules.get("amount_patterns")
        if not isinstance(patterns, list) or not patterns:
            raise RuleTableError(f"Category '{category_id}' has no amount_patterns")

        for pattern in patterns:
            try:
                compiled = re.compile(pattern, re.IGNORECASE)
            except (re.error, TypeError) as e:
                raise RuleTableError(
                    f"Category '{category_id}' has an invalid amount pattern {pattern!r}: {e}"
                ) from e
            if compiled.groups != 1:
                raise RuleTableError(
                    f"Category '{category_id}' amount pattern {pattern!r} must define exactly "
                    f"one capture group, found {compiled.groups}"
                )


def find_similar_terms(table: Dict, threshold: Optional[int] = None) -> List[Dict]:
    """
    Find business names shared (exactly or nearly) between categories.

    Overlapping vendor names make the business signal fire for several
    categories at once, so they are worth reviewing when the table is edited.

    Args:
        table: Validated rule table
        threshold: Minimum rapidfuzz ratio (0-100) to report a pair

    Returns:
        List of dicts with term, category, other_term, other_category, score
    """
    if threshold is None:
        threshold = ENGINE_CONFIG["rules"]["similarity_threshold"]

    categories = list(table["categories"].items())
    overlaps = []

    for index, (category_id, rules) in enumerate(categories):
        terms = clean_terms(rules["business_names"])
        for other_id, other_rules in categories[index + 1:]:
            other_terms = clean_terms(other_rules["business_names"])
            for term in terms:
                for other_term, score, _ in process.extract(
                    term, other_terms, scorer=fuzz.ratio, score_cutoff=threshold, limit=None
                ):
                    overlaps.append({
                        "term": term,
                        "category": category_id,
                        "other_term": other_term,
                        "other_category": other_id,
                        "score": round(score, 1),
                    })

    return overlaps


def load_rule_table(path: Optional[str] = None) -> Dict:
    """
    Load and validate the rule table from a JSON file.

    Args:
        path: Path to a JSON rule table. Defaults to the packaged table.

    Returns:
        Parsed rule table dictionary

    Raises:
        FileNotFoundError: If the file does not exist
        RuleTableError: If the file is not valid JSON or fails validation
    """
    rules_file = Path(path) if path else DEFAULT_RULES_PATH
    if not rules_file.exists():
        raise FileNotFoundError(f"Rule table not found: {rules_file}")

    with open(rules_file, "r", encoding="utf-8") as f:
        try:
            table = json.load(f)
        except json.JSONDecodeError as e:
            raise RuleTableError(f"Rule table {rules_file} is not valid JSON: {e}") from e

    validate_rule_table(table)

    logger.info(
        "Loaded rule table %s (version %s, %d categories)",
        rules_file.name, table.get("version", "unversioned"), len(table["categories"])
    )

    for overlap in find_similar_terms(table):
        logger.warning(
            "Business name '%s' (%s) overlaps '%s' (%s), similarity %.1f",
            overlap["term"], overlap["category"],
            overlap["other_term"], overlap["other_category"], overlap["score"]
        )

    return table
