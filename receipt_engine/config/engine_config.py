"""
Engine configuration for receipt categorisation.
Contains signal weights, confidence thresholds, and amount extraction rules.
"""

# Classifier Configuration
# Weights are applied per match (or per distinct pattern for amount labels),
# then the raw score is divided by the number of signal types that fired.
ENGINE_CONFIG = {
    "classifier": {
        "business_weight": 40,  # Per business-name match
        "keyword_weight": 30,  # Per keyword match
        "amount_label_weight": 20,  # Per distinct amount-label pattern
        "position_weight": 10,  # Per business-name match near the top
        "position_window": 300,  # Characters considered "top of receipt"
        "score_scale": 100,  # best score / scale = confidence
        "confidence_threshold": 0.75,  # Minimum confidence to report a category
    },

    # Amount extraction and candidate confidence
    "amount": {
        "base_confidence": 0.5,
        "position_bonuses": [
            {"min_relative_position": 0.7, "bonus": 0.2},  # Last 30% of text
            {"min_relative_position": 0.5, "bonus": 0.1},  # Last 50% of text
        ],
        "range_bonuses": [
            {"min": 50, "max": 50000, "bonus": 0.2},  # Typical expense range
            {"min": 10, "max": 100000, "bonus": 0.1},  # Extended range
        ],
        "context_window": 50,  # Characters either side of the match
        "context_bonus": 0.1,
        "total_words": [
            "total", "grand total", "net", "final", "bill", "amount", "payable", "due",
        ],
        "max_amount": 1000000,  # Exclusive; larger values are OCR noise (phones, barcodes)
        "fallback_pattern": r"\b(\d{2,6}(?:\.\d{2})?)\b",
        "fallback_min_amount": 10,
        "fallback_confidence": 0.3,
        "tie_tolerance": 0.1,  # Confidences closer than this are ranked as ties
    },

    # Rule table
    "rules": {
        "default_file": "receipt_rules.json",
        "similarity_threshold": 92,  # rapidfuzz ratio for cross-category overlap audit
    },
}

# Settings store keys (mirrors the keys the web client persists)
SETTINGS_KEYS = {
    "THEME": "appTheme",  # 'light' or 'dark'
    "USER": "currentUser",  # JSON object {name, email, ...}
    "CURRENCY": "currencySymbol",
    "LANGUAGE": "appLanguage",
    "NOTIFICATIONS": "notifications",
    "PROFILE_NAME": "profileName",
    "PROFILE_EMAIL": "profileEmail",
    "PROFILE_PHONE": "profilePhone",
    "PROFILE_AVATAR": "profileAvatar",
}

SETTINGS_DEFAULTS = {
    "appTheme": "light",
    "currencySymbol": "₹",
    "appLanguage": "en",
    "notifications": "true",
}
