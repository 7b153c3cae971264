"""
Classification configuration for the ledger classification engine.
Contains the transfer window, classification labels and batch options.
"""

from typing import Dict

# Classification Configuration
CLASSIFICATION_CONFIG = {
    # Transfer matching
    "transfers": {
        "max_days_difference": 3,  # Calendar days between the two legs (inclusive)
        "respect_priority": True,  # Keep CC payment / manual / payee rule labels on linked legs
    },

    # Category labels written onto transactions
    "labels": {
        "income": "Income",
        "expense": "Expense",
        "transfer": "Transfer",
    },

    # Rule synthesis from user corrections
    "rules": {
        "min_description_word_length": 3,  # Fallback payee from first description word
        "default_classification_type": "expense",
    },

    # Batch processing
    "batch": {
        "categorize_spending": True,  # Run the merchant category pass after the chain
    },
}

# Semantic types a user rule may target
CLASSIFICATION_TYPES = ("income", "expense", "transfer", "ignored")


def validate_config(config: Dict) -> Dict:
    """
    Validate a classification configuration dictionary.

    Args:
        config: Configuration dictionary shaped like CLASSIFICATION_CONFIG

    Returns:
        The same configuration, if valid

    Raises:
        ValueError: If a setting is missing or out of range
    """
    try:
        max_days = config["transfers"]["max_days_difference"]
        respect_priority = config["transfers"]["respect_priority"]
        labels = {name: config["labels"][name] for name in ("income", "expense", "transfer")}
        min_word = config["rules"]["min_description_word_length"]
        default_type = config["rules"]["default_classification_type"]
        categorize_spending = config["batch"]["categorize_spending"]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Missing configuration key: {e}")

    # bool is a subclass of int
    if isinstance(max_days, bool) or not isinstance(max_days, int) or max_days < 0:
        raise ValueError(f"max_days_difference must be a non-negative integer, got {max_days!r}")
    if isinstance(min_word, bool) or not isinstance(min_word, int) or min_word < 1:
        raise ValueError(f"min_description_word_length must be a positive integer, got {min_word!r}")
    if default_type not in CLASSIFICATION_TYPES:
        raise ValueError(f"Unknown default_classification_type: {default_type!r}")
    if not isinstance(respect_priority, bool):
        raise ValueError(f"respect_priority must be a boolean, got {respect_priority!r}")
    if not isinstance(categorize_spending, bool):
        raise ValueError(f"categorize_spending must be a boolean, got {categorize_spending!r}")
    for name, label in labels.items():
        if not isinstance(label, str) or not label.strip():
            raise ValueError(f"Label {name!r} must be a non-empty string, got {label!r}")

    return config
