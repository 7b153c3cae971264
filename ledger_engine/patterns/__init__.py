"""
Transaction Pattern Definitions for the ledger classification engine.

Contains the static tables used for automatic detection:
- Income patterns (ordered regex table)
- Spending category patterns (merchant substrings)
- Credit card payment phrases
- Transfer keywords
"""

from .transaction_patterns import (
    INCOME_PATTERNS,
    CATEGORY_PATTERNS,
    CC_PAYMENT_PATTERNS,
    TRANSFER_KEYWORDS,
)

__all__ = [
    "INCOME_PATTERNS",
    "CATEGORY_PATTERNS",
    "CC_PAYMENT_PATTERNS",
    "TRANSFER_KEYWORDS",
]
