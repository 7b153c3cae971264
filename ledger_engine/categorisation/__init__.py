"""
Categorisation Module for the ledger classification engine.

Provides the building blocks shared by every detector:
- Transaction record and classification types
- Priority model (reason kind -> priority)
- Preprocessing (text normalization, exact amount parsing)
- Pattern matching (keyword and regex-based)
- Merchant category matching
"""

from .models import Transaction, ClassificationType
from .priority import (
    Classification,
    ClassificationPriority,
    ReasonKind,
    priority_from_reason,
    reason_kind_from_text,
    can_override,
)
from .preprocess import (
    normalize_text,
    combine_text,
    parse_amount,
    posted_date,
)
from .pattern_matching import (
    match_keywords,
    compile_patterns,
    match_regex_patterns,
    match_pattern_dict,
    pattern_matches,
)
from .category_matcher import CategoryMatcher

__all__ = [
    # Records
    "Transaction",
    "ClassificationType",
    # Priority model
    "Classification",
    "ClassificationPriority",
    "ReasonKind",
    "priority_from_reason",
    "reason_kind_from_text",
    "can_override",
    # Preprocessing utilities
    "normalize_text",
    "combine_text",
    "parse_amount",
    "posted_date",
    # Pattern matching utilities
    "match_keywords",
    "compile_patterns",
    "match_regex_patterns",
    "match_pattern_dict",
    "pattern_matches",
    # Detectors
    "CategoryMatcher",
]
