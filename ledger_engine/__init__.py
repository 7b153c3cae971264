"""
Ledger Engine - Transaction Classification for personal finance ledgers.

Classifies transactions synced from an aggregation feed into income,
expense, transfer and ignored, with a human-readable reason and a priority
that protects user decisions from automatic overwrites.

Main Components:
    - patterns: Income, merchant category, CC payment and transfer tables
    - config: Classification configuration
    - categorisation: Transaction record, priority model, category matcher
    - transfers: Cross-account transfer matching
    - income: Pattern-based income detection
    - rules: User payee rules and the rule engine
"""

from typing import Iterable, List, Optional

# Core records and priority model
from .categorisation.models import Transaction, ClassificationType
from .categorisation.priority import (
    Classification,
    ClassificationPriority,
    ReasonKind,
    priority_from_reason,
    can_override,
)
from .categorisation.category_matcher import CategoryMatcher

# Detectors
from .transfers.transfer_matcher import TransferMatcher, TransferMatch
from .income.income_detector import IncomeDetector

# Rules
from .rules.rule_store import UserRule, UserRuleStore
from .rules.rule_loader import load_rules_csv, load_rule_store
from .rules.rule_engine import RuleEngine, BatchClassification

# Configuration
from .config.classification_config import CLASSIFICATION_CONFIG

from .patterns.transaction_patterns import (
    INCOME_PATTERNS,
    CATEGORY_PATTERNS,
    CC_PAYMENT_PATTERNS,
    TRANSFER_KEYWORDS,
)


__version__ = "1.0.0"
__all__ = [
    # Records
    "Transaction",
    "ClassificationType",
    # Priority model
    "Classification",
    "ClassificationPriority",
    "ReasonKind",
    "priority_from_reason",
    "can_override",
    # Detectors
    "CategoryMatcher",
    "TransferMatcher",
    "TransferMatch",
    "IncomeDetector",
    # Rules
    "UserRule",
    "UserRuleStore",
    "load_rules_csv",
    "load_rule_store",
    "RuleEngine",
    "BatchClassification",
    # Configuration
    "CLASSIFICATION_CONFIG",
    # Patterns
    "INCOME_PATTERNS",
    "CATEGORY_PATTERNS",
    "CC_PAYMENT_PATTERNS",
    "TRANSFER_KEYWORDS",
    # Main function
    "classify_transactions",
]


def classify_transactions(
    transactions: List[Transaction],
    rules: Optional[Iterable[UserRule]] = None,
) -> BatchClassification:
    """
    Main entry point for batch classification.

    Runs the complete pipeline over the batch, in place:
    1. Match transfers across accounts
    2. Apply payee rules, then CC payment, income and default detection
    3. Assign merchant categories to remaining spending

    Args:
        transactions: Every transaction of the sync window
        rules: User rules; inactive rules are ignored

    Returns:
        BatchClassification with pair count and priority per transaction id

    Example:
        >>> from datetime import datetime
        >>> txn = Transaction(
        ...     id="t1", account_id="checking", posted=datetime(2025, 1, 15),
        ...     amount="-42.10", description="WHOLE FOODS #123",
        ... )
        >>> result = classify_transactions([txn])
        >>> txn.category, txn.classification_reason
        ('Groceries', 'Pattern: Whole Foods')
    """
    engine = RuleEngine(rule_store=UserRuleStore(rules))
    return engine.classify_all(transactions)
