"""
Merchant Category Matcher.

Auto-categorizes spending by looking for known merchant names and keywords
in the description, payee and memo of outgoing transactions.
"""

import logging
import string
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from ..config.classification_config import CLASSIFICATION_CONFIG
from ..patterns.transaction_patterns import CATEGORY_PATTERNS
from .models import Transaction
from .pattern_matching import match_pattern_dict
from .preprocess import combine_text
from .priority import Classification, ClassificationPriority

logger = logging.getLogger(__name__)

# Categories owned by other detectors
SKIPPED_CATEGORIES = ("transfer", "income", "salary")


class CategoryMatcher:
    """Assigns spending categories from the merchant pattern table."""

    def __init__(
        self,
        category_patterns: Optional[Mapping[str, Sequence[str]]] = None,
        transfer_label: str = CLASSIFICATION_CONFIG["labels"]["transfer"],
        income_label: str = CLASSIFICATION_CONFIG["labels"]["income"],
    ):
        """
        Args:
            category_patterns: Category name -> merchant substrings
            transfer_label: Configured transfer category, never recategorized
            income_label: Configured income category, never recategorized
        """
        self.category_patterns = CATEGORY_PATTERNS if category_patterns is None else category_patterns
        self.skipped_categories = frozenset(SKIPPED_CATEGORIES) | {
            transfer_label.lower(),
            income_label.lower(),
        }

    @property
    def all_categories(self) -> List[str]:
        return sorted(self.category_patterns.keys())

    def patterns_for(self, category: str) -> Optional[Sequence[str]]:
        return self.category_patterns.get(category)

    @staticmethod
    def pattern_matches(pattern: str, text: str) -> bool:
        return pattern.lower() in text.lower()

    def detect_category(self, transaction: Transaction) -> Optional[Tuple[str, str]]:
        """
        Detect the spending category for a transaction.

        Only records at default or pattern priority are considered; linked
        transfer legs, transfers, income and credits are skipped.

        Args:
            transaction: The transaction to categorize

        Returns:
            Tuple of (category, reason_label) or None
        """
        if transaction.priority > ClassificationPriority.PATTERN_INCOME:
            return None
        if transaction.is_matched_transfer:
            return None
        if (transaction.category or "").lower() in self.skipped_categories:
            return None
        if transaction.amount >= 0:
            return None

        text = combine_text(transaction.description, transaction.payee, transaction.memo)
        match = match_pattern_dict(text, self.category_patterns)
        if match is None:
            return None

        category, keyword = match
        return category, string.capwords(keyword)

    def process_transaction(self, transaction: Transaction) -> bool:
        """
        Categorize a transaction if it matches a merchant pattern.

        Returns:
            True if the transaction was categorized
        """
        match = self.detect_category(transaction)
        if match is None:
            return False

        category, label = match
        logger.debug("Merchant pattern %r -> %s for transaction %s", label, category, transaction.id)
        transaction.classify(category, Classification.pattern(label))
        return True

    def process_transactions(self, transactions: Iterable[Transaction]) -> int:
        """Process many transactions; returns the count categorized."""
        return sum(1 for txn in transactions if self.process_transaction(txn))

    @staticmethod
    def count_uncategorized(transactions: Iterable[Transaction]) -> int:
        """Count outgoing, non-ignored transactions without a category."""
        return sum(
            1 for txn in transactions
            if not txn.is_ignored and not txn.category and txn.amount < 0
        )
