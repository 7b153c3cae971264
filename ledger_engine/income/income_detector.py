"""
Pattern-based Income Detection Module.

Detects income transactions by scanning description, payee and memo against
an ordered table of regular expressions (payroll, direct deposit, benefits,
tax refunds, dividends, refunds, ...). The first pattern that matches wins.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from ..categorisation.models import Transaction
from ..categorisation.pattern_matching import (
    compile_patterns,
    match_regex_patterns,
    pattern_matches,
)
from ..categorisation.preprocess import combine_text
from ..categorisation.priority import Classification
from ..config.classification_config import CLASSIFICATION_CONFIG
from ..patterns.transaction_patterns import INCOME_PATTERNS

logger = logging.getLogger(__name__)

_DEFAULT_COMPILED = compile_patterns(INCOME_PATTERNS)


class IncomeDetector:
    """Detects income through the ordered income pattern table."""

    def __init__(
        self,
        patterns: Optional[Sequence[Tuple[str, str]]] = None,
        income_label: str = CLASSIFICATION_CONFIG["labels"]["income"],
        transfer_label: str = CLASSIFICATION_CONFIG["labels"]["transfer"],
    ):
        """
        Args:
            patterns: Ordered (regex, label) pairs; defaults to INCOME_PATTERNS
            income_label: Category written on detected income
            transfer_label: Configured transfer category, skipped
        """
        if patterns is None:
            self._patterns = INCOME_PATTERNS
            self._compiled = _DEFAULT_COMPILED
        else:
            self._patterns = tuple(patterns)
            self._compiled = compile_patterns(self._patterns)
        self.income_label = income_label
        self._transfer_categories = {"transfer", transfer_label.lower()}

    @property
    def all_pattern_names(self) -> List[str]:
        return [label for _, label in self._patterns]

    @staticmethod
    def pattern_matches(pattern: str, text: str) -> bool:
        return pattern_matches(pattern, text)

    def matches_income_pattern(self, text: str) -> Optional[str]:
        """
        Check if text matches any income pattern.

        Args:
            text: Text to check

        Returns:
            The matched pattern label, or None
        """
        return match_regex_patterns(text.lower(), self._compiled)

    def detect_income(self, transaction: Transaction) -> Optional[str]:
        """
        Check if a transaction matches any income pattern.

        Only credits are considered; ignored transactions and transactions
        already categorized or linked as transfers are skipped.

        Args:
            transaction: The transaction to check

        Returns:
            Matched pattern label, or None
        """
        if transaction.amount <= 0:
            return None
        if transaction.is_ignored:
            return None
        if transaction.is_matched_transfer:
            return None
        if (transaction.category or "").lower() in self._transfer_categories:
            return None

        text = combine_text(transaction.description, transaction.payee, transaction.memo)
        return self.matches_income_pattern(text)

    def apply_income_classification(self, transaction: Transaction, label: str) -> None:
        transaction.classify(self.income_label, Classification.pattern(label))

    def process_transaction(self, transaction: Transaction) -> bool:
        """
        Classify a transaction as income if it matches a pattern.

        Returns:
            True if the transaction was classified as income
        """
        label = self.detect_income(transaction)
        if label is None:
            return False

        logger.debug("Income pattern %r matched transaction %s", label, transaction.id)
        self.apply_income_classification(transaction, label)
        return True

    def process_transactions(self, transactions: Iterable[Transaction]) -> int:
        """Process many transactions; returns the count classified as income."""
        return sum(1 for txn in transactions if self.process_transaction(txn))

    @staticmethod
    def count_potential_income(transactions: Iterable[Transaction]) -> int:
        """Count credits not yet labelled as income or transfer."""
        count = 0
        for txn in transactions:
            category = (txn.category or "").lower()
            if txn.amount > 0 and not txn.is_ignored and category not in ("income", "transfer"):
                count += 1
        return count
