"""
Classification rule engine with priority-based resolution.

Runs the full classification chain over a batch of transactions:

    transfer pass (whole batch)
    -> per transaction: payee rule > manual > auto-transfer > auto-CC payment
                        > pattern income > default
    -> merchant category pass

Every step only writes when it does not lower the priority of the existing
classification, so the engine can be re-run on classified data.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..categorisation.category_matcher import CategoryMatcher
from ..categorisation.models import Transaction
from ..categorisation.pattern_matching import match_keywords
from ..categorisation.preprocess import normalize_text
from ..categorisation.priority import (
    Classification,
    ClassificationPriority,
    ReasonKind,
    can_override,
)
from ..config.classification_config import (
    CLASSIFICATION_CONFIG,
    CLASSIFICATION_TYPES,
    validate_config,
)
from ..income.income_detector import IncomeDetector
from ..patterns.transaction_patterns import CC_PAYMENT_PATTERNS
from ..transfers.transfer_matcher import TransferMatcher
from .rule_store import UserRule, UserRuleStore

logger = logging.getLogger(__name__)


@dataclass
class BatchClassification:
    """Outcome of classifying one batch."""
    transfers_matched: int = 0
    categorized: int = 0
    priorities: Dict[str, ClassificationPriority] = field(default_factory=dict)

    def count_by_priority(self) -> Dict[ClassificationPriority, int]:
        return dict(Counter(self.priorities.values()))


class RuleEngine:
    """Applies user rules and automatic detectors in priority order."""

    def __init__(
        self,
        rule_store: Optional[UserRuleStore] = None,
        config: Optional[Dict] = None,
        transfer_matcher: Optional[TransferMatcher] = None,
        income_detector: Optional[IncomeDetector] = None,
        category_matcher: Optional[CategoryMatcher] = None,
    ):
        """
        Initialize the engine.

        Args:
            rule_store: User rules; an empty store when omitted
            config: Configuration shaped like CLASSIFICATION_CONFIG

        Raises:
            ValueError: If the configuration is invalid
        """
        self.config = validate_config(config if config is not None else CLASSIFICATION_CONFIG)
        labels = self.config["labels"]

        self.rule_store = rule_store if rule_store is not None else UserRuleStore()
        self.transfer_matcher = transfer_matcher or TransferMatcher(
            max_days_difference=self.config["transfers"]["max_days_difference"],
            respect_priority=self.config["transfers"]["respect_priority"],
            transfer_label=labels["transfer"],
        )
        self.income_detector = income_detector or IncomeDetector(
            income_label=labels["income"],
            transfer_label=labels["transfer"],
        )
        self.category_matcher = category_matcher or CategoryMatcher(
            transfer_label=labels["transfer"],
            income_label=labels["income"],
        )

        self.income_label = labels["income"]
        self.expense_label = labels["expense"]
        self.transfer_label = labels["transfer"]

    # ----------------------------
    # Rule application
    # ----------------------------
    def apply_best_rule(
        self,
        transaction: Transaction,
        rules: Sequence[UserRule],
        force: bool = False,
    ) -> bool:
        """
        Apply the first matching rule to a transaction.

        Args:
            transaction: The transaction to classify
            rules: Rules in precedence order
            force: Override the existing classification regardless of priority

        Returns:
            True if a rule was applied
        """
        best_rule = next((rule for rule in rules if rule.matches(transaction)), None)
        if best_rule is None:
            return False

        if force or ClassificationPriority.PAYEE_RULE >= transaction.priority:
            best_rule.apply(transaction)
            return True

        return False

    # ----------------------------
    # Classification chain
    # ----------------------------
    def classify(
        self,
        transaction: Transaction,
        rules: Optional[Sequence[UserRule]] = None,
    ) -> ClassificationPriority:
        """
        Classify one transaction using the full priority chain.

        Assumes the transfer pass has already run over the batch.

        Args:
            transaction: The transaction to classify
            rules: Rule snapshot; the store's active rules when omitted

        Returns:
            The classification priority level that applies
        """
        if rules is None:
            rules = self.rule_store.active_rules()

        # 1. User payee rules
        if self.apply_best_rule(transaction, rules):
            return ClassificationPriority.PAYEE_RULE

        # 2. Manual classification is final
        if transaction.classification is not None and transaction.classification.kind is ReasonKind.MANUAL:
            return ClassificationPriority.MANUAL

        # 3. Already matched by the transfer pass
        if transaction.is_matched_transfer:
            return ClassificationPriority.AUTO_TRANSFER

        existing = transaction.priority
        if existing > ClassificationPriority.AUTO_CC_PAYMENT:
            # Label from a rule that no longer matches
            return existing

        # 4. Credit card payments
        if self.apply_cc_payment_detection(transaction):
            return ClassificationPriority.AUTO_CC_PAYMENT

        # 5. Income patterns
        if existing <= ClassificationPriority.PATTERN_INCOME and self.income_detector.process_transaction(transaction):
            return ClassificationPriority.PATTERN_INCOME

        # 6. Default
        if transaction.category is None:
            self.apply_default_classification(transaction)
            return ClassificationPriority.DEFAULT

        return existing

    def classify_all(
        self,
        transactions: Sequence[Transaction],
        rules: Optional[Sequence[UserRule]] = None,
    ) -> BatchClassification:
        """
        Classify a whole batch.

        Args:
            transactions: Every transaction of the sync window
            rules: Rule snapshot; the store's active rules when omitted

        Returns:
            BatchClassification with pair count and priority per transaction id
        """
        rules = tuple(rules) if rules is not None else self.rule_store.active_rules()
        result = BatchClassification()

        # Transfer detection needs the full batch
        result.transfers_matched = self.transfer_matcher.process_transfers(transactions)

        for txn in transactions:
            result.priorities[txn.id] = self.classify(txn, rules)

        if self.config["batch"]["categorize_spending"]:
            for txn in transactions:
                if self.category_matcher.process_transaction(txn):
                    result.categorized += 1
                    result.priorities[txn.id] = txn.priority

        logger.debug(
            "Classified %d transactions: %d transfer pairs, %d merchant categories, %d rules",
            len(transactions), result.transfers_matched, result.categorized, len(rules)
        )
        return result

    # ----------------------------
    # Detectors
    # ----------------------------
    def apply_cc_payment_detection(self, transaction: Transaction) -> bool:
        """
        Detect and classify credit card payments.

        Returns:
            True if the transaction was classified as a CC payment
        """
        if transaction.amount >= 0:
            return False
        if transaction.is_matched_transfer:
            return False

        description = normalize_text(transaction.description)
        payee = normalize_text(transaction.payee)
        if match_keywords(description, CC_PAYMENT_PATTERNS) is None and match_keywords(payee, CC_PAYMENT_PATTERNS) is None:
            return False

        transaction.classify(self.transfer_label, Classification.auto_cc_payment())
        return True

    def apply_default_classification(self, transaction: Transaction) -> None:
        """Income for credits (and zero), Expense for debits."""
        category = self.income_label if transaction.amount >= 0 else self.expense_label
        transaction.classify(category, Classification.default())

    # ----------------------------
    # User corrections
    # ----------------------------
    def create_rule(
        self,
        transaction: Transaction,
        category: str,
        classification_type: str = CLASSIFICATION_CONFIG["rules"]["default_classification_type"],
    ) -> Optional[UserRule]:
        """
        Build a rule from a transaction (for "apply to all from this payee").

        Uses the payee, or the first description word when there is no payee.

        Returns:
            A new, unsaved rule, or None if no usable payee exists
        """
        if transaction.payee:
            payee = transaction.payee
        else:
            words = transaction.description.split()
            min_length = self.config["rules"]["min_description_word_length"]
            if not words or len(words[0]) < min_length:
                return None
            payee = words[0]

        return UserRule(payee=payee, category=category, classification_type=classification_type)

    def apply_correction(
        self,
        transaction: Transaction,
        category: str,
        classification_type: str = CLASSIFICATION_CONFIG["rules"]["default_classification_type"],
        apply_to_payee: bool = False,
    ) -> Optional[UserRule]:
        """
        Record an explicit user correction.

        The transaction is labelled "Manual". With apply_to_payee a rule is
        created (or updated) in the rule store.

        Args:
            transaction: The corrected transaction
            category: Category chosen by the user
            classification_type: income / expense / transfer / ignored
            apply_to_payee: Also create a rule for the payee

        Returns:
            The stored rule, or None
        """
        classification_type = classification_type.lower()
        if classification_type not in CLASSIFICATION_TYPES:
            raise ValueError(f"Unknown classification type: {classification_type!r}")

        transaction.classify(category, Classification.manual())
        transaction.is_ignored = classification_type == "ignored"

        if not apply_to_payee:
            return None

        rule = self.create_rule(transaction, category, classification_type)
        if rule is None:
            logger.debug("No payee to build a rule from for transaction %s", transaction.id)
            return None

        return self.rule_store.create_rule_from_correction(rule.payee, category, classification_type)

    # ----------------------------
    # Priority checking + statistics
    # ----------------------------
    @staticmethod
    def can_override(new_reason: str, existing_reason: Optional[str]) -> bool:
        return can_override(new_reason, existing_reason)

    @staticmethod
    def priority_of(transaction: Transaction) -> ClassificationPriority:
        return transaction.priority

    @staticmethod
    def count_by_reason(transactions: Iterable[Transaction]) -> Dict[str, int]:
        """Count transactions by classification reason."""
        counts: Dict[str, int] = {}
        for txn in transactions:
            reason = txn.classification_reason or "Default"
            counts[reason] = counts.get(reason, 0) + 1
        return counts

    @staticmethod
    def count_matches(rule: UserRule, transactions: Iterable[Transaction]) -> int:
        return UserRuleStore.count_matches(rule, transactions)

    def uncategorized(self, transactions: Iterable[Transaction]) -> List[Transaction]:
        """Outgoing transactions that still carry no category."""
        return [txn for txn in transactions if not txn.is_ignored and not txn.category and txn.amount < 0]
