"""
User-defined classification rules.

A rule matches transactions whose payee or description contains the rule's
payee pattern (case-insensitive) and assigns the rule's category. Rules are
created by the user or synthesized from a one-off correction; they are
deactivated, never deleted automatically.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ..categorisation.models import Transaction
from ..categorisation.priority import Classification
from ..config.classification_config import CLASSIFICATION_CONFIG, CLASSIFICATION_TYPES

logger = logging.getLogger(__name__)


@dataclass
class UserRule:
    """A user-defined payee rule."""
    payee: str
    category: str
    classification_type: str = CLASSIFICATION_CONFIG["rules"]["default_classification_type"]
    is_active: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.payee or not self.payee.strip():
            raise ValueError("Rule payee pattern must not be empty")
        self.classification_type = self.classification_type.lower()
        if self.classification_type not in CLASSIFICATION_TYPES:
            raise ValueError(f"Unknown classification type: {self.classification_type!r}")

    def matches(self, transaction: Transaction) -> bool:
        """Check if this rule matches a transaction."""
        if not self.is_active:
            return False

        pattern = self.payee.lower()
        payee = (transaction.payee or "").lower()
        description = transaction.description.lower()
        return pattern in payee or pattern in description

    def apply(self, transaction: Transaction) -> None:
        """Apply this rule to a transaction."""
        transaction.classify(self.category, Classification.payee_rule(self.payee))
        transaction.is_ignored = self.classification_type == "ignored"


class UserRuleStore:
    """In-memory rule set handed over by the persistence layer."""

    def __init__(self, rules: Optional[Iterable[UserRule]] = None):
        self._rules: List[UserRule] = list(rules or [])

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    @property
    def rules(self) -> Tuple[UserRule, ...]:
        return tuple(self._rules)

    def active_rules(self) -> Tuple[UserRule, ...]:
        """Snapshot of the active rules, in creation order."""
        return tuple(rule for rule in self._rules if rule.is_active)

    def add(self, rule: UserRule) -> UserRule:
        self._rules.append(rule)
        logger.debug("Added rule %s: %r -> %s", rule.id, rule.payee, rule.category)
        return rule

    def get(self, rule_id: str) -> Optional[UserRule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def find_by_payee(self, payee: str) -> Optional[UserRule]:
        """First rule whose pattern contains payee (case-insensitive)."""
        needle = payee.lower()
        for rule in self._rules:
            if needle in rule.payee.lower():
                return rule
        return None

    def deactivate(self, rule_id: str) -> bool:
        rule = self.get(rule_id)
        if rule is None:
            return False
        rule.is_active = False
        return True

    def create_rule_from_correction(
        self,
        payee: str,
        category: str,
        classification_type: str = CLASSIFICATION_CONFIG["rules"]["default_classification_type"],
    ) -> UserRule:
        """
        Create or update the rule for a payee after a user correction.

        An existing rule for the payee is updated and re-activated instead of
        adding a duplicate.

        Args:
            payee: Payee pattern to match
            category: Category to assign
            classification_type: income / expense / transfer / ignored

        Returns:
            The created or updated rule
        """
        existing = self.find_by_payee(payee)
        if existing is not None:
            classification_type = classification_type.lower()
            if classification_type not in CLASSIFICATION_TYPES:
                raise ValueError(f"Unknown classification type: {classification_type!r}")
            existing.category = category
            existing.classification_type = classification_type
            existing.is_active = True
            logger.debug("Updated rule %s for payee %r", existing.id, payee)
            return existing

        return self.add(UserRule(payee=payee, category=category, classification_type=classification_type))

    @staticmethod
    def count_matches(rule: UserRule, transactions: Iterable[Transaction]) -> int:
        """Count transactions a rule would match."""
        return sum(1 for txn in transactions if rule.matches(txn))
