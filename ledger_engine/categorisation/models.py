"""
Transaction record shared with the host application.

The host owns the record; the engine only writes the classification fields
(category, classification reason, ignored flag, transfer link).
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from .preprocess import parse_amount
from .priority import Classification, ClassificationPriority


class ClassificationType(Enum):
    """Semantic type shown for a transaction."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    IGNORED = "ignored"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


INCOME_CATEGORY_NAMES = {"income", "salary", "payroll"}


@dataclass
class Transaction:
    """A single transaction from the aggregation feed."""
    id: str
    account_id: str
    posted: datetime
    amount: Decimal
    description: str
    payee: Optional[str] = None
    memo: Optional[str] = None
    pending: bool = False
    category: Optional[str] = None
    classification: Optional[Classification] = None
    is_ignored: bool = False
    matched_transfer_id: Optional[str] = None

    def __post_init__(self):
        self.amount = parse_amount(self.amount)

    @classmethod
    def from_feed(cls, data: Dict, account_id: str) -> "Transaction":
        """
        Build a transaction from a feed transaction object.

        Args:
            data: Feed transaction ({"id", "posted", "amount", "description", ...})
            account_id: Id of the owning account

        Returns:
            Unclassified Transaction
        """
        return cls(
            id=str(data["id"]),
            account_id=account_id,
            posted=datetime.fromtimestamp(int(data["posted"]), tz=timezone.utc),
            amount=parse_amount(data.get("amount")),
            description=data.get("description") or "",
            payee=data.get("payee"),
            memo=data.get("memo"),
            pending=bool(data.get("pending") or False),
        )

    @property
    def classification_reason(self) -> Optional[str]:
        if self.classification is None:
            return None
        return self.classification.reason

    @classification_reason.setter
    def classification_reason(self, reason: Optional[str]) -> None:
        self.classification = Classification.from_reason(reason)

    @property
    def amount_value(self) -> Decimal:
        return self.amount

    @property
    def is_matched_transfer(self) -> bool:
        return self.matched_transfer_id is not None

    @property
    def priority(self) -> ClassificationPriority:
        if self.classification is None:
            return ClassificationPriority.DEFAULT
        return self.classification.priority

    @property
    def classification_type(self) -> ClassificationType:
        if self.is_ignored:
            return ClassificationType.IGNORED

        category = (self.category or "").lower()
        if category in INCOME_CATEGORY_NAMES:
            return ClassificationType.INCOME
        if category == "transfer":
            return ClassificationType.TRANSFER
        return ClassificationType.INCOME if self.amount >= 0 else ClassificationType.EXPENSE

    def classify(self, category: Optional[str], classification: Classification) -> None:
        """Write a classification onto the record."""
        self.category = category
        self.classification = classification
