"""
Classification priority model.

Every classification carries a reason kind. Each kind maps to exactly one
priority level; a new classification may only replace an existing one of
lower priority.

Priority (lowest to highest):
    default < pattern < auto-transfer < auto-CC payment < manual < payee rule
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class ClassificationPriority(IntEnum):
    """Priority levels for classification resolution."""
    DEFAULT = 0
    PATTERN_INCOME = 1
    AUTO_TRANSFER = 2
    AUTO_CC_PAYMENT = 3
    MANUAL = 4
    PAYEE_RULE = 5


class ReasonKind(Enum):
    """Source of a classification."""
    DEFAULT = "default"
    PATTERN = "pattern"
    AUTO_TRANSFER = "auto_transfer"
    AUTO_CC_PAYMENT = "auto_cc_payment"
    MANUAL = "manual"
    PAYEE_RULE = "payee_rule"

    @property
    def priority(self) -> ClassificationPriority:
        return _KIND_PRIORITY[self]


_KIND_PRIORITY = {
    ReasonKind.DEFAULT: ClassificationPriority.DEFAULT,
    ReasonKind.PATTERN: ClassificationPriority.PATTERN_INCOME,
    ReasonKind.AUTO_TRANSFER: ClassificationPriority.AUTO_TRANSFER,
    ReasonKind.AUTO_CC_PAYMENT: ClassificationPriority.AUTO_CC_PAYMENT,
    ReasonKind.MANUAL: ClassificationPriority.MANUAL,
    ReasonKind.PAYEE_RULE: ClassificationPriority.PAYEE_RULE,
}


@dataclass(frozen=True)
class Classification:
    """A reason kind plus its human-readable detail (pattern label, rule payee)."""
    kind: ReasonKind
    detail: Optional[str] = None
    raw: Optional[str] = None  # Original text when parsed from an external record

    @property
    def priority(self) -> ClassificationPriority:
        return self.kind.priority

    @property
    def reason(self) -> str:
        """Reason text as stored on the transaction."""
        if self.raw is not None:
            return self.raw
        if self.kind is ReasonKind.PAYEE_RULE:
            return f"Payee Rule: {self.detail}"
        if self.kind is ReasonKind.PATTERN:
            return f"Pattern: {self.detail}"
        return _FIXED_REASONS[self.kind]

    @classmethod
    def default(cls) -> "Classification":
        return cls(ReasonKind.DEFAULT)

    @classmethod
    def manual(cls) -> "Classification":
        return cls(ReasonKind.MANUAL)

    @classmethod
    def auto_transfer(cls) -> "Classification":
        return cls(ReasonKind.AUTO_TRANSFER)

    @classmethod
    def auto_cc_payment(cls) -> "Classification":
        return cls(ReasonKind.AUTO_CC_PAYMENT)

    @classmethod
    def pattern(cls, label: str) -> "Classification":
        return cls(ReasonKind.PATTERN, label)

    @classmethod
    def payee_rule(cls, payee: str) -> "Classification":
        return cls(ReasonKind.PAYEE_RULE, payee)

    @classmethod
    def from_reason(cls, reason: Optional[str]) -> Optional["Classification"]:
        """
        Parse a reason string coming from outside the engine.

        The original text is kept so that the round trip is lossless.

        Args:
            reason: Stored reason text, e.g. "Payee Rule: Amazon" or "Manual"

        Returns:
            Classification, or None when no reason is set
        """
        if reason is None:
            return None
        kind = reason_kind_from_text(reason)
        detail = None
        if kind in (ReasonKind.PAYEE_RULE, ReasonKind.PATTERN) and ":" in reason:
            detail = reason.split(":", 1)[1].strip()
        return cls(kind, detail, raw=reason)


_FIXED_REASONS = {
    ReasonKind.DEFAULT: "Default",
    ReasonKind.AUTO_TRANSFER: "Auto-Transfer",
    ReasonKind.AUTO_CC_PAYMENT: "Auto-CC Payment",
    ReasonKind.MANUAL: "Manual",
}


def reason_kind_from_text(reason: Optional[str]) -> ReasonKind:
    """Map reason text to its kind (case-insensitive, order of checks matters)."""
    if reason is None:
        return ReasonKind.DEFAULT

    text = reason.lower()
    if text.startswith("payee rule"):
        return ReasonKind.PAYEE_RULE
    if text == "manual":
        return ReasonKind.MANUAL
    if "auto-cc" in text or "cc payment" in text:
        return ReasonKind.AUTO_CC_PAYMENT
    if "auto-transfer" in text:
        return ReasonKind.AUTO_TRANSFER
    if text.startswith("pattern"):
        return ReasonKind.PATTERN
    return ReasonKind.DEFAULT


def priority_from_reason(reason: Optional[str]) -> ClassificationPriority:
    """Get the priority for a given classification reason string."""
    return reason_kind_from_text(reason).priority


def can_override(new_reason: str, existing_reason: Optional[str]) -> bool:
    """True if new_reason has strictly higher priority than existing_reason."""
    return priority_from_reason(new_reason) > priority_from_reason(existing_reason)
