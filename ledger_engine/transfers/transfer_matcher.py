"""
Transfer Matching Module.

Pairs outgoing and incoming transactions on different accounts that look like
the two legs of one internal movement of money: equal absolute amount and
posted within a few calendar days of each other.

Matching is greedy first-fit in batch order, without backtracking. Pending
and already linked transactions never take part, so re-running the matcher
on a linked batch adds nothing.
"""

import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional, Sequence, Set

from ..categorisation.models import Transaction
from ..categorisation.pattern_matching import match_keywords
from ..categorisation.preprocess import combine_text, posted_date
from ..categorisation.priority import Classification, ClassificationPriority, ReasonKind
from ..config.classification_config import CLASSIFICATION_CONFIG
from ..patterns.transaction_patterns import TRANSFER_KEYWORDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferMatch:
    """A matched pair of transfer legs."""
    outgoing: Transaction
    incoming: Transaction


class TransferMatcher:
    """Detects and links transfer pairs across accounts."""

    def __init__(
        self,
        max_days_difference: int = CLASSIFICATION_CONFIG["transfers"]["max_days_difference"],
        respect_priority: bool = CLASSIFICATION_CONFIG["transfers"]["respect_priority"],
        transfer_label: str = CLASSIFICATION_CONFIG["labels"]["transfer"],
    ):
        """
        Args:
            max_days_difference: Maximum calendar days between the two legs
            respect_priority: Keep labels above auto-transfer (CC payment, manual, payee rule) when linking
            transfer_label: Category written on linked legs

        Raises:
            ValueError: If max_days_difference is negative
        """
        if max_days_difference < 0:
            raise ValueError(f"max_days_difference must be >= 0, got {max_days_difference}")
        self.max_days_difference = max_days_difference
        self.respect_priority = respect_priority
        self.transfer_label = transfer_label

    # ----------------------------
    # Detection
    # ----------------------------
    def detect_transfers(self, transactions: Sequence[Transaction]) -> List[TransferMatch]:
        """
        Detect all transfer matches in a batch.

        Args:
            transactions: Full batch for the sync window

        Returns:
            Disjoint (outgoing, incoming) pairs, in outgoing batch order
        """
        eligible = [txn for txn in transactions if not txn.pending and txn.matched_transfer_id is None]
        outgoing = [txn for txn in eligible if txn.amount < 0]
        incoming = [txn for txn in eligible if txn.amount > 0]

        matches = []
        consumed: Set[str] = set()

        for out in outgoing:
            match = self.find_match(out, incoming, consumed)
            if match is not None:
                matches.append(TransferMatch(outgoing=out, incoming=match))
                consumed.add(match.id)

        logger.debug(
            "Transfer detection: %d outgoing, %d incoming candidates, %d pairs",
            len(outgoing), len(incoming), len(matches)
        )
        return matches

    def find_match(
        self,
        outgoing: Transaction,
        candidates: Iterable[Transaction],
        excluded_ids: AbstractSet[str],
    ) -> Optional[Transaction]:
        """
        Find the first incoming candidate matching an outgoing transaction.

        Args:
            outgoing: Outgoing (negative amount) transaction
            candidates: Incoming transactions in batch order
            excluded_ids: Ids of already consumed incoming transactions

        Returns:
            Matching transaction, or None
        """
        amount = abs(outgoing.amount)

        for incoming in candidates:
            if incoming.id in excluded_ids:
                continue
            if incoming.account_id == outgoing.account_id:
                continue
            if incoming.amount != amount:
                continue
            if not self.is_within_date_range(outgoing, incoming):
                continue
            return incoming

        return None

    def is_within_date_range(self, first: Transaction, second: Transaction) -> bool:
        """True if the two posted dates are at most max_days_difference days apart."""
        days = abs((posted_date(first.posted) - posted_date(second.posted)).days)
        return days <= self.max_days_difference

    # ----------------------------
    # Application
    # ----------------------------
    def apply_matches(self, matches: Iterable[TransferMatch]) -> None:
        """Link each pair and label both legs as transfers."""
        for match in matches:
            match.outgoing.matched_transfer_id = match.incoming.id
            match.incoming.matched_transfer_id = match.outgoing.id

            self._label_leg(match.outgoing)
            self._label_leg(match.incoming)

    def _label_leg(self, transaction: Transaction) -> None:
        if self.respect_priority and transaction.priority > ClassificationPriority.AUTO_TRANSFER:
            logger.debug(
                "Transfer leg %s keeps higher priority reason %r",
                transaction.id, transaction.classification_reason
            )
            return
        transaction.classify(self.transfer_label, Classification.auto_transfer())

    def process_transfers(self, transactions: Sequence[Transaction]) -> int:
        """
        Detect and apply transfer matches.

        Returns:
            Number of transfer pairs matched
        """
        matches = self.detect_transfers(transactions)
        self.apply_matches(matches)
        return len(matches)

    # ----------------------------
    # Maintenance + statistics
    # ----------------------------
    @staticmethod
    def unmatch_transfer(first: Transaction, second: Transaction) -> None:
        """Clear a pair's links and reset automatic transfer labels."""
        for txn in (first, second):
            txn.matched_transfer_id = None
            if txn.classification is not None and txn.classification.kind is ReasonKind.AUTO_TRANSFER:
                txn.classify(None, Classification.default())

    @staticmethod
    def looks_like_transfer(transaction: Transaction) -> bool:
        """True if description or payee contains a transfer keyword."""
        text = combine_text(transaction.description, transaction.payee)
        return match_keywords(text, TRANSFER_KEYWORDS) is not None

    def count_unmatched_transfers(self, transactions: Iterable[Transaction]) -> int:
        return sum(
            1 for txn in transactions
            if self.looks_like_transfer(txn) and txn.matched_transfer_id is None
        )

    @staticmethod
    def matched_transfer_ids(transactions: Iterable[Transaction]) -> Set[str]:
        ids = set()
        for txn in transactions:
            if txn.matched_transfer_id is not None:
                ids.add(txn.id)
                ids.add(txn.matched_transfer_id)
        return ids
