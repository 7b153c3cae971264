"""
Ledger Batch Processor for classifying a synced feed payload.
Parses account-set JSON documents, runs the rule engine over the batch and
exports the results as DataFrames.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .categorisation.models import Transaction
from .rules.rule_engine import RuleEngine
from .rules.rule_loader import load_rule_store
from .rules.rule_store import UserRuleStore

logger = logging.getLogger(__name__)


class InvalidFeedStructureError(ValueError):
    """Raised when a feed payload cannot be normalized to the account-set format."""
    pass


@dataclass
class ProcessingError:
    """Details of a skipped account or transaction."""
    source: str
    error_type: str
    error_message: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


@dataclass
class BatchStats:
    """Statistics for one classified batch."""
    total_transactions: int = 0
    accounts: int = 0
    skipped: int = 0
    transfers_matched: int = 0
    categorized: int = 0

    # Counts keyed by priority level name
    by_priority: Dict[str, int] = field(default_factory=dict)

    # Timing
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def processing_time(self) -> float:
        """Total processing time in seconds."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0


@dataclass
class BatchResult:
    """Complete result of classifying one batch."""
    stats: BatchStats
    transactions: List[Transaction]
    errors: List[ProcessingError] = field(default_factory=list)
    reason_counts: Dict[str, int] = field(default_factory=dict)


def parse_feed_payload(data) -> Tuple[List[Transaction], List[ProcessingError]]:
    """
    Normalize a parsed feed document into transactions.

    Handles:
    - Dictionary with 'accounts' (and optional 'errors') keys
    - Root-level list of account objects

    Args:
        data: Parsed JSON data (dict or list)

    Returns:
        Tuple of (transactions, errors); malformed accounts and transactions
        are skipped and reported in errors

    Raises:
        InvalidFeedStructureError: If the structure cannot be normalized
    """
    errors: List[ProcessingError] = []

    if isinstance(data, dict):
        for message in data.get("errors") or []:
            logger.warning("Feed reported error: %s", message)
            errors.append(ProcessingError(source="feed", error_type="FEED_ERROR", error_message=str(message)))

        if "accounts" not in data:
            raise InvalidFeedStructureError("Feed document has no 'accounts' key")
        accounts = data["accounts"]
        if not isinstance(accounts, list):
            raise InvalidFeedStructureError(
                f"'accounts' must be a list, got {type(accounts).__name__}"
            )

    elif isinstance(data, list):
        if len(data) == 0:
            raise InvalidFeedStructureError("Empty array in feed payload")
        if not all(isinstance(item, dict) for item in data):
            raise InvalidFeedStructureError(
                "Unrecognized array structure. Expected account objects with 'id' and 'transactions'."
            )
        accounts = data

    else:
        raise InvalidFeedStructureError(
            f"Unexpected JSON root type: {type(data).__name__}. Expected dict or list."
        )

    transactions = _extract_transactions_from_accounts(accounts, errors)
    logger.debug("Feed payload: %d accounts, %d transactions, %d errors", len(accounts), len(transactions), len(errors))
    return transactions, errors


def _extract_transactions_from_accounts(
    accounts: List,
    errors: List[ProcessingError],
) -> List[Transaction]:
    """Flatten nested account transactions, attaching the account id."""
    all_transactions = []

    for idx, account in enumerate(accounts):
        if not isinstance(account, dict) or not account.get("id"):
            errors.append(ProcessingError(
                source=f"account[{idx}]",
                error_type="INVALID_ACCOUNT",
                error_message="Account object without an 'id'",
            ))
            continue

        account_id = str(account["id"])
        account_transactions = account.get("transactions") or []
        if not isinstance(account_transactions, list):
            errors.append(ProcessingError(
                source=account_id,
                error_type="INVALID_ACCOUNT",
                error_message="'transactions' must be a list",
            ))
            continue

        for txn_idx, txn in enumerate(account_transactions):
            try:
                all_transactions.append(Transaction.from_feed(txn, account_id))
            except (KeyError, TypeError, ValueError) as e:
                errors.append(ProcessingError(
                    source=f"{account_id}[{txn_idx}]",
                    error_type="INVALID_TRANSACTION",
                    error_message=f"{type(e).__name__}: {e}",
                ))
                logger.warning("Skipping transaction %d of account %s: %s", txn_idx, account_id, e)

    return all_transactions


def decode_feed(content: Union[bytes, str]):
    """Parse feed JSON from bytes or text."""
    if isinstance(content, str):
        return json.loads(content)

    try:
        return json.loads(content.decode("utf-8"))
    except UnicodeDecodeError:
        # Fallback to latin-1 which accepts all byte values
        return json.loads(content.decode("latin-1"))


def load_feed_file(feed_path: str) -> Tuple[List[Transaction], List[ProcessingError]]:
    """
    Load transactions from a feed JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidFeedStructureError: If the structure cannot be normalized
    """
    path = Path(feed_path)
    if not path.exists():
        raise FileNotFoundError(f"Feed file not found: {feed_path}")
    return parse_feed_payload(decode_feed(path.read_bytes()))


class LedgerBatchProcessor:
    """Classifies feed batches with the rule engine."""

    def __init__(
        self,
        rule_store: Optional[UserRuleStore] = None,
        config: Optional[Dict] = None,
    ):
        """
        Initialize the batch processor.

        Args:
            rule_store: User rules to apply (empty when omitted)
            config: Configuration shaped like CLASSIFICATION_CONFIG
        """
        self.engine = RuleEngine(rule_store=rule_store, config=config)

    def classify_batch(self, transactions: Sequence[Transaction]) -> BatchResult:
        """
        Classify a batch of transactions in place.

        Args:
            transactions: Every transaction of the sync window

        Returns:
            BatchResult with statistics and the classified transactions

        Raises:
            ValueError: If the batch is empty
        """
        if not transactions:
            raise ValueError("Empty transaction batch")

        stats = BatchStats(
            total_transactions=len(transactions),
            accounts=len({txn.account_id for txn in transactions}),
            start_time=datetime.now(),
        )

        outcome = self.engine.classify_all(transactions)
        stats.transfers_matched = outcome.transfers_matched
        stats.categorized = outcome.categorized
        stats.by_priority = {
            priority.name: count for priority, count in outcome.count_by_priority().items()
        }
        stats.end_time = datetime.now()

        logger.info(
            "Batch classification complete: %d transactions across %d accounts, "
            "%d transfer pairs, %d merchant categories, time: %.3fs",
            stats.total_transactions, stats.accounts, stats.transfers_matched,
            stats.categorized, stats.processing_time
        )

        return BatchResult(
            stats=stats,
            transactions=list(transactions),
            reason_counts=self.engine.count_by_reason(transactions),
        )

    def process_feed(self, content: Union[bytes, str]) -> BatchResult:
        """Parse a feed payload and classify its transactions."""
        transactions, errors = parse_feed_payload(decode_feed(content))
        result = self.classify_batch(transactions)
        result.errors = errors
        result.stats.skipped = sum(1 for error in errors if error.error_type == "INVALID_TRANSACTION")
        return result

    # ----------------------------
    # Export
    # ----------------------------
    @staticmethod
    def results_to_dataframe(transactions: Sequence[Transaction]):
        """
        Convert classified transactions to a pandas DataFrame.

        Args:
            transactions: Classified transactions

        Returns:
            pandas DataFrame, one row per transaction
        """
        import pandas as pd

        rows = []
        for txn in transactions:
            row = {
                "Transaction ID": txn.id,
                "Account ID": txn.account_id,
                "Posted": txn.posted.date().isoformat(),
                "Amount": txn.amount,
                "Description": txn.description,
                "Payee": txn.payee or "",
                "Category": txn.category or "",
                "Type": txn.classification_type.display_name,
                "Reason": txn.classification_reason or "",
                "Priority": txn.priority.name,
                "Matched Transfer ID": txn.matched_transfer_id or "",
                "Ignored": txn.is_ignored,
                "Pending": txn.pending,
            }
            rows.append(row)

        return pd.DataFrame(rows)

    @staticmethod
    def summary_to_dataframe(counts: Dict[str, int]):
        """
        Convert reason (or priority) counts to a pandas DataFrame.

        Rows are ordered by count, highest first.
        """
        import pandas as pd

        rows = [
            {"Reason": reason, "Count": count}
            for reason, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        ]
        return pd.DataFrame(rows, columns=["Reason", "Count"])

    @staticmethod
    def errors_to_dataframe(errors: List[ProcessingError]):
        """Convert processing errors to a pandas DataFrame."""
        import pandas as pd

        rows = []
        for error in errors:
            rows.append({
                "Source": error.source,
                "Error Type": error.error_type,
                "Error Message": error.error_message,
                "Timestamp": error.timestamp,
            })

        return pd.DataFrame(rows, columns=["Source", "Error Type", "Error Message", "Timestamp"])


def main(feed_path: str, rules_csv: Optional[str] = None, out_csv: Optional[str] = None) -> BatchResult:
    rule_store = load_rule_store(rules_csv) if rules_csv else UserRuleStore()
    processor = LedgerBatchProcessor(rule_store=rule_store)

    transactions, errors = load_feed_file(feed_path)
    result = processor.classify_batch(transactions)
    result.errors = errors

    df = processor.results_to_dataframe(result.transactions)
    if out_csv:
        df.to_csv(out_csv, index=False)
        logger.info("Wrote %d rows to %s", len(df), out_csv)
    else:
        print(processor.summary_to_dataframe(result.reason_counts).to_string(index=False))

    if errors:
        logger.warning("%d feed problems; first: %s", len(errors), errors[0].error_message)
    return result


if __name__ == "__main__":
    import sys

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    if len(sys.argv) < 2:
        raise SystemExit(
            "Usage:\n"
            "  python -m ledger_engine.batch_processor <feed.json> [rules.csv] [out.csv]\n"
        )

    main(
        feed_path=sys.argv[1],
        rules_csv=sys.argv[2] if len(sys.argv) >= 3 else None,
        out_csv=sys.argv[3] if len(sys.argv) >= 4 else None,
    )
