"""
User rule loader.
Loads rule snapshots exported by the persistence layer as CSV.
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import List

from .rule_store import UserRule, UserRuleStore

_TRUE_VALUES = {"1", "true", "yes", "y"}


def load_rules_csv(csv_path: str) -> List[UserRule]:
    """
    Load user rules from a CSV file.

    Args:
        csv_path: Path to CSV file containing rules

    Returns:
        List of rules in file order

    Example CSV format:
        payee,category,classification_type,is_active
        Netflix,Subscriptions,expense,true
        ACME Corp,Salary,income,true
    """
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"Rule file not found: {csv_path}")

    rules = []
    with open(csv_file, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            payee = (row.get("payee") or "").strip()
            if not payee:
                continue

            kwargs = {
                "payee": payee,
                "category": (row.get("category") or "").strip(),
                "classification_type": (row.get("classification_type") or "expense").strip(),
                "is_active": (row.get("is_active") or "true").strip().lower() in _TRUE_VALUES,
            }
            rule_id = (row.get("id") or "").strip()
            if rule_id:
                kwargs["id"] = rule_id
            created_at = (row.get("created_at") or "").strip()
            if created_at:
                kwargs["created_at"] = datetime.fromisoformat(created_at)

            rules.append(UserRule(**kwargs))

    return rules


def load_rule_store(csv_path: str) -> UserRuleStore:
    """Load a rule CSV straight into a UserRuleStore."""
    return UserRuleStore(load_rules_csv(csv_path))
