"""
User Rules Module for the ledger classification engine.

Provides user payee rules, their CSV loader and the rule engine that runs
the full classification chain.
"""

from .rule_store import UserRule, UserRuleStore
from .rule_loader import load_rules_csv, load_rule_store
from .rule_engine import RuleEngine, BatchClassification

__all__ = [
    "UserRule",
    "UserRuleStore",
    "load_rules_csv",
    "load_rule_store",
    "RuleEngine",
    "BatchClassification",
]
