"""
Income Detection Module for the ledger classification engine.

Detects income through the ordered payroll / benefits / refund pattern table.
"""

from .income_detector import IncomeDetector

__all__ = [
    "IncomeDetector",
]
