"""
Preprocessing utilities for transaction classification.
Handles text normalization and exact amount parsing.
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

logger = logging.getLogger(__name__)


def normalize_text(text: Optional[str]) -> str:
    """
    Normalize text for matching.

    Args:
        text: Raw text to normalize

    Returns:
        Lower-cased text ("" for None)
    """
    if not text:
        return ""
    return text.lower()


def combine_text(*parts: Optional[str]) -> str:
    """
    Join description, payee and memo for scanning.

    Missing parts are joined as empty strings so the field boundaries stay
    the same whatever is present.

    Args:
        parts: Text fields in scan order

    Returns:
        Lower-cased combined text
    """
    return " ".join(part or "" for part in parts).lower()


def parse_amount(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Parse a feed amount into an exact Decimal.

    Amounts arrive as decimal strings ("-45.00"). Floats are converted through
    their string form so no binary rounding leaks in. Unparseable values are
    treated as zero.

    Args:
        value: Raw amount

    Returns:
        Decimal amount
    """
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal(0)

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        amount = None

    if amount is None or not amount.is_finite():
        logger.warning("Unparseable amount %r treated as zero", value)
        return Decimal(0)
    return amount


def posted_date(posted: Union[datetime, date]) -> date:
    """Calendar date of a posted timestamp (time of day dropped)."""
    if isinstance(posted, datetime):
        return posted.date()
    return posted
