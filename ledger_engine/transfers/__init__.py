"""
Transfer Matching Module for the ledger classification engine.

Links the outgoing and incoming legs of internal transfers across accounts.
"""

from .transfer_matcher import TransferMatcher, TransferMatch

__all__ = [
    "TransferMatcher",
    "TransferMatch",
]
