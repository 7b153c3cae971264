"""
Configuration module for the ledger classification engine.

This module contains the classification configuration dictionary.
"""

from .classification_config import (
    CLASSIFICATION_CONFIG,
    CLASSIFICATION_TYPES,
    validate_config,
)

__all__ = [
    "CLASSIFICATION_CONFIG",
    "CLASSIFICATION_TYPES",
    "validate_config",
]
