"""
Generic Pattern Matching for Transaction Classification.

Provides reusable substring and regex matching used by the detectors.
Matching is first-match-wins in declared order; there is no scoring.
"""

import logging
import re
from typing import Iterable, Mapping, Optional, Pattern, Sequence, Tuple

logger = logging.getLogger(__name__)


def match_keywords(text: str, keywords: Iterable[str]) -> Optional[str]:
    """
    Match text against a list of keywords.

    Args:
        text: Normalized (lower-case) text to match
        keywords: Keyword strings, tried in order

    Returns:
        The first keyword contained in text, or None

    Example:
        >>> match_keywords("whole foods #123", ["kroger", "whole foods"])
        'whole foods'
    """
    for keyword in keywords:
        if keyword.lower() in text:
            return keyword
    return None


def compile_patterns(
    patterns: Sequence[Tuple[str, str]]
) -> Tuple[Tuple[Pattern, str], ...]:
    """
    Compile (regex, label) pairs case-insensitively.

    Invalid patterns are skipped so a single bad entry never aborts a scan.

    Args:
        patterns: Ordered (regex, label) pairs

    Returns:
        Ordered (compiled_regex, label) pairs
    """
    compiled = []
    for pattern, label in patterns:
        try:
            compiled.append((re.compile(pattern, re.IGNORECASE), label))
        except re.error as e:
            logger.debug("Skipping invalid pattern %r (%s): %s", pattern, label, e)
    return tuple(compiled)


def match_regex_patterns(
    text: str,
    patterns: Sequence[Tuple[Pattern, str]]
) -> Optional[str]:
    """
    Match text against compiled regex patterns.

    Args:
        text: Text to match
        patterns: Ordered (compiled_regex, label) pairs

    Returns:
        Label of the first matching pattern, or None
    """
    for regex, label in patterns:
        if regex.search(text):
            return label
    return None


def pattern_matches(pattern: str, text: str) -> bool:
    """True if the regex matches text (case-insensitive); invalid regex never matches."""
    try:
        return re.search(pattern, text, re.IGNORECASE) is not None
    except re.error:
        return False


def match_pattern_dict(
    text: str,
    pattern_dict: Mapping[str, Sequence[str]]
) -> Optional[Tuple[str, str]]:
    """
    Match text against a category -> keywords dictionary.

    Categories are tried in the dictionary's order and keywords in list
    order; the first hit wins.

    Args:
        text: Normalized (lower-case) text to match
        pattern_dict: Category name -> keyword list

    Returns:
        Tuple of (category_name, matched_keyword) or None
    """
    for category_name, keywords in pattern_dict.items():
        keyword = match_keywords(text, keywords)
        if keyword is not None:
            return category_name, keyword
    return None
