"""Candidate normalization and noise filtering.

OCR tokens are reduced to upper-case ASCII letters and digits before any
plate-specific policy is applied. Tokens that exactly match a known non-plate
word (jurisdiction names, registration boilerplate) are treated as noise.

Example:
    >>> normalize("abc-123")
    'ABC123'
    >>> is_noise("CALIFORNIA")
    True
"""

import re
from typing import AbstractSet, Iterable, Optional

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")

NOISE_VOCABULARY: frozenset = frozenset(
    {
        "OF",
        "THE",
        "STATE",
        "USA",
        "GOV",
        "GOVT",
        "CALIFORNIA",
        "TEXAS",
        "FLORIDA",
        "NEWYORK",
        "ILLINOIS",
        "REGISTRATION",
        "EXPIRES",
        "LICENSE",
        "PLATE",
    }
)


def normalize(raw_text: Optional[str]) -> str:
    """Strip non-alphanumeric characters and upper-case the remainder.

    Args:
        raw_text: Raw OCR token (may be None or empty)

    Returns:
        Normalized token matching ``^[A-Z0-9]*$``

    Example:
        >>> normalize(" 7ab c-12 ")
        '7ABC12'
    """
    if not raw_text:
        return ""
    return _NON_ALNUM.sub("", raw_text).upper()


def is_within_length(text: str, min_length: int, max_length: int) -> bool:
    """Check whether a normalized token length lies in [min_length, max_length]."""
    return min_length <= len(text) <= max_length


def is_noise(text: str, vocabulary: AbstractSet[str] = NOISE_VOCABULARY) -> bool:
    """Check whether a normalized token is a known non-plate word.

    Args:
        text: Normalized (upper-case) token
        vocabulary: Noise words to match against

    Returns:
        True if ``text`` exactly equals a vocabulary member
    """
    return text in vocabulary


def build_vocabulary(extra_words: Iterable[str] = ()) -> frozenset:
    """Return the built-in noise vocabulary extended with ``extra_words``."""
    extra = {normalize(word) for word in extra_words}
    extra.discard("")
    if not extra:
        return NOISE_VOCABULARY
    return NOISE_VOCABULARY | extra
