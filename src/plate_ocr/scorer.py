"""Plausibility scoring for plate candidates.

A candidate's score is the sum of four heuristic terms:

1. **Confidence**: ``confidence / 100 * confidence_weight`` (default 30)
2. **Length**: first matching band wins, 5-7 -> +30, 4-8 -> +20, 3-9 -> +10
3. **Character mix**: letters and digits -> +40, one class only -> +15
4. **All-letters penalty**: letters only and longer than 4 -> -20

The character mix carries the largest weight since it separates plates from
incidental words best. OCR confidence on cluttered backgrounds is noisy and
is kept below the structural terms. Scores are unbounded; only their relative
order matters.
"""

import logging
import re
from typing import Optional

from .config_loader import ScoringConfig
from .types import RawToken, ScoredCandidate

logger = logging.getLogger(__name__)

_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"[0-9]")

_DEFAULT_SCORING = ScoringConfig()


def score(text: str, confidence: float, config: Optional[ScoringConfig] = None) -> float:
    """Score a normalized candidate.

    Args:
        text: Normalized candidate text
        confidence: Recognizer confidence (0-100)
        config: Scoring weights, defaults to ScoringConfig()

    Returns:
        Plausibility score (higher is more plate-like)

    Example:
        >>> score("ABC123", 100.0)
        100.0
    """
    config = config or _DEFAULT_SCORING
    total = (confidence / 100.0) * config.confidence_weight

    length = len(text)
    for band in config.length_bands:
        if band.min_length <= length <= band.max_length:
            total += band.bonus
            break

    has_letters = bool(_LETTER.search(text))
    has_digits = bool(_DIGIT.search(text))
    if has_letters and has_digits:
        total += config.mixed_bonus
    elif has_letters or has_digits:
        total += config.single_class_bonus

    # Long all-letter tokens are usually words, not plates
    if has_letters and not has_digits and length > config.all_letters_max_length:
        total -= config.all_letters_penalty

    return total


class CandidateScorer:
    """Scores collected tokens with a fixed set of weights.

    Args:
        config: Scoring weights.
    """

    def __init__(self, config: ScoringConfig):
        self.config = config

    def score_token(self, token: RawToken) -> ScoredCandidate:
        candidate = ScoredCandidate(
            token=token, score=score(token.text, token.confidence, self.config)
        )
        logger.debug(
            f"Candidate '{token.text}' | length={len(token.text)} | "
            f"confidence={token.confidence:.0f}% | score={candidate.score:.1f} | "
            f"source={token.source}"
        )
        return candidate
