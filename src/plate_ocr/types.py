"""Type definitions for the plate OCR module.

This module defines the data structures passed between the OCR collaborators,
the candidate ranking engine and callers: recognition outputs, raw tokens,
scored candidates, per-pass outcomes and the final extraction report.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class SegmentationMode(Enum):
    """Page segmentation strategy used for one OCR pass."""

    AUTO = "auto"  # Fully automatic page segmentation
    SINGLE_BLOCK = "single_block"  # Assume a single uniform block of text
    SINGLE_LINE = "single_line"  # Treat the image as a single text line

    @property
    def label(self) -> str:
        """Human-readable pass name, used as the token source."""
        return _MODE_LABELS[self]


_MODE_LABELS = {
    SegmentationMode.AUTO: "Auto",
    SegmentationMode.SINGLE_BLOCK: "Single Block",
    SegmentationMode.SINGLE_LINE: "Single Line",
}


class ExtractionSource(Enum):
    """Which collaborator produced the final plate string."""

    REMOTE = "remote"
    OCR = "ocr"
    NONE = "none"


@dataclass
class RecognizedWord:
    """Single word reported by the OCR engine.

    Attributes:
        text: Word text as recognized (unnormalized).
        confidence: Recognizer confidence (0-100).
    """

    text: str
    confidence: float


@dataclass
class RecognitionOutput:
    """Output of one OCR pass.

    Attributes:
        full_text: Full transcription of the image for this pass.
        words: Word-level transcriptions with confidences.
    """

    full_text: str
    words: List[RecognizedWord] = field(default_factory=list)


@dataclass
class RawToken:
    """Candidate token collected from a recognition pass.

    Attributes:
        text: Token text (normalized once collected by the orchestrator).
        confidence: Recognizer confidence (0-100).
        source: Pass that produced it, e.g. "Auto" or "Auto-full".
        sequence: Stable collection index used to break score ties.
    """

    text: str
    confidence: float
    source: str
    sequence: int = 0


@dataclass
class ScoredCandidate:
    """A normalized, filtered token with its plausibility score."""

    token: RawToken
    score: float

    @property
    def text(self) -> str:
        return self.token.text


@dataclass
class PassOutcome:
    """Result of a single OCR pass.

    A failed pass carries the error and no tokens, which keeps it
    distinguishable from a pass that succeeded without any candidates.

    Attributes:
        mode: Segmentation mode of the pass.
        success: Whether the OCR engine call completed.
        tokens: Tokens collected from the pass (empty on failure).
        error: Error message if the pass failed.
    """

    mode: SegmentationMode
    success: bool
    tokens: List[RawToken] = field(default_factory=list)
    error: Optional[str] = None

    def is_failure(self) -> bool:
        return not self.success


@dataclass
class RemoteGuess:
    """Plate guess from the remote recognition service.

    Attributes:
        plate: Plate string as returned by the service.
        score: Service confidence (0.0-1.0).
    """

    plate: str
    score: float


@dataclass
class ExtractionResult:
    """Full report of one extraction.

    Attributes:
        text: Selected plate string, empty when nothing plausible was found.
        source: Collaborator that produced ``text``.
        candidates: Scored candidates in collection order (OCR path only).
        passes: Outcome of every OCR pass that ran.
        remote_guesses: Guesses returned by the remote service, if called.
        processing_time_ms: Total processing time in milliseconds.
    """

    text: str
    source: ExtractionSource
    candidates: List[ScoredCandidate] = field(default_factory=list)
    passes: List[PassOutcome] = field(default_factory=list)
    remote_guesses: List[RemoteGuess] = field(default_factory=list)
    processing_time_ms: float = 0.0

    def is_empty(self) -> bool:
        """Check whether no plate string was found.

        Returns:
            True if the caller has to fall back to manual entry.
        """
        return not self.text


class PlateOCRError(Exception):
    """Base class for plate OCR errors."""


class InvalidImageError(PlateOCRError, ValueError):
    """Input image is missing, unreadable, too large or of a wrong format."""


class RecognitionError(PlateOCRError):
    """An OCR pass failed."""


class RemoteServiceError(PlateOCRError):
    """The remote plate recognition service failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
