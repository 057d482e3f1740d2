"""Plate OCR: license plate text extraction.

This module extracts a license plate string from a vehicle photograph. It
asks a remote plate recognition service first when an API key is
configured, and otherwise ranks the candidates of several Tesseract passes.

Core Components:
    - types: Data structures (RawToken, ScoredCandidate, ExtractionResult, etc.)
    - config_loader: Configuration loading with Pydantic validation
    - normalizer: Token normalization and noise vocabulary
    - scorer: Candidate plausibility scoring
    - orchestrator: Multi-pass OCR candidate extraction and ranking
    - selector: Remote-first plate extraction and public entry point

Example:
    >>> import asyncio
    >>> from src.plate_ocr import extract_plate_text
    >>> plate = asyncio.run(extract_plate_text("car.jpg"))
    >>> if not plate:
    ...     print("Please enter the plate number manually.")
"""

from .config_loader import (
    CandidateConfig,
    Config,
    ImageConfig,
    LengthBand,
    NoiseConfig,
    PlateOCRModuleConfig,
    RemoteConfig,
    ScoringConfig,
    TesseractConfig,
    get_default_config,
    load_config,
)
from .engine_tesseract import TesseractEngine
from .image_loader import PlateImage, load_image
from .normalizer import NOISE_VOCABULARY, is_noise, is_within_length, normalize
from .orchestrator import MultiPassOrchestrator
from .remote_client import PlateRecognizerClient
from .scorer import CandidateScorer, score
from .selector import PlateTextExtractor, extract_plate_text
from .types import (
    ExtractionResult,
    ExtractionSource,
    InvalidImageError,
    PassOutcome,
    PlateOCRError,
    RawToken,
    RecognitionError,
    RecognitionOutput,
    RecognizedWord,
    RemoteGuess,
    RemoteServiceError,
    ScoredCandidate,
    SegmentationMode,
)

__all__ = [
    # Types
    "SegmentationMode",
    "ExtractionSource",
    "RecognizedWord",
    "RecognitionOutput",
    "RawToken",
    "ScoredCandidate",
    "PassOutcome",
    "RemoteGuess",
    "ExtractionResult",
    "PlateOCRError",
    "InvalidImageError",
    "RecognitionError",
    "RemoteServiceError",
    # Configuration
    "Config",
    "PlateOCRModuleConfig",
    "TesseractConfig",
    "CandidateConfig",
    "ScoringConfig",
    "LengthBand",
    "NoiseConfig",
    "RemoteConfig",
    "ImageConfig",
    "load_config",
    "get_default_config",
    # Candidates
    "NOISE_VOCABULARY",
    "normalize",
    "is_within_length",
    "is_noise",
    "score",
    "CandidateScorer",
    # Collaborators
    "TesseractEngine",
    "PlateRecognizerClient",
    "PlateImage",
    "load_image",
    # Extraction
    "MultiPassOrchestrator",
    "PlateTextExtractor",
    "extract_plate_text",
]
