"""Configuration loader with Pydantic validation for the plate OCR module.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .types import SegmentationMode

API_KEY_ENV_VAR = "PLATE_RECOGNIZER_API_KEY"

DEFAULT_PSM: Dict[SegmentationMode, int] = {
    SegmentationMode.AUTO: 3,
    SegmentationMode.SINGLE_BLOCK: 6,
    SegmentationMode.SINGLE_LINE: 7,
}


class TesseractConfig(BaseModel):
    """Tesseract engine configuration.

    Attributes:
        lang: Tesseract language code
        modes: Segmentation modes to run, in pass order
        psm: Tesseract page segmentation mode per segmentation mode; entries
            missing from a partial map keep their defaults
        char_whitelist: Optional tessedit_char_whitelist (zeroes confidences)
        timeout: Per-pass Tesseract timeout in seconds (0 disables it)
    """

    lang: str = "eng"
    modes: List[SegmentationMode] = [
        SegmentationMode.AUTO,
        SegmentationMode.SINGLE_BLOCK,
        SegmentationMode.SINGLE_LINE,
    ]
    psm: Dict[SegmentationMode, int] = DEFAULT_PSM
    char_whitelist: Optional[str] = None
    timeout: float = Field(default=0.0, ge=0.0)

    @field_validator("modes")
    @classmethod
    def _modes_not_empty(cls, value: List[SegmentationMode]) -> List[SegmentationMode]:
        if not value:
            raise ValueError("at least one segmentation mode is required")
        return value

    @model_validator(mode="after")
    def _fill_psm_defaults(self) -> "TesseractConfig":
        self.psm = {**DEFAULT_PSM, **self.psm}
        return self


class CandidateConfig(BaseModel):
    """Candidate collection thresholds.

    Tokens are collected when their normalized length lies inside
    [min_token_length, max_token_length]; only those of at least
    min_plate_length characters are scored.

    Attributes:
        min_token_length: Shortest normalized token kept at collection
        max_token_length: Longest normalized token kept at collection
        min_plate_length: Shortest candidate considered a plausible plate
        full_text_confidence: Confidence assigned to full-text tokens (0-100)
    """

    min_token_length: int = Field(default=2, ge=0)
    max_token_length: int = Field(default=10, ge=1)
    min_plate_length: int = Field(default=3, ge=0)
    full_text_confidence: float = Field(default=50.0, ge=0.0, le=100.0)

    @model_validator(mode="after")
    def _check_window(self) -> "CandidateConfig":
        if self.min_token_length > self.max_token_length:
            raise ValueError("min_token_length must not exceed max_token_length")
        return self


class LengthBand(BaseModel):
    """Inclusive length range rewarded with a fixed bonus."""

    min_length: int = Field(ge=0)
    max_length: int = Field(ge=0)
    bonus: float


class ScoringConfig(BaseModel):
    """Candidate scoring weights.

    Attributes:
        confidence_weight: Points for a 100% confident token
        length_bands: Length bonuses, checked in order, first match wins
        mixed_bonus: Bonus when letters and digits are both present
        single_class_bonus: Bonus when only letters or only digits are present
        all_letters_penalty: Subtracted from long all-letter tokens
        all_letters_max_length: All-letter tokens longer than this are penalized
        min_score: A candidate must score strictly above this to be selected
    """

    confidence_weight: float = 30.0
    length_bands: List[LengthBand] = [
        LengthBand(min_length=5, max_length=7, bonus=30.0),
        LengthBand(min_length=4, max_length=8, bonus=20.0),
        LengthBand(min_length=3, max_length=9, bonus=10.0),
    ]
    mixed_bonus: float = 40.0
    single_class_bonus: float = 15.0
    all_letters_penalty: float = 20.0
    all_letters_max_length: int = 4
    min_score: float = 0.0


class NoiseConfig(BaseModel):
    """Noise vocabulary configuration.

    Attributes:
        extra_words: Words added to the built-in noise vocabulary
    """

    extra_words: List[str] = []

    @field_validator("extra_words")
    @classmethod
    def _upper_case(cls, value: List[str]) -> List[str]:
        return [word.upper() for word in value]


class RemoteConfig(BaseModel):
    """Remote plate recognition service configuration.

    Attributes:
        api_key: Plate Recognizer API token; remote lookup is off when empty
        api_url: Plate reader endpoint
        timeout: Request timeout in seconds
        regions: Optional region codes passed to the service
    """

    api_key: Optional[str] = None
    api_url: str = "https://api.platerecognizer.com/v1/plate-reader/"
    timeout: float = Field(default=10.0, gt=0.0)
    regions: List[str] = []

    @model_validator(mode="after")
    def _api_key_from_env(self) -> "RemoteConfig":
        if not self.api_key:
            self.api_key = os.environ.get(API_KEY_ENV_VAR) or None
        return self

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


class ImageConfig(BaseModel):
    """Input image validation.

    Attributes:
        max_bytes: Maximum encoded image size
        allowed_formats: Accepted encoded formats
    """

    max_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    allowed_formats: List[str] = ["jpeg", "png", "webp"]


class PlateOCRModuleConfig(BaseModel):
    """Complete plate OCR module configuration.

    Attributes:
        engine: Tesseract engine configuration
        candidates: Candidate collection thresholds
        scoring: Candidate scoring weights
        noise: Noise vocabulary configuration
        remote: Remote recognition service configuration
        image: Input image validation
    """

    engine: TesseractConfig = TesseractConfig()
    candidates: CandidateConfig = CandidateConfig()
    scoring: ScoringConfig = ScoringConfig()
    noise: NoiseConfig = NoiseConfig()
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    image: ImageConfig = ImageConfig()


class Config(BaseModel):
    """Root configuration container.

    Attributes:
        plate_ocr: Plate OCR module configuration
    """

    plate_ocr: PlateOCRModuleConfig = Field(default_factory=PlateOCRModuleConfig)


def load_config(config_path: Path) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated Config object with all settings

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config(Path("src/plate_ocr/config.yaml"))
        >>> print(config.plate_ocr.candidates.min_plate_length)
        3
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    # Accept both a flat module section and one wrapped in 'plate_ocr'
    if "plate_ocr" in config_dict:
        config_dict = config_dict["plate_ocr"] or {}

    return Config(plate_ocr=PlateOCRModuleConfig(**config_dict))


def get_default_config() -> Config:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config object loaded from src/plate_ocr/config.yaml
    """
    default_config_path = Path(__file__).parent / "config.yaml"
    if default_config_path.exists():
        return load_config(default_config_path)
    else:
        # Fallback to hardcoded defaults if config file is missing
        return Config()
