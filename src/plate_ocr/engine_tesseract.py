"""Tesseract OCR engine wrapper for plate recognition.

This module runs a single Tesseract pass over a plate image with a given page
segmentation mode and returns the full transcription together with the
word-level tokens and their confidences.

Example:
    >>> from src.plate_ocr import TesseractEngine, TesseractConfig
    >>> engine = TesseractEngine(TesseractConfig())
    >>> output = engine.recognize(image, SegmentationMode.SINGLE_LINE)
    >>> print(output.full_text, [w.text for w in output.words])
    'ABC 123' ['ABC', '123']
"""

import logging
from typing import Dict, List, Tuple

import cv2
import numpy as np
import pytesseract

from .config_loader import TesseractConfig
from .types import RecognitionError, RecognitionOutput, RecognizedWord, SegmentationMode

logger = logging.getLogger(__name__)


class TesseractEngine:
    """Wrapper for Tesseract OCR with per-pass segmentation modes.

    Args:
        config: Tesseract engine configuration.

    Attributes:
        config: Engine configuration instance.
    """

    def __init__(self, config: TesseractConfig):
        """Initialize Tesseract engine wrapper.

        Args:
            config: Tesseract engine configuration.
        """
        self.config = config
        logger.info(
            f"TesseractEngine initialized: lang={config.lang}, "
            f"modes={[m.value for m in config.modes]}"
        )

    def is_available(self) -> bool:
        """Check if the Tesseract binary can be found.

        Returns:
            True if Tesseract reports a version.
        """
        try:
            version = pytesseract.get_tesseract_version()
            logger.debug(f"Tesseract version {version}")
            return True
        except Exception as e:
            logger.error(f"Tesseract not found or not properly configured: {e}")
            return False

    def build_config(self, mode: SegmentationMode) -> str:
        """Build the Tesseract command line options for one pass.

        Args:
            mode: Segmentation mode of the pass.

        Returns:
            Option string such as ``"--psm 7"``.
        """
        options = f"--psm {self.config.psm[mode]}"
        if self.config.char_whitelist:
            options += f" -c tessedit_char_whitelist={self.config.char_whitelist}"
        return options

    def recognize(self, image: np.ndarray, mode: SegmentationMode) -> RecognitionOutput:
        """Run one OCR pass.

        Args:
            image: Image as numpy array (H, W), (H, W, 1) or BGR (H, W, 3).
            mode: Segmentation mode for this pass.

        Returns:
            RecognitionOutput with full text and word tokens.

        Raises:
            RecognitionError: If the image is invalid or Tesseract fails.
        """
        if image is None or image.size == 0:
            raise RecognitionError("Invalid image: empty or None")

        if image.ndim == 3:
            if image.shape[2] == 3:
                image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
            elif image.shape[2] == 4:
                image = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
            elif image.shape[2] == 1:
                image = image[:, :, 0]
        if image.ndim != 2:
            raise RecognitionError(f"Invalid image shape: {image.shape}")

        tesseract_config = self.build_config(mode)
        logger.debug(f"Running Tesseract ({mode.label}) with config: {tesseract_config}")

        try:
            data = pytesseract.image_to_data(
                image,
                lang=self.config.lang,
                config=tesseract_config,
                output_type=pytesseract.Output.DICT,
                timeout=self.config.timeout,
            )
        except Exception as e:
            raise RecognitionError(f"Tesseract {mode.label} pass failed: {e}") from e

        words, full_text = self._parse_data(data)

        logger.debug(f"{mode.label} - Raw text: {full_text!r}")
        logger.debug(
            f"{mode.label} - Words: "
            f"{[f'{w.text}({w.confidence:.0f}%)' for w in words]}"
        )

        return RecognitionOutput(full_text=full_text, words=words)

    def _parse_data(self, data: Dict[str, list]) -> Tuple[List[RecognizedWord], str]:
        """Convert ``image_to_data`` output into words and full text.

        Rows with empty text or negative confidence (layout rows) are skipped.
        Words on the same line are joined with spaces, lines with newlines.

        Args:
            data: Dictionary returned by ``pytesseract.image_to_data``.

        Returns:
            Tuple of (words in reading order, full transcription).
        """
        words: List[RecognizedWord] = []
        lines: Dict[Tuple[int, int, int], List[str]] = {}

        n_rows = len(data["text"])
        blocks = data.get("block_num") or [0] * n_rows
        pars = data.get("par_num") or [0] * n_rows
        line_nums = data.get("line_num") or [0] * n_rows

        for i in range(n_rows):
            text = str(data["text"][i]).strip()
            conf = float(data["conf"][i])

            if not text or conf < 0:
                continue

            words.append(RecognizedWord(text=text, confidence=conf))

            line_key = (int(blocks[i]), int(pars[i]), int(line_nums[i]))
            lines.setdefault(line_key, []).append(text)

        full_text = "\n".join(" ".join(parts) for parts in lines.values())
        return words, full_text
