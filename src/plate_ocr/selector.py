"""Remote-first plate text extraction.

When a Plate Recognizer API key is configured, the remote service is asked
first and its top guess is returned as-is (upper-cased, separators kept).
A remote error or an empty guess list falls through to local multi-pass OCR.
Remote and local candidates are never pooled: a usable remote answer
short-circuits the OCR passes entirely.

Example:
    >>> extractor = PlateTextExtractor()
    >>> text = extractor.extract("plate.jpg")
    >>> if not text:
    ...     print("Could not extract plate number. Please enter it manually.")
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import List, Optional, Tuple

from .config_loader import Config, get_default_config, load_config
from .engine_tesseract import TesseractEngine
from .image_loader import ImageSource, PlateImage, load_image
from .orchestrator import MultiPassOrchestrator
from .remote_client import PlateRecognizerClient
from .types import ExtractionResult, ExtractionSource, RemoteGuess

logger = logging.getLogger(__name__)


class PlateTextExtractor:
    """Extracts a plate string from an image.

    Configuration is read once at construction; a running extractor is not
    affected by later configuration changes.

    Args:
        config: Configuration object. If None, uses the bundled defaults.
        engine: OCR engine exposing ``recognize(image, mode)``. Defaults to
            TesseractEngine.
        remote_client: Remote client exposing ``recognize_plate(bytes)``.
            Only used when an API key is configured; built on demand.

    Attributes:
        config: Full configuration object
        orchestrator: Local multi-pass OCR orchestrator
        remote_client: Remote client, None when no API key is configured
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        engine=None,
        remote_client=None,
    ):
        self.config: Config = config if config is not None else get_default_config()
        module_config = self.config.plate_ocr

        if engine is None:
            engine = TesseractEngine(config=module_config.engine)
        self.orchestrator = MultiPassOrchestrator(engine=engine, config=module_config)

        if module_config.remote.enabled:
            self.remote_client = remote_client or PlateRecognizerClient(module_config.remote)
            logger.info("Remote plate recognition enabled")
        else:
            self.remote_client = None
            logger.info("No API key configured. Using local OCR only")

    @classmethod
    def from_config_file(cls, config_path: Path, **kwargs) -> "PlateTextExtractor":
        return cls(config=load_config(config_path), **kwargs)

    def _load(self, image: ImageSource) -> PlateImage:
        return load_image(image, self.config.plate_ocr.image)

    def _try_remote(self, image: PlateImage) -> Tuple[Optional[str], List[RemoteGuess]]:
        """Ask the remote service once.

        Returns:
            Tuple of (upper-cased first plate or None, all guesses).
        """
        logger.info("Using Plate Recognizer API...")
        try:
            guesses = self.remote_client.recognize_plate(image.to_bytes(), filename=image.filename)
        except Exception as e:
            logger.warning(f"Plate Recognizer API failed: {e}")
            logger.info("Falling back to local OCR...")
            return None, []

        if guesses and guesses[0].plate:
            plate = guesses[0].plate.upper()
            logger.info(f"Plate Recognizer API succeeded: {plate}")
            return plate, guesses

        logger.info("Plate Recognizer API returned no plates, falling back to local OCR...")
        return None, guesses

    def extract_report(self, image: ImageSource) -> ExtractionResult:
        """Extract the plate string and return a full diagnostic report.

        Args:
            image: File path, encoded bytes, numpy array or PlateImage.

        Returns:
            ExtractionResult; ``text`` is empty if nothing plausible was found.

        Raises:
            InvalidImageError: If the image cannot be used.
        """
        start_time = time.perf_counter()
        plate_image = self._load(image)

        guesses: List[RemoteGuess] = []
        if self.remote_client is not None:
            plate, guesses = self._try_remote(plate_image)
            if plate:
                return ExtractionResult(
                    text=plate,
                    source=ExtractionSource.REMOTE,
                    remote_guesses=guesses,
                    processing_time_ms=(time.perf_counter() - start_time) * 1000,
                )

        result = self.orchestrator.extract_report(plate_image.array)
        result.remote_guesses = guesses
        result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        return result

    async def extract_report_async(self, image: ImageSource) -> ExtractionResult:
        """Coroutine form of ``extract_report``; OCR passes run concurrently."""
        start_time = time.perf_counter()
        plate_image = await asyncio.to_thread(self._load, image)

        guesses: List[RemoteGuess] = []
        if self.remote_client is not None:
            plate, guesses = await asyncio.to_thread(self._try_remote, plate_image)
            if plate:
                return ExtractionResult(
                    text=plate,
                    source=ExtractionSource.REMOTE,
                    remote_guesses=guesses,
                    processing_time_ms=(time.perf_counter() - start_time) * 1000,
                )

        result = await self.orchestrator.extract_report_async(plate_image.array)
        result.remote_guesses = guesses
        result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        return result

    def extract(self, image: ImageSource) -> str:
        """Return the plate string, or an empty string if none was found."""
        return self.extract_report(image).text

    async def extract_async(self, image: ImageSource) -> str:
        return (await self.extract_report_async(image)).text

    def close(self) -> None:
        """Release the remote client's network session, if any."""
        if self.remote_client is not None and hasattr(self.remote_client, "close"):
            self.remote_client.close()


async def extract_plate_text(image: ImageSource, config: Optional[Config] = None) -> str:
    """Extract a plate string from an image.

    Args:
        image: File path, encoded bytes, numpy array or PlateImage.
        config: Optional configuration, defaults to the bundled config.

    Returns:
        Plate string, empty if no plausible candidate was found.

    Raises:
        InvalidImageError: If the image cannot be used.
    """
    extractor = PlateTextExtractor(config=config)
    try:
        return await extractor.extract_async(image)
    finally:
        extractor.close()
