"""
Command-line plate extraction.

Reads a vehicle photograph and prints the detected plate string.

Usage:
    # Local OCR only
    python scripts/extract_plate.py car.jpg

    # Ask Plate Recognizer first
    python scripts/extract_plate.py car.jpg --api-key $PLATE_RECOGNIZER_API_KEY

    # Full JSON report with every scored candidate
    python scripts/extract_plate.py car.jpg --json

Exit codes:
    0: plate found, 1: no plausible plate, 2: invalid image or configuration
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.plate_ocr import (  # noqa: E402
    InvalidImageError,
    PlateTextExtractor,
    get_default_config,
    load_config,
)

logger = logging.getLogger(__name__)


def _json_default(value):
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for plate extraction."""
    parser = argparse.ArgumentParser(
        description="Extract a license plate string from an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("image", type=Path, help="Path to a JPEG, PNG or WebP image")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config YAML (default: bundled src/plate_ocr/config.yaml)",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Plate Recognizer API key (overrides config and environment)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full extraction report as JSON",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every candidate and its score",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else get_default_config()
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if args.api_key:
        config.plate_ocr.remote.api_key = args.api_key

    extractor = PlateTextExtractor(config=config)
    try:
        result = asyncio.run(extractor.extract_report_async(args.image))
    except InvalidImageError as e:
        logger.error(str(e))
        return 2
    finally:
        extractor.close()

    if args.json:
        print(json.dumps(asdict(result), indent=2, default=_json_default))
    elif result.text:
        print(result.text)

    if not result.text:
        logger.warning("Could not extract plate number. Please enter it manually.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
