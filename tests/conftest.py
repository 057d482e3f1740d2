"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest


@pytest.fixture(autouse=True)
def no_api_key_env(monkeypatch):
    """Keep a developer's PLATE_RECOGNIZER_API_KEY out of the tests."""
    monkeypatch.delenv("PLATE_RECOGNIZER_API_KEY", raising=False)


@pytest.fixture
def sample_plate_image():
    """Fixture providing a synthetic plate image (white plate, black text)."""
    import cv2
    import numpy as np

    image = np.ones((120, 360, 3), dtype=np.uint8) * 255
    cv2.rectangle(image, (5, 5), (355, 115), (0, 0, 0), 3)
    cv2.putText(
        image,
        "ABC123",
        (40, 80),
        cv2.FONT_HERSHEY_SIMPLEX,
        2.0,
        (0, 0, 0),
        4,
    )
    return image


@pytest.fixture
def make_engine():
    """Fixture building a mock OCR engine with scripted outputs per mode.

    Usage:
        engine = make_engine({SegmentationMode.AUTO: RecognitionOutput(...)})

    Modes without a scripted output return an empty RecognitionOutput. A
    scripted Exception instance is raised instead of returned.
    """
    from unittest.mock import Mock

    from src.plate_ocr.types import RecognitionOutput

    def _make(outputs=None):
        outputs = outputs or {}

        def recognize(image, mode):
            output = outputs.get(mode, RecognitionOutput(full_text=""))
            if isinstance(output, Exception):
                raise output
            return output

        engine = Mock()
        engine.recognize.side_effect = recognize
        return engine

    return _make
