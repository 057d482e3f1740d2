"""Unit tests for input image validation."""

from pathlib import Path
from unittest.mock import patch

import cv2
import numpy as np
import pytest

from src.plate_ocr.config_loader import ImageConfig
from src.plate_ocr.image_loader import PlateImage, detect_format, load_image
from src.plate_ocr.types import InvalidImageError


def encode(image, extension):
    ok, buffer = cv2.imencode(extension, image)
    assert ok
    return buffer.tobytes()


@pytest.fixture
def png_bytes(sample_plate_image):
    return encode(sample_plate_image, ".png")


@pytest.fixture
def jpeg_bytes(sample_plate_image):
    return encode(sample_plate_image, ".jpg")


class TestDetectFormat:
    """Test magic byte detection."""

    def test_known_formats(self, png_bytes, jpeg_bytes):
        assert detect_format(png_bytes) == "png"
        assert detect_format(jpeg_bytes) == "jpeg"
        assert detect_format(b"RIFF\x24\x00\x00\x00WEBPVP8 ") == "webp"

    def test_unknown_format(self):
        assert detect_format(b"GIF89a....") is None
        assert detect_format(b"") is None


class TestLoadFromBytes:
    """Test loading encoded bytes."""

    def test_png(self, png_bytes, sample_plate_image):
        """Test PNG bytes are decoded and kept for upload."""
        image = load_image(png_bytes)

        assert image.format == "png"
        assert image.array.shape == sample_plate_image.shape
        assert image.to_bytes() == png_bytes
        assert image.filename == "plate.png"

    def test_jpeg(self, jpeg_bytes):
        """Test JPEG bytes are accepted."""
        image = load_image(bytearray(jpeg_bytes))

        assert image.format == "jpeg"
        assert image.filename == "plate.jpg"

    def test_unsupported_format(self):
        """Test non JPEG/PNG/WebP data is rejected."""
        with pytest.raises(InvalidImageError, match="JPEG, PNG, or WebP"):
            load_image(b"GIF89a" + b"\x00" * 32)

    def test_format_not_allowed(self, jpeg_bytes):
        """Test formats can be restricted by configuration."""
        with pytest.raises(InvalidImageError):
            load_image(jpeg_bytes, ImageConfig(allowed_formats=["png"]))

    def test_too_large(self, png_bytes):
        """Test the size limit."""
        with pytest.raises(InvalidImageError, match="too large"):
            load_image(png_bytes, ImageConfig(max_bytes=len(png_bytes) - 1))

    def test_corrupt_data(self):
        """Test data with a valid header but no image is rejected."""
        with pytest.raises(InvalidImageError, match="decode"):
            load_image(b"\x89PNG\r\n\x1a\n" + b"not really a png")

    def test_empty(self):
        with pytest.raises(InvalidImageError, match="empty"):
            load_image(b"")


class TestLoadFromPath:
    """Test loading image files."""

    def test_existing_file(self, tmp_path, png_bytes):
        path = tmp_path / "car.png"
        path.write_bytes(png_bytes)

        image = load_image(path)

        assert image.format == "png"
        assert image.data == png_bytes

    def test_string_path(self, tmp_path, jpeg_bytes):
        path = tmp_path / "car.jpg"
        path.write_bytes(jpeg_bytes)

        assert load_image(str(path)).format == "jpeg"

    def test_too_large_file_not_read(self, tmp_path, png_bytes):
        """Test an oversized file is rejected from its size without reading it."""
        path = tmp_path / "huge.png"
        path.write_bytes(png_bytes)

        with patch.object(Path, "read_bytes") as read_bytes:
            with pytest.raises(InvalidImageError, match="too large"):
                load_image(path, ImageConfig(max_bytes=len(png_bytes) - 1))

        read_bytes.assert_not_called()

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidImageError, match="not found"):
            load_image(tmp_path / "missing.jpg")


class TestLoadFromArray:
    """Test wrapping decoded arrays."""

    def test_color_array(self, sample_plate_image):
        image = load_image(sample_plate_image)

        assert image.array is sample_plate_image
        assert image.data is None
        assert image.to_bytes().startswith(b"\x89PNG")

    def test_gray_array(self):
        image = load_image(np.zeros((20, 60), dtype=np.uint8))
        assert image.array.ndim == 2

    @pytest.mark.parametrize(
        "array",
        [
            np.array([], dtype=np.uint8),
            np.zeros((4,), dtype=np.uint8),
            np.zeros((20, 60), dtype=np.float32),
        ],
    )
    def test_invalid_arrays(self, array):
        with pytest.raises(InvalidImageError):
            load_image(array)

    def test_plate_image_passthrough(self, sample_plate_image):
        image = PlateImage(array=sample_plate_image)
        assert load_image(image) is image

    def test_unsupported_source(self):
        with pytest.raises(InvalidImageError, match="Unsupported image source"):
            load_image(12345)
