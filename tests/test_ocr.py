"""Tests for certificate-number OCR."""

from unittest.mock import AsyncMock, patch

import cv2
import numpy as np
import pytest

from cardsnipe.ocr import CertificateOCR, decode_image, parse_certificate_number, preprocess_label
from cardsnipe.utils.error_handler import OCRError


def encoded_image(height=200, width=120):
    image = np.full((height, width, 3), 255, dtype=np.uint8)
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


class TestCertificateNumberRegex:
    """Test certificate number pattern extraction."""

    @pytest.mark.parametrize("text,expected", [
        ("2019 HOOPS PREMIUM STOCK CERT # 48213377", "48213377"),
        ("CERTIFICATION NUMBER: 1234567", "1234567"),
        ("cert#123456", "123456"),
        ("LEBRON JAMES\nGEM MT 10\n48213377", "48213377"),
    ])
    def test_valid_numbers(self, text, expected):
        assert parse_certificate_number(text) == expected

    @pytest.mark.parametrize("text", [
        "GEM MT 10 #87",
        "1234567890",
        "PSA 10 2019",
        "",
    ])
    def test_invalid_numbers(self, text):
        assert parse_certificate_number(text) is None

    def test_labelled_number_preferred(self):
        assert parse_certificate_number("11112222 CERT 33334444") == "33334444"


class TestImageHandling:
    """Test decoding and label preprocessing."""

    def test_decode_image(self):
        image = decode_image(encoded_image())
        assert image.shape == (200, 120, 3)

    def test_decode_invalid_bytes(self):
        with pytest.raises(OCRError):
            decode_image(b"not an image")

    def test_preprocess_label_crops_top_band(self):
        image = np.zeros((200, 120, 3), dtype=np.uint8)

        label = preprocess_label(image)

        assert label.shape == (120, 240)
        assert label.ndim == 2


class TestCertificateOCR:
    """Test CertificateOCR class with tesseract mocked."""

    @pytest.fixture
    def ocr(self):
        return CertificateOCR(tesseract_path="/usr/bin/tesseract", timeout_s=1.0)

    def test_reads_label_band(self, ocr):
        image = np.zeros((200, 120, 3), dtype=np.uint8)

        with patch("cardsnipe.ocr.extract.pytesseract.image_to_string",
                   return_value="LEBRON JAMES\nCERT # 48213377") as mock_ocr:
            reading = ocr.read_certificate(image)

        assert reading.certificate_number == "48213377"
        assert mock_ocr.call_count == 1

    def test_falls_back_to_full_image(self, ocr):
        image = np.zeros((200, 120, 3), dtype=np.uint8)

        with patch("cardsnipe.ocr.extract.pytesseract.image_to_string",
                   side_effect=["GEM MT 10", "48213377"]) as mock_ocr:
            reading = ocr.read_certificate(image)

        assert reading.certificate_number == "48213377"
        assert mock_ocr.call_count == 2
        assert "GEM MT 10" in reading.raw_text

    def test_nothing_found(self, ocr):
        with patch("cardsnipe.ocr.extract.pytesseract.image_to_string", return_value=""):
            reading = ocr.read_certificate(np.zeros((50, 50), dtype=np.uint8))

        assert reading.certificate_number is None

    @pytest.mark.asyncio
    async def test_certificate_from_url(self, ocr):
        with patch.object(ocr, "fetch_image", AsyncMock(return_value=encoded_image())), \
             patch("cardsnipe.ocr.extract.pytesseract.image_to_string", return_value="CERT 48213377"):
            number = await ocr.certificate_from_url("https://i.ebayimg.com/slab.jpg")

        assert number == "48213377"

    def test_tesseract_path_resolved_when_not_given(self):
        with patch("cardsnipe.ocr.extract.resolve_tesseract_path", return_value="/opt/tesseract"):
            ocr = CertificateOCR()

        assert ocr.tesseract_path == "/opt/tesseract"
