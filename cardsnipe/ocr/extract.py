"""OCR extraction of certificate numbers from slab photos."""

import asyncio
from dataclasses import dataclass
from typing import Optional

import aiohttp
import cv2
import numpy as np
import pytesseract

from ..utils.config import resolve_tesseract_path, settings
from ..utils.error_handler import OCRError, SourceUnavailableError
from ..utils.log import LoggerMixin
from .regexes import parse_certificate_number

# Top band of a slab photo, where the grading label sits.
LABEL_ROI = (0.0, 0.3)


@dataclass
class CertificateReading:
    """OCR outcome for one image."""

    certificate_number: Optional[str] = None
    raw_text: str = ""


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes (JPEG, PNG...) to a BGR array."""
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise OCRError("Image could not be decoded", details={"bytes": len(data)})
    return image


def preprocess_label(image: np.ndarray) -> np.ndarray:
    """Crop to the label band, convert to grayscale and binarize with Otsu."""
    height = image.shape[0]
    y1, y2 = int(height * LABEL_ROI[0]), max(1, int(height * LABEL_ROI[1]))
    roi = image[y1:y2]
    if len(roi.shape) == 3:
        gray = cv2.cvtColor(roi, cv2.COLOR_BGR2GRAY)
    else:
        gray = roi
    gray = cv2.resize(gray, None, fx=2.0, fy=2.0, interpolation=cv2.INTER_CUBIC)
    _, thresh = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return thresh


class CertificateOCR(LoggerMixin):
    """Reads a grading certificate number from a listing image."""

    def __init__(self, tesseract_path: Optional[str] = None, timeout_s: Optional[float] = None):
        self.tesseract_path = tesseract_path or resolve_tesseract_path()
        pytesseract.pytesseract.tesseract_cmd = self.tesseract_path
        self.timeout_s = timeout_s or settings.REQUEST_TIMEOUT_S

    def read_certificate(self, image: np.ndarray) -> CertificateReading:
        """OCR the label band, falling back to the whole image."""
        text = pytesseract.image_to_string(preprocess_label(image), config="--psm 6")
        number = parse_certificate_number(text)
        if number is None:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY) if len(image.shape) == 3 else image
            text = f"{text}\n{pytesseract.image_to_string(gray, config='--psm 11')}"
            number = parse_certificate_number(text)

        self.logger.debug("Certificate OCR completed", certificate_number=number)
        return CertificateReading(certificate_number=number, raw_text=text)

    async def fetch_image(self, url: str) -> bytes:
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    response.raise_for_status()
                    return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SourceUnavailableError("Image download failed", details={"url": url, "error": str(e)}) from e

    async def certificate_from_url(self, url: str) -> Optional[str]:
        """Download an image and return the certificate number read from it, if any."""
        context = self.log_start("certificate_from_url", url=url)
        data = await self.fetch_image(url)
        image = decode_image(data)
        reading = await asyncio.to_thread(self.read_certificate, image)
        self.log_success(context, certificate_number=reading.certificate_number)
        return reading.certificate_number
