"""
OCR module for reading grading certificate numbers from listing images.
"""

from .extract import CertificateOCR, CertificateReading, decode_image, preprocess_label
from .regexes import CERT_NUMBER_PATTERNS, parse_certificate_number

__all__ = [
    "CERT_NUMBER_PATTERNS",
    "CertificateOCR",
    "CertificateReading",
    "decode_image",
    "parse_certificate_number",
    "preprocess_label",
]
