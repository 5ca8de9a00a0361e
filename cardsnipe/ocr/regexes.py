"""Regex patterns for certificate numbers read off slab labels."""

import re
from typing import List, Optional, Pattern

# Labelled forms first ("CERT # 12345678", "CERTIFICATION #12345678"),
# then a bare 8-digit run as printed beside the label barcode.
CERT_NUMBER_PATTERNS: List[Pattern] = [
    re.compile(r'CERT(?:IFICATION)?\s*(?:NO\.?|NUMBER|#)?\s*[:#]?\s*(\d{6,9})\b', re.IGNORECASE),
    re.compile(r'(?<!\d)(\d{8})(?!\d)'),
]


def parse_certificate_number(text: str) -> Optional[str]:
    """
    Return the first certificate number found in OCR text.

    Examples:
        >>> parse_certificate_number("2019 HOOPS PREMIUM STOCK CERT # 48213377")
        '48213377'
        >>> parse_certificate_number("GEM MT 10 #87") is None
        True
    """
    for pattern in CERT_NUMBER_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return match.group(1)
    return None
