"""PSA public API client for certificate lookups."""

import logging
import time
from typing import Any, Dict, Optional

from ..core.types import CertificateRecord, GradeAuthority
from ..parse.grade import parse_grade_value
from ..parse.regexes import parse_year
from ..utils.error_handler import (
    ConfigurationError,
    ErrorContext,
    ParseError,
    SourceUnavailableError,
    validate_required_fields,
)
from ..utils.http import RateLimitedClient
from ..utils.retry import retry

BASE_URL = "https://api.psacard.com/publicapi"
TOKEN_REFRESH_MARGIN_S = 60


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def certificate_from_payload(payload: Dict[str, Any]) -> CertificateRecord:
    """
    Map a ``GetByCertNumber`` response to a CertificateRecord.

    Raises:
        ParseError: If the payload carries no certificate block.
    """
    cert = payload.get("PSACert") if isinstance(payload, dict) else None
    if not isinstance(cert, dict):
        raise ParseError("PSA response has no certificate", details={"keys": sorted(payload) if isinstance(payload, dict) else []})
    validate_required_fields(
        cert, ["CertNumber"], ErrorContext("certificate_lookup", "psa", "certificate_from_payload")
    )

    grade_text = _clean(cert.get("CardGrade"))
    variety = _clean(cert.get("Variety"))
    return CertificateRecord(
        cert_number=str(cert["CertNumber"]),
        year=parse_year(str(cert.get("Year") or "")),
        set_name=_clean(cert.get("Brand")),
        player=_clean(cert.get("Subject")),
        card_number=_clean(cert.get("CardNumber")),
        numeric_grade=parse_grade_value(grade_text),
        variety=variety,
        parallel=variety,
        authority=GradeAuthority.PSA,
        grade_description=_clean(cert.get("GradeDescription")) or grade_text,
    )


class PSAClient(RateLimitedClient):
    """Certificate lookups with a cached OAuth password-grant token."""

    source_name = "psa"

    def __init__(
        self,
        username: Optional[str],
        password: Optional[str],
        min_request_interval: float = 0.5,
        timeout_s: float = 10.0,
    ):
        super().__init__(BASE_URL, min_request_interval=min_request_interval, timeout_s=timeout_s)
        self.username = username
        self.password = password
        self._access_token: Optional[str] = None
        self._token_expiry = 0.0

    def is_configured(self) -> bool:
        return bool(self.username and self.password)

    @retry(
        max_attempts=2,
        base_delay=0.5,
        exceptions=SourceUnavailableError,
        logger=logging.getLogger(__name__),
        context=ErrorContext("token_request", "psa", "_fetch_token"),
    )
    async def _fetch_token(self) -> Dict[str, Any]:
        try:
            return await self._request_with_backoff(
                "POST",
                f"{self.base_url}/token",
                data={"grant_type": "password", "username": self.username, "password": self.password},
            )
        except SourceUnavailableError as e:
            if e.details.get("status") in (400, 401, 403):
                raise ConfigurationError("PSA authentication rejected", details={"status": e.details["status"]}) from e
            raise

    async def get_access_token(self) -> str:
        if self._access_token and self._token_expiry > time.time():
            return self._access_token
        if not self.is_configured():
            raise ConfigurationError("PSA credentials not configured")

        self.logger.info("Requesting PSA token", username=f"{self.username[:3]}***")
        data = await self._fetch_token()
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise SourceUnavailableError("PSA token response has no access_token")
        self._access_token = token
        self._token_expiry = time.time() + float(data.get("expires_in", 3600)) - TOKEN_REFRESH_MARGIN_S
        return token

    async def lookup_certificate(self, cert_number: str) -> Optional[CertificateRecord]:
        """Look up a graded card by certificate number. None when PSA has no such cert."""
        cert_number = str(cert_number).strip()
        context = self.log_start("lookup_certificate", cert_number=cert_number)
        token = await self.get_access_token()
        try:
            payload = await self._request_with_backoff(
                "GET",
                f"{self.base_url}/cert/GetByCertNumber/{cert_number}",
                headers={"Authorization": f"Bearer {token}"},
            )
        except SourceUnavailableError as e:
            if e.details.get("status") == 404:
                self.log_success(context, found=False)
                return None
            self.log_error(context, e)
            raise

        try:
            record = certificate_from_payload(payload)
        except ParseError:
            self.log_success(context, found=False)
            return None
        self.log_success(context, found=True, grade=record.numeric_grade)
        return record
