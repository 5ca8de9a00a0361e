"""Configuration and settings management."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator
from pathlib import Path
import shutil

DEFAULT_CATALOG_PATH = str(Path(__file__).parent.parent / "data" / "card_sets.json")


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"

    # Reference catalog and local price data
    CATALOG_PATH: str = DEFAULT_CATALOG_PATH
    LOCAL_PRICE_DB_PATH: str = "cache/prices.db"

    # Resolution cache
    CACHE_TTL_SECONDS: int = 3600
    CACHE_MAX_ENTRIES: int = 5000

    # External catalog API (SportsCardsPro)
    SPORTSCARDPRO_TOKEN: Optional[str] = None
    EXTERNAL_CANDIDATE_LIMIT: int = 5

    # Certificate authority (PSA)
    PSA_USERNAME: Optional[str] = None
    PSA_PASSWORD: Optional[str] = None

    # Collaborator HTTP behaviour
    MIN_REQUEST_INTERVAL_S: float = 0.5
    REQUEST_TIMEOUT_S: float = 10.0

    # Scraped sold listings
    SCRAPED_SALES_ENABLED: bool = False
    SCRAPED_SALES_MIN_SAMPLES: int = 3

    # Pipeline
    BATCH_SIZE: int = 10
    MIN_DEAL_SCORE: int = 10

    # OCR settings
    OCR_ENABLED: bool = True
    TESSERACT_PATH: Optional[str] = None

    @field_validator('SPORTSCARDPRO_TOKEN', 'PSA_USERNAME', 'PSA_PASSWORD', 'TESSERACT_PATH', mode='before')
    @classmethod
    def validate_optional_secret(cls, v):
        """Convert empty/whitespace strings to None."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "INFO"
        return v

    @field_validator('CATALOG_PATH', mode='before')
    @classmethod
    def validate_catalog_path(cls, v):
        """Convert empty/whitespace strings to the bundled catalog."""
        if isinstance(v, str) and not v.strip():
            return DEFAULT_CATALOG_PATH
        return v

    @field_validator('LOCAL_PRICE_DB_PATH', mode='before')
    @classmethod
    def validate_price_db_path(cls, v):
        """Convert empty/whitespace strings to default."""
        if isinstance(v, str) and not v.strip():
            return "cache/prices.db"
        return v

    @property
    def has_psa_credentials(self) -> bool:
        return bool(self.PSA_USERNAME and self.PSA_PASSWORD)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


# Global settings instance
settings = Settings()


def ensure_cache_dir(db_path: Optional[str] = None) -> Path:
    """Ensure the directory holding the local price database exists."""
    path = Path(db_path or settings.LOCAL_PRICE_DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def resolve_tesseract_path(configured: Optional[str] = None) -> str:
    """Get Tesseract path, with fallback to common locations."""
    configured = configured or settings.TESSERACT_PATH
    if configured and Path(configured).exists():
        return configured

    tesseract_path = shutil.which("tesseract")
    if tesseract_path:
        return tesseract_path

    common_paths = [
        "/opt/homebrew/bin/tesseract",  # Apple Silicon Homebrew
        "/usr/local/bin/tesseract",     # Intel Homebrew
        "/usr/bin/tesseract",           # System package
    ]

    for path in common_paths:
        if Path(path).exists():
            return path

    raise FileNotFoundError(
        "Tesseract not found. Please install tesseract-ocr or set TESSERACT_PATH"
    )
