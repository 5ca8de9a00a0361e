"""Card Snipe - exact identity resolution and deal scoring for graded sports card listings."""

__version__ = "1.0.0"
__description__ = "Resolve graded card listings to verified market values and score the deals"

from .core.types import (
    CardIdentity,
    DealScoreResult,
    GradeInfo,
    IdentityHints,
    Listing,
    PriceQuote,
    ResolutionResult,
)
from .pipeline import DealPipeline, build_pipeline
from .reference.catalog import load_catalog, load_catalog_file
from .utils.config import settings

# Core functionality imports
from .utils.log import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__description__",
    # Core components
    "CardIdentity",
    "DealPipeline",
    "DealScoreResult",
    "GradeInfo",
    "IdentityHints",
    "Listing",
    "PriceQuote",
    "ResolutionResult",
    "build_pipeline",
    "configure_logging",
    "get_logger",
    "load_catalog",
    "load_catalog_file",
    "settings",
]
