from typing import Final, List, Tuple

# Identity parsing
AUTOGRAPH_TOKENS: Final[Tuple[str, ...]] = ("auto", "autograph", "autographs", "autographed", "signed")
SIMPLE_COLOR_SUFFIXES: Final[Tuple[str, ...]] = ("refractor", "holo")
BRAND_PREFIXES: Final[Tuple[str, ...]] = ("panini", "topps", "upper deck", "leaf")
# Slab-label wording that names a colour without being a parallel.
LABEL_NOISE_PHRASES: Final[Tuple[str, ...]] = (
    "pristine black label", "black label", "gold label", "silver label", "white label",
)

SPORT_KEYWORDS: Final[dict] = {
    "basketball": ("prizm", "optic", "select", "mosaic", "hoops", "nba", "basketball"),
    "baseball": ("topps", "bowman", "chrome", "mlb", "baseball", "sapphire"),
    "football": ("nfl", "football"),
}

# Price resolution
EXTERNAL_CANDIDATE_LIMIT: Final[int] = 5
SALES_TRIM_FRACTION: Final[float] = 0.1

# Deal scoring
AUCTION_ENDING_HOURS: Final[float] = 1.0
AUCTION_ENDING_MAX_BIDS: Final[int] = 5
AUCTION_ENDING_BONUS: Final[int] = 10
AUCTION_FINAL_HOURS: Final[float] = 0.25
AUCTION_FINAL_MAX_BIDS: Final[int] = 3
AUCTION_FINAL_BONUS: Final[int] = 15
SELLER_FEEDBACK_PCT_MIN: Final[float] = 99.5
SELLER_FEEDBACK_PCT_BONUS: Final[int] = 5
SELLER_FEEDBACK_COUNT_MIN: Final[int] = 1000
SELLER_FEEDBACK_COUNT_BONUS: Final[int] = 3
SHIPPING_PENALTY_THRESHOLD: Final[float] = 5.0
SHIPPING_PENALTY: Final[int] = 5

# Collaborator HTTP
RETRYABLE_STATUS: Final[Tuple[int, ...]] = (429, 500, 502, 503, 504)
BACKOFF_S: Final[List[float]] = [0.2, 1.0, 3.0]
