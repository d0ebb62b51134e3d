import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

REPO_ROOT = Path(__file__).resolve().parents[1]
OUTPUT_DIR = REPO_ROOT / "output"
OUTPUT_PATH = OUTPUT_DIR / "events.json"
LOG_PATH = OUTPUT_DIR / "search-log.txt"
LOG_RETENTION_DAYS = 14

TICKETMASTER_API_KEY = os.environ.get("TICKETMASTER_API_KEY")
TICKETMASTER_BASE_URL = "https://app.ticketmaster.com/discovery/v2"

PREDICTHQ_API_KEY = os.environ.get("PREDICTHQ_API_KEY")
PREDICTHQ_BASE_URL = "https://api.predicthq.com/v1"

SEATGEEK_CLIENT_ID = os.environ.get("SEATGEEK_CLIENT_ID")
SEATGEEK_BASE_URL = "https://api.seatgeek.com/2"

RAPIDAPI_KEY = os.environ.get("RAPIDAPI_KEY")
RAPIDAPI_HOST = os.environ.get("RAPIDAPI_HOST", "real-time-events-search.p.rapidapi.com")

USE_MOCK_EVENTS = os.environ.get("USE_MOCK_EVENTS", "false").lower() == "true"

PROVIDER_TIMEOUT = float(os.environ.get("PROVIDER_TIMEOUT", "10"))
PROVIDER_PAGE_SIZE = int(os.environ.get("PROVIDER_PAGE_SIZE", "100"))

# Score at or above which an event is treated as a party. Some older
# normalizers used 4; 5 is the default.
PARTY_SCORE_THRESHOLD = float(os.environ.get("PARTY_SCORE_THRESHOLD", "5"))

CACHE_TTL_SECONDS = int(os.environ.get("CACHE_TTL_SECONDS", "300"))

DEFAULT_RADIUS_KM = 50
MIN_RADIUS_KM = 5
MAX_RADIUS_KM = 100
DEFAULT_LIMIT = 100
MAX_LIMIT = 100
KM_PER_MILE = 1.60934

CATEGORIES = ["music", "sports", "arts", "family", "food", "party", "other"]
DEFAULT_CATEGORY = "other"
REQUIRED_FIELDS = ["id", "title", "date"]

DEFAULT_IMAGE = "https://images.unsplash.com/photo-1523580494863-6f3031224c94?w=800&auto=format&fit=crop"
CATEGORY_IMAGES = {
    "music": "https://images.unsplash.com/photo-1501386761578-eac5c94b800a?w=800&auto=format&fit=crop",
    "sports": "https://images.unsplash.com/photo-1471295253337-3ceaaedca402?w=800&auto=format&fit=crop",
    "arts": "https://images.unsplash.com/photo-1507676184212-d03ab07a01bf?w=800&auto=format&fit=crop",
    "family": "https://images.unsplash.com/photo-1511632765486-a01980e01a18?w=800&auto=format&fit=crop",
    "food": "https://images.unsplash.com/photo-1414235077428-338989a2e8c0?w=800&auto=format&fit=crop",
    "party": "https://images.unsplash.com/photo-1514525253161-7a46d19cd819?w=800&auto=format&fit=crop",
    "other": DEFAULT_IMAGE,
}


@dataclass
class Settings:
    """Provider credentials and tunables for one aggregator instance."""
    ticketmaster_api_key: str = None
    predicthq_api_key: str = None
    seatgeek_client_id: str = None
    rapidapi_key: str = None
    rapidapi_host: str = RAPIDAPI_HOST
    use_mock_events: bool = False
    provider_timeout: float = PROVIDER_TIMEOUT
    provider_page_size: int = PROVIDER_PAGE_SIZE
    party_score_threshold: float = PARTY_SCORE_THRESHOLD
    cache_ttl_seconds: int = CACHE_TTL_SECONDS

    @classmethod
    def from_env(cls):
        return cls(
            ticketmaster_api_key=TICKETMASTER_API_KEY,
            predicthq_api_key=PREDICTHQ_API_KEY,
            seatgeek_client_id=SEATGEEK_CLIENT_ID,
            rapidapi_key=RAPIDAPI_KEY,
            rapidapi_host=RAPIDAPI_HOST,
            use_mock_events=USE_MOCK_EVENTS,
            provider_timeout=PROVIDER_TIMEOUT,
            provider_page_size=PROVIDER_PAGE_SIZE,
            party_score_threshold=PARTY_SCORE_THRESHOLD,
            cache_ttl_seconds=CACHE_TTL_SECONDS,
        )
