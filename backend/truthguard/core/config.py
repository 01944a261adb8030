import json
import logging
import os
from dotenv import load_dotenv

from truthguard.models.claim import Scope

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _csv(name: str, default: str) -> list:
    """Read a comma-separated env var into a list of stripped, non-empty items."""
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


# MongoDB Configuration
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/truthguard_db")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "truthguard_db")

# Google Gemini API Configuration
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# NewsAPI Configuration (trusted-domain evidence search)
NEWS_API_KEY = os.getenv("NEWS_API_KEY")
NEWS_API_URL = os.getenv("NEWS_API_URL", "https://newsapi.org/v2/everything")

# Untrusted claim sources, in priority order
LOCAL_TARGETS = _csv("LOCAL_TARGETS", "r/newsnepal289,r/nepalnews,r/nepalsocial")
GLOBAL_TARGETS = _csv("GLOBAL_TARGETS", "r/worldnews,r/news,r/GlobalNews")

# Trusted outlets used as evidence
LOCAL_TRUSTED_DOMAINS = _csv(
    "LOCAL_TRUSTED_DOMAINS",
    "ekantipur.com,kathmandupost.com,thehimalayantimes.com,setopati.com,"
    "onlinekhabar.com,ratopati.com,nayapatrikadaily.com,annapurnapost.com,reuters.com",
)
GLOBAL_TRUSTED_DOMAINS = _csv(
    "GLOBAL_TRUSTED_DOMAINS",
    "reuters.com,apnews.com,bbc.co.uk,bbc.com,aljazeera.com,theguardian.com,npr.org",
)

# Outbound call limits
FEED_TIMEOUT_SECONDS = float(os.getenv("FEED_TIMEOUT_SECONDS", "5"))
SEARCH_TIMEOUT_SECONDS = float(os.getenv("SEARCH_TIMEOUT_SECONDS", "5"))
FEED_ITEM_LIMIT = int(os.getenv("FEED_ITEM_LIMIT", "10"))
MIN_TITLE_LENGTH = int(os.getenv("MIN_TITLE_LENGTH", "10"))

# Pipeline tuning
FRESHNESS_THRESHOLD = int(os.getenv("FRESHNESS_THRESHOLD", "5"))
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "20"))
CLAIM_DELAY_SECONDS = float(os.getenv("CLAIM_DELAY_SECONDS", "1.2"))
PIPELINE_BATCH_SIZE = int(os.getenv("PIPELINE_BATCH_SIZE", "1"))
RATE_LIMIT_BACKOFF_SECONDS = float(os.getenv("RATE_LIMIT_BACKOFF_SECONDS", "3"))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))

# Emergency snapshot overrides, one per scope (JSON list of {"title", "url"})
LOCAL_EMERGENCY_CLAIMS_FILE = os.getenv("LOCAL_EMERGENCY_CLAIMS_FILE")
GLOBAL_EMERGENCY_CLAIMS_FILE = os.getenv("GLOBAL_EMERGENCY_CLAIMS_FILE")

# Server Configuration
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
BACKEND_PORT = int(os.getenv("BACKEND_PORT", "8000"))
BACKEND_HOST = os.getenv("BACKEND_HOST", "0.0.0.0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Served when every live source for a scope is unreachable
DEFAULT_EMERGENCY_CLAIMS = {
    Scope.LOCAL: [
        {
            "title": "Government announces nationwide fuel price cut starting next week",
            "url": "https://www.reddit.com/r/nepalnews/",
        },
        {
            "title": "Viral post claims Kathmandu schools will close for a month due to pollution",
            "url": "https://www.reddit.com/r/nepalsocial/",
        },
        {
            "title": "Social media users share video claiming a new airport opened in Pokhara this morning",
            "url": "https://www.reddit.com/r/newsnepal289/",
        },
    ],
    Scope.GLOBAL: [
        {
            "title": "Viral post claims the United Nations has dissolved its Security Council",
            "url": "https://www.reddit.com/r/worldnews/",
        },
        {
            "title": "Social media users claim a global internet outage is scheduled for next month",
            "url": "https://www.reddit.com/r/news/",
        },
        {
            "title": "Post claims major economies agreed to a single world currency at the latest summit",
            "url": "https://www.reddit.com/r/GlobalNews/",
        },
    ],
}


def clean_emergency_claims(items, min_title_length: int = MIN_TITLE_LENGTH) -> list:
    """
    Keep only well-formed emergency entries.

    An entry needs a string title longer than min_title_length; url must be a
    string or absent and is coerced to "" when missing.
    """
    if not isinstance(items, list):
        return []

    claims = []
    for item in items:
        if not isinstance(item, dict):
            continue
        title = item.get("title")
        url = item.get("url")
        if not isinstance(title, str) or len(title.strip()) <= min_title_length:
            continue
        if url is not None and not isinstance(url, str):
            continue
        claims.append({"title": title.strip(), "url": url or ""})
    return claims


def load_emergency_claims(path: str = None, scope: Scope = Scope.LOCAL) -> list:
    """
    Load a scope's emergency claim override from a JSON file.

    Falls back to the scope's DEFAULT_EMERGENCY_CLAIMS when no path is given,
    the file cannot be read, or it holds no usable entries.

    Args:
        path (str): Path to a JSON file holding a list of {"title", "url"} objects
        scope (Scope): Partition the snapshot belongs to

    Returns:
        list: Emergency claim dicts
    """
    defaults = list(DEFAULT_EMERGENCY_CLAIMS[scope])
    if not path:
        return defaults

    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"[Config] Could not read emergency claims from {path}: {e}")
        return defaults

    claims = clean_emergency_claims(data)
    if not claims:
        logger.warning(f"[Config] Emergency claims file {path} has no usable entries, using built-in snapshot")
        return defaults
    return claims
