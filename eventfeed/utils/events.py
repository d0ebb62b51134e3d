import math
import re
from datetime import datetime, timezone

from bs4 import BeautifulSoup

from eventfeed import config
from eventfeed.utils.dates import DEFAULT_TIME

PROVIDER_REFERENCES = {
    "predicthq": re.compile(r"\bpredicthq(?:\.com)?\b", re.IGNORECASE),
    "rapidapi": re.compile(r"\brapidapi(?:\.com)?\b", re.IGNORECASE),
}

SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


def make_event_id(source, provider_id):
    """Canonical id: "<source>-<providerId>". None if the provider id is missing."""
    if provider_id is None:
        return None
    provider_id = str(provider_id).strip()
    if not provider_id:
        return None
    return f"{source}-{provider_id}"


def is_zero_price(value):
    """Check if a price value represents $0 or free (often means price not available in API)."""
    if value is None:
        return True
    try:
        number = float(value)
    except (TypeError, ValueError):
        return True
    return not math.isfinite(number) or number <= 0


def _money(value, currency):
    amount = float(value)
    text = f"{amount:.0f}" if amount.is_integer() else f"{amount:.2f}"
    if not isinstance(currency, str) or not currency or currency.upper() == "USD":
        return f"${text}"
    return f"{currency.upper()} {text}"


def format_price(min_price, max_price=None, currency="USD"):
    """
    Format a provider price range as "$min - $max" or "$min".
    Zero or missing values are dropped. Returns None when nothing usable remains.
    """
    low = None if is_zero_price(min_price) else float(min_price)
    high = None if is_zero_price(max_price) else float(max_price)

    if low is None and high is None:
        return None
    if low is None or high is None or low == high:
        return _money(low if low is not None else high, currency)
    if low > high:
        low, high = high, low
    return f"{_money(low, currency)} - {_money(high, currency)}"


def build_location(*parts):
    """Join location components with ", ", skipping blanks and repeats (case-insensitive)."""
    seen = set()
    kept = []
    for part in parts:
        if part is None:
            continue
        text = str(part).strip()
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        kept.append(text)
    return ", ".join(kept)


def clean_description(text, source=None):
    """
    Normalize description text: strip HTML, drop sentences that reference the
    provider itself, collapse whitespace and trailing punctuation.
    """
    if not text or not isinstance(text, str):
        return ""

    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ")

    pattern = PROVIDER_REFERENCES.get(source)
    if pattern:
        sentences = SENTENCE_SPLIT.split(text)
        text = " ".join(s for s in sentences if not pattern.search(s))

    text = re.sub(r"\s{2,}", " ", text).strip()
    text = re.sub(r"[,;:\s]+$", "", text).strip()
    return text


def default_image(category):
    return config.CATEGORY_IMAGES.get(category) or config.DEFAULT_IMAGE


def make_error_event(source, title=None, provider_id=None, index=None):
    """
    Minimal valid event used when a raw record can't be normalized.
    Flagged with error=True so the pipeline drops it.
    """
    suffix = provider_id if provider_id not in (None, "") else (index if index is not None else "unknown")
    return {
        "id": f"{source}-error-{suffix}",
        "source": source,
        "title": title if isinstance(title, str) and title.strip() else "Unknown Event",
        "description": "Error processing event details",
        "date": datetime.now(timezone.utc).strftime("%Y-%m-%d"),
        "time": DEFAULT_TIME,
        "rawDate": None,
        "location": "Location not specified",
        "venue": None,
        "category": config.DEFAULT_CATEGORY,
        "partySubcategory": None,
        "image": config.DEFAULT_IMAGE,
        "coordinates": None,
        "url": None,
        "price": None,
        "error": True,
    }
