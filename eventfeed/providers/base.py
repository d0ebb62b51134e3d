"""
Shared provider plumbing.

Each provider module defines a RawEventSource subclass that knows how to pull
fields out of that provider's raw JSON record, plus a fetch function that
calls the provider's API. RawEventSource.normalize() turns one raw record into
a canonical event dict.
"""

from abc import ABC, abstractmethod

import requests

from eventfeed import config
from eventfeed.errors import ProviderError, ProviderHTTPError, ProviderTimeout
from eventfeed.party import PartySignals, classify_party, detect_party_subcategory
from eventfeed.utils.dates import DEFAULT_TIME, split_datetime
from eventfeed.utils.events import (
    clean_description,
    default_image,
    make_error_event,
    make_event_id,
)


def dig(data, *path, default=None):
    """Walk nested dicts/lists without raising. dig(raw, "dates", "start", "localDate")."""
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return default
        elif not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return default if current is None else current


def as_list(value):
    """value if it is a list, else []. Provider arrays are sometimes null or a bare object."""
    return value if isinstance(value, list) else []


def first_text(*values):
    """First value that is a non-blank string, stripped."""
    for value in values:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def date_parts(value):
    """
    (date, time, raw) from a provider date-time string. time is None when the
    provider gave only a date, so the party classifier adds no time bonus.
    """
    if not isinstance(value, str) or not value.strip():
        return None, None, None
    raw = value.strip()
    date, time = split_datetime(raw)
    if date is None:
        return None, None, raw
    if "T" not in raw and " " not in raw:
        time = None
    return date, time, raw


def get_json(provider, url, params=None, headers=None, timeout=config.PROVIDER_TIMEOUT):
    """GET a provider endpoint and decode JSON, raising ProviderError subclasses on failure."""
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout:
        raise ProviderTimeout(provider, timeout)
    except requests.exceptions.RequestException as e:
        raise ProviderError(provider, f"{provider} request failed: {e}")

    if resp.status_code >= 400:
        raise ProviderHTTPError(provider, resp.status_code, resp.reason or "")

    try:
        return resp.json()
    except ValueError:
        raise ProviderError(provider, f"{provider} returned malformed JSON")


class RawEventSource(ABC):
    """
    Field extraction for one raw provider record.

    Extractors never raise for missing or malformed fields; they return None
    (or an empty list) and leave the decision to normalize().
    """

    source = None
    display_name = None

    def __init__(self, raw):
        self.raw = raw

    @abstractmethod
    def extract_id(self):
        """Provider-side id."""

    @abstractmethod
    def extract_title(self):
        """Event name."""

    @abstractmethod
    def extract_date(self):
        """
        Return (date, time, raw_date). date is YYYY-MM-DD, time is HH:MM or
        None when the provider gave no time, raw_date is the original string.
        """

    @abstractmethod
    def extract_location(self):
        """Human-readable location string."""

    @abstractmethod
    def extract_coordinates(self):
        """[lon, lat] or None."""

    @abstractmethod
    def extract_image(self):
        """Image URL from the record itself, or None."""

    @abstractmethod
    def extract_category(self):
        """Canonical category from the provider's own taxonomy."""

    def extract_description(self):
        return first_text(self.raw.get("description"))

    def extract_venue(self):
        return None

    def extract_price(self):
        return None

    def extract_url(self):
        return first_text(self.raw.get("url"))

    def extract_labels(self):
        return []

    def extract_popularity(self):
        """(rank, local_rank, attendance); any may be None."""
        return None, None, None

    def extract_party_signals(self, title, description, venue, start_time):
        rank, local_rank, attendance = self.extract_popularity()
        return PartySignals(
            title=title or "",
            description=description or "",
            venue_name=venue or "",
            labels=self.extract_labels(),
            start_time=start_time,
            rank=rank,
            local_rank=local_rank,
            attendance=attendance,
        )

    def to_event(self, threshold=None):
        title = self.extract_title()
        description = clean_description(self.extract_description(), self.source)
        date, time, raw_date = self.extract_date()
        venue = self.extract_venue()

        category = self.extract_category()
        if category not in config.CATEGORIES:
            category = config.DEFAULT_CATEGORY

        signals = self.extract_party_signals(title, description, venue, time)
        result = classify_party(signals, threshold)

        party_subcategory = None
        if result.is_party:
            category = "party"
            party_subcategory = result.subcategory
        elif category == "party":
            party_subcategory = detect_party_subcategory(title, description)

        return {
            "id": make_event_id(self.source, self.extract_id()),
            "source": self.source,
            "title": title,
            "description": description,
            "date": date,
            "time": time or DEFAULT_TIME,
            "rawDate": raw_date,
            "location": self.extract_location() or "",
            "venue": venue,
            "category": category,
            "partySubcategory": party_subcategory,
            "image": self.extract_image() or default_image(category),
            "coordinates": self.extract_coordinates(),
            "url": self.extract_url(),
            "price": self.extract_price(),
        }

    @classmethod
    def normalize(cls, raw, threshold=None, index=None):
        """
        Canonical event dict for one raw record. Any failure yields an error
        event instead of an exception so one bad record can't sink the batch.
        """
        provider_id = raw.get("id") if isinstance(raw, dict) else None
        try:
            if not isinstance(raw, dict):
                raise ValueError(f"invalid event object: {type(raw).__name__}")
            event = cls(raw).to_event(threshold)
            if not event["id"]:
                raise ValueError("missing provider id")
            if not event["title"]:
                raise ValueError("missing title")
            return event
        except Exception as e:
            print(f"    {cls.display_name}: could not normalize event {provider_id or index}: {e}")
            title = None
            if isinstance(raw, dict):
                title = raw.get("title") or raw.get("name")
            return make_error_event(cls.source, title, provider_id, index)

    @classmethod
    def normalize_all(cls, raw_events, threshold=None):
        if not isinstance(raw_events, list):
            return []
        return [cls.normalize(raw, threshold, index=i) for i, raw in enumerate(raw_events)]
