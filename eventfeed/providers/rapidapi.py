from datetime import date, datetime, timezone

from eventfeed.errors import MissingApiKey
from eventfeed.providers.base import RawEventSource, as_list, date_parts, dig, first_text, get_json
from eventfeed.utils.categories import detect_category_from_text, map_rapidapi_category
from eventfeed.utils.events import build_location
from eventfeed.utils.geo import make_coordinates

# (max days ahead, API date bucket)
DATE_BUCKETS = [
    (1, "today"),
    (2, "tomorrow"),
    (7, "week"),
    (14, "next_week"),
    (30, "month"),
]

PARTY_QUERY = "party nightlife"


class RapidAPIEvent(RawEventSource):
    source = "rapidapi"
    display_name = "RapidAPI"

    @property
    def venue(self):
        venue = self.raw.get("venue")
        return venue if isinstance(venue, dict) else {}

    def subtypes(self):
        subtypes = []
        if isinstance(self.venue.get("subtype"), str):
            subtypes.append(self.venue["subtype"])
        for subtype in as_list(self.venue.get("subtypes")):
            if isinstance(subtype, str) and subtype not in subtypes:
                subtypes.append(subtype)
        return subtypes

    def extract_id(self):
        return self.raw.get("event_id") or self.raw.get("id")

    def extract_title(self):
        return first_text(self.raw.get("name"), self.raw.get("title"))

    def extract_date(self):
        return date_parts(self.raw.get("start_time") or self.raw.get("start_time_utc"))

    def extract_venue(self):
        return first_text(self.venue.get("name"))

    def extract_location(self):
        full_address = first_text(self.venue.get("full_address"))
        if full_address:
            return build_location(self.venue.get("name"), full_address)
        return build_location(
            self.venue.get("name"),
            self.venue.get("city"),
            self.venue.get("state"),
            self.venue.get("country"),
        )

    def extract_coordinates(self):
        return make_coordinates(self.venue.get("longitude"), self.venue.get("latitude"))

    def extract_image(self):
        return first_text(self.raw.get("thumbnail"))

    def extract_url(self):
        return first_text(
            self.raw.get("link"),
            dig(self.raw, "ticket_links", 0, "link"),
            dig(self.raw, "info_links", 0, "link"),
        )

    def extract_category(self):
        for subtype in self.subtypes():
            category = map_rapidapi_category(subtype)
            if category != "other":
                return category
        text = f"{self.extract_title() or ''} {self.raw.get('description') or ''}"
        return detect_category_from_text(text) or "other"

    def extract_labels(self):
        labels = self.subtypes()
        for tag in as_list(self.raw.get("tags")):
            if isinstance(tag, str) and tag not in labels:
                labels.append(tag)
        return labels


def date_bucket(start_date, today=None):
    """Map a YYYY-MM-DD start date onto the API's coarse date filter."""
    if not start_date:
        return "any"
    today = today or datetime.now(timezone.utc).date()
    try:
        days_ahead = (date.fromisoformat(start_date) - today).days
    except ValueError:
        return "any"
    for max_days, bucket in DATE_BUCKETS:
        if days_ahead <= max_days:
            return bucket
    return "next_month"


def build_query(params):
    """Free-text query: keyword (or a generic term) scoped to the location."""
    if params.keyword:
        term = params.keyword
    elif params.categories == ["party"]:
        term = PARTY_QUERY
    else:
        term = "events"

    if params.location:
        return f"{term} in {params.location}"
    if params.latitude is not None and params.longitude is not None:
        return f"{term} nearby"
    return term


def build_params(params):
    return {
        "query": build_query(params),
        "date": date_bucket(params.start_date),
        "is_virtual": "false",
        "start": 0,
    }


def fetch_rapidapi_events(params, settings):
    """Fetch and normalize RapidAPI real-time events. Raises ProviderError on failure."""
    if not settings.rapidapi_key:
        raise MissingApiKey("rapidapi")

    data = get_json(
        "rapidapi",
        f"https://{settings.rapidapi_host}/search-events",
        params=build_params(params),
        headers={
            "X-RapidAPI-Key": settings.rapidapi_key,
            "X-RapidAPI-Host": settings.rapidapi_host,
        },
        timeout=settings.provider_timeout,
    )
    raw_events = data.get("data", []) if isinstance(data, dict) else []
    return RapidAPIEvent.normalize_all(raw_events, settings.party_score_threshold)
