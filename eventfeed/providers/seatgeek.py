from eventfeed import config
from eventfeed.errors import MissingApiKey
from eventfeed.providers.base import RawEventSource, as_list, date_parts, dig, first_text, get_json
from eventfeed.utils.categories import map_seatgeek_type
from eventfeed.utils.events import build_location, format_price
from eventfeed.utils.geo import make_coordinates

# Our categories -> SeatGeek taxonomy names, used to narrow the query.
TAXONOMIES = {
    "music": ["concert", "music_festival"],
    "sports": ["sports"],
    "arts": ["theater", "comedy", "classical"],
    "family": ["family"],
}


class SeatGeekEvent(RawEventSource):
    source = "seatgeek"
    display_name = "SeatGeek"

    @property
    def venue(self):
        venue = self.raw.get("venue")
        return venue if isinstance(venue, dict) else {}

    @property
    def performer(self):
        performers = [p for p in as_list(self.raw.get("performers")) if isinstance(p, dict)]
        for performer in performers:
            if performer.get("primary"):
                return performer
        return performers[0] if performers else {}

    def extract_id(self):
        return self.raw.get("id")

    def extract_title(self):
        return first_text(self.raw.get("title"), self.raw.get("short_title"))

    def extract_description(self):
        return first_text(self.raw.get("description"))

    def extract_date(self):
        return date_parts(self.raw.get("datetime_local") or self.raw.get("datetime_utc"))

    def extract_venue(self):
        return first_text(self.venue.get("name"))

    def extract_location(self):
        country = self.venue.get("country")
        location = build_location(
            self.venue.get("name"),
            self.venue.get("city"),
            self.venue.get("state"),
            None if country in ("US", "USA", "United States") else country,
        )
        return location or first_text(self.venue.get("display_location")) or ""

    def extract_coordinates(self):
        return make_coordinates(dig(self.venue, "location", "lon"), dig(self.venue, "location", "lat"))

    def extract_image(self):
        performer = self.performer
        if isinstance(performer.get("image"), str) and performer["image"]:
            return performer["image"]
        for size in ("huge", "large", "medium"):
            image = dig(performer, "images", size)
            if isinstance(image, str) and image:
                return image
        return None

    def extract_price(self):
        return format_price(dig(self.raw, "stats", "lowest_price"), dig(self.raw, "stats", "highest_price"))

    def extract_url(self):
        return first_text(self.raw.get("url"))

    def extract_category(self):
        category = map_seatgeek_type(self.raw.get("type"))
        if category != config.DEFAULT_CATEGORY:
            return category
        for taxonomy in as_list(self.raw.get("taxonomies")):
            if isinstance(taxonomy, dict):
                category = map_seatgeek_type(taxonomy.get("name"))
                if category != config.DEFAULT_CATEGORY:
                    return category
        return config.DEFAULT_CATEGORY

    def extract_labels(self):
        labels = []
        for taxonomy in as_list(self.raw.get("taxonomies")):
            name = taxonomy.get("name") if isinstance(taxonomy, dict) else None
            if isinstance(name, str):
                labels.append(name)
        for genre in as_list(self.performer.get("genres")):
            name = genre.get("name") if isinstance(genre, dict) else None
            if isinstance(name, str):
                labels.append(name)
        return labels

    def extract_popularity(self):
        # score is 0-1; scale it onto the 0-100 rank used elsewhere
        score = self.raw.get("score")
        if isinstance(score, (int, float)) and not isinstance(score, bool):
            return score * 100, None, None
        return None, None, None


def build_params(params, settings):
    query = {
        "client_id": settings.seatgeek_client_id,
        "per_page": settings.provider_page_size,
        "page": 1,
        "sort": "datetime_local.asc",
    }
    if params.latitude is not None and params.longitude is not None:
        query["lat"] = params.latitude
        query["lon"] = params.longitude
        query["range"] = f"{round(params.radius / config.KM_PER_MILE)}mi"
    if params.keyword:
        query["q"] = params.keyword
    if params.start_date:
        query["datetime_utc.gte"] = params.start_date
    if params.end_date:
        query["datetime_utc.lte"] = f"{params.end_date}T23:59:59"

    taxonomies = []
    for category in params.categories or []:
        taxonomies.extend(TAXONOMIES.get(category, []))
    if taxonomies:
        query["taxonomies.name"] = taxonomies
    return query


def fetch_seatgeek_events(params, settings):
    """Fetch and normalize SeatGeek events. Raises ProviderError on failure."""
    if not settings.seatgeek_client_id:
        raise MissingApiKey("seatgeek")

    data = get_json(
        "seatgeek",
        f"{config.SEATGEEK_BASE_URL}/events",
        params=build_params(params, settings),
        headers={"Accept": "application/json"},
        timeout=settings.provider_timeout,
    )
    raw_events = data.get("events", []) if isinstance(data, dict) else []
    return SeatGeekEvent.normalize_all(raw_events, settings.party_score_threshold)
