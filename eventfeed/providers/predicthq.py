from eventfeed import config
from eventfeed.errors import MissingApiKey
from eventfeed.providers.base import RawEventSource, as_list, date_parts, dig, first_text, get_json
from eventfeed.utils.categories import map_predicthq_category
from eventfeed.utils.events import build_location
from eventfeed.utils.geo import coordinates_from_pair

# Our categories -> PredictHQ categories, used to narrow the query.
CATEGORY_QUERY = {
    "music": ["concerts", "festivals"],
    "sports": ["sports"],
    "arts": ["performing-arts"],
    "family": ["community", "expos"],
    "food": ["food-drink"],
    "party": ["concerts", "festivals", "community"],
}


class PredictHQEvent(RawEventSource):
    source = "predicthq"
    display_name = "PredictHQ"

    @property
    def venue_entity(self):
        for entity in as_list(self.raw.get("entities")):
            if isinstance(entity, dict) and entity.get("type") == "venue":
                return entity
        venue = self.raw.get("phq_venue")
        return venue if isinstance(venue, dict) else {}

    def extract_id(self):
        return self.raw.get("id")

    def extract_title(self):
        return first_text(self.raw.get("title"))

    def extract_date(self):
        return date_parts(self.raw.get("start") or self.raw.get("start_local"))

    def extract_venue(self):
        return first_text(self.venue_entity.get("name"), self.raw.get("location_name"))

    def extract_location(self):
        address = first_text(
            self.venue_entity.get("formatted_address"),
            dig(self.raw, "geo", "address", "formatted_address"),
            self.raw.get("address"),
        )
        return build_location(
            self.extract_venue(),
            address,
            dig(self.raw, "place", "name"),
            self.raw.get("state"),
            self.raw.get("country"),
        )

    def extract_coordinates(self):
        for pair in (
            self.raw.get("location"),
            dig(self.raw, "geo", "geometry", "coordinates"),
            self.venue_entity.get("coordinates"),
            dig(self.raw, "place", "location"),
        ):
            coordinates = coordinates_from_pair(pair)
            if coordinates:
                return coordinates
        return None

    def extract_image(self):
        for images in (self.raw.get("images"), self.venue_entity.get("images")):
            url = dig(images, 0, "url")
            if isinstance(url, str) and url:
                return url
        return None

    def extract_url(self):
        return first_text(self.raw.get("url"), self.venue_entity.get("url"))

    def extract_category(self):
        return map_predicthq_category(self.raw.get("category"))

    def extract_labels(self):
        labels = [label for label in as_list(self.raw.get("labels")) if isinstance(label, str)]
        for item in as_list(self.raw.get("phq_labels")):
            label = item.get("label") if isinstance(item, dict) else None
            if isinstance(label, str) and label not in labels:
                labels.append(label)
        return labels

    def extract_popularity(self):
        return self.raw.get("rank"), self.raw.get("local_rank"), self.raw.get("phq_attendance")


def build_params(params, settings):
    query = {
        "limit": settings.provider_page_size,
        "sort": "start",
    }
    if params.latitude is not None and params.longitude is not None:
        query["within"] = f"{params.radius:g}km@{params.latitude},{params.longitude}"
    if params.keyword:
        query["q"] = params.keyword
    if params.start_date:
        query["start.gte"] = params.start_date
    if params.end_date:
        query["start.lte"] = params.end_date

    categories = []
    for category in params.categories or []:
        for phq_category in CATEGORY_QUERY.get(category, []):
            if phq_category not in categories:
                categories.append(phq_category)
    if categories:
        query["category"] = ",".join(categories)
    return query


def fetch_predicthq_events(params, settings):
    """Fetch and normalize PredictHQ events. Raises ProviderError on failure."""
    if not settings.predicthq_api_key:
        raise MissingApiKey("predicthq")

    data = get_json(
        "predicthq",
        f"{config.PREDICTHQ_BASE_URL}/events/",
        params=build_params(params, settings),
        headers={
            "Authorization": f"Bearer {settings.predicthq_api_key}",
            "Accept": "application/json",
        },
        timeout=settings.provider_timeout,
    )
    raw_events = data.get("results", []) if isinstance(data, dict) else []
    return PredictHQEvent.normalize_all(raw_events, settings.party_score_threshold)
