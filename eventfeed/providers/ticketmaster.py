from eventfeed import config
from eventfeed.errors import MissingApiKey
from eventfeed.providers.base import RawEventSource, as_list, date_parts, dig, first_text, get_json
from eventfeed.utils.categories import map_tm_classification
from eventfeed.utils.events import build_location, format_price
from eventfeed.utils.geo import make_coordinates

MIN_IMAGE_WIDTH = 600
MAX_PAGE_SIZE = 200

# Ticketmaster segment names for our categories, used to narrow the query.
SEGMENTS = {
    "music": "Music",
    "sports": "Sports",
    "arts": "Arts & Theatre",
    "family": "Family",
}


def _pick_image(images):
    """Prefer a 16:9 image at least MIN_IMAGE_WIDTH wide, else the first with a url."""
    if not isinstance(images, list):
        return None
    usable = [img for img in images if isinstance(img, dict) and img.get("url")]
    for img in usable:
        width = img.get("width") or 0
        if img.get("ratio") == "16_9" and isinstance(width, (int, float)) and width >= MIN_IMAGE_WIDTH:
            return img["url"]
    return usable[0]["url"] if usable else None


class TicketmasterEvent(RawEventSource):
    source = "ticketmaster"
    display_name = "Ticketmaster"

    @property
    def venue(self):
        venue = dig(self.raw, "_embedded", "venues", 0)
        return venue if isinstance(venue, dict) else {}

    def extract_id(self):
        return self.raw.get("id")

    def extract_title(self):
        return first_text(self.raw.get("name"))

    def extract_description(self):
        return first_text(self.raw.get("description"), self.raw.get("info"), self.raw.get("pleaseNote"))

    def extract_date(self):
        local_date = dig(self.raw, "dates", "start", "localDate")
        local_time = dig(self.raw, "dates", "start", "localTime")
        if not isinstance(local_date, str) or not local_date:
            return date_parts(dig(self.raw, "dates", "start", "dateTime"))
        if not isinstance(local_time, str):
            local_time = None

        raw = f"{local_date}T{local_time}" if local_time else local_date
        date, time, _ = date_parts(raw)
        if date is None:
            # malformed localTime; keep the day
            date, time, _ = date_parts(local_date)
        return date, time, raw

    def extract_venue(self):
        return first_text(self.venue.get("name"))

    def extract_location(self):
        country = dig(self.venue, "country", "countryCode")
        return build_location(
            self.venue.get("name"),
            dig(self.venue, "city", "name"),
            dig(self.venue, "state", "stateCode"),
            None if country == "US" else country,
        )

    def extract_coordinates(self):
        return make_coordinates(dig(self.venue, "location", "longitude"), dig(self.venue, "location", "latitude"))

    def extract_image(self):
        image = _pick_image(self.raw.get("images"))
        if image:
            return image
        for attraction in as_list(dig(self.raw, "_embedded", "attractions")):
            image = _pick_image(attraction.get("images") if isinstance(attraction, dict) else None)
            if image:
                return image
        return _pick_image(self.venue.get("images"))

    def extract_price(self):
        price_range = dig(self.raw, "priceRanges", 0)
        if not isinstance(price_range, dict):
            return None
        return format_price(price_range.get("min"), price_range.get("max"), price_range.get("currency") or "USD")

    def extract_url(self):
        return first_text(self.raw.get("url"))

    def extract_category(self):
        return map_tm_classification(self.raw.get("classifications"))

    def extract_labels(self):
        labels = []
        for classification in as_list(self.raw.get("classifications")):
            if not isinstance(classification, dict):
                continue
            for key in ("genre", "subGenre"):
                name = dig(classification, key, "name")
                if isinstance(name, str) and name and name != "Undefined":
                    labels.append(name)
        return labels


def build_params(params, settings):
    """Discovery API query for a SearchParams."""
    query = {
        "apikey": settings.ticketmaster_api_key,
        "sort": "date,asc",
        "size": min(settings.provider_page_size, MAX_PAGE_SIZE),
    }
    if params.latitude is not None and params.longitude is not None:
        query["latlong"] = f"{params.latitude},{params.longitude}"
        query["radius"] = int(round(params.radius))
        query["unit"] = "km"
    elif params.location:
        query["city"] = params.location
    if params.keyword:
        query["keyword"] = params.keyword
    if params.start_date:
        query["startDateTime"] = f"{params.start_date}T00:00:00Z"
    if params.end_date:
        query["endDateTime"] = f"{params.end_date}T23:59:59Z"

    segments = [SEGMENTS[c] for c in params.categories or [] if c in SEGMENTS]
    if segments and len(segments) == len(params.categories):
        query["segmentName"] = ",".join(segments)
    return query


def fetch_ticketmaster_events(params, settings):
    """Fetch and normalize Ticketmaster events. Raises ProviderError on failure."""
    if not settings.ticketmaster_api_key:
        raise MissingApiKey("ticketmaster")

    data = get_json(
        "ticketmaster",
        f"{config.TICKETMASTER_BASE_URL}/events.json",
        params=build_params(params, settings),
        timeout=settings.provider_timeout,
    )
    raw_events = dig(data, "_embedded", "events", default=[])
    return TicketmasterEvent.normalize_all(raw_events, settings.party_score_threshold)
