"""
Offline provider. Generates a fixed set of sample events around the search
center so the whole pipeline can run without API keys.
"""

from datetime import date, datetime, timedelta, timezone

from eventfeed.providers.base import RawEventSource, as_list, date_parts, dig, first_text
from eventfeed.utils.events import build_location, format_price
from eventfeed.utils.geo import make_coordinates

DEFAULT_CENTER = (34.0522, -118.2437)  # Los Angeles

# (days ahead, time, title, venue, category, labels, d_lon, d_lat, min price, max price)
SAMPLE_EVENTS = [
    (0, "21:00", "DJ Sparkle Club Night", "The Wiltern", "music", ["nightlife"], -0.01, 0.02, 25, 40),
    (1, "19:30", "The Night Owls Live", "Hollywood Bowl", "music", ["concert"], 0.03, -0.01, 35, 120),
    (2, "12:00", "Rooftop Pool Brunch", "The Roxy Theatre", "food", ["food-and-drink"], -0.02, -0.03, 0, 0),
    (3, "14:00", "Family Science Fair", "Natural History Museum", "family", ["community"], 0.015, 0.01, 10, None),
    (4, "20:00", "Improv Comedy Showcase", "The Troubadour", "arts", [], -0.025, -0.015, 15, 15),
    (5, "18:00", "City FC vs Harbor United", "Memorial Stadium", "sports", ["sport"], 0.04, 0.03, 30, 90),
]


class MockEvent(RawEventSource):
    source = "mock"
    display_name = "Mock"

    def extract_id(self):
        return self.raw.get("id")

    def extract_title(self):
        return first_text(self.raw.get("title"))

    def extract_date(self):
        return date_parts(self.raw.get("start"))

    def extract_venue(self):
        return first_text(self.raw.get("venue"))

    def extract_location(self):
        return build_location(self.raw.get("venue"), self.raw.get("city"))

    def extract_coordinates(self):
        return make_coordinates(dig(self.raw, "coordinates", 0), dig(self.raw, "coordinates", 1))

    def extract_image(self):
        return None

    def extract_price(self):
        return format_price(self.raw.get("min_price"), self.raw.get("max_price"))

    def extract_category(self):
        return self.raw.get("category")

    def extract_labels(self):
        return [label for label in as_list(self.raw.get("labels")) if isinstance(label, str)]


def generate_mock_events(params):
    """Raw sample records near the search center, starting at params.start_date."""
    try:
        start = date.fromisoformat(params.start_date) if params.start_date else None
    except ValueError:
        start = None
    start = start or datetime.now(timezone.utc).date()

    if params.latitude is not None and params.longitude is not None:
        lat, lng = params.latitude, params.longitude
    else:
        lat, lng = DEFAULT_CENTER

    keyword = (params.keyword or "").lower()
    events = []
    for i, (days, time, title, venue, category, labels, d_lon, d_lat, low, high) in enumerate(SAMPLE_EVENTS):
        if keyword and keyword not in title.lower():
            continue
        day = start + timedelta(days=days)
        events.append({
            "id": f"sample-{i + 1}",
            "title": title,
            "description": f"{title} at {venue}.",
            "start": f"{day.isoformat()}T{time}:00",
            "venue": venue,
            "city": params.location,
            "category": category,
            "labels": labels,
            "coordinates": [lng + d_lon, lat + d_lat],
            "min_price": low,
            "max_price": high,
        })
    return events


def fetch_mock_events(params, settings):
    return MockEvent.normalize_all(generate_mock_events(params), settings.party_score_threshold)
