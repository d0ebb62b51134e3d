import re

from eventfeed import config

TICKETMASTER_CATEGORY_MAP = {
    # segments
    "Music": "music",
    "Sports": "sports",
    "Arts & Theatre": "arts",
    "Arts & Theater": "arts",
    "Family": "family",
    "Film": "arts",
    "Miscellaneous": "other",
    "Undefined": "other",
    # genres (more specific, checked first)
    "Comedy": "arts",
    "Theatre": "arts",
    "Musical": "arts",
    "Dance": "arts",
    "Classical": "arts",
    "Children's Theatre": "family",
    "Children's Music": "family",
    "Circus & Specialty Acts": "family",
    "Food & Drink": "food",
    "Fairs & Festivals": "music",
}

PREDICTHQ_CATEGORY_MAP = {
    "concerts": "music",
    "festivals": "music",
    "sports": "sports",
    "performing-arts": "arts",
    "community": "family",
    "expos": "family",
    "food-drink": "food",
    "conferences": "other",
    "academic": "other",
    "observances": "other",
    "politics": "other",
    "public-holidays": "other",
    "school-holidays": "other",
    "daylight-savings": "other",
    "airport-delays": "other",
    "severe-weather": "other",
    "disasters": "other",
    "health-warnings": "other",
    "terror": "other",
}

SEATGEEK_CATEGORY_MAP = {
    "concert": "music",
    "music_festival": "music",
    "sports": "sports",
    "theater": "arts",
    "broadway_tickets_national": "arts",
    "classical": "arts",
    "classical_opera": "arts",
    "classical_orchestral_instrumental": "arts",
    "classical_vocal": "arts",
    "comedy": "arts",
    "dance_performance_tour": "arts",
    "literary": "arts",
    "film": "arts",
    "family": "family",
    "cirque_du_soleil": "family",
    "food_and_drink": "food",
}

SEATGEEK_SPORT_TYPES = {
    "nba", "nfl", "mlb", "nhl", "mls", "wnba", "nascar", "pga", "tennis",
    "boxing", "mma", "wrestling", "soccer", "hockey", "baseball", "football",
    "basketball", "auto_racing", "horse_racing", "rodeo", "golf",
}

# RapidAPI venue subtypes are free text, matched as whole words (plural allowed) in order.
RAPIDAPI_CATEGORY_RULES = [
    (("concert", "music", "festival"), "music"),
    (("sport", "stadium", "arena"), "sports"),
    (("art", "theater", "theatre", "museum", "gallery", "exhibition", "comedy"), "arts"),
    (("family", "kids", "children", "zoo", "park"), "family"),
    (("food", "drink", "restaurant", "brewery", "winery"), "food"),
    (("night club", "nightclub", "nightlife", "party", "dance club", "lounge"), "party"),
]

_RAPIDAPI_PATTERNS = [
    (re.compile(r"\b(?:" + "|".join(re.escape(p) for p in patterns) + r")s?\b"), category)
    for patterns, category in RAPIDAPI_CATEGORY_RULES
]


def _closed(category):
    return category if category in config.CATEGORIES else config.DEFAULT_CATEGORY


def detect_category_from_text(text):
    """
    Detect event category from free text using keyword analysis.
    Returns detected category or None if uncertain.
    Priority order: sports > arts > family > food > music.
    """
    if not text:
        return None

    text_lower = text.lower()

    sports_patterns = [
        "basketball", "nba", "football", "nfl", "soccer", "mls",
        "hockey", "nhl", "baseball", "mlb", "wrestling", "boxing", "ufc",
        "mma", "championship", "tournament", "playoffs", " vs ", " vs. ",
    ]
    if any(pattern in text_lower for pattern in sports_patterns):
        return "sports"

    arts_patterns = [
        "theatre", "theater", "musical", "ballet", "opera", "comedy",
        "comedian", "stand-up", "exhibition", "gallery",
    ]
    if any(pattern in text_lower for pattern in arts_patterns):
        return "arts"

    family_patterns = ["family", "kids", "children", "disney on ice", "circus"]
    if any(pattern in text_lower for pattern in family_patterns):
        return "family"

    food_patterns = ["food festival", "tasting", "wine", "beer fest", "culinary", "food truck"]
    if any(pattern in text_lower for pattern in food_patterns):
        return "food"

    music_patterns = ["concert", "tour", "festival", "live music", "orchestra", "symphony"]
    if any(pattern in text_lower for pattern in music_patterns):
        return "music"

    return None


def _name(value):
    name = value.get("name") if isinstance(value, dict) else None
    return name if isinstance(name, str) else ""


def map_tm_classification(classifications):
    """
    Map Ticketmaster classification hierarchy to our category.
    Priority: genre > segment (more specific wins)
    """
    if not classifications or not isinstance(classifications, list):
        return config.DEFAULT_CATEGORY

    primary = classifications[0] if isinstance(classifications[0], dict) else {}
    segment = _name(primary.get("segment"))
    genre = _name(primary.get("genre"))

    if genre in TICKETMASTER_CATEGORY_MAP:
        return TICKETMASTER_CATEGORY_MAP[genre]

    if segment in TICKETMASTER_CATEGORY_MAP:
        return TICKETMASTER_CATEGORY_MAP[segment]

    return config.DEFAULT_CATEGORY


def map_predicthq_category(category):
    if not category or not isinstance(category, str):
        return config.DEFAULT_CATEGORY
    return _closed(PREDICTHQ_CATEGORY_MAP.get(category.lower(), config.DEFAULT_CATEGORY))


def map_seatgeek_type(event_type):
    if not event_type or not isinstance(event_type, str):
        return config.DEFAULT_CATEGORY

    event_type = event_type.lower()
    if event_type in SEATGEEK_CATEGORY_MAP:
        return SEATGEEK_CATEGORY_MAP[event_type]
    if event_type in SEATGEEK_SPORT_TYPES or event_type.startswith("ncaa"):
        return "sports"
    return config.DEFAULT_CATEGORY


def map_rapidapi_category(subtype):
    if not subtype or not isinstance(subtype, str):
        return config.DEFAULT_CATEGORY

    subtype = subtype.lower().replace("_", " ")
    for pattern, category in _RAPIDAPI_PATTERNS:
        if pattern.search(subtype):
            return category
    return config.DEFAULT_CATEGORY
