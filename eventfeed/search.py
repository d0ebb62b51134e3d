"""
Search parameters and request validation.

validate_search_params() accepts a loosely shaped request body (the aliases
web and mobile clients send) and returns a SearchParams, or raises
RequestValidationError listing every problem found.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from eventfeed import config
from eventfeed.errors import RequestValidationError

_LAT_LNG_STRING = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")
_WITHIN_STRING = re.compile(r"@(-?\d+(?:\.\d+)?),(-?\d+(?:\.\d+)?)")

RADIUS_UNITS = ("km", "mi")


@dataclass
class SearchParams:
    keyword: str = ""
    location: str = ""
    latitude: float = None
    longitude: float = None
    radius: float = config.DEFAULT_RADIUS_KM  # km
    start_date: str = None
    end_date: str = None
    categories: list = field(default_factory=list)
    limit: int = config.DEFAULT_LIMIT
    page: int = 1
    exclude_ids: list = field(default_factory=list)

    @property
    def has_center(self):
        return self.latitude is not None and self.longitude is not None


def _error(message, field_name, details):
    return {"message": message, "field": field_name, "details": details}


def _first_present(body, *keys):
    for key in keys:
        if body.get(key) is not None:
            return body[key]
    return None


def _number(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def extract_center(body):
    """
    Pull (lat, lng) out of a request body. Explicit lat/lng keys win, then a
    [lon, lat] coordinates array, then "...@lat,lng", then a "lat,lng" location
    string. Values are returned raw so validation can report what was sent.
    """
    lat = _first_present(body, "lat", "latitude", "userLat")
    lng = _first_present(body, "lng", "longitude", "userLng")

    coordinates = body.get("coordinates")
    if (lat is None or lng is None) and isinstance(coordinates, (list, tuple)) and len(coordinates) >= 2:
        if lat is None and _number(coordinates[1]) is not None:
            lat = _number(coordinates[1])
        if lng is None and _number(coordinates[0]) is not None:
            lng = _number(coordinates[0])

    for key, pattern in (("predicthqLocation", _WITHIN_STRING), ("location", _LAT_LNG_STRING)):
        text = body.get(key)
        if (lat is None or lng is None) and isinstance(text, str):
            match = pattern.search(text)
            if match:
                lat = lat if lat is not None else float(match.group(1))
                lng = lng if lng is not None else float(match.group(2))

    return lat, lng


def validate_lat_lng(lat, lng):
    errors = []
    if lat is not None and lng is None:
        errors.append(_error("Missing longitude value", "longitude",
                             "Longitude must be provided when latitude is specified"))
    if lng is not None and lat is None:
        errors.append(_error("Missing latitude value", "latitude",
                             "Latitude must be provided when longitude is specified"))

    for value, name, limit in ((lat, "latitude", 90), (lng, "longitude", 180)):
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            errors.append(_error(f"Empty {name} value", name, f"{name.capitalize()} cannot be an empty string"))
            continue
        number = _number(value)
        if number is None or not -limit <= number <= limit:
            errors.append(_error(f"Invalid {name} value", name,
                                 f"{name.capitalize()} must be a number between -{limit} and {limit}"))
    return errors


def validate_radius(radius, unit="km"):
    """
    Returns (radius_km, errors). The 5-100 range applies in the caller's unit;
    miles are converted to km afterwards.
    """
    errors = []
    if unit not in RADIUS_UNITS:
        errors.append(_error("Invalid radius unit", "radiusUnit", "Radius unit must be 'km' or 'mi'"))
        unit = "km"

    value = config.DEFAULT_RADIUS_KM
    if radius is not None:
        number = _number(radius)
        if number is None:
            errors.append(_error("Invalid radius value", "radius", "Radius must be a valid number"))
        elif not config.MIN_RADIUS_KM <= number <= config.MAX_RADIUS_KM:
            errors.append(_error("Invalid radius value", "radius",
                                 f"Radius must be between {config.MIN_RADIUS_KM} and {config.MAX_RADIUS_KM} {unit}"))
        else:
            value = number
            if unit == "mi":
                value = number * config.KM_PER_MILE

    return value, errors


def parse_date(value):
    """YYYY-MM-DD string from a date or ISO date-time string, or None."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).strftime("%Y-%m-%d")
    except ValueError:
        return None


def validate_dates(start_date, end_date):
    """Returns (start, end, errors)."""
    errors = []
    start = parse_date(start_date)
    end = parse_date(end_date)

    if start_date and start is None:
        errors.append(_error("Invalid start date", "startDate", "Start date must be a valid ISO date string"))
    if end_date and end is None:
        errors.append(_error("Invalid end date", "endDate", "End date must be a valid ISO date string"))
    if start and end and end < start:
        errors.append(_error("Invalid date range", "endDate", "End date must be after start date"))
    return start, end, errors


def _positive_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def validate_limit(limit):
    if limit is None:
        return config.DEFAULT_LIMIT, []
    number = _positive_int(limit)
    if number is None or not 1 <= number <= config.MAX_LIMIT:
        return config.DEFAULT_LIMIT, [_error("Invalid limit value", "limit",
                                             f"Limit must be an integer between 1 and {config.MAX_LIMIT}")]
    return number, []


def validate_page(page):
    if page is None:
        return 1, []
    number = _positive_int(page)
    if number is None or number < 1:
        return 1, [_error("Invalid page value", "page", "Page must be a positive integer")]
    return number, []


def validate_categories(categories):
    if categories is None:
        return [], []
    if isinstance(categories, str):
        categories = categories.split(",")
    if not isinstance(categories, (list, tuple)):
        return [], [_error("Invalid categories", "categories", "Categories must be a list")]

    normalized = []
    invalid = []
    for category in categories:
        name = str(category).strip().lower()
        if not name:
            continue
        if name not in config.CATEGORIES:
            invalid.append(name)
        elif name not in normalized:
            normalized.append(name)

    if invalid:
        return normalized, [_error(
            "Invalid categories", "categories",
            f"Invalid categories: {', '.join(invalid)}. Valid categories are: {', '.join(config.CATEGORIES)}",
        )]
    return normalized, []


def validate_search_params(body):
    """
    Validate a request body and build SearchParams.
    Raises RequestValidationError with every problem found.
    """
    if not isinstance(body, dict):
        raise RequestValidationError([_error("Invalid request body", "body", "Request body must be an object")])

    errors = []

    lat, lng = extract_center(body)
    errors.extend(validate_lat_lng(lat, lng))

    unit = str(body.get("radiusUnit") or body.get("unit") or "km").lower()
    radius, radius_errors = validate_radius(body.get("radius"), unit)
    errors.extend(radius_errors)

    start, end, date_errors = validate_dates(body.get("startDate"), body.get("endDate"))
    errors.extend(date_errors)

    limit, limit_errors = validate_limit(body.get("limit"))
    errors.extend(limit_errors)
    page, page_errors = validate_page(body.get("page"))
    errors.extend(page_errors)

    categories, category_errors = validate_categories(body.get("categories"))
    errors.extend(category_errors)

    if errors:
        raise RequestValidationError(errors)

    location = body.get("location")
    if not isinstance(location, str) or _LAT_LNG_STRING.match(location):
        location = ""

    exclude_ids = body.get("excludeIds") or []
    if not isinstance(exclude_ids, (list, tuple)):
        exclude_ids = []

    return SearchParams(
        keyword=str(body.get("keyword") or "").strip(),
        location=location.strip(),
        latitude=_number(lat) if lat is not None else None,
        longitude=_number(lng) if lng is not None else None,
        radius=radius,
        start_date=start or datetime.now(timezone.utc).strftime("%Y-%m-%d"),
        end_date=end,
        categories=categories,
        limit=limit,
        page=page,
        exclude_ids=[str(i) for i in exclude_ids],
    )
