import math
import random

EARTH_RADIUS_KM = 6371.0

MIN_JITTER_DEGREES = 0.01
MAX_JITTER_DEGREES = 0.1


def to_float(value):
    """Coerce a provider number (often a string) to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def make_coordinates(longitude, latitude):
    """
    Build a [lon, lat] pair from raw values.
    Returns None unless both values are finite and within range.
    """
    lon = to_float(longitude)
    lat = to_float(latitude)
    if lon is None or lat is None:
        return None
    if not (-180 <= lon <= 180 and -90 <= lat <= 90):
        return None
    return [lon, lat]


def coordinates_from_pair(pair):
    """[lon, lat] from a two-element list or tuple, validated."""
    if not isinstance(pair, (list, tuple)) or len(pair) != 2:
        return None
    return make_coordinates(pair[0], pair[1])


def is_valid_coordinates(coordinates):
    return coordinates_from_pair(coordinates) is not None


def haversine_km(lat1, lon1, lat2, lon2):
    """Great-circle distance between two points in kilometers."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def jitter_coordinates(latitude, longitude, rng=None):
    """
    Approximate [lon, lat] near a search center, offset 0.01-0.1 degrees
    on each axis (roughly 1-10 km). Not a geocode.
    """
    rng = rng or random
    offsets = []
    for _ in range(2):
        magnitude = rng.uniform(MIN_JITTER_DEGREES, MAX_JITTER_DEGREES)
        offsets.append(magnitude if rng.random() < 0.5 else -magnitude)

    lon = min(max(longitude + offsets[0], -180.0), 180.0)
    lat = min(max(latitude + offsets[1], -90.0), 90.0)
    return [lon, lat]
