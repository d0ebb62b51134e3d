from eventfeed import config
from eventfeed.utils.geo import is_valid_coordinates


def validate_event(event):
    """Check that event has all required fields and isn't a placeholder for a failed record."""
    if not isinstance(event, dict) or event.get("error"):
        return False
    for field in config.REQUIRED_FIELDS:
        value = event.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            return False
    return True


def missing_fields(event):
    """Names of required fields the event lacks (for logging)."""
    if not isinstance(event, dict):
        return list(config.REQUIRED_FIELDS)
    return [f for f in config.REQUIRED_FIELDS if not event.get(f)]


def has_coordinates(event):
    return is_valid_coordinates(event.get("coordinates"))
