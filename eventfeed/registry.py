from eventfeed.providers.mock import fetch_mock_events
from eventfeed.providers.predicthq import fetch_predicthq_events
from eventfeed.providers.rapidapi import fetch_rapidapi_events
from eventfeed.providers.seatgeek import fetch_seatgeek_events
from eventfeed.providers.ticketmaster import fetch_ticketmaster_events

DISPLAY_NAMES = {
    "ticketmaster": "Ticketmaster",
    "predicthq": "PredictHQ",
    "seatgeek": "SeatGeek",
    "rapidapi": "RapidAPI",
    "mock": "Mock",
}


def get_providers(settings):
    """
    Build the provider registry: source name -> fetch(params, settings).
    The real providers always run (a missing key is reported as that
    provider's error); the mock provider runs only when enabled.
    """
    providers = {
        "ticketmaster": fetch_ticketmaster_events,
        "predicthq": fetch_predicthq_events,
        "seatgeek": fetch_seatgeek_events,
        "rapidapi": fetch_rapidapi_events,
    }

    if settings.use_mock_events:
        providers["mock"] = fetch_mock_events

    return providers
