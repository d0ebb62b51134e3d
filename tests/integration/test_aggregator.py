import json
import random
import threading
from pathlib import Path

import pytest

responses = pytest.importorskip("responses")

from eventfeed import config
from eventfeed.aggregator import (
    ALL_FAILED_WARNING,
    INCOMPLETE_WARNING,
    NO_EVENTS_WARNING,
    OUT_OF_RANGE_WARNING,
    fetch_all,
    run_search,
    search_events,
)
from eventfeed.config import Settings
from eventfeed.errors import ProviderHTTPError
from eventfeed.pipeline.cache import SearchCache
from eventfeed.providers.rapidapi import fetch_rapidapi_events
from eventfeed.providers.ticketmaster import fetch_ticketmaster_events
from eventfeed.search import SearchParams

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"

PROVIDER_URLS = {
    "ticketmaster": (f"{config.TICKETMASTER_BASE_URL}/events.json", "ticketmaster_events.json"),
    "predicthq": (f"{config.PREDICTHQ_BASE_URL}/events/", "predicthq_events.json"),
    "seatgeek": (f"{config.SEATGEEK_BASE_URL}/events", "seatgeek_events.json"),
    "rapidapi": ("https://real-time-events-search.p.rapidapi.com/search-events", "rapidapi_events.json"),
}


@pytest.fixture
def settings():
    return Settings(
        ticketmaster_api_key="tm-key",
        predicthq_api_key="phq-key",
        seatgeek_client_id="sg-id",
        rapidapi_key="rapid-key",
        rapidapi_host="real-time-events-search.p.rapidapi.com",
        provider_timeout=5,
    )


@pytest.fixture
def params():
    return SearchParams(latitude=40.7128, longitude=-74.0060, radius=50, start_date="2025-06-01")


def register_all(rsps, skip=()):
    for name, (url, fixture) in PROVIDER_URLS.items():
        if name in skip:
            continue
        rsps.add(rsps.GET, url, json=json.loads((FIXTURES / fixture).read_text()), status=200)


def quiet(*_):
    pass


def test_search_merges_all_providers(settings, params):
    with responses.RequestsMock() as rsps:
        register_all(rsps)
        response = search_events(params, settings=settings, rng=random.Random(1), log_func=quiet)

    assert response["sourceStats"] == {
        "ticketmaster": {"count": 2, "error": None},
        "predicthq": {"count": 2, "error": None},
        "seatgeek": {"count": 2, "error": None},
        "rapidapi": {"count": 2, "error": None},
    }

    # Toronto is outside the radius; the RapidAPI "Jazz Night" duplicates SeatGeek's
    assert [e["title"] for e in response["events"]] == [
        "Jazz Night",
        "New York Knicks vs. Boston Celtics",
        "Saturday Night DJ Party at The Grand Club",
        "Warehouse Rave",
        "Sunday Pool Brunch",
        "Data Engineering Summit",
    ]
    assert response["events"][0]["id"] == "seatgeek-5001"

    game = response["events"][1]
    lon, lat = game["coordinates"]
    assert abs(lat - 40.7128) <= 0.1
    assert abs(lon - -74.0060) <= 0.1

    meta = response["meta"]
    assert meta["totalEvents"] == 6
    assert meta["eventsWithCoordinates"] == 6
    assert meta["currentPage"] == 1
    assert meta["pageSize"] == config.DEFAULT_LIMIT
    assert meta["totalPages"] == 1
    assert meta["cached"] is False
    assert "warning" not in response


def test_provider_timeout_keeps_other_events(settings, params):
    release = threading.Event()

    def hanging(params, settings):
        release.wait(5)
        return []

    def fast(params, settings):
        return [{
            "id": "mock-1",
            "source": "mock",
            "title": "Rooftop Social",
            "date": "2025-06-02",
            "time": "18:00",
            "rawDate": None,
            "category": "party",
            "coordinates": [-74.0, 40.71],
        }]

    settings.provider_timeout = 0.2
    try:
        response = search_events(
            params,
            settings=settings,
            providers={"ticketmaster": hanging, "mock": fast},
            log_func=quiet,
        )
    finally:
        release.set()

    assert response["sourceStats"]["ticketmaster"] == {
        "count": 0,
        "error": "ticketmaster request timed out after 0.2s",
    }
    assert response["sourceStats"]["mock"] == {"count": 1, "error": None}
    assert [e["id"] for e in response["events"]] == ["mock-1"]


def test_http_timeout_reported_per_provider(settings, params):
    import requests

    with responses.RequestsMock() as rsps:
        register_all(rsps, skip=("predicthq",))
        rsps.add(rsps.GET, PROVIDER_URLS["predicthq"][0], body=requests.exceptions.ReadTimeout("slow"))
        response = search_events(params, settings=settings, rng=random.Random(1), log_func=quiet)

    assert response["sourceStats"]["predicthq"] == {
        "count": 0,
        "error": "predicthq request timed out after 5s",
    }
    assert "Sunday Pool Brunch" not in [e["title"] for e in response["events"]]
    assert "Warehouse Rave" in [e["title"] for e in response["events"]]


def test_missing_keys_and_unexpected_errors_are_isolated(params):
    def broken(params, settings):
        raise KeyError("venue")

    settings = Settings(rapidapi_key="rapid-key", rapidapi_host="real-time-events-search.p.rapidapi.com")
    with responses.RequestsMock() as rsps:
        register_all(rsps, skip=("ticketmaster", "predicthq", "seatgeek"))
        response = search_events(
            params,
            settings=settings,
            providers={
                "ticketmaster": fetch_ticketmaster_events,
                "seatgeek": broken,
                "rapidapi": fetch_rapidapi_events,
            },
            log_func=quiet,
        )

    stats = response["sourceStats"]
    assert stats["ticketmaster"] == {"count": 0, "error": "API key not configured for ticketmaster"}
    assert stats["seatgeek"] == {"count": 0, "error": "seatgeek failed: 'venue'"}
    assert stats["rapidapi"] == {"count": 2, "error": None}
    assert [e["title"] for e in response["events"]] == ["Jazz Night", "Warehouse Rave"]
    assert "warning" not in response


def test_fetch_all_keeps_registry_order(settings, params):
    def named(name):
        return lambda params, settings: [{"id": f"{name}-1", "title": name, "date": "2025-06-01"}]

    results = fetch_all(params, settings, {"b": named("b"), "a": named("a")}, log_func=quiet)

    assert [r.provider for r in results] == ["b", "a"]
    assert all(r.ok for r in results)
    assert fetch_all(params, settings, {}, log_func=quiet) == []


def event(**overrides):
    base = {
        "id": "mock-1",
        "source": "mock",
        "title": "Rooftop Social",
        "date": "2025-06-02",
        "time": "18:00",
        "rawDate": None,
        "category": "party",
        "coordinates": [-74.0, 40.71],
    }
    base.update(overrides)
    return base


def failing(params, settings):
    raise ProviderHTTPError("predicthq", 500, "Internal Server Error")


@pytest.mark.parametrize(
    "providers, expected",
    [
        ({"predicthq": failing}, ALL_FAILED_WARNING),
        ({"mock": lambda p, s: []}, NO_EVENTS_WARNING),
        ({"mock": lambda p, s: [event(title="")]}, INCOMPLETE_WARNING),
        ({"mock": lambda p, s: [event(coordinates=[-79.3788, 43.654])]}, OUT_OF_RANGE_WARNING),
        ({"mock": lambda p, s: [event(category="sports")], "predicthq": failing}, OUT_OF_RANGE_WARNING),
    ],
)
def test_warnings(settings, params, providers, expected):
    params.categories = ["party"] if len(providers) > 1 else []
    response = search_events(params, settings=settings, providers=providers, log_func=quiet)

    assert response["warning"] == expected
    assert response["events"] == []
    assert response["meta"]["totalPages"] == 0


def test_pagination_meta(settings, params):
    events = [event(id=f"mock-{i}", title=f"Show {i}", date=f"2025-06-{i + 1:02d}") for i in range(5)]
    params.limit = 2
    params.page = 3

    response = search_events(params, settings=settings, providers={"mock": lambda p, s: events}, log_func=quiet)

    assert [e["id"] for e in response["events"]] == ["mock-4"]
    assert response["meta"]["totalEvents"] == 5
    assert response["meta"]["totalPages"] == 3
    assert response["meta"]["currentPage"] == 3
    assert response["meta"]["pageSize"] == 2


def test_cached_response_skips_providers(settings, params):
    calls = []

    def counting(params, settings):
        calls.append(1)
        return [event()]

    cache = SearchCache(ttl_seconds=300)
    first, metrics = run_search(params, settings=settings, providers={"mock": counting}, cache=cache, log_func=quiet)
    second = search_events(params, settings=settings, providers={"mock": counting}, cache=cache, log_func=quiet)

    assert len(calls) == 1
    assert metrics["mock"].event_count == 1
    assert first["meta"]["cached"] is False
    assert second["meta"]["cached"] is True
    assert second["events"] == first["events"]


def test_failed_searches_are_not_cached(settings, params):
    cache = SearchCache(ttl_seconds=300)
    search_events(params, settings=settings, providers={"predicthq": failing}, cache=cache, log_func=quiet)
    assert len(cache) == 0


def test_mock_provider_end_to_end(settings, params):
    settings.use_mock_events = True
    settings.ticketmaster_api_key = None
    settings.predicthq_api_key = None
    settings.seatgeek_client_id = None
    settings.rapidapi_key = None

    response = search_events(params, settings=settings, rng=random.Random(5), log_func=quiet)

    assert response["sourceStats"]["mock"] == {"count": 6, "error": None}
    assert response["sourceStats"]["ticketmaster"]["error"] == "API key not configured for ticketmaster"
    assert response["meta"]["totalEvents"] == 6
    dates = [e["date"] for e in response["events"]]
    assert dates == sorted(dates)
