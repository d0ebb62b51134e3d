import pytest
from freezegun import freeze_time

from eventfeed import config
from eventfeed.errors import RequestValidationError
from eventfeed.search import SearchParams, extract_center, validate_search_params


def error_fields(body):
    with pytest.raises(RequestValidationError) as excinfo:
        validate_search_params(body)
    return [error["field"] for error in excinfo.value.errors]


@freeze_time("2025-05-30 12:00:00")
def test_defaults():
    params = validate_search_params({})

    assert params == SearchParams(
        keyword="",
        location="",
        latitude=None,
        longitude=None,
        radius=config.DEFAULT_RADIUS_KM,
        start_date="2025-05-30",
        end_date=None,
        categories=[],
        limit=config.DEFAULT_LIMIT,
        page=1,
        exclude_ids=[],
    )
    assert params.has_center is False


def test_full_request():
    params = validate_search_params({
        "keyword": "  jazz ",
        "location": "New York, NY",
        "lat": "40.7128",
        "lng": -74.006,
        "radius": 25,
        "startDate": "2025-06-01",
        "endDate": "2025-06-30T23:59:59Z",
        "categories": ["Music", "party", "music"],
        "limit": 20,
        "page": "2",
        "excludeIds": ["seatgeek-1"],
    })

    assert params.keyword == "jazz"
    assert params.location == "New York, NY"
    assert (params.latitude, params.longitude) == (40.7128, -74.006)
    assert params.radius == 25
    assert (params.start_date, params.end_date) == ("2025-06-01", "2025-06-30")
    assert params.categories == ["music", "party"]
    assert (params.limit, params.page) == (20, 2)
    assert params.exclude_ids == ["seatgeek-1"]


def test_radius_in_miles_is_converted_to_km():
    params = validate_search_params({"radius": 10, "radiusUnit": "mi"})
    assert params.radius == pytest.approx(16.0934)


@pytest.mark.parametrize(
    "body",
    [
        {"userLat": 40.7128, "userLng": -74.006},
        {"coordinates": [-74.006, 40.7128]},
        {"predicthqLocation": "50km@40.7128,-74.006"},
        {"location": "40.7128, -74.006"},
    ],
)
def test_center_aliases(body):
    assert extract_center(body) == (40.7128, -74.006)
    params = validate_search_params(body)
    assert params.has_center
    assert params.location == ""


def test_lat_without_lng():
    assert error_fields({"lat": 40.7}) == ["longitude"]


def test_out_of_range_and_empty_coordinates():
    assert error_fields({"lat": 91, "lng": 0}) == ["latitude"]
    assert error_fields({"lat": 0, "lng": "  "}) == ["longitude"]


@pytest.mark.parametrize("radius", [4, 101, "wide"])
def test_invalid_radius(radius):
    assert error_fields({"radius": radius}) == ["radius"]


def test_invalid_dates():
    assert error_fields({"startDate": "next tuesday"}) == ["startDate"]
    assert error_fields({"startDate": "2025-06-10", "endDate": "2025-06-01"}) == ["endDate"]


@pytest.mark.parametrize("body", [{"limit": 0}, {"limit": 101}, {"limit": 2.5}, {"page": 0}, {"page": "first"}])
def test_invalid_paging(body):
    assert error_fields(body) == list(body.keys())


def test_unknown_category():
    with pytest.raises(RequestValidationError) as excinfo:
        validate_search_params({"categories": ["music", "business"]})
    error = excinfo.value.errors[0]
    assert error["field"] == "categories"
    assert "business" in error["details"]
    assert str(excinfo.value) == "Invalid categories"


def test_all_errors_reported_together():
    fields = error_fields({"lat": 100, "lng": 0, "radius": 500, "limit": 0, "categories": ["nope"]})
    assert fields == ["latitude", "radius", "limit", "categories"]


def test_non_dict_body():
    assert error_fields(["not", "a", "dict"]) == ["body"]
