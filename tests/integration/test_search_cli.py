import json

import pytest

import search
from eventfeed import config
from eventfeed.config import Settings


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "LOG_PATH", tmp_path / "search-log.txt")
    monkeypatch.setattr(Settings, "from_env", classmethod(lambda cls: cls()))
    return tmp_path


def test_mock_search_writes_response_and_log(workspace, capsys):
    output = workspace / "events.json"

    code = search.main([
        "--mock",
        "--lat", "40.7128",
        "--lng", "-74.006",
        "--start-date", "2025-06-01",
        "--output", str(output),
    ])

    assert code == 0
    response = json.loads(output.read_text())
    assert response["sourceStats"]["mock"] == {"count": 6, "error": None}
    assert response["sourceStats"]["seatgeek"]["error"] == "API key not configured for seatgeek"
    assert response["meta"]["totalEvents"] == 6

    log_text = config.LOG_PATH.read_text()
    assert "--- New Run ---" in log_text
    assert "[ERROR] WARNING: Failed providers: ticketmaster, predicthq, seatgeek, rapidapi" in log_text
    assert "PROVIDER SUMMARY" in capsys.readouterr().out


def test_invalid_request_exits_with_usage_error(workspace):
    code = search.main(["--lat", "95", "--lng", "0", "--output", str(workspace / "events.json")])

    assert code == 2
    assert not (workspace / "events.json").exists()
    assert "[ERROR]   Invalid latitude value" in config.LOG_PATH.read_text()


def test_build_request_drops_unset_flags():
    args = search.parse_args(["--keyword", "jazz", "--category", "music", "--category", "party", "--unit", "mi"])

    assert search.build_request(args) == {
        "keyword": "jazz",
        "radiusUnit": "mi",
        "categories": ["music", "party"],
    }


def test_cache_ttl_comes_from_settings(workspace, monkeypatch):
    monkeypatch.setattr(Settings, "from_env", classmethod(lambda cls: cls(cache_ttl_seconds=42)))
    built = []

    class RecordingCache(search.SearchCache):
        def __init__(self, ttl_seconds, **kwargs):
            super().__init__(ttl_seconds=ttl_seconds, **kwargs)
            built.append(self)

    monkeypatch.setattr(search, "SearchCache", RecordingCache)

    code = search.main(["--mock", "--lat", "40.7128", "--lng", "-74.006", "--output", str(workspace / "events.json")])

    assert code == 0
    assert [cache.ttl_seconds for cache in built] == [42]
    assert len(built[0]) == 1
