import json
from pathlib import Path

import pytest

freeze_time = pytest.importorskip("freezegun").freeze_time

from eventfeed.providers.ticketmaster import TicketmasterEvent

TESTS_DIR = Path(__file__).resolve().parents[1]


@freeze_time("2025-05-30 12:00:00")
def test_golden_ticketmaster_snapshot():
    fixtures_path = TESTS_DIR / "fixtures" / "ticketmaster_events.json"
    golden_path = TESTS_DIR / "golden" / "ticketmaster_normalized.json"

    raw_events = json.loads(fixtures_path.read_text())["_embedded"]["events"]

    events = TicketmasterEvent.normalize_all(raw_events)

    expected = json.loads(golden_path.read_text())
    assert events == expected
