import pytest

from eventfeed.party import (
    PartySignals,
    calculate_party_score,
    classify_party,
    detect_party_subcategory,
    normalize_label,
    score_labels,
    score_popularity,
    score_text,
    score_time,
    score_venue,
)


def test_text_keywords_match_whole_words():
    assert score_text("dj party") == 9
    # whole words only: "partying" is not "party", "clubhouse" is not "club"
    assert score_text("partying at the clubhouse") == 0
    assert score_text("") == 0


def test_venue_keywords():
    assert score_venue("The Grand Club") == 5
    assert score_venue("Rooftop Bar") == 6
    assert score_venue(None) == 0


def test_labels_normalize_case_and_separators():
    assert normalize_label("Dance Club") == "dance-club"
    assert normalize_label("live_music") == "live-music"
    assert score_labels(["Nightlife", "live_music"]) == 8
    assert score_labels(["nightlife", "Nightlife"]) == 5
    assert score_labels(None) == 0


@pytest.mark.parametrize(
    "start_time, expected",
    [
        ("22:00", 3),
        ("01:30", 3),
        ("04:00", 0),
        ("17:15", 1.5),
        ("13:00", 0),
        (None, 0),
        ("TBA", 0),
    ],
)
def test_score_time(start_time, expected):
    assert score_time(start_time) == expected


def test_score_popularity_tiers():
    assert score_popularity(rank=75) == 3
    assert score_popularity(rank=55, local_rank=72, attendance=600) == 6
    assert score_popularity(rank=29, local_rank=49, attendance=199) == 0
    assert score_popularity(rank="high") == 0


def test_missing_signals_contribute_nothing():
    assert calculate_party_score(PartySignals()) == 0


def test_dj_party_at_club_is_club_party():
    signals = PartySignals(
        title="Saturday Night DJ Party at The Grand Club",
        venue_name="The Grand Club",
        labels=["Music"],
        start_time="22:00",
    )
    result = classify_party(signals)

    assert result.is_party is True
    assert result.subcategory == "club"
    assert result.score >= 5
    assert "venue:club(+5)" in result.matches


def test_pool_brunch_sits_on_the_threshold():
    signals = PartySignals(title="Sunday Pool Brunch", start_time="13:00")

    at_default = classify_party(signals)
    assert at_default.score == 5
    assert at_default.is_party is True
    assert at_default.subcategory == "day-party"

    stricter = classify_party(signals, threshold=6)
    assert stricter.is_party is False
    assert stricter.subcategory is None


def test_classify_party_is_deterministic():
    signals = PartySignals(title="Rooftop Mixer", venue_name="Skyline Lounge", start_time="18:00", rank=55)
    first = classify_party(signals)
    second = classify_party(signals)
    assert first == second


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Disco Inferno", "club"),
        ("Afternoon Pool Party", "day-party"),
        ("Dance Party by the Pool", "club"),
        ("Summer Music Festival", "music"),
        ("Young Professionals Mixer", "social"),
        ("Warehouse Rave", "general"),
    ],
)
def test_detect_party_subcategory_priority(title, expected):
    assert detect_party_subcategory(title) == expected
