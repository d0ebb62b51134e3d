"""
Party event classification.

Scores an event on four keyword channels (title + description text, venue
name, provider labels, start hour) plus provider popularity signals. When the
total reaches the threshold the event is re-categorized as "party",
regardless of what the provider taxonomy said, and gets a subcategory.

Everything here is a pure function of its inputs: no I/O, no randomness.
"""

import re
from dataclasses import dataclass, field

from eventfeed import config
from eventfeed.utils.dates import hour_of

STRONG = "strong"
MEDIUM = "medium"
WEAK = "weak"

TEXT_KEYWORDS = {
    STRONG: {
        "party": 5, "parties": 5, "nightclub": 5, "rave": 5, "nightlife": 5,
        "afterparty": 5,
        "club": 4, "clubbing": 4, "dj": 4, "dance": 4,
        "dancing": 4, "disco": 4,
    },
    MEDIUM: {
        "festival": 3, "mixer": 3, "lounge": 3, "happy hour": 3,
        "social": 2.5, "gala": 2.5, "pool": 2.5, "brunch": 2.5,
        "rooftop": 2.5, "celebration": 2.5,
    },
    WEAK: {
        "entertainment": 1, "show": 1, "live": 1.5, "concert": 1.5,
        "night": 1, "bar": 1,
    },
}

VENUE_KEYWORDS = {
    STRONG: {"club": 5, "nightclub": 5, "lounge": 4, "discotheque": 5},
    MEDIUM: {"bar": 3, "rooftop": 3, "warehouse": 3, "hall": 2.5, "ballroom": 2.5, "terrace": 2.5},
    WEAK: {"restaurant": 1, "theater": 1, "theatre": 1, "cafe": 1, "brewery": 1.5},
}

LABEL_KEYWORDS = {
    STRONG: {
        "nightlife": 5, "dance-club": 5, "dj-set": 5, "nightclub": 5,
        "party": 5, "dance-party": 5, "rave": 5, "club": 4, "dj": 4,
    },
    MEDIUM: {
        "live-music": 3, "social-gathering": 3, "mixer": 3, "lounge": 3,
        "happy-hour": 2.5, "festival": 2.5, "concert": 2.5,
    },
    WEAK: {
        "food-and-drink": 1, "community": 1, "entertainment": 1,
        "music": 1.5, "food": 1,
    },
}

NIGHT_BONUS = 3
LATE_AFTERNOON_BONUS = 1.5

RANK_BONUSES = [(70, 3), (50, 2), (30, 1)]
LOCAL_RANK_BONUSES = [(70, 2), (50, 1)]
ATTENDANCE_BONUSES = [(500, 2), (200, 1)]

SUBCATEGORY_PATTERNS = [
    ("club", re.compile(r"\b(?:club\w*|nightclub\w*|dj|danc\w*|disco\w*)\b")),
    ("day-party", re.compile(r"\b(?:day|afternoon|pool|rooftop|brunch)\b")),
    ("music", re.compile(r"\b(?:festival\w*|concert\w*|live|performance\w*)\b")),
    ("social", re.compile(r"\b(?:social\w*|mixer\w*|networking|gathering\w*)\b")),
]


def _pattern(keyword):
    return re.compile(r"\b" + re.escape(keyword) + r"\b")


_TEXT_PATTERNS = {
    tier: [(kw, weight, _pattern(kw)) for kw, weight in keywords.items()]
    for tier, keywords in TEXT_KEYWORDS.items()
}
_VENUE_PATTERNS = {
    tier: [(kw, weight, _pattern(kw)) for kw, weight in keywords.items()]
    for tier, keywords in VENUE_KEYWORDS.items()
}


@dataclass
class PartySignals:
    """Inputs the classifier reads from one raw event."""
    title: str = ""
    description: str = ""
    venue_name: str = ""
    labels: list = field(default_factory=list)
    start_time: str = None
    rank: float = None
    local_rank: float = None
    attendance: float = None

    def text(self):
        return f"{self.title or ''} {self.description or ''}".lower()


@dataclass
class PartyResult:
    is_party: bool
    subcategory: str = None
    score: float = 0.0
    matches: list = field(default_factory=list)


def normalize_label(label):
    if not isinstance(label, str):
        return ""
    return re.sub(r"[\s_]+", "-", label.strip().lower())


def _score_patterns(text, patterns, channel, matches):
    score = 0.0
    if not text:
        return score
    for tier in (STRONG, MEDIUM, WEAK):
        for keyword, weight, pattern in patterns[tier]:
            if pattern.search(text):
                score += weight
                matches.append(f"{channel}:{keyword}(+{weight})")
    return score


def score_text(text, matches=None):
    """Keyword score for combined title + description text."""
    matches = matches if matches is not None else []
    return _score_patterns((text or "").lower(), _TEXT_PATTERNS, "text", matches)


def score_venue(venue_name, matches=None):
    matches = matches if matches is not None else []
    return _score_patterns((venue_name or "").lower(), _VENUE_PATTERNS, "venue", matches)


def score_labels(labels, matches=None):
    """Labels match whole (after normalizing case and separators), each at most once."""
    matches = matches if matches is not None else []
    normalized = {normalize_label(label) for label in (labels or [])}
    score = 0.0
    for tier in (STRONG, MEDIUM, WEAK):
        for label, weight in LABEL_KEYWORDS[tier].items():
            if label in normalized:
                score += weight
                matches.append(f"label:{label}(+{weight})")
    return score


def score_time(start_time, matches=None):
    """19:00-04:00 scores highest, 16:00-19:00 a little, anything else nothing."""
    matches = matches if matches is not None else []
    hour = hour_of(start_time)
    if hour is None:
        return 0.0
    if hour >= 19 or hour < 4:
        matches.append(f"time:{start_time}(+{NIGHT_BONUS})")
        return float(NIGHT_BONUS)
    if 16 <= hour < 19:
        matches.append(f"time:{start_time}(+{LATE_AFTERNOON_BONUS})")
        return LATE_AFTERNOON_BONUS
    return 0.0


def _tiered_bonus(value, tiers):
    if value is None or isinstance(value, bool):
        return 0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0
    for minimum, bonus in tiers:
        if value >= minimum:
            return bonus
    return 0


def score_popularity(rank=None, local_rank=None, attendance=None, matches=None):
    matches = matches if matches is not None else []
    score = 0.0
    for name, value, tiers in (
        ("rank", rank, RANK_BONUSES),
        ("local_rank", local_rank, LOCAL_RANK_BONUSES),
        ("attendance", attendance, ATTENDANCE_BONUSES),
    ):
        bonus = _tiered_bonus(value, tiers)
        if bonus:
            score += bonus
            matches.append(f"{name}:{value}(+{bonus})")
    return score


def calculate_party_score(signals, matches=None):
    """Sum of every channel's contribution. Missing signals contribute 0."""
    matches = matches if matches is not None else []
    return (
        score_text(signals.text(), matches)
        + score_venue(signals.venue_name, matches)
        + score_labels(signals.labels, matches)
        + score_time(signals.start_time, matches)
        + score_popularity(signals.rank, signals.local_rank, signals.attendance, matches)
    )


def detect_party_subcategory(title="", description=""):
    """First matching pattern wins: club, day-party, music, social, else general."""
    text = f"{title or ''} {description or ''}".lower()
    for subcategory, pattern in SUBCATEGORY_PATTERNS:
        if pattern.search(text):
            return subcategory
    return "general"


def classify_party(signals, threshold=None):
    """
    Decide whether an event should be categorized as a party.
    Returns a PartyResult; subcategory is only set when is_party is True.
    """
    threshold = config.PARTY_SCORE_THRESHOLD if threshold is None else threshold
    matches = []
    score = calculate_party_score(signals, matches)

    if score >= threshold:
        return PartyResult(
            is_party=True,
            subcategory=detect_party_subcategory(signals.title, signals.description),
            score=score,
            matches=matches,
        )
    return PartyResult(is_party=False, score=score, matches=matches)
