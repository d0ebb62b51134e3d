"""
Post-processing for the merged provider events.

Steps run in a fixed order; later steps depend on earlier ones (dedup must
see only complete events, the distance filter must see backfilled
coordinates, pagination must see the sorted list).
"""

import math
from dataclasses import dataclass, field

from eventfeed.pipeline.merge import dedupe_events, exclude_events
from eventfeed.pipeline.validate import has_coordinates, missing_fields, validate_event
from eventfeed.utils.dates import sort_timestamp
from eventfeed.utils.geo import haversine_km, jitter_coordinates


@dataclass
class ProcessResult:
    events: list
    total: int = 0
    total_pages: int = 0
    page: int = 1
    page_size: int = 0
    counts: dict = field(default_factory=dict)

    @property
    def events_with_coordinates(self):
        return sum(1 for e in self.events if has_coordinates(e))


def backfill_coordinates(events, latitude, longitude, rng=None):
    """
    Give events without valid coordinates an approximate position near the
    search center. Returns (events, backfilled_count); input dicts are not mutated.
    """
    filled = []
    backfilled = 0
    for event in events:
        if has_coordinates(event):
            filled.append(event)
            continue
        event = dict(event)
        event["coordinates"] = jitter_coordinates(latitude, longitude, rng)
        filled.append(event)
        backfilled += 1
    return filled, backfilled


def sort_events(events):
    """Ascending by start; unparsable dates go last, ties keep input order."""
    return sorted(events, key=sort_timestamp)


def filter_by_distance(events, latitude, longitude, radius_km):
    """Keep events within radius_km of the center. Events without coordinates are dropped."""
    kept = []
    for event in events:
        if not has_coordinates(event):
            continue
        lon, lat = event["coordinates"]
        if haversine_km(latitude, longitude, lat, lon) <= radius_km:
            kept.append(event)
    return kept


def paginate(events, page, limit):
    start = (page - 1) * limit
    return events[start:start + limit]


def post_process(events, params, rng=None, log_func=None):
    """
    Run the merged events through every post-processing step and return the
    requested page as a ProcessResult.
    """
    log = log_func or print
    counts = {"input": len(events)}

    complete = []
    for event in events:
        if validate_event(event):
            complete.append(event)
        elif isinstance(event, dict) and not event.get("error"):
            log(f"  Dropping {event.get('id') or event.get('title')}: missing {', '.join(missing_fields(event))}")
    counts["incomplete"] = counts["input"] - len(complete)

    kept = exclude_events(complete, params.exclude_ids, params.categories)
    counts["excluded"] = len(complete) - len(kept)

    unique = dedupe_events(kept)
    counts["duplicates"] = len(kept) - len(unique)

    counts["backfilled"] = 0
    if params.has_center:
        unique, counts["backfilled"] = backfill_coordinates(unique, params.latitude, params.longitude, rng)

    ordered = sort_events(unique)

    counts["outside_radius"] = 0
    if params.has_center and params.radius:
        nearby = filter_by_distance(ordered, params.latitude, params.longitude, params.radius)
        counts["outside_radius"] = len(ordered) - len(nearby)
        ordered = nearby

    total = len(ordered)
    return ProcessResult(
        events=paginate(ordered, params.page, params.limit),
        total=total,
        total_pages=math.ceil(total / params.limit) if params.limit else 0,
        page=params.page,
        page_size=params.limit,
        counts=counts,
    )
