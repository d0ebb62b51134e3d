def dedup_key(event):
    """Events from different providers collapse when title and date match exactly."""
    return f"{event.get('title')}-{event.get('date')}"


def exclude_events(events, exclude_ids=None, categories=None):
    """
    Drop events the client has already seen (by id) and, when categories is
    non-empty, events outside those categories.
    """
    excluded = set(exclude_ids or [])
    allowed = set(categories or [])

    kept = []
    for event in events:
        if event.get("id") in excluded:
            continue
        if allowed and event.get("category") not in allowed:
            continue
        kept.append(event)
    return kept


def dedupe_events(events):
    """Keep the first event for each title + date; input order decides which one wins."""
    seen = set()
    unique = []
    for event in events:
        key = dedup_key(event)
        if key in seen:
            continue
        seen.add(key)
        unique.append(event)
    return unique
