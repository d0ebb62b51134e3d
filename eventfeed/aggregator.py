"""
Multi-provider search.

search_events() fans one search out to every registered provider at once,
waits for all of them (each bounded by the provider timeout), then runs the
merged events through post-processing and assembles the response dict.
A failing provider only ever costs its own events.
"""

import time
import traceback
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone

from eventfeed.config import Settings
from eventfeed.errors import ProviderError, ProviderTimeout
from eventfeed.pipeline.metrics import ProviderMetrics, build_source_stats
from eventfeed.pipeline.process import post_process
from eventfeed.registry import DISPLAY_NAMES, get_providers

NO_EVENTS_WARNING = "No events found for this search. Try a different location, date range or keyword."
ALL_FAILED_WARNING = "All event providers failed. Please try again later."
INCOMPLETE_WARNING = "Events were found but all were filtered out for missing required fields."
OUT_OF_RANGE_WARNING = "Events were found but none are within the search radius or selected filters."


@dataclass
class ProviderResult:
    """Outcome of one provider call: its events, or the error that replaced them."""
    provider: str
    events: list = field(default_factory=list)
    error: str = None
    duration_ms: float = 0.0

    @property
    def ok(self):
        return self.error is None


def _timed_fetch(fetch, params, settings):
    start_time = time.time()
    events = fetch(params, settings)
    return events, (time.time() - start_time) * 1000


def fetch_all(params, settings, providers, log_func=None):
    """
    Call every provider concurrently and collect a ProviderResult per provider,
    in registry order. Providers still running after settings.provider_timeout
    are reported as timed out and abandoned.
    """
    log = log_func or print
    if not providers:
        return []

    executor = ThreadPoolExecutor(max_workers=len(providers), thread_name_prefix="provider")
    futures = {
        name: executor.submit(_timed_fetch, fetch, params, settings)
        for name, fetch in providers.items()
    }
    _, not_done = wait(futures.values(), timeout=settings.provider_timeout)

    results = []
    for name, future in futures.items():
        display_name = DISPLAY_NAMES.get(name, name)
        if future in not_done:
            error = str(ProviderTimeout(name, settings.provider_timeout))
            log(f"  {display_name}: ERROR - {error}")
            results.append(ProviderResult(name, error=error, duration_ms=settings.provider_timeout * 1000))
            continue

        try:
            events, duration_ms = future.result()
            events = [e for e in events or [] if not e.get("error")]
            log(f"  {display_name}: Found {len(events)} events")
            results.append(ProviderResult(name, events=events, duration_ms=duration_ms))
        except ProviderError as e:
            log(f"  {display_name}: ERROR - {e}")
            results.append(ProviderResult(name, error=str(e)))
        except Exception as e:
            log(f"  {display_name}: ERROR - {e}")
            log(f"  Traceback:\n{traceback.format_exc()}")
            results.append(ProviderResult(name, error=f"{name} failed: {e}"))

    # Don't block on providers that overran the timeout.
    executor.shutdown(wait=False, cancel_futures=True)
    return results


def _warning(results, raw_count, process_result):
    if results and all(not r.ok for r in results):
        return ALL_FAILED_WARNING
    if raw_count == 0:
        return NO_EVENTS_WARNING
    if process_result.counts.get("incomplete", 0) == raw_count:
        return INCOMPLETE_WARNING
    if process_result.total == 0:
        return OUT_OF_RANGE_WARNING
    return None


def _timestamp():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def run_search(params, settings=None, providers=None, cache=None, rng=None, log_func=None):
    """
    Run one search across all providers. Returns (response, metrics) where
    response is {events, sourceStats, meta, warning?} and metrics maps each
    provider to its ProviderMetrics (empty on a cache hit).

    providers maps source name -> fetch(params, settings); defaults to the
    registry. cache is an optional SearchCache; rng is passed to coordinate
    backfill.
    """
    log = log_func or print
    settings = settings or Settings.from_env()
    start_time = time.time()

    if cache is not None:
        cached = cache.get(params)
        if cached is not None:
            log("Returning cached search results")
            cached["meta"]["cached"] = True
            return cached, {}

    if providers is None:
        providers = get_providers(settings)

    log(f"Searching {len(providers)} providers...")
    results = fetch_all(params, settings, providers, log)

    metrics = {}
    all_events = []
    for result in results:
        m = ProviderMetrics(name=result.provider, event_count=len(result.events), duration_ms=result.duration_ms)
        if result.error:
            m.errors = 1
            m.error_messages.append(result.error)
        metrics[result.provider] = m
        all_events.extend(result.events)

    log(f"Processing {len(all_events)} events...")
    processed = post_process(all_events, params, rng=rng, log_func=log)
    counts = processed.counts
    log(
        f"  {counts['incomplete']} incomplete, {counts['excluded']} excluded, "
        f"{counts['duplicates']} duplicates, {counts['backfilled']} backfilled, "
        f"{counts['outside_radius']} outside radius"
    )

    response = {
        "events": processed.events,
        "sourceStats": build_source_stats(metrics),
        "meta": {
            "executionTime": round((time.time() - start_time) * 1000),
            "totalEvents": processed.total,
            "eventsWithCoordinates": processed.events_with_coordinates,
            "currentPage": processed.page,
            "pageSize": processed.page_size,
            "totalPages": processed.total_pages,
            "timestamp": _timestamp(),
            "cached": False,
        },
    }

    warning = _warning(results, len(all_events), processed)
    if warning:
        response["warning"] = warning
        log(f"  {warning}")

    if cache is not None and any(r.ok for r in results):
        cache.set(params, response)

    return response, metrics


def search_events(params, settings=None, providers=None, cache=None, rng=None, log_func=None):
    """Response dict for one search. See run_search()."""
    response, _ = run_search(params, settings, providers, cache, rng, log_func)
    return response
