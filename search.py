#!/usr/bin/env python3
"""
Event search runner.
Queries every configured provider for one search, writes the response JSON
and appends the run to the search log.
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

from eventfeed import config
from eventfeed.aggregator import run_search
from eventfeed.errors import RequestValidationError
from eventfeed.pipeline.cache import SearchCache
from eventfeed.pipeline.io import append_run_log, save_response
from eventfeed.pipeline.metrics import summary_lines
from eventfeed.search import validate_search_params


def build_request(args):
    """Request body for validate_search_params from CLI arguments."""
    body = {
        "keyword": args.keyword,
        "location": args.location,
        "lat": args.lat,
        "lng": args.lng,
        "radius": args.radius,
        "radiusUnit": args.unit,
        "startDate": args.start_date,
        "endDate": args.end_date,
        "categories": args.category or None,
        "limit": args.limit,
        "page": args.page,
    }
    return {key: value for key, value in body.items() if value is not None}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Search events across all configured providers")
    parser.add_argument("--keyword", help="Free-text search term")
    parser.add_argument("--location", help="City or place name")
    parser.add_argument("--lat", type=float, help="Search center latitude")
    parser.add_argument("--lng", type=float, help="Search center longitude")
    parser.add_argument("--radius", type=float, help="Search radius (5-100)")
    parser.add_argument("--unit", choices=["km", "mi"], default="km", help="Radius unit")
    parser.add_argument("--start-date", help="YYYY-MM-DD (default: today)")
    parser.add_argument("--end-date", help="YYYY-MM-DD")
    parser.add_argument("--category", action="append", choices=config.CATEGORIES,
                        help="Limit to a category (repeatable)")
    parser.add_argument("--limit", type=int, help="Events per page (1-100)")
    parser.add_argument("--page", type=int, help="Page number")
    parser.add_argument("--mock", action="store_true", help="Include the offline mock provider")
    parser.add_argument("--output", default=str(config.OUTPUT_PATH), help="Where to write the response JSON")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    run_timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    log_lines = []  # Collect log entries

    def log(message, level="INFO"):
        """Log a message to both console and log buffer."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        log_entry = f"[{timestamp}] [{level}] {message}"
        print(message)
        log_lines.append(log_entry)

    log(f"Starting search run at {run_timestamp}")

    try:
        params = validate_search_params(build_request(args))
    except RequestValidationError as e:
        for error in e.errors:
            log(f"  {error['message']}: {error['details']}", "ERROR")
        append_run_log(log_lines, config.LOG_PATH)
        return 2

    settings = config.Settings.from_env()
    if args.mock:
        settings.use_mock_events = True

    cache = SearchCache(ttl_seconds=settings.cache_ttl_seconds)
    response, metrics = run_search(params, settings=settings, cache=cache, log_func=log)

    # Log summary table
    log("")
    for line in summary_lines(metrics):
        log(line)

    meta = response["meta"]
    log(f"\nTotal events: {meta['totalEvents']} (page {meta['currentPage']} of {meta['totalPages']})")

    failed = [name for name, stats in response["sourceStats"].items() if stats["error"]]
    if failed:
        log(f"WARNING: Failed providers: {', '.join(failed)}", "ERROR")
    if response.get("warning"):
        log(f"WARNING: {response['warning']}", "WARNING")

    output_path = Path(args.output)
    save_response(response, output_path)
    log(f"Response saved to {output_path}")

    # Save log file (time-based retention: 14 days)
    append_run_log(log_lines, config.LOG_PATH)
    print(f"Log saved to {config.LOG_PATH}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
