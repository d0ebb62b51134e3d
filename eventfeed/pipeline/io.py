import json
import re
from datetime import datetime, timedelta, timezone

from eventfeed import config


def trim_log_by_time(log_path, retention_days=config.LOG_RETENTION_DAYS):
    """
    Remove log entries older than retention_days.
    Returns list of lines to keep.
    """
    if not log_path.exists():
        return []

    cutoff = datetime.now(timezone.utc) - timedelta(days=retention_days)
    cutoff_str = cutoff.strftime("%Y-%m-%d %H:%M:%S")

    kept_lines = []
    current_entry_recent = False

    with open(log_path, "r") as f:
        for line in f:
            match = re.match(r"\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]", line)
            if match:
                current_entry_recent = match.group(1) >= cutoff_str

            if current_entry_recent:
                kept_lines.append(line)

    return kept_lines


def append_run_log(log_lines, log_path=config.LOG_PATH, retention_days=config.LOG_RETENTION_DAYS):
    """Write this run's log lines after the retained history."""
    existing_log = trim_log_by_time(log_path, retention_days)
    log_content = existing_log + ["\n--- New Run ---\n"] + [line + "\n" for line in log_lines]

    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, "w") as f:
        f.writelines(log_content)


def save_response(response, output_path=config.OUTPUT_PATH):
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(response, f, indent=2)
