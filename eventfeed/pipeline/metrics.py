from dataclasses import dataclass, field

from eventfeed.registry import DISPLAY_NAMES


@dataclass
class ProviderMetrics:
    """Track fetch metrics for each provider."""
    name: str
    event_count: int = 0
    errors: int = 0
    error_messages: list = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def error(self):
        return self.error_messages[0] if self.error_messages else None


def build_source_stats(metrics):
    """sourceStats for the response: {provider: {count, error}}."""
    return {
        name: {"count": m.event_count, "error": m.error}
        for name, m in metrics.items()
    }


def summary_lines(metrics):
    """Provider summary table, one line per entry."""
    lines = [
        "=" * 60,
        "PROVIDER SUMMARY",
        "=" * 60,
        f"{'Provider':<24} {'Events':>7} {'Errors':>7} {'Time':>10}",
        "-" * 60,
    ]
    for name in sorted(metrics.keys()):
        m = metrics[name]
        time_str = f"{m.duration_ms:.0f}ms"
        lines.append(f"{DISPLAY_NAMES.get(name, name):<24} {m.event_count:>7} {m.errors:>7} {time_str:>10}")
    lines.append("-" * 60)
    total_events = sum(m.event_count for m in metrics.values())
    total_errors = sum(m.errors for m in metrics.values())
    total_time = max((m.duration_ms for m in metrics.values()), default=0.0)
    lines.append(f"{'TOTAL':<24} {total_events:>7} {total_errors:>7} {total_time:>8.0f}ms")
    lines.append("=" * 60)
    return lines
