"""Plain-text rendering of a fetch outcome."""

from prayer_times.prayer_api import FetchOutcome, format_12_hour, next_prayer

ERROR_MESSAGE = "Unable to fetch prayer times. Please try again later."
FALLBACK_WARNING = "Using default location (Mecca): location unavailable."


def render_text(outcome: FetchOutcome, now) -> str:
    """Render the record as lines of text, marking the next prayer with '>'."""
    record = outcome.record
    upcoming = next_prayer(record.timings, now)

    lines = [
        "Prayer Times",
        record.readable_date,
        f"{record.hijri.date} {record.hijri.month_en} ({record.hijri.month_ar}) {record.hijri.year}",
    ]
    if outcome.used_fallback_location:
        lines.append(f"! {FALLBACK_WARNING}")
    lines.append("")

    for name, time_str in record.timings.items():
        marker = ">" if name == upcoming.name and not upcoming.tomorrow else " "
        lines.append(f"{marker} {name:<8} {format_12_hour(time_str):>8}")

    when = " (tomorrow)" if upcoming.tomorrow else ""
    lines.append("")
    lines.append(f"Next: {upcoming.name} at {format_12_hour(upcoming.time)}{when}")
    lines.append(f"{record.meta.latitude:.4f}, {record.meta.longitude:.4f} ({record.meta.timezone})")
    return "\n".join(lines)
