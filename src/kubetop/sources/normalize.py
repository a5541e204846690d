"""Pure helpers that turn Kubernetes object fields into display text.

None of these functions read the clock: callers pass the elapsed duration in.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any

# Pod names at or above this length are abbreviated
TRUNCATE_THRESHOLD = 20
# Characters kept from the end of an abbreviated name
TRUNCATE_TAIL = 5
TRUNCATE_MARKER = "..."

UNKNOWN_AGE = "<unknown>"


def short_human_duration(d: timedelta) -> str:
    """Format an elapsed duration as a single short token.

    Deviations down to -1s are tolerated as clock skew and shown as "0s".
    All unit counts are truncated, never rounded.

    Args:
        d: Elapsed time (now - creation timestamp)

    Returns:
        One of "<invalid>", "<N>s", "<N>m", "<N>h", "<N>d" or "<N>y"

    Example:
        >>> short_human_duration(timedelta(seconds=125))
        '2m'
    """
    total = d.total_seconds()
    seconds = int(total)
    if seconds < -1:
        return "<invalid>"
    if seconds < 0:
        return "0s"
    if seconds < 60:
        return f"{seconds}s"
    minutes = int(total / 60)
    if minutes < 60:
        return f"{minutes}m"
    hours = int(total / 3600)
    if hours < 24:
        return f"{hours}h"
    if hours < 24 * 364:
        return f"{hours // 24}d"
    return f"{int(total / 3600 / 24 / 365)}y"


def age_since(created: datetime | None, now: datetime) -> str:
    """Return the short age of an object created at ``created``."""
    if created is None:
        return UNKNOWN_AGE
    return short_human_duration(now - created)


def truncate_name(name: str) -> str:
    """Abbreviate a long name to head + "..." + last five characters.

    Names shorter than 20 characters are returned unchanged.

    Example:
        >>> truncate_name("abcdefghijklmnopqrstuvwxyz")
        'abcdefghijkl...vwxyz'
    """
    if len(name) < TRUNCATE_THRESHOLD:
        return name
    head = TRUNCATE_THRESHOLD - len(TRUNCATE_MARKER) - TRUNCATE_TAIL
    return name[:head] + TRUNCATE_MARKER + name[len(name) - TRUNCATE_TAIL :]


def true_conditions(conditions: Iterable[Any] | None) -> list[str]:
    """Return the type names of all conditions whose status is "True"."""
    return [str(c.type) for c in conditions or [] if c.status == "True"]


def status_summary(phase: str | None, conditions: Iterable[Any] | None) -> str:
    """Join an optional phase with the names of true-valued conditions."""
    parts = [phase] if phase else []
    parts.extend(true_conditions(conditions))
    return " ".join(parts)


def unique_in_order(values: Iterable[str | None]) -> list[str]:
    """Drop empty values and duplicates, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
