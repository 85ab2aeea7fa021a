"""Conversions for Jenkins' epoch-millisecond timestamps and durations.

Jenkins reports `timestamp` as milliseconds since the epoch (UTC) and
`duration` as elapsed milliseconds (0 while a build is still running).

Usage:
    from buildwatch.core.datetime_utils import format_duration_ms, format_epoch_ms

    format_duration_ms(83_000)          # "1m 23s"
    format_epoch_ms(1_700_000_000_000)  # "2023-11-14 22:13:20 UTC"
"""

from datetime import UTC, datetime


def from_epoch_ms(value: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def format_epoch_ms(value: int) -> str:
    """Format epoch milliseconds as a human-readable UTC timestamp."""
    return from_epoch_ms(value).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_duration_ms(value: int) -> str:
    """Format a duration in milliseconds as e.g. '1h 2m 3s', '4m 5s' or '6s'."""
    total_seconds = max(value, 0) // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
