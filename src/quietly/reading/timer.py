"""Elapsed reading time.

The live timer is always derived from absolute timestamps rather than a
ticking counter, so it stays correct after the process sleeps or restarts.
"""

from datetime import datetime
from typing import Optional

from ..utils import ensure_utc


def _seconds_between(start: datetime, end: datetime) -> int:
    return int((ensure_utc(end) - ensure_utc(start)).total_seconds())


def elapsed_seconds(
    now: datetime,
    started_at: datetime,
    paused_at: Optional[datetime] = None,
    total_paused_seconds: int = 0,
) -> int:
    """
    Reading seconds of a session, excluding paused time.

    While paused the clock is frozen at ``paused_at``; otherwise it runs up
    to ``now``. Negative results (clock skew, corrupt accumulator) are
    reported as 0.

    Args:
        now: Current time
        started_at: When the session started
        paused_at: When the current pause began, if paused
        total_paused_seconds: Paused time already folded in by resumes

    Returns:
        Elapsed reading seconds, never negative

    Example:
        >>> from datetime import timezone
        >>> t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> elapsed_seconds(t0.replace(minute=3), t0, None, 60)
        120
    """
    until = paused_at if paused_at is not None else now
    return max(0, _seconds_between(started_at, until) - total_paused_seconds)


def pause_interval_seconds(paused_at: datetime, now: datetime) -> int:
    """Length of the open pause interval, never negative."""
    return max(0, _seconds_between(paused_at, now))


def format_duration(seconds: int) -> str:
    """
    Format seconds as a clock string.

    Example:
        >>> format_duration(75)
        '1:15'
        >>> format_duration(3725)
        '1:02:05'
    """
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_minutes(minutes: int) -> str:
    """
    Format a minute total for summaries.

    Example:
        >>> format_minutes(135)
        '2h 15m'
        >>> format_minutes(40)
        '40m'
    """
    hours, mins = divmod(max(0, int(minutes)), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"
