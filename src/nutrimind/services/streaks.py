"""Calendar helpers and logging streaks."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from nutrimind.domain.models import DailyLog


def today_local(timezone_name: str, now: datetime | None = None) -> str:
    """Return today's date as YYYY-MM-DD in the user's timezone."""
    moment = now or datetime.now(tz=UTC)
    return moment.astimezone(ZoneInfo(timezone_name)).date().isoformat()


def _active_dates(logs: list[DailyLog]) -> set[date]:
    return {date.fromisoformat(log.date) for log in logs if log.has_activity}


def current_streak(logs: list[DailyLog], today: str) -> int:
    """Count consecutive active days ending today, or yesterday if today is empty."""
    active = _active_dates(logs)
    day = date.fromisoformat(today)
    if day not in active:
        day -= timedelta(days=1)
        if day not in active:
            return 0
    streak = 0
    while day in active:
        streak += 1
        day -= timedelta(days=1)
    return streak


def best_streak(logs: list[DailyLog]) -> int:
    """Return the longest run of consecutive active days."""
    active = sorted(_active_dates(logs))
    best = 0
    run = 0
    previous: date | None = None
    for day in active:
        run = run + 1 if previous and day - previous == timedelta(days=1) else 1
        best = max(best, run)
        previous = day
    return best
