"""
Budget period time rules (voting window, countdown)

Naive datetimes are treated as UTC.
"""
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class TimeRemaining:
    days: int
    hours: int
    minutes: int
    seconds: int
    is_expired: bool

    def to_dict(self) -> dict:
        return {
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
            "is_expired": self.is_expired,
        }


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_voting_ended(end_date: datetime, now: datetime) -> bool:
    """Voting is over strictly after end_date."""
    return as_utc(now) > as_utc(end_date)


def time_remaining(end_date: datetime, now: datetime) -> TimeRemaining:
    """
    Whole days/hours/minutes/seconds until end_date (zeros once passed).

    Each unit is floored from the remainder of the larger one.
    """
    end, current = as_utc(end_date), as_utc(now)
    total = max(0, int((end - current).total_seconds()))

    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    return TimeRemaining(
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        is_expired=end <= current,
    )


def format_countdown(remaining: TimeRemaining) -> str:
    """'3d 4h 5m 6s' or 'Expired'."""
    if remaining.is_expired:
        return "Expired"
    return f"{remaining.days}d {remaining.hours}h {remaining.minutes}m {remaining.seconds}s"
