"""
Learning statistics over the completed-session history.

This is a pure computation module with no I/O.
"""

import calendar
from collections.abc import Sequence
from datetime import date, datetime, timedelta

from mnemo.domain.models import LearningStats, ReviewSession, TimeRange, utc_now


def subtract_month(moment: datetime) -> datetime:
    """Same instant one calendar month earlier, clamping the day to the month's length."""
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def range_cutoff(time_range: TimeRange, now: datetime) -> datetime | None:
    """Earliest session start included in ``time_range``; None means unbounded."""
    match TimeRange(time_range):
        case TimeRange.DAY:
            return now - timedelta(days=1)
        case TimeRange.WEEK:
            return now - timedelta(days=7)
        case TimeRange.MONTH:
            return subtract_month(now)
        case _:
            return None


def filter_sessions(
    sessions: Sequence[ReviewSession], time_range: TimeRange, now: datetime
) -> list[ReviewSession]:
    cutoff = range_cutoff(time_range, now)
    if cutoff is None:
        return list(sessions)
    return [s for s in sessions if s.started_at >= cutoff]


def session_accuracy(session: ReviewSession) -> float | None:
    """Percentage of correct reviews, or None when nothing was reviewed."""
    stats = session.session_stats
    if stats.reviewed_cards == 0:
        return None
    return stats.correct_cards / stats.reviewed_cards * 100


def average_accuracy(sessions: Sequence[ReviewSession]) -> float:
    """
    Mean of per-session accuracy.

    Sessions without reviewed cards are excluded; with none left the result is 0.0.
    """
    ratios = [a for a in (session_accuracy(s) for s in sessions) if a is not None]
    if not ratios:
        return 0.0
    return sum(ratios) / len(ratios)


def average_session_minutes(sessions: Sequence[ReviewSession]) -> float:
    """Mean duration in minutes over sessions that have a completion time."""
    durations = [
        (s.completed_at - s.started_at).total_seconds() / 60
        for s in sessions
        if s.completed_at is not None
    ]
    if not durations:
        return 0.0
    return sum(durations) / len(durations)


def calculate_streak(sessions: Sequence[ReviewSession], today: date) -> int:
    """
    Count consecutive study days ending today.

    Sessions are scanned newest-first. A session exactly ``streak`` days before
    today extends the streak, a same-day repeat is ignored, a larger gap stops.
    """
    ordered = sorted(sessions, key=lambda s: s.started_at, reverse=True)

    streak = 0
    for session in ordered:
        day_diff = (today - session.started_at.date()).days
        if day_diff == streak:
            streak += 1
        elif day_diff > streak:
            break

    return streak


def compute_learning_stats(
    sessions: Sequence[ReviewSession],
    time_range: TimeRange = TimeRange.ALL,
    now: datetime | None = None,
) -> LearningStats:
    """
    Aggregate completed sessions within ``time_range``.

    The streak always considers the full history.
    """
    now = now or utc_now()
    filtered = filter_sessions(sessions, time_range, now)

    return LearningStats(
        total_sessions=len(filtered),
        total_cards_reviewed=sum(s.session_stats.reviewed_cards for s in filtered),
        average_accuracy=average_accuracy(filtered),
        average_session_minutes=average_session_minutes(filtered),
        streak=calculate_streak(sessions, now.date()),
    )
