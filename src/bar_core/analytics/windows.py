"""Time window resolution for reports.

A report covers a user-chosen range of whole days. It is compared against the
immediately preceding range of the same length (shifted back by the number of
days in the range, not by calendar month), and its break-even goal is
apportioned from the calendar month containing the range start.

Examples:
    >>> from datetime import date
    >>> from bar_core.ledger.models import DateRange
    >>> window = resolve_window(DateRange(date(2025, 1, 10), date(2025, 1, 16)))
    >>> window.period_days
    7
    >>> window.previous.start
    datetime.datetime(2025, 1, 3, 0, 0)
    >>> window.days_in_month
    31

"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from bar_core.ledger.ingest import normalize_timestamp
from bar_core.ledger.models import DateRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interval:
    """Closed datetime interval, both bounds inclusive."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class ReportWindow:
    """Resolved intervals for one report.

    Attributes:
        current: Selected range, from start of the first day to end of the last.
        previous: Range of equal length immediately preceding ``current``.
        month: Calendar month containing the start of ``current``.
        period_days: Inclusive number of days in ``current`` (at least 1).
        days_in_month: Number of days in ``month``.
    """

    current: Interval
    previous: Interval
    month: Interval
    period_days: int
    days_in_month: int


def start_of_day(d: date) -> datetime:
    day = d.date() if isinstance(d, datetime) else d
    return datetime.combine(day, time.min)


def end_of_day(d: date) -> datetime:
    day = d.date() if isinstance(d, datetime) else d
    return datetime.combine(day, time.max)


def month_interval(d: date) -> tuple[Interval, int]:
    """Return the calendar month containing ``d`` and its number of days."""
    days_in_month = calendar.monthrange(d.year, d.month)[1]
    first = date(d.year, d.month, 1)
    last = date(d.year, d.month, days_in_month)
    return Interval(start_of_day(first), end_of_day(last)), days_in_month


def resolve_window(date_range: DateRange | None, tz: str | None = None) -> ReportWindow | None:
    """Resolve a user-selected date range into report intervals.

    Args:
        date_range: Selected range. ``end`` defaults to ``start``.
        tz: IANA zone used if the bounds are timezone-aware.

    Returns:
        ReportWindow, or None when the range has no resolvable start
        (the "no report" state).

    """
    if date_range is None:
        return None

    start = normalize_timestamp(date_range.start, tz)
    if start is None:
        logger.debug("No report window: range start %r is not set", date_range.start)
        return None

    end = normalize_timestamp(date_range.end, tz) or start
    if end < start:
        logger.debug("Range end %s before start %s, swapping", end, start)
        start, end = end, start

    current = Interval(start_of_day(start), end_of_day(end))
    period_days = max((end.date() - start.date()).days + 1, 1)

    shift = timedelta(days=period_days)
    previous = Interval(start_of_day(current.start - shift), end_of_day(current.end - shift))

    month, days_in_month = month_interval(start)

    return ReportWindow(
        current=current,
        previous=previous,
        month=month,
        period_days=period_days,
        days_in_month=days_in_month,
    )
