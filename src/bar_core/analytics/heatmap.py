"""Occupancy heatmap and closing-hour histogram.

A tab occupies the venue for every hour between the moment it was opened and
the moment it was closed, so a sale increments one heatmap cell per whole hour
spanned: a tab open from 10:40 to 13:05 counts for 10:00, 11:00, 12:00 and
13:00 on that weekday. The histogram, by contrast, only looks at the hour the
sale was finalized.

Days follow the POS convention: 0 = Sunday ... 6 = Saturday.

Examples:
    >>> grid = build_heatmap(sales)  # 168 rows: day, hour, value
    >>> grid.pivot(index="day", columns="hour", values="value")
    >>> by_hour = build_hourly_histogram(sales)  # 24 rows: hour ("HH:00"), sales

"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from bar_core.ledger.frames import require_columns

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24

# Tabs open longer than this usually carry a bogus opening time
LONG_TAB_HOURS = 48

HOUR_LABELS = [f"{h:02d}:00" for h in range(HOURS_PER_DAY)]

_ONE_HOUR = np.timedelta64(1, "h")


def day_of_week(ts: pd.Series) -> pd.Series:
    """Sunday-first day index (0 = Sunday) for a datetime Series."""
    return (ts.dt.dayofweek + 1) % DAYS_PER_WEEK


def _closed_sales(sales: pd.DataFrame) -> pd.DataFrame:
    closed = sales[sales["timestamp"].notna()]
    if "type" in closed.columns:
        closed = closed[closed["type"] == "sale"]
    return closed


def occupied_hours(
    opened: pd.Series, closed: pd.Series, max_tab_hours: int | None = None
) -> pd.DatetimeIndex:
    """Expand each (opened, closed) pair into the whole hours it spans.

    Both ends are floored to the hour and included. A tab whose opening time
    is missing or after its closing time only counts its closing hour.

    Args:
        opened: Tab opening times (NaT allowed).
        closed: Tab closing times, no NaT.
        max_tab_hours: Optional cap; longer tabs keep their last hours only.

    Returns:
        DatetimeIndex with one entry per occupied hour, across all tabs.

    """
    close = closed.dt.floor("h")
    start = opened.fillna(closed).dt.floor("h")
    start = start.where(start <= close, close)

    spans = ((close - start) // pd.Timedelta(hours=1)).astype("int64") + 1
    long_tabs = int((spans > LONG_TAB_HOURS).sum())
    if long_tabs and max_tab_hours is None:
        logger.warning(
            "%d tab(s) open for more than %d hours (longest %d); check their opening times",
            long_tabs,
            LONG_TAB_HOURS,
            int(spans.max()),
        )
    if max_tab_hours is not None:
        spans = spans.clip(upper=max_tab_hours)
        start = close - pd.to_timedelta(spans - 1, unit="h")

    counts = spans.to_numpy()
    firsts = np.repeat(start.to_numpy(), counts)
    offsets = np.arange(counts.sum()) - np.repeat(np.cumsum(counts) - counts, counts)
    return pd.DatetimeIndex(firsts + offsets * _ONE_HOUR)


def build_heatmap(sales: pd.DataFrame, max_tab_hours: int | None = None) -> pd.DataFrame:
    """Dense day-of-week x hour occupancy grid.

    Args:
        sales: fact_transactions rows (non-sales are ignored).
        max_tab_hours: Optional cap on hours counted per tab.

    Returns:
        DataFrame with columns ``day``, ``hour``, ``value``; 168 rows ordered by
        day then hour, zeros where no tab was open.

    """
    require_columns(sales, ["timestamp", "order_created_at"], "fact_transactions")
    closed = _closed_sales(sales)

    hours = occupied_hours(closed["order_created_at"], closed["timestamp"], max_tab_hours)
    occupied = pd.Series(hours)
    cells = day_of_week(occupied) * HOURS_PER_DAY + occupied.dt.hour
    counts = np.bincount(np.asarray(cells, dtype="int64"), minlength=DAYS_PER_WEEK * HOURS_PER_DAY)

    logger.debug("Heatmap: %d sale(s) spanning %d occupied hour(s)", len(closed), len(hours))

    grid = pd.MultiIndex.from_product(
        [range(DAYS_PER_WEEK), range(HOURS_PER_DAY)], names=["day", "hour"]
    ).to_frame(index=False)
    grid["value"] = counts.astype("int64")
    return grid


def build_hourly_histogram(sales: pd.DataFrame) -> pd.DataFrame:
    """Number of sales finalized in each hour of the day.

    Args:
        sales: fact_transactions rows (non-sales are ignored).

    Returns:
        DataFrame with columns ``hour`` ("00:00" ... "23:00") and ``sales``.

    """
    require_columns(sales, ["timestamp"], "fact_transactions")
    closed = _closed_sales(sales)

    counts = np.bincount(
        closed["timestamp"].dt.hour.to_numpy(dtype="int64"), minlength=HOURS_PER_DAY
    )
    return pd.DataFrame({"hour": HOUR_LABELS, "sales": counts.astype("int64")})
