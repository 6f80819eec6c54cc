"""Ledger filter: partition fact frames by report interval.

Rows whose timestamp could not be resolved (NaT) never fall inside any
interval, so they are silently left out of every KPI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from bar_core.analytics.windows import Interval, ReportWindow
from bar_core.ledger.frames import require_columns

logger = logging.getLogger(__name__)


def within(df: pd.DataFrame, interval: Interval, column: str = "timestamp") -> pd.DataFrame:
    """Return rows of ``df`` whose ``column`` lies in ``interval`` (inclusive)."""
    require_columns(df, [column], "frame")
    mask = df[column].between(interval.start, interval.end, inclusive="both")
    return df[mask]


def items_for(items: pd.DataFrame, transactions: pd.DataFrame) -> pd.DataFrame:
    """Return item lines belonging to the given fact_transactions rows."""
    return items[items["tx_pos"].isin(transactions.index)]


@dataclass(frozen=True)
class LedgerPartition:
    """Interval subsets used by a report.

    Attributes:
        current: fact_transactions rows in the selected range.
        previous: fact_transactions rows in the comparison range.
        month_expenses: Expense rows in the month containing the range start.
        current_items: Sale item lines of ``current``.
        previous_items: Sale item lines of ``previous``.
    """

    current: pd.DataFrame
    previous: pd.DataFrame
    month_expenses: pd.DataFrame
    current_items: pd.DataFrame
    previous_items: pd.DataFrame


def partition_ledger(
    transactions: pd.DataFrame,
    items: pd.DataFrame,
    window: ReportWindow,
) -> LedgerPartition:
    """Split fact frames into the current, previous and month subsets.

    Args:
        transactions: fact_transactions frame.
        items: fact_sale_items frame (optionally with cost columns attached).
        window: Resolved report window.

    Returns:
        LedgerPartition with the three interval subsets.

    """
    require_columns(transactions, ["type", "timestamp", "total"], "fact_transactions")
    require_columns(items, ["tx_pos"], "fact_sale_items")

    undated = int(transactions["timestamp"].isna().sum())
    if undated:
        logger.debug("Excluding %d undated ledger record(s) from all intervals", undated)

    current = within(transactions, window.current)
    previous = within(transactions, window.previous)
    month = within(transactions, window.month)
    month_expenses = month[month["type"] == "expense"]

    return LedgerPartition(
        current=current,
        previous=previous,
        month_expenses=month_expenses,
        current_items=items_for(items, current),
        previous_items=items_for(items, previous),
    )
