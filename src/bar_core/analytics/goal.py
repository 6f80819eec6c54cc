"""Break-even goal by monthly cost apportionment (rateio).

The month's total expenses are spread evenly over its days to get a daily
cost rate. The goal for a report is that rate times the number of days in the
selected range, i.e. the revenue needed to cover this range's pro-rata share
of the month's operating cost. A manually entered goal always wins.

The month used is the one containing the range start, even when the range
crosses into the next month.

Examples:
    >>> daily, dynamic = apportion_goal(monthly_expenses=3000.0, days_in_month=30, period_days=7)
    >>> daily, dynamic
    (100.0, 700.0)
    >>> goal_progress(revenue=350.0, final_goal=dynamic)
    50.0

"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass

import pandas as pd

from bar_core.analytics.windows import ReportWindow
from bar_core.ledger.frames import require_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoalResult:
    """Break-even goal for a report.

    Attributes:
        monthly_expenses: Expenses apportioned (recorded, or the configured default).
        daily_expense_rate: ``monthly_expenses / days_in_month``.
        dynamic_goal: ``daily_expense_rate * period_days``.
        final_goal: Manual goal when set, otherwise ``dynamic_goal``.
        goal_progress: Revenue as a percentage of ``final_goal``.
        is_manual: True when ``final_goal`` came from a manual entry.
    """

    monthly_expenses: float
    daily_expense_rate: float
    dynamic_goal: float
    final_goal: float
    goal_progress: float
    is_manual: bool

    def to_dict(self) -> dict[str, float | bool]:
        return asdict(self)


def monthly_expense_total(month_expenses: pd.DataFrame) -> float:
    require_columns(month_expenses, ["total"], "month_expenses")
    return float(month_expenses["total"].sum())


def apportion_goal(
    monthly_expenses: float, days_in_month: int, period_days: int
) -> tuple[float, float]:
    """Return ``(daily_expense_rate, dynamic_goal)`` for a window."""
    if days_in_month <= 0:
        return 0.0, 0.0
    daily_expense_rate = monthly_expenses / days_in_month
    return daily_expense_rate, daily_expense_rate * period_days


def goal_progress(revenue: float, final_goal: float) -> float:
    """Revenue as a percentage of the goal.

    With no goal, any revenue counts as the goal fully met (100) and no
    revenue as 0.
    """
    if final_goal > 0:
        return (revenue / final_goal) * 100
    return 100.0 if revenue > 0 else 0.0


def _manual(manual_goal: float | None) -> float:
    if manual_goal is None or math.isnan(manual_goal):
        return 0.0
    return float(manual_goal)


def compute_goal(
    revenue: float,
    month_expenses: pd.DataFrame,
    window: ReportWindow,
    manual_goal: float | None = 0.0,
    default_monthly_expenses: float = 0.0,
) -> GoalResult:
    """Compute the break-even goal and progress for a report window.

    Args:
        revenue: Revenue of the selected range.
        month_expenses: Expense rows of the month containing the range start.
        window: Resolved report window.
        manual_goal: Goal entered by the user; 0 or None means none.
        default_monthly_expenses: Monthly cost used when the month has no
            recorded expenses. 0 disables the fallback.

    Returns:
        GoalResult for the window.

    """
    monthly_expenses = monthly_expense_total(month_expenses)
    if monthly_expenses <= 0 and default_monthly_expenses > 0:
        logger.debug(
            "No expenses recorded for the month, apportioning default %.2f",
            default_monthly_expenses,
        )
        monthly_expenses = default_monthly_expenses

    daily_expense_rate, dynamic_goal = apportion_goal(
        monthly_expenses, window.days_in_month, window.period_days
    )

    manual = _manual(manual_goal)
    is_manual = manual > 0
    final_goal = manual if is_manual else dynamic_goal

    return GoalResult(
        monthly_expenses=monthly_expenses,
        daily_expense_rate=daily_expense_rate,
        dynamic_goal=dynamic_goal,
        final_goal=final_goal,
        goal_progress=goal_progress(revenue, final_goal),
        is_manual=is_manual,
    )
