"""Analytics domain module: KPIs, goals and breakdowns of the ledger.

Stages, leaves first:

- **windows**: selected range, comparison range and apportionment month.
- **filters**: interval subsets of the fact frames.
- **costing** / **metrics**: COGS and the scalar KPIs of one interval.
- **goal**: break-even goal from the month's apportioned costs.
- **deltas**: percentage change against the comparison range.
- **breakdowns**: rankings by payment method, category, supplier, product.
- **heatmap**: occupancy heatmap and closing-hour histogram.
- **games** / **summary**: game audit, customer debt and stock figures.

Example:
    >>> from datetime import date
    >>> from bar_core.analytics import build_report
    >>> from bar_core.ledger import DateRange
    >>>
    >>> report = build_report(transactions, products, game_modalities, customers,
    ...                       DateRange(date(2025, 1, 1), date(2025, 1, 31)))
    >>> report.net_profit, report.goal_progress
"""

from bar_core.analytics.api import Report, build_report, build_report_from_snapshot
from bar_core.analytics.deltas import calculate_delta
from bar_core.analytics.goal import GoalResult
from bar_core.analytics.metrics import PeriodMetrics
from bar_core.analytics.windows import Interval, ReportWindow, resolve_window

__all__ = [
    "GoalResult",
    "Interval",
    "PeriodMetrics",
    "Report",
    "ReportWindow",
    "build_report",
    "build_report_from_snapshot",
    "calculate_delta",
    "resolve_window",
]
