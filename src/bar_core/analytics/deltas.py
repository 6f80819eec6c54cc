"""Signed percentage change between the selected and the comparison period."""

from __future__ import annotations

from bar_core.analytics.metrics import PeriodMetrics

# KPIs compared against the previous period
DELTA_METRICS = (
    "revenue",
    "game_revenue",
    "bar_revenue",
    "cash_inflow",
    "expenses",
    "insumos",
    "gross_profit",
    "net_profit",
    "sales_count",
    "avg_ticket",
)


def calculate_delta(current: float, previous: float) -> float:
    """Percentage change from ``previous`` to ``current``.

    A previous value of zero or less has no meaningful base: going from
    nothing to something counts as +100, staying at nothing as 0.

    Examples:
        >>> calculate_delta(150.0, 100.0)
        50.0
        >>> calculate_delta(10.0, 0.0)
        100.0
        >>> calculate_delta(0.0, 0.0)
        0.0

    """
    if previous <= 0:
        return 100.0 if current > 0 else 0.0
    return ((current - previous) / previous) * 100


def compute_deltas(current: PeriodMetrics, previous: PeriodMetrics) -> dict[str, float]:
    """Delta for every KPI in DELTA_METRICS, keyed by KPI name."""
    return {
        name: calculate_delta(getattr(current, name), getattr(previous, name))
        for name in DELTA_METRICS
    }
