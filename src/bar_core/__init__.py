"""Bar Core - Business analytics for bar and venue point of sale ledgers.

This package turns the raw transaction ledger of a bar (sales, expenses,
customer payments) into the KPIs, comparative deltas, break-even goals and
time/category breakdowns shown on dashboards and drill-down reports.

Module Structure:
    bar_core.ledger: Record types, ingestion and fact frames
    bar_core.analytics: Report pipeline (windows, metrics, goal, breakdowns, heatmap)
    bar_core.config: Ledger vocabulary and ReportConfig

Quick Start:
    >>> from datetime import date
    >>> from bar_core import DateRange, build_report
    >>>
    >>> report = build_report(
    ...     transactions=ledger_records,
    ...     products=catalog,
    ...     game_modalities=games,
    ...     customers=customers,
    ...     date_range=DateRange(date(2025, 1, 1), date(2025, 1, 7)),
    ... )
    >>> report.revenue, report.net_profit, report.goal_progress
    >>> report.heatmap.pivot(index="day", columns="hour", values="value")

Grain Reference:
    - fact_transactions: one row per ledger record
    - fact_sale_items: one row per sale item line
    - dim_products: one row per catalog product
"""

__version__ = "0.1.0"

from bar_core.analytics import Report, build_report
from bar_core.config import ReportConfig
from bar_core.exceptions import BarCoreError, ConfigError, DataQualityError
from bar_core.ledger import DateRange, LedgerSnapshot

__all__ = [
    "BarCoreError",
    "ConfigError",
    "DataQualityError",
    "DateRange",
    "LedgerSnapshot",
    "Report",
    "ReportConfig",
    "__version__",
    "build_report",
]
