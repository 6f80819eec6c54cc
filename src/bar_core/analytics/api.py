"""Public API for the business analytics report.

This module provides a single entry point, ``build_report``, that maps a ledger
snapshot, a date range and a manual goal into a ``Report``. It is a pure
function of its inputs: no I/O, no caching, no mutation of the inputs. Callers
re-run it whenever the ledger, the range or the goal changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

import pandas as pd

from bar_core.analytics.breakdowns import (
    cash_inflow_by_method,
    expenses_by_category,
    profit_by_product,
    purchases_by_supplier,
    sales_by_payment_method,
    top_products_by_quantity,
)
from bar_core.analytics.costing import attach_costs
from bar_core.analytics.deltas import compute_deltas
from bar_core.analytics.filters import partition_ledger
from bar_core.analytics.games import GameAudit, audit_games
from bar_core.analytics.goal import GoalResult, compute_goal
from bar_core.analytics.heatmap import build_heatmap, build_hourly_histogram
from bar_core.analytics.metrics import PeriodMetrics, compute_metrics
from bar_core.analytics.summary import ReferenceSummary, summarize_references
from bar_core.analytics.windows import ReportWindow, resolve_window
from bar_core.config import INSUMOS, ReportConfig
from bar_core.ledger.frames import products_frame, sale_items_frame, transactions_frame
from bar_core.ledger.ingest import LedgerSnapshot
from bar_core.ledger.models import (
    Customer,
    DateRange,
    Expense,
    GameModality,
    Payment,
    Product,
    Sale,
    Transaction,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Report:
    """Everything a dashboard needs for one date range.

    Attributes:
        window: Resolved current, comparison and month intervals.
        current: KPIs of the selected range.
        previous: KPIs of the comparison range.
        goal: Break-even goal and progress.
        deltas: Percentage change per KPI, keyed by KPI name.
        top_products: Units sold per product (name, value), top N.
        profit_by_product: Gross profit per product (name, value), top N.
        sales_by_payment_method: Sale revenue per method (name, value).
        cash_inflow_by_method: Cash received per method (name, value).
        expenses_by_category: Expenses per category (name, value).
        purchases_by_supplier: Supply purchases per supplier (name, value).
        heatmap: Dense 7 x 24 occupancy grid (day, hour, value).
        sales_by_hour: Dense 24-slot histogram of closing hours (hour, sales).
        sales_transactions: Sales of the range, for drill-down tables.
        expense_transactions: Expenses of the range.
        purchase_transactions: Supply purchases (Insumos) of the range.
        payment_transactions: Customer payments of the range.
        games: Game audit of the range.
        references: Customer debt and stock summary.
    """

    window: ReportWindow
    current: PeriodMetrics
    previous: PeriodMetrics
    goal: GoalResult
    deltas: dict[str, float]
    top_products: pd.DataFrame
    profit_by_product: pd.DataFrame
    sales_by_payment_method: pd.DataFrame
    cash_inflow_by_method: pd.DataFrame
    expenses_by_category: pd.DataFrame
    purchases_by_supplier: pd.DataFrame
    heatmap: pd.DataFrame
    sales_by_hour: pd.DataFrame
    sales_transactions: tuple[Sale, ...] = ()
    expense_transactions: tuple[Expense, ...] = ()
    purchase_transactions: tuple[Expense, ...] = ()
    payment_transactions: tuple[Payment, ...] = ()
    games: GameAudit = field(default_factory=GameAudit)
    references: ReferenceSummary = field(default_factory=ReferenceSummary)

    # Headline KPIs
    @property
    def revenue(self) -> float:
        return self.current.revenue

    @property
    def game_revenue(self) -> float:
        return self.current.game_revenue

    @property
    def bar_revenue(self) -> float:
        return self.current.bar_revenue

    @property
    def cash_inflow(self) -> float:
        return self.current.cash_inflow

    @property
    def expenses(self) -> float:
        return self.current.expenses

    @property
    def insumos(self) -> float:
        return self.current.insumos

    @property
    def cogs(self) -> float:
        return self.current.cogs

    @property
    def gross_profit(self) -> float:
        return self.current.gross_profit

    @property
    def net_profit(self) -> float:
        return self.current.net_profit

    @property
    def sales_count(self) -> int:
        return self.current.sales_count

    @property
    def avg_ticket(self) -> float:
        return self.current.avg_ticket

    @property
    def monthly_expenses(self) -> float:
        return self.goal.monthly_expenses

    @property
    def daily_expense_rate(self) -> float:
        return self.goal.daily_expense_rate

    @property
    def dynamic_goal(self) -> float:
        return self.goal.dynamic_goal

    @property
    def final_goal(self) -> float:
        return self.goal.final_goal

    @property
    def goal_progress(self) -> float:
        return self.goal.goal_progress

    @property
    def period_days(self) -> int:
        return self.window.period_days

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation for the UI layer.

        DataFrames become lists of row dicts; datetimes become ISO strings.
        """
        return {
            "period": {
                "start": self.window.current.start.isoformat(),
                "end": self.window.current.end.isoformat(),
                "previous_start": self.window.previous.start.isoformat(),
                "previous_end": self.window.previous.end.isoformat(),
                "period_days": self.window.period_days,
                "days_in_month": self.window.days_in_month,
            },
            **self.current.to_dict(),
            "goal": self.goal.to_dict(),
            "deltas": dict(self.deltas),
            "previous": self.previous.to_dict(),
            "top_products": _records(self.top_products),
            "profit_by_product": _records(self.profit_by_product),
            "sales_by_payment_method": _records(self.sales_by_payment_method),
            "cash_inflow_by_method": _records(self.cash_inflow_by_method),
            "expenses_by_category": _records(self.expenses_by_category),
            "purchases_by_supplier": _records(self.purchases_by_supplier),
            "heatmap": _records(self.heatmap),
            "sales_by_hour": _records(self.sales_by_hour),
            "sales_transactions": [_transaction_dict(t) for t in self.sales_transactions],
            "expense_transactions": [_transaction_dict(t) for t in self.expense_transactions],
            "purchase_transactions": [_transaction_dict(t) for t in self.purchase_transactions],
            "payment_transactions": [_transaction_dict(t) for t in self.payment_transactions],
            "games": {
                "sale_ids": [s.id for s in self.games.sales],
                "total_game_revenue": self.games.total_game_revenue,
                "bet_count": self.games.bet_count,
            },
            **self.references.to_dict(),
        }


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    return [{k: _plain(v) for k, v in row.items()} for row in df.to_dict("records")]


def _plain(value: Any) -> Any:
    # numpy scalars -> builtin numbers
    return value.item() if hasattr(value, "item") else value


def _transaction_dict(tx: Transaction) -> dict[str, Any]:
    data = asdict(tx)
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat()
    return data


def _drilldowns(
    current: pd.DataFrame, records: tuple[Transaction, ...]
) -> tuple[tuple[Sale, ...], tuple[Expense, ...], tuple[Expense, ...], tuple[Payment, ...]]:
    """Split the selected range back into typed records, in ledger order."""

    def pick(mask: pd.Series) -> tuple[Any, ...]:
        return tuple(records[pos] for pos in current.index[mask.to_numpy(dtype=bool)])

    is_expense = current["type"] == "expense"
    return (
        pick(current["type"] == "sale"),
        pick(is_expense),
        pick(is_expense & (current["expense_category"] == INSUMOS)),
        pick(current["type"] == "payment"),
    )


def build_report_from_snapshot(
    snapshot: LedgerSnapshot,
    window: ReportWindow,
    manual_goal: float | None = 0.0,
    config: ReportConfig | None = None,
) -> Report:
    """Compute a report from an already captured snapshot and window.

    Args:
        snapshot: Normalized, immutable ledger snapshot.
        window: Resolved report window.
        manual_goal: Goal entered by the user; 0 or None means none.
        config: Report settings. If None, uses ReportConfig defaults.

    Returns:
        Report for the window.

    """
    config = config or ReportConfig()

    tx = transactions_frame(snapshot)
    items = attach_costs(sale_items_frame(snapshot), products_frame(snapshot.products))
    partition = partition_ledger(tx, items, window)

    current = compute_metrics(partition.current, partition.current_items)
    previous = compute_metrics(partition.previous, partition.previous_items)

    goal = compute_goal(
        current.revenue,
        partition.month_expenses,
        window,
        manual_goal=manual_goal,
        default_monthly_expenses=config.default_monthly_expenses,
    )

    sales, expenses, purchases, payments = _drilldowns(partition.current, snapshot.transactions)

    report = Report(
        window=window,
        current=current,
        previous=previous,
        goal=goal,
        deltas=compute_deltas(current, previous),
        top_products=top_products_by_quantity(partition.current_items, top_n=config.top_n),
        profit_by_product=profit_by_product(partition.current_items, top_n=config.top_n),
        sales_by_payment_method=sales_by_payment_method(partition.current),
        cash_inflow_by_method=cash_inflow_by_method(partition.current),
        expenses_by_category=expenses_by_category(partition.current),
        purchases_by_supplier=purchases_by_supplier(partition.current),
        heatmap=build_heatmap(partition.current, max_tab_hours=config.max_tab_hours),
        sales_by_hour=build_hourly_histogram(partition.current),
        sales_transactions=sales,
        expense_transactions=expenses,
        purchase_transactions=purchases,
        payment_transactions=payments,
        games=audit_games(partition.current, partition.current_items, snapshot.transactions),
        references=summarize_references(snapshot.customers, snapshot.products),
    )

    logger.info(
        "Built report for %s to %s: %d record(s), revenue=%.2f, goal=%.2f (%.1f%%)",
        window.current.start.date(),
        window.current.end.date(),
        len(partition.current),
        current.revenue,
        goal.final_goal,
        goal.goal_progress,
    )
    return report


def build_report(
    transactions: Iterable[Transaction | Mapping[str, Any]] | None,
    products: Iterable[Product | Mapping[str, Any]] | None = None,
    game_modalities: Iterable[GameModality | Mapping[str, Any] | str] | None = None,
    customers: Iterable[Customer | Mapping[str, Any]] | None = None,
    date_range: DateRange | None = None,
    manual_goal: float | None = 0.0,
    *,
    config: ReportConfig | None = None,
) -> Report | None:
    """Build the analytics report for a date range.

    Args:
        transactions: Ledger records (models or raw store mappings).
        products: Catalog products.
        game_modalities: Game modalities (models, mappings or bare ids).
        customers: Customers (only balances are read).
        date_range: Selected range. ``end`` defaults to ``start``.
        manual_goal: Goal entered by the user; 0 or None means "use the
            apportioned goal".
        config: Report settings. If None, uses ReportConfig defaults.

    Returns:
        Report, or None when no range start is selected.

    Examples:
        >>> from datetime import date
        >>> report = build_report(
        ...     transactions=[{"id": "t1", "type": "sale", "total": 50.0,
        ...                    "paymentMethod": "Dinheiro",
        ...                    "timestamp": "2025-01-15T21:00:00"}],
        ...     date_range=DateRange(date(2025, 1, 15)),
        ... )
        >>> report.revenue
        50.0

    """
    config = config or ReportConfig()

    window = resolve_window(date_range, tz=config.timezone)
    if window is None:
        logger.debug("No date range selected, no report")
        return None

    snapshot = LedgerSnapshot.capture(
        transactions, products, game_modalities, customers, tz=config.timezone
    )
    return build_report_from_snapshot(snapshot, window, manual_goal, config)
