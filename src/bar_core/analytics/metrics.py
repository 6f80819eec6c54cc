"""Period metrics: the scalar KPIs of one interval.

The same function computes the selected period and the comparison period so
both share identical semantics.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

import pandas as pd

from bar_core.config import FIADO, INSUMOS
from bar_core.ledger.frames import require_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodMetrics:
    """Scalar KPIs for one interval.

    Attributes:
        revenue: Sum of sale totals.
        game_revenue: Sum of ``unit_price * quantity`` over game item lines.
        bar_revenue: ``revenue - game_revenue``.
        cash_inflow: Non-Fiado sale totals plus customer payments.
        expenses: Sum of expense totals.
        insumos: Expense totals in the supplier purchase category.
        sales_count: Number of sales.
        avg_ticket: ``revenue / sales_count`` (0 when there are no sales).
        cogs: Cost of goods sold.
        gross_profit: ``revenue - cogs``.
        net_profit: ``gross_profit - expenses``.
    """

    revenue: float = 0.0
    game_revenue: float = 0.0
    bar_revenue: float = 0.0
    cash_inflow: float = 0.0
    expenses: float = 0.0
    insumos: float = 0.0
    sales_count: int = 0
    avg_ticket: float = 0.0
    cogs: float = 0.0
    gross_profit: float = 0.0
    net_profit: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def compute_metrics(transactions: pd.DataFrame, items: pd.DataFrame) -> PeriodMetrics:
    """Aggregate one interval of the ledger into PeriodMetrics.

    Args:
        transactions: fact_transactions rows of the interval.
        items: Costed sale item lines of the interval (see
            ``costing.attach_costs``).

    Returns:
        PeriodMetrics for the interval.

    """
    require_columns(
        transactions, ["type", "total", "payment_method", "expense_category"], "fact_transactions"
    )
    require_columns(items, ["is_game", "line_revenue", "line_cost"], "fact_sale_items")

    sales = transactions[transactions["type"] == "sale"]
    payments = transactions[transactions["type"] == "payment"]
    expenses = transactions[transactions["type"] == "expense"]

    revenue = float(sales["total"].sum())
    sales_count = int(len(sales))

    on_credit = sales["payment_method"] == FIADO
    cash_inflow = float(sales.loc[~on_credit, "total"].sum()) + float(payments["total"].sum())

    expenses_total = float(expenses["total"].sum())
    insumos = float(expenses.loc[expenses["expense_category"] == INSUMOS, "total"].sum())

    game_revenue = float(items.loc[items["is_game"], "line_revenue"].sum())
    cogs = float(items["line_cost"].sum())

    gross_profit = revenue - cogs
    logger.debug(
        "Metrics over %d record(s): revenue=%.2f cogs=%.2f expenses=%.2f",
        len(transactions),
        revenue,
        cogs,
        expenses_total,
    )

    return PeriodMetrics(
        revenue=revenue,
        game_revenue=game_revenue,
        bar_revenue=revenue - game_revenue,
        cash_inflow=cash_inflow,
        expenses=expenses_total,
        insumos=insumos,
        sales_count=sales_count,
        avg_ticket=revenue / sales_count if sales_count > 0 else 0.0,
        cogs=cogs,
        gross_profit=gross_profit,
        net_profit=gross_profit - expenses_total,
    )
