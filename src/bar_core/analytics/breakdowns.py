"""Dimensional breakdowns of the selected period.

Every breakdown is a DataFrame with two columns, ``name`` and ``value``,
sorted by value descending. Ties keep the order in which names first appear
in the ledger. Product rankings are truncated to the top N.
"""

from __future__ import annotations

import logging

import pandas as pd

from bar_core.config import (
    DEFAULT_EXPENSE_CATEGORY,
    DEFAULT_PAYMENT_METHOD,
    DEFAULT_SALE_METHOD,
    DEFAULT_SUPPLIER,
    FIADO,
    INSUMOS,
    SUPPLIER_PREFIX,
    TOP_N,
)
from bar_core.ledger.frames import require_columns

logger = logging.getLogger(__name__)

BREAKDOWN_COLUMNS = ["name", "value"]


def _ranked(keys: pd.Series, values: pd.Series, top_n: int | None = None) -> pd.DataFrame:
    """Sum ``values`` by ``keys`` and sort descending."""
    if keys.empty:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS).astype({"value": float})

    totals = values.groupby(keys, sort=False).sum()
    totals = totals.sort_values(ascending=False, kind="stable")
    if top_n is not None:
        totals = totals.head(top_n)

    df = pd.DataFrame({"name": totals.index.astype(str), "value": totals.to_numpy(dtype=float)})
    return df.reset_index(drop=True)


def _of_type(transactions: pd.DataFrame, tx_type: str) -> pd.DataFrame:
    return transactions[transactions["type"] == tx_type]


def sales_by_payment_method(transactions: pd.DataFrame) -> pd.DataFrame:
    """Sale revenue by payment method, including on-credit (Fiado) sales."""
    require_columns(transactions, ["type", "total", "payment_method"], "fact_transactions")
    sales = _of_type(transactions, "sale")
    methods = sales["payment_method"].fillna(DEFAULT_SALE_METHOD)
    return _ranked(methods, sales["total"])


def cash_inflow_by_method(transactions: pd.DataFrame) -> pd.DataFrame:
    """Cash actually received, by method: non-Fiado sales plus customer payments."""
    require_columns(transactions, ["type", "total", "payment_method"], "fact_transactions")
    is_sale = transactions["type"] == "sale"
    is_payment = transactions["type"] == "payment"

    fallback = is_sale.map({True: DEFAULT_SALE_METHOD, False: DEFAULT_PAYMENT_METHOD})
    methods = transactions["payment_method"].fillna(fallback)

    received = (is_sale & (methods != FIADO)) | is_payment
    return _ranked(methods[received], transactions.loc[received, "total"])


def expenses_by_category(transactions: pd.DataFrame) -> pd.DataFrame:
    require_columns(transactions, ["type", "total", "expense_category"], "fact_transactions")
    expenses = _of_type(transactions, "expense")
    categories = expenses["expense_category"].fillna(DEFAULT_EXPENSE_CATEGORY)
    return _ranked(categories, expenses["total"])


def supplier_name(description: str | None) -> str:
    """Supplier of a supply purchase, taken from its description.

    Examples:
        >>> supplier_name("Compra: Distribuidora Sul")
        'Distribuidora Sul'
        >>> supplier_name(None)
        'Outros'

    """
    if not isinstance(description, str) or not description:
        return DEFAULT_SUPPLIER
    return description.replace(SUPPLIER_PREFIX, "", 1).strip() or DEFAULT_SUPPLIER


def purchases_by_supplier(transactions: pd.DataFrame) -> pd.DataFrame:
    """Supply purchase (Insumos) totals by supplier."""
    require_columns(
        transactions, ["type", "total", "expense_category", "description"], "fact_transactions"
    )
    expenses = _of_type(transactions, "expense")
    purchases = expenses[expenses["expense_category"] == INSUMOS]
    suppliers = purchases["description"].map(supplier_name)
    return _ranked(suppliers, purchases["total"])


def top_products_by_quantity(items: pd.DataFrame, top_n: int = TOP_N) -> pd.DataFrame:
    """Units sold per product name, top ``top_n``."""
    require_columns(items, ["name", "quantity"], "fact_sale_items")
    return _ranked(items["name"], items["quantity"], top_n=top_n)


def profit_by_product(items: pd.DataFrame, top_n: int = TOP_N) -> pd.DataFrame:
    """Gross profit per product name, top ``top_n``.

    Only lines whose product resolves in the catalog are attributed; lines of
    deleted products have no known cost and are left out.
    """
    require_columns(items, ["name", "has_product", "line_profit"], "fact_sale_items")
    known = items[items["has_product"]]
    skipped = len(items) - len(known)
    if skipped:
        logger.debug("Left %d line(s) of unknown products out of profit ranking", skipped)
    return _ranked(known["name"], known["line_profit"], top_n=top_n)
