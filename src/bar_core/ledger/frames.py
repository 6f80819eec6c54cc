"""Fact frames: pandas views of a ledger snapshot at two grains.

- **fact_transactions**: one row per ledger record (sale, expense or payment).
  The frame index is the record's position in ``LedgerSnapshot.transactions``
  so aggregated rows can always be traced back to the typed record.
- **fact_sale_items**: one row per item line of a sale. ``tx_pos`` points at
  the owning row of fact_transactions.
- **dim_products**: catalog products indexed by product id.

Examples:
    >>> from bar_core.ledger.ingest import LedgerSnapshot
    >>> snapshot = LedgerSnapshot.capture(transactions=[...], products=[...])
    >>> tx = transactions_frame(snapshot)
    >>> items = sale_items_frame(snapshot)
    >>> items.groupby("name")["quantity"].sum()

"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import pandas as pd

from bar_core.exceptions import DataQualityError
from bar_core.ledger.ingest import LedgerSnapshot
from bar_core.ledger.models import Expense, Payment, Product, Sale

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = [
    "id",
    "type",
    "timestamp",
    "total",
    "payment_method",
    "expense_category",
    "description",
    "customer_id",
    "tab_name",
    "order_created_at",
]

SALE_ITEM_COLUMNS = [
    "tx_pos",
    "timestamp",
    "product_id",
    "name",
    "quantity",
    "unit_price",
    "size",
    "identifier",
    "is_game",
]

PRODUCT_COLUMNS = ["name", "cost_price", "base_unit_size", "sale_type", "stock"]


def require_columns(df: pd.DataFrame, columns: Iterable[str], frame_name: str) -> None:
    """Raise DataQualityError if ``df`` lacks any of ``columns``."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DataQualityError(f"{frame_name} is missing required columns: {missing}")


def _datetime_column(values: list) -> pd.Series:
    return pd.to_datetime(pd.Series(values, dtype="object")).astype("datetime64[ns]")


def transactions_frame(snapshot: LedgerSnapshot) -> pd.DataFrame:
    """Build fact_transactions from a snapshot.

    Args:
        snapshot: Normalized ledger snapshot.

    Returns:
        DataFrame with TRANSACTION_COLUMNS, indexed by record position.
        Timestamps that could not be resolved are NaT.

    """
    rows = []
    for tx in snapshot.transactions:
        rows.append(
            {
                "id": tx.id,
                "type": tx.type,
                "total": tx.total,
                "payment_method": tx.payment_method if isinstance(tx, (Sale, Payment)) else None,
                "expense_category": tx.expense_category if isinstance(tx, Expense) else None,
                "description": tx.description,
                "customer_id": tx.customer_id,
                "tab_name": tx.tab_name if isinstance(tx, Sale) else None,
            }
        )

    df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
    df["total"] = df["total"].astype(float)
    df["timestamp"] = _datetime_column([tx.timestamp for tx in snapshot.transactions])
    df["order_created_at"] = _datetime_column(
        [tx.order_created_at if isinstance(tx, Sale) else None for tx in snapshot.transactions]
    )
    return df


def sale_items_frame(snapshot: LedgerSnapshot) -> pd.DataFrame:
    """Build fact_sale_items from a snapshot.

    A line is flagged ``is_game`` when it carries a wager identifier or its
    product is one of the snapshot's game modalities.

    Args:
        snapshot: Normalized ledger snapshot.

    Returns:
        DataFrame with SALE_ITEM_COLUMNS, one row per sale item line.

    """
    game_ids = snapshot.game_ids
    rows = []
    timestamps = []
    for pos, tx in enumerate(snapshot.transactions):
        if not isinstance(tx, Sale):
            continue
        for item in tx.items:
            rows.append(
                {
                    "tx_pos": pos,
                    "product_id": item.product_id,
                    "name": item.name,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "size": item.size,
                    "identifier": item.identifier,
                    "is_game": item.identifier is not None or item.product_id in game_ids,
                }
            )
            timestamps.append(tx.timestamp)

    df = pd.DataFrame(rows, columns=SALE_ITEM_COLUMNS)
    df["tx_pos"] = df["tx_pos"].astype("int64")
    df["timestamp"] = _datetime_column(timestamps)
    for col in ("quantity", "unit_price", "size"):
        df[col] = df[col].astype(float)
    df["is_game"] = df["is_game"].astype(bool)
    return df


def products_frame(products: Iterable[Product]) -> pd.DataFrame:
    """Build dim_products, indexed by product id.

    Duplicate ids keep the last occurrence, matching a keyed document store
    where later writes win.

    Args:
        products: Parsed catalog products.

    Returns:
        DataFrame with PRODUCT_COLUMNS indexed by ``id``.

    """
    df = pd.DataFrame(
        [
            {
                "id": p.id,
                "name": p.name,
                "cost_price": p.cost_price,
                "base_unit_size": p.base_unit_size,
                "sale_type": p.sale_type,
                "stock": p.stock,
            }
            for p in products
        ],
        columns=["id", *PRODUCT_COLUMNS],
    )
    df["cost_price"] = df["cost_price"].astype(float)
    df["base_unit_size"] = df["base_unit_size"].astype(float)

    duplicated = df["id"].duplicated(keep="last")
    if duplicated.any():
        logger.debug("Dropping %d duplicated product id(s)", int(duplicated.sum()))
        df = df[~duplicated]
    return df.set_index("id")
