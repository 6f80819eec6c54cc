"""Ledger domain module.

This module turns the records produced by the POS collaborators (sales,
expenses, payments and the reference catalog) into typed, immutable inputs
for the analytics engine:

- **models**: Sale / Expense / Payment tagged union plus reference entities.
- **ingest**: timestamp normalization and record parsing into a LedgerSnapshot.
- **frames**: pandas fact frames (fact_transactions, fact_sale_items,
  dim_products) built from a snapshot.

Example:
    >>> from bar_core.ledger import LedgerSnapshot
    >>> snapshot = LedgerSnapshot.capture(
    ...     transactions=[{"id": "t1", "type": "sale", "total": 50,
    ...                    "timestamp": "2025-01-15T21:00:00"}],
    ... )
    >>> snapshot.transactions[0].type
    'sale'
"""

from bar_core.ledger.ingest import LedgerSnapshot, normalize_timestamp
from bar_core.ledger.models import (
    Customer,
    DateRange,
    Expense,
    GameModality,
    OrderItem,
    Payment,
    Product,
    Sale,
    Transaction,
)

__all__ = [
    "Customer",
    "DateRange",
    "Expense",
    "GameModality",
    "LedgerSnapshot",
    "OrderItem",
    "Payment",
    "Product",
    "Sale",
    "Transaction",
    "normalize_timestamp",
]
