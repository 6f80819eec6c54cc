"""Ledger record types consumed by the analytics engine.

Transactions are modelled as a tagged union of frozen dataclasses. The
``type`` attribute is the discriminant; each variant carries only the
fields that make sense for it:

- **Sale**: a finalized tab. Has item lines, a payment method and the time
  the tab was opened.
- **Expense**: money going out. Has an expense category; ``"Insumos"`` marks
  a supplier purchase.
- **Payment**: a customer paying off on-credit (``"Fiado"``) debt.

Reference entities (Product, GameModality, Customer) are read-only to the
engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, Union


@dataclass(frozen=True)
class OrderItem:
    """One line inside a sale.

    Attributes:
        product_id: Id of the product sold (may no longer exist).
        name: Display name at the time of sale.
        quantity: Units (or doses) sold, always > 0.
        unit_price: Price charged per unit. Game prizes may be negative.
        size: Volume dispensed for dose sales, in the product's base unit.
        identifier: Wager/game entry identifier. Its presence marks the line
            as game revenue.
    """

    product_id: str
    name: str
    quantity: float = 1.0
    unit_price: float = 0.0
    size: float | None = None
    identifier: str | None = None


@dataclass(frozen=True)
class Sale:
    id: str
    timestamp: datetime | None
    total: float = 0.0
    items: tuple[OrderItem, ...] = ()
    payment_method: str | None = None
    customer_id: str | None = None
    tab_name: str | None = None
    description: str | None = None
    order_created_at: datetime | None = None
    type: Literal["sale"] = field(default="sale", init=False)


@dataclass(frozen=True)
class Expense:
    id: str
    timestamp: datetime | None
    total: float = 0.0
    expense_category: str | None = None
    description: str | None = None
    supplier_id: str | None = None
    customer_id: str | None = None
    items: tuple[OrderItem, ...] = ()
    type: Literal["expense"] = field(default="expense", init=False)


@dataclass(frozen=True)
class Payment:
    id: str
    timestamp: datetime | None
    total: float = 0.0
    payment_method: str | None = None
    customer_id: str | None = None
    description: str | None = None
    type: Literal["payment"] = field(default="payment", init=False)


Transaction = Union[Sale, Expense, Payment]


@dataclass(frozen=True)
class Product:
    """Catalog product.

    Attributes:
        id: Product id.
        name: Display name.
        cost_price: Cost of one base unit (e.g. one bottle).
        base_unit_size: Volume of one base unit, e.g. 750 for a 750 ml bottle.
            Values that are missing or not positive are treated as 1.
        sale_type: "unit", "dose" or "service".
        stock: Units on hand.
    """

    id: str
    name: str = ""
    cost_price: float = 0.0
    base_unit_size: float = 1.0
    sale_type: str = "unit"
    stock: float = 0.0


@dataclass(frozen=True)
class GameModality:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Customer:
    id: str
    name: str = ""
    balance: float = 0.0


@dataclass(frozen=True)
class DateRange:
    """User-selected report range. ``end`` defaults to ``start`` when absent."""

    start: date | datetime | None
    end: date | datetime | None = None
