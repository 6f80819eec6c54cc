"""Point-in-time summaries of the reference collections.

These figures do not depend on the report range: they describe the customer
ledger and the catalog as they stand in the snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass

from bar_core.ledger.models import Customer, Product


@dataclass(frozen=True)
class ReferenceSummary:
    """Customer debt and stock figures.

    Attributes:
        customers_with_debt: Customers with a positive balance.
        total_customer_debt: Sum of all customer balances (credits included).
        out_of_stock_products: Stocked products (not services) with stock <= 0.
        total_products: Number of catalog products.
    """

    customers_with_debt: int = 0
    total_customer_debt: float = 0.0
    out_of_stock_products: int = 0
    total_products: int = 0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def summarize_references(
    customers: Iterable[Customer], products: Iterable[Product]
) -> ReferenceSummary:
    customers = list(customers)
    products = list(products)
    return ReferenceSummary(
        customers_with_debt=sum(1 for c in customers if c.balance > 0),
        total_customer_debt=float(sum(c.balance for c in customers)),
        out_of_stock_products=sum(
            1 for p in products if p.sale_type != "service" and p.stock <= 0
        ),
        total_products=len(products),
    )
