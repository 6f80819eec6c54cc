"""Cost of goods sold for sale item lines.

Products are costed per base unit (e.g. a bottle). A dose sale carries the
volume poured in ``size``, so its cost is the base-unit cost scaled by the
share of the base unit dispensed::

    effective_unit_cost = (cost_price / base_unit_size) * size

Any other line costs ``cost_price`` per unit. Lines whose product no longer
exists in the catalog cost nothing and are flagged ``has_product=False``.

Examples:
    >>> effective_unit_cost(Product(id="gin", cost_price=30.0, base_unit_size=750.0), 100.0)
    4.0

"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from bar_core.ledger.frames import require_columns
from bar_core.ledger.models import Product

logger = logging.getLogger(__name__)


def _unit_cost(cost_price, base_unit_size, size):
    """Costing rule shared by the scalar and the frame paths.

    Works on scalars and arrays alike. A ``size`` of 0 means a plain unit sale.
    """
    base_unit_size = np.where(base_unit_size > 0, base_unit_size, 1.0)
    return np.where(size > 0, cost_price / base_unit_size * size, cost_price)


def effective_unit_cost(product: Product | None, size: float | None = None) -> float:
    """Cost of one sold unit (or dose) of ``product``.

    Args:
        product: Catalog product, or None when it cannot be resolved.
        size: Volume dispensed for dose sales, in the product's base unit.
            None or a non-positive size costs a whole unit.

    Returns:
        Effective unit cost; 0.0 for unknown products.

    """
    if product is None:
        return 0.0
    return float(_unit_cost(product.cost_price, product.base_unit_size, size or 0.0))


def attach_costs(items: pd.DataFrame, products: pd.DataFrame) -> pd.DataFrame:
    """Add cost, revenue and profit columns to fact_sale_items.

    Adds ``has_product``, ``unit_cost``, ``line_revenue``, ``line_cost`` and
    ``line_profit``. Product lookups go through ``products``'s id index, built
    once per report.

    Args:
        items: fact_sale_items frame.
        products: dim_products frame indexed by product id.

    Returns:
        New DataFrame with the same index as ``items`` plus cost columns.

    """
    require_columns(items, ["product_id", "quantity", "unit_price", "size"], "fact_sale_items")
    require_columns(products, ["cost_price", "base_unit_size"], "dim_products")

    lookup = products[["cost_price", "base_unit_size"]]
    costed = items.join(lookup, on="product_id")

    has_product = costed["cost_price"].notna()
    missing = int((~has_product).sum())
    if missing:
        logger.debug("%d item line(s) reference unknown products, costed at 0", missing)

    unit_cost = _unit_cost(
        costed["cost_price"].fillna(0.0).to_numpy(dtype=float),
        costed["base_unit_size"].fillna(1.0).to_numpy(dtype=float),
        costed["size"].fillna(0.0).to_numpy(dtype=float),
    )

    costed = costed.drop(columns=["cost_price", "base_unit_size"])
    costed["has_product"] = has_product
    costed["unit_cost"] = unit_cost
    costed["line_revenue"] = costed["unit_price"] * costed["quantity"]
    costed["line_cost"] = costed["unit_cost"] * costed["quantity"]
    costed["line_profit"] = costed["line_revenue"] - costed["line_cost"]
    return costed
