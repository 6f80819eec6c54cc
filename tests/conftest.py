"""Shared fixtures for the analytics tests.

The sample ledger covers one bar night (Wednesday 2025-01-15) plus a few
records around it so interval boundaries can be exercised.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import pandas as pd
import pytest

from bar_core.analytics.costing import attach_costs
from bar_core.ledger.frames import products_frame, sale_items_frame, transactions_frame
from bar_core.ledger.ingest import LedgerSnapshot
from bar_core.ledger.models import (
    Customer,
    Expense,
    GameModality,
    OrderItem,
    Payment,
    Product,
    Sale,
)


@pytest.fixture
def catalog() -> list[Product]:
    """Catalog with a unit product, a dose product and a game product."""
    return [
        Product(id="beer", name="Cerveja", cost_price=10.0, sale_type="unit", stock=24),
        Product(
            id="gin",
            name="Gin",
            cost_price=30.0,
            base_unit_size=750.0,
            sale_type="dose",
            stock=0,
        ),
        Product(id="pool", name="Sinuca", cost_price=0.0, sale_type="service", stock=0),
    ]


@pytest.fixture
def games() -> list[GameModality]:
    return [GameModality(id="pool", name="Sinuca")]


@pytest.fixture
def customers() -> list[Customer]:
    return [
        Customer(id="c1", name="Ana", balance=120.0),
        Customer(id="c2", name="Bruno", balance=0.0),
        Customer(id="c3", name="Carla", balance=-15.0),
        Customer(id="c4", name="Davi", balance=35.0),
    ]


@pytest.fixture
def night_ledger() -> list:
    """Ledger records of Wednesday 2025-01-15 and its surroundings."""
    return [
        Sale(
            id="s1",
            timestamp=datetime(2025, 1, 15, 13, 0),
            order_created_at=datetime(2025, 1, 15, 10, 0),
            total=50.0,
            payment_method="Dinheiro",
            items=(OrderItem(product_id="beer", name="Cerveja", quantity=2, unit_price=25.0),),
        ),
        Sale(
            id="s2",
            timestamp=datetime(2025, 1, 15, 22, 30),
            total=60.0,
            payment_method="Fiado",
            customer_id="c1",
            items=(
                OrderItem(product_id="gin", name="Gin", quantity=2, unit_price=20.0, size=100.0),
                OrderItem(product_id="pool", name="Sinuca", quantity=1, unit_price=20.0),
            ),
        ),
        Sale(
            id="s3",
            timestamp=datetime(2025, 1, 15, 23, 10),
            total=30.0,
            payment_method="Pix",
            items=(
                OrderItem(
                    product_id="bet", name="Bolão", quantity=3, unit_price=10.0, identifier="B-7"
                ),
            ),
        ),
        Payment(
            id="p1",
            timestamp=datetime(2025, 1, 15, 19, 0),
            total=40.0,
            payment_method="Pix",
            customer_id="c1",
        ),
        Expense(
            id="e1",
            timestamp=datetime(2025, 1, 15, 9, 0),
            total=20.0,
            expense_category="Insumos",
            description="Compra: Distribuidora Sul",
        ),
        Expense(
            id="e2",
            timestamp=datetime(2025, 1, 3, 9, 0),
            total=290.0,
            expense_category="Aluguel",
        ),
        Sale(
            id="s0",
            timestamp=datetime(2025, 1, 14, 21, 0),
            total=25.0,
            payment_method="Dinheiro",
            items=(OrderItem(product_id="beer", name="Cerveja", quantity=1, unit_price=25.0),),
        ),
        Sale(id="undated", timestamp=None, total=999.0, payment_method="Dinheiro"),
    ]


@pytest.fixture
def make_frames() -> Callable[..., tuple[pd.DataFrame, pd.DataFrame]]:
    """Build (fact_transactions, costed fact_sale_items) from records."""

    def _make(records, products=(), game_modalities=()):
        snapshot = LedgerSnapshot.capture(records, products, game_modalities)
        tx = transactions_frame(snapshot)
        items = attach_costs(sale_items_frame(snapshot), products_frame(snapshot.products))
        return tx, items

    return _make
