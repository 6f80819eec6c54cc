"""Tests for dimensional breakdowns."""

from datetime import date, datetime

import pandas as pd
import pytest

from bar_core.analytics.breakdowns import (
    cash_inflow_by_method,
    expenses_by_category,
    profit_by_product,
    purchases_by_supplier,
    sales_by_payment_method,
    supplier_name,
    top_products_by_quantity,
)
from bar_core.analytics.filters import partition_ledger
from bar_core.analytics.windows import resolve_window
from bar_core.exceptions import DataQualityError
from bar_core.ledger.models import DateRange, Expense, OrderItem, Payment, Sale

DAY = datetime(2025, 1, 15, 20, 0)


def _pairs(df: pd.DataFrame) -> list[tuple[str, float]]:
    return [(row.name, pytest.approx(row.value)) for row in df.itertuples(index=False)]


@pytest.fixture
def night(make_frames, night_ledger, catalog, games):
    """Current-range subsets of the sample night."""
    tx, items = make_frames(night_ledger, catalog, games)
    window = resolve_window(DateRange(date(2025, 1, 15)))
    return partition_ledger(tx, items, window)


class TestLedgerBreakdowns:
    """Rankings over fact_transactions."""

    def test_sales_by_payment_method_includes_fiado(self, night) -> None:
        df = sales_by_payment_method(night.current)
        assert list(df.columns) == ["name", "value"]
        assert _pairs(df) == [("Fiado", 60.0), ("Dinheiro", 50.0), ("Pix", 30.0)]

    def test_cash_inflow_excludes_fiado_and_adds_payments(self, night) -> None:
        df = cash_inflow_by_method(night.current)
        assert _pairs(df) == [("Pix", 70.0), ("Dinheiro", 50.0)]

    def test_expenses_by_category(self, night) -> None:
        assert _pairs(expenses_by_category(night.current)) == [("Insumos", 20.0)]

    def test_purchases_by_supplier(self, night) -> None:
        assert _pairs(purchases_by_supplier(night.current)) == [("Distribuidora Sul", 20.0)]

    def test_missing_labels_use_fallbacks(self, make_frames) -> None:
        tx, _ = make_frames(
            [
                Sale(id="s1", timestamp=DAY, total=10.0),
                Payment(id="p1", timestamp=DAY, total=5.0),
                Expense(id="e1", timestamp=DAY, total=7.0),
                Expense(id="e2", timestamp=DAY, total=3.0, expense_category="Insumos"),
            ]
        )

        assert _pairs(sales_by_payment_method(tx)) == [("Outros", 10.0)]
        assert _pairs(cash_inflow_by_method(tx)) == [("Outros", 10.0), ("Dinheiro", 5.0)]
        assert _pairs(expenses_by_category(tx)) == [("Geral", 7.0), ("Insumos", 3.0)]
        assert _pairs(purchases_by_supplier(tx)) == [("Outros", 3.0)]

    def test_ties_keep_first_appearance(self, make_frames) -> None:
        tx, _ = make_frames(
            [
                Sale(id="s1", timestamp=DAY, total=10.0, payment_method="Pix"),
                Sale(id="s2", timestamp=DAY, total=10.0, payment_method="Cartão"),
                Sale(id="s3", timestamp=DAY, total=10.0, payment_method="Dinheiro"),
            ]
        )

        df = sales_by_payment_method(tx)

        assert df["name"].tolist() == ["Pix", "Cartão", "Dinheiro"]

    def test_empty_period(self, make_frames) -> None:
        tx, _ = make_frames([])
        df = sales_by_payment_method(tx)
        assert df.empty
        assert list(df.columns) == ["name", "value"]

    def test_missing_columns_raise(self) -> None:
        with pytest.raises(DataQualityError, match="payment_method"):
            sales_by_payment_method(pd.DataFrame({"type": ["sale"], "total": [1.0]}))


class TestProductRankings:
    def test_top_products_by_quantity(self, night) -> None:
        df = top_products_by_quantity(night.current_items)
        assert _pairs(df) == [("Bolão", 3.0), ("Cerveja", 2.0), ("Gin", 2.0), ("Sinuca", 1.0)]

    def test_top_n_truncates(self, night) -> None:
        df = top_products_by_quantity(night.current_items, top_n=2)
        assert df["name"].tolist() == ["Bolão", "Cerveja"]

    def test_profit_by_product_skips_unknown_products(self, night) -> None:
        df = profit_by_product(night.current_items)
        assert _pairs(df) == [("Gin", 32.0), ("Cerveja", 30.0), ("Sinuca", 20.0)]

    def test_same_name_across_sales_is_summed(self, make_frames) -> None:
        beer = OrderItem(product_id="beer", name="Cerveja", quantity=2, unit_price=8.0)
        _, items = make_frames(
            [
                Sale(id="s1", timestamp=DAY, total=16.0, items=(beer,)),
                Sale(id="s2", timestamp=DAY, total=16.0, items=(beer,)),
            ]
        )

        assert _pairs(top_products_by_quantity(items)) == [("Cerveja", 4.0)]


class TestSupplierName:
    @pytest.mark.parametrize(
        "description, expected",
        [
            ("Compra: Distribuidora Sul", "Distribuidora Sul"),
            ("Atacadão", "Atacadão"),
            ("Compra:   Hortifruti  ", "Hortifruti"),
            ("Compra: ", "Outros"),
            ("", "Outros"),
            (None, "Outros"),
            (float("nan"), "Outros"),
        ],
    )
    def test_supplier_name(self, description: object, expected: str) -> None:
        assert supplier_name(description) == expected
