"""Tests for ledger ingestion: timestamp normalization and record parsing."""

from datetime import date, datetime, timezone

import pandas as pd
import pytest

from bar_core.ledger.ingest import (
    LedgerSnapshot,
    normalize_timestamp,
    parse_customer,
    parse_game_modality,
    parse_item,
    parse_product,
    parse_transaction,
)
from bar_core.ledger.models import Expense, OrderItem, Payment, Product, Sale


class LazyTimestamp:
    """Mimics a store timestamp that materializes on demand."""

    def __init__(self, value: datetime) -> None:
        self._value = value

    def toDate(self) -> datetime:  # noqa: N802
        return self._value


class BrokenTimestamp:
    def to_datetime(self) -> datetime:
        raise ValueError("corrupted")


class MissingFieldTimestamp:
    """Wrapper whose accessor fails with a non-parsing error."""

    def toDate(self) -> datetime:  # noqa: N802
        raise KeyError("seconds")


class TestNormalizeTimestamp:
    """One canonical naive datetime regardless of the incoming representation."""

    def test_native_datetime_passes_through(self) -> None:
        ts = datetime(2025, 1, 15, 21, 30)
        assert normalize_timestamp(ts) == ts

    def test_date_becomes_midnight(self) -> None:
        assert normalize_timestamp(date(2025, 1, 15)) == datetime(2025, 1, 15, 0, 0)

    def test_pandas_timestamp(self) -> None:
        assert normalize_timestamp(pd.Timestamp("2025-01-15 21:30")) == datetime(2025, 1, 15, 21, 30)

    def test_iso_string(self) -> None:
        assert normalize_timestamp("2025-01-15T21:30:00") == datetime(2025, 1, 15, 21, 30)

    def test_epoch_milliseconds(self) -> None:
        assert normalize_timestamp(1736974800000, tz="UTC") == datetime(2025, 1, 15, 21, 0)

    def test_lazy_wrapper_is_materialized(self) -> None:
        wrapped = LazyTimestamp(datetime(2025, 1, 15, 21, 30))
        assert normalize_timestamp(wrapped) == datetime(2025, 1, 15, 21, 30)

    def test_firestore_seconds_mapping(self) -> None:
        raw = {"seconds": 1736974800, "nanoseconds": 0}
        assert normalize_timestamp(raw, tz="UTC") == datetime(2025, 1, 15, 21, 0)

    def test_aware_datetime_is_converted_then_made_naive(self) -> None:
        aware = datetime(2025, 1, 15, 21, 0, tzinfo=timezone.utc)
        result = normalize_timestamp(aware, tz="America/Sao_Paulo")
        assert result == datetime(2025, 1, 15, 18, 0)
        assert result.tzinfo is None

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "not a date",
            float("nan"),
            True,
            object(),
            pd.NaT,
            BrokenTimestamp(),
            MissingFieldTimestamp(),
        ],
    )
    def test_unresolvable_values_become_none(self, value: object) -> None:
        assert normalize_timestamp(value) is None

    def test_out_of_range_is_rejected(self) -> None:
        assert normalize_timestamp(datetime(1500, 1, 1)) is None


class TestParseTransaction:
    """Raw store records become the right tagged-union variant."""

    def test_sale_from_camel_case_record(self) -> None:
        raw = {
            "id": "s1",
            "type": "sale",
            "total": 50,
            "timestamp": "2025-01-15T13:00:00",
            "orderCreatedAt": "2025-01-15T10:00:00",
            "paymentMethod": "Dinheiro",
            "tabName": "Mesa 4",
            "items": [
                {"productId": "beer", "name": "Cerveja", "quantity": 2, "unitPrice": 25},
            ],
        }
        tx = parse_transaction(raw)

        assert isinstance(tx, Sale)
        assert tx.type == "sale"
        assert tx.total == 50.0
        assert tx.payment_method == "Dinheiro"
        assert tx.tab_name == "Mesa 4"
        assert tx.order_created_at == datetime(2025, 1, 15, 10, 0)
        assert tx.items[0].quantity == 2.0
        assert tx.items[0].unit_price == 25.0

    def test_expense_and_payment(self) -> None:
        expense = parse_transaction(
            {"id": "e1", "type": "expense", "total": 20, "expenseCategory": "Insumos"}
        )
        payment = parse_transaction({"id": "p1", "type": "payment", "total": 40})

        assert isinstance(expense, Expense)
        assert expense.expense_category == "Insumos"
        assert expense.timestamp is None
        assert isinstance(payment, Payment)

    def test_unknown_type_is_skipped(self) -> None:
        assert parse_transaction({"id": "x", "type": "refund", "total": 10}) is None

    def test_model_instance_timestamps_are_normalized(self) -> None:
        sale = Sale(id="s", timestamp=LazyTimestamp(datetime(2025, 1, 15, 22, 0)))  # type: ignore[arg-type]
        parsed = parse_transaction(sale)
        assert parsed is not None
        assert parsed.timestamp == datetime(2025, 1, 15, 22, 0)


class TestParseItemAndProduct:
    def test_item_fallbacks(self) -> None:
        item = parse_item({"productId": 7, "name": "Gin", "quantity": 0, "size": 0, "identifier": ""})

        assert item.product_id == "7"
        assert item.quantity == 1.0
        assert item.size is None
        assert item.identifier is None

    def test_dose_item_keeps_size(self) -> None:
        item = parse_item({"productId": "gin", "quantity": 2, "unitPrice": 20, "size": 100})
        assert item.size == 100.0

    @pytest.mark.parametrize("size", [0.0, -50.0, float("nan")])
    def test_model_item_without_positive_size_is_a_unit_sale(self, size: float) -> None:
        item = parse_item(OrderItem(product_id="beer", name="Cerveja", size=size))
        assert item.size is None

    def test_model_sale_items_are_normalized(self) -> None:
        sale = Sale(
            id="s",
            timestamp=datetime(2025, 1, 15, 22, 0),
            items=(OrderItem(product_id="beer", name="Cerveja", size=0.0),),
        )
        parsed = parse_transaction(sale)
        assert parsed is not None
        assert parsed.items[0].size is None

    def test_product_base_unit_size_defaults_to_one(self) -> None:
        product = parse_product({"id": "beer", "costPrice": 10, "baseUnitSize": 0})
        assert product is not None
        assert product.base_unit_size == 1.0

    def test_product_model_with_invalid_base_unit_size(self) -> None:
        product = parse_product(Product(id="x", cost_price=5.0, base_unit_size=-3.0))
        assert product is not None
        assert product.base_unit_size == 1.0

    def test_product_without_id_is_skipped(self) -> None:
        assert parse_product({"name": "ghost", "costPrice": 3}) is None


class TestLedgerSnapshot:
    def test_capture_normalizes_everything(self) -> None:
        snapshot = LedgerSnapshot.capture(
            transactions=[
                {"id": "s1", "type": "sale", "total": 10, "timestamp": "2025-01-15T20:00:00"},
                {"id": "bad", "type": "transfer", "total": 10},
            ],
            products=[{"id": "beer", "costPrice": 10}],
            game_modalities=["pool", {"id": "darts", "name": "Dardos"}],
            customers=[{"id": "c1", "balance": "12.5"}],
        )

        assert [tx.id for tx in snapshot.transactions] == ["s1"]
        assert snapshot.products[0].cost_price == 10.0
        assert snapshot.game_ids == frozenset({"pool", "darts"})
        assert snapshot.customers[0].balance == 12.5

    def test_capture_of_nothing_is_empty(self) -> None:
        snapshot = LedgerSnapshot.capture()
        assert snapshot.transactions == ()
        assert snapshot.game_ids == frozenset()

    def test_malformed_reference_entries_are_skipped(self) -> None:
        snapshot = LedgerSnapshot.capture(
            products=[None, 42, {"id": "beer", "costPrice": 10}],
            game_modalities=[None, ["pool"], "darts"],
            customers=[None, "c1", {"id": "c2", "balance": 30}],
        )

        assert [p.id for p in snapshot.products] == ["beer"]
        assert snapshot.game_ids == frozenset({"darts"})
        assert [c.id for c in snapshot.customers] == ["c2"]

    @pytest.mark.parametrize("raw", [None, 42, ["pool"]])
    def test_reference_parsers_reject_non_mappings(self, raw: object) -> None:
        assert parse_product(raw) is None
        assert parse_game_modality(raw) is None
        assert parse_customer(raw) is None
