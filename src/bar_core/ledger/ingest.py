"""Ledger ingestion: normalize raw records into typed, immutable snapshots.

The document store hands the engine loosely typed records: camelCase keys,
optional fields, and timestamps that may be native datetimes, ISO strings,
epoch milliseconds or lazily materialized wrappers (objects exposing a
``to_datetime()``/``toDate()`` accessor or Firestore-style
``seconds``/``nanoseconds``). Everything is resolved here, once, so the
analytics layer only ever sees naive local ``datetime`` values.

Ingestion is fail-soft: a field that cannot be parsed falls back to a neutral
value, an unresolvable timestamp becomes ``None`` and a record whose type
cannot be classified is skipped with a warning.

Examples:
    >>> from bar_core.ledger.ingest import normalize_timestamp
    >>> normalize_timestamp("2025-01-15T21:30:00")
    datetime.datetime(2025, 1, 15, 21, 30)
    >>> normalize_timestamp({"seconds": 0, "nanoseconds": 0}, tz="UTC")
    datetime.datetime(1970, 1, 1, 0, 0)

"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

import pandas as pd

from bar_core.ledger.models import (
    Customer,
    Expense,
    GameModality,
    OrderItem,
    Payment,
    Product,
    Sale,
    Transaction,
)

logger = logging.getLogger(__name__)

# Accessors exposed by lazily materialized timestamp wrappers, tried in order
_LAZY_ACCESSORS = ("to_datetime", "toDate", "to_pydatetime")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Fact frames store timestamps as datetime64[ns]
_MIN_SUPPORTED = datetime(1678, 1, 1)
_MAX_SUPPORTED = datetime(2261, 12, 31)

_TRANSACTION_TYPES = {"sale": Sale, "expense": Expense, "payment": Payment}


# ============================================================================
# Scalar normalization
# ============================================================================


def _localize(dt: datetime, tz: str | None) -> datetime:
    """Convert an aware datetime to the target zone and drop tzinfo."""
    if dt.tzinfo is None:
        return dt
    target = ZoneInfo(tz) if tz else None
    return dt.astimezone(target).replace(tzinfo=None)


def _in_supported_range(dt: datetime) -> bool:
    return _MIN_SUPPORTED <= dt <= _MAX_SUPPORTED


def _from_epoch_seconds(seconds: float, nanoseconds: float = 0) -> datetime:
    return _EPOCH + timedelta(seconds=seconds, microseconds=nanoseconds / 1000)


def normalize_timestamp(value: Any, tz: str | None = None) -> datetime | None:
    """Resolve any supported timestamp representation to a naive datetime.

    Supported inputs:
    - ``datetime`` / ``pandas.Timestamp`` (aware values are converted to ``tz``)
    - ``date`` (midnight of that day)
    - ISO-8601 strings
    - ints/floats, interpreted as epoch milliseconds
    - mappings or objects with ``seconds``/``nanoseconds`` (Firestore shape)
    - objects exposing ``to_datetime()``, ``toDate()`` or ``to_pydatetime()``

    Args:
        value: Raw timestamp value.
        tz: IANA zone for aware values. If None, uses the system local zone.

    Returns:
        Naive datetime, or None when the value cannot be resolved.

    """
    try:
        dt = _coerce_datetime(value)
    except (AttributeError, TypeError, ValueError, OverflowError, OSError) as e:
        logger.debug("Unresolvable timestamp %r: %s", value, e)
        return None

    if dt is None:
        return None

    try:
        dt = _localize(dt, tz)
    except (ValueError, OverflowError, OSError) as e:
        logger.debug("Could not localize timestamp %r: %s", value, e)
        return None

    if not _in_supported_range(dt):
        logger.debug("Timestamp %s outside supported range, ignoring", dt)
        return None
    return dt


def _coerce_datetime(value: Any) -> datetime | None:
    if value is None or value is pd.NaT:
        return None

    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    if isinstance(value, str):
        if not value.strip():
            return None
        parsed = pd.to_datetime(value)
        return None if pd.isna(parsed) else parsed.to_pydatetime()

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return _from_epoch_seconds(value / 1000)

    if isinstance(value, Mapping):
        if "seconds" in value:
            return _from_epoch_seconds(value["seconds"], value.get("nanoseconds", 0))
        return None

    for accessor in _LAZY_ACCESSORS:
        method = getattr(value, accessor, None)
        if callable(method):
            try:
                resolved = method()
            except Exception as e:
                # Store SDK wrappers raise their own error types
                logger.debug("Timestamp accessor %s() failed on %r: %s", accessor, value, e)
                return None
            # Wrappers must resolve to a concrete value, not another wrapper
            if isinstance(resolved, (datetime, date, str, int, float)):
                return _coerce_datetime(resolved)
            return None

    if hasattr(value, "seconds"):
        return _from_epoch_seconds(value.seconds, getattr(value, "nanoseconds", 0))

    return None


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(result) or math.isinf(result) else result


def _to_str(value: Any) -> str | None:
    """Stringify ids and labels; empty strings count as missing."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _get(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


# ============================================================================
# Record parsing
# ============================================================================


def parse_item(raw: OrderItem | Mapping[str, Any]) -> OrderItem:
    """Parse one item line. Quantity falls back to 1 when missing or not positive."""
    if isinstance(raw, OrderItem):
        if raw.size is not None and not _to_float(raw.size) > 0:
            return replace(raw, size=None)
        return raw

    quantity = _to_float(_get(raw, "quantity"), default=1.0)
    if quantity <= 0:
        quantity = 1.0

    size = _to_float(_get(raw, "size"), default=0.0)

    return OrderItem(
        product_id=_to_str(_get(raw, "productId", "product_id")) or "",
        name=_to_str(_get(raw, "name")) or "",
        quantity=quantity,
        unit_price=_to_float(_get(raw, "unitPrice", "unit_price", "unitCost", "unit_cost")),
        size=size if size > 0 else None,
        identifier=_to_str(_get(raw, "identifier")),
    )


def _parse_items(raw_items: Any) -> tuple[OrderItem, ...]:
    if not raw_items or isinstance(raw_items, (str, Mapping)):
        return ()
    items = []
    for raw in raw_items:
        if isinstance(raw, (OrderItem, Mapping)):
            items.append(parse_item(raw))
        else:
            logger.debug("Skipping malformed item line %r", raw)
    return tuple(items)


def parse_transaction(
    raw: Transaction | Mapping[str, Any], tz: str | None = None
) -> Transaction | None:
    """Parse a ledger record into a Sale, Expense or Payment.

    Model instances pass through with their timestamps re-normalized.

    Args:
        raw: Model instance or raw mapping from the document store.
        tz: IANA zone for timezone-aware timestamps.

    Returns:
        Typed transaction, or None when the record type is unknown.

    """
    if isinstance(raw, Sale):
        return replace(
            raw,
            timestamp=normalize_timestamp(raw.timestamp, tz),
            order_created_at=normalize_timestamp(raw.order_created_at, tz),
            items=_parse_items(raw.items),
        )
    if isinstance(raw, (Expense, Payment)):
        return replace(raw, timestamp=normalize_timestamp(raw.timestamp, tz))

    if not isinstance(raw, Mapping):
        logger.warning("Skipping ledger record of unsupported kind %s", type(raw).__name__)
        return None

    tx_type = _to_str(raw.get("type"))
    if tx_type not in _TRANSACTION_TYPES:
        logger.warning("Skipping ledger record %r with unknown type %r", raw.get("id"), tx_type)
        return None

    common = {
        "id": _to_str(raw.get("id")) or "",
        "timestamp": normalize_timestamp(raw.get("timestamp"), tz),
        "total": _to_float(raw.get("total")),
        "customer_id": _to_str(_get(raw, "customerId", "customer_id")),
        "description": _to_str(raw.get("description")),
    }

    if tx_type == "sale":
        return Sale(
            **common,
            items=_parse_items(raw.get("items")),
            payment_method=_to_str(_get(raw, "paymentMethod", "payment_method")),
            tab_name=_to_str(_get(raw, "tabName", "tab_name")),
            order_created_at=normalize_timestamp(
                _get(raw, "orderCreatedAt", "order_created_at"), tz
            ),
        )
    if tx_type == "expense":
        return Expense(
            **common,
            expense_category=_to_str(_get(raw, "expenseCategory", "expense_category")),
            supplier_id=_to_str(_get(raw, "supplierId", "supplier_id")),
            items=_parse_items(raw.get("items")),
        )
    return Payment(
        **common,
        payment_method=_to_str(_get(raw, "paymentMethod", "payment_method")),
    )


def _skip_malformed(kind: str, raw: Any) -> None:
    logger.debug("Skipping malformed %s entry of type %s", kind, type(raw).__name__)


def parse_product(raw: Product | Mapping[str, Any]) -> Product | None:
    """Parse a catalog product. Returns None when the record has no id."""
    if isinstance(raw, Product):
        base = raw.base_unit_size
        return raw if base and base > 0 else replace(raw, base_unit_size=1.0)
    if not isinstance(raw, Mapping):
        _skip_malformed("product", raw)
        return None

    product_id = _to_str(raw.get("id"))
    if product_id is None:
        logger.debug("Skipping product without id: %r", raw.get("name"))
        return None

    base_unit_size = _to_float(_get(raw, "baseUnitSize", "base_unit_size"), default=1.0)
    return Product(
        id=product_id,
        name=_to_str(raw.get("name")) or "",
        cost_price=_to_float(_get(raw, "costPrice", "cost_price")),
        base_unit_size=base_unit_size if base_unit_size > 0 else 1.0,
        sale_type=_to_str(_get(raw, "saleType", "sale_type")) or "unit",
        stock=_to_float(raw.get("stock")),
    )


def parse_game_modality(raw: GameModality | Mapping[str, Any] | str) -> GameModality | None:
    if isinstance(raw, GameModality):
        return raw
    if isinstance(raw, str):
        return GameModality(id=raw) if raw else None
    if not isinstance(raw, Mapping):
        _skip_malformed("game modality", raw)
        return None
    modality_id = _to_str(raw.get("id"))
    if modality_id is None:
        return None
    return GameModality(id=modality_id, name=_to_str(raw.get("name")) or "")


def parse_customer(raw: Customer | Mapping[str, Any]) -> Customer | None:
    if isinstance(raw, Customer):
        return raw
    if not isinstance(raw, Mapping):
        _skip_malformed("customer", raw)
        return None
    return Customer(
        id=_to_str(raw.get("id")) or "",
        name=_to_str(raw.get("name")) or "",
        balance=_to_float(raw.get("balance")),
    )


# ============================================================================
# Snapshot
# ============================================================================


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable, fully normalized view of the engine inputs for one report.

    Attributes:
        transactions: Parsed ledger records, in input order.
        products: Catalog products with a resolvable id.
        game_modalities: Game modalities with a resolvable id.
        customers: Customers (only balances are consumed).
    """

    transactions: tuple[Transaction, ...] = ()
    products: tuple[Product, ...] = ()
    game_modalities: tuple[GameModality, ...] = ()
    customers: tuple[Customer, ...] = ()

    @classmethod
    def capture(
        cls,
        transactions: Iterable[Transaction | Mapping[str, Any]] | None = None,
        products: Iterable[Product | Mapping[str, Any]] | None = None,
        game_modalities: Iterable[GameModality | Mapping[str, Any] | str] | None = None,
        customers: Iterable[Customer | Mapping[str, Any]] | None = None,
        *,
        tz: str | None = None,
    ) -> LedgerSnapshot:
        """Parse every input collection once and freeze the result.

        Args:
            transactions: Ledger records (models or raw mappings).
            products: Catalog products.
            game_modalities: Game modalities (models, mappings or bare ids).
            customers: Customers.
            tz: IANA zone for timezone-aware timestamps.

        Returns:
            LedgerSnapshot instance.

        """
        parsed_tx = tuple(
            tx for tx in (parse_transaction(raw, tz) for raw in transactions or ()) if tx
        )
        parsed_products = tuple(p for p in (parse_product(raw) for raw in products or ()) if p)
        parsed_games = tuple(
            g for g in (parse_game_modality(raw) for raw in game_modalities or ()) if g
        )
        parsed_customers = tuple(
            c for c in (parse_customer(raw) for raw in customers or ()) if c
        )

        unresolved = sum(1 for tx in parsed_tx if tx.timestamp is None)
        if unresolved:
            logger.debug("%d ledger record(s) without a resolvable timestamp", unresolved)

        return cls(
            transactions=parsed_tx,
            products=parsed_products,
            game_modalities=parsed_games,
            customers=parsed_customers,
        )

    @property
    def game_ids(self) -> frozenset[str]:
        return frozenset(g.id for g in self.game_modalities)
