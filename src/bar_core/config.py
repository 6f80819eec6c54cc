"""Configuration for the bar_core analytics engine.

This module provides the ledger vocabulary shared by every stage (reserved
payment methods, expense categories, fallback labels) and a single
``ReportConfig`` dataclass with the tunable knobs of a report build.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bar_core.exceptions import ConfigError

# Reserved ledger markers
FIADO = "Fiado"  # sale on customer credit, no cash changes hands
INSUMOS = "Insumos"  # expense category for supplier purchases

# Fallback labels for breakdowns
DEFAULT_SALE_METHOD = "Outros"
DEFAULT_PAYMENT_METHOD = "Dinheiro"
DEFAULT_EXPENSE_CATEGORY = "Geral"
DEFAULT_SUPPLIER = "Outros"

# Supply purchases are recorded with a description like "Compra: <supplier>"
SUPPLIER_PREFIX = "Compra: "

# Size of the ranked product lists
TOP_N = 10

ENV_PREFIX = "BAR_CORE_"


@dataclass
class ReportConfig:
    """Tunable settings for a report build.

    Attributes:
        top_n: Number of entries kept in the ranked product lists (default: 10).
        default_monthly_expenses: Monthly cost used for the break-even goal when
            the month has no recorded expenses. 0 disables the fallback.
        timezone: IANA zone that timezone-aware timestamps are converted to
            before being made naive. If None, uses the system local zone.
        max_tab_hours: Optional cap on the number of hours a single tab may
            contribute to the occupancy heatmap. If None, tabs are not capped.
    """

    top_n: int = TOP_N
    default_monthly_expenses: float = 0.0
    timezone: str | None = None
    max_tab_hours: int | None = None

    def __post_init__(self) -> None:
        if self.top_n < 1:
            raise ConfigError(f"top_n must be >= 1, got {self.top_n}")
        if self.default_monthly_expenses < 0:
            raise ConfigError(
                f"default_monthly_expenses must be >= 0, got {self.default_monthly_expenses}"
            )
        if self.max_tab_hours is not None and self.max_tab_hours < 1:
            raise ConfigError(f"max_tab_hours must be >= 1, got {self.max_tab_hours}")
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ConfigError(f"Unknown timezone {self.timezone!r}") from e

    @classmethod
    def from_env(cls) -> ReportConfig:
        """Create a ReportConfig from ``BAR_CORE_*`` environment variables.

        Recognized variables: BAR_CORE_TOP_N, BAR_CORE_DEFAULT_MONTHLY_EXPENSES,
        BAR_CORE_TIMEZONE, BAR_CORE_MAX_TAB_HOURS. Unset variables keep the
        dataclass defaults.

        Returns:
            ReportConfig instance.

        Raises:
            ConfigError: If a variable cannot be parsed or is out of range.

        Examples:
            >>> os.environ["BAR_CORE_TOP_N"] = "5"
            >>> ReportConfig.from_env().top_n
            5

        """
        kwargs: dict[str, object] = {}
        try:
            if top_n := os.environ.get(f"{ENV_PREFIX}TOP_N"):
                kwargs["top_n"] = int(top_n)
            if monthly := os.environ.get(f"{ENV_PREFIX}DEFAULT_MONTHLY_EXPENSES"):
                kwargs["default_monthly_expenses"] = float(monthly)
            if max_hours := os.environ.get(f"{ENV_PREFIX}MAX_TAB_HOURS"):
                kwargs["max_tab_hours"] = int(max_hours)
        except ValueError as e:
            raise ConfigError(f"Invalid {ENV_PREFIX}* environment value: {e}") from e

        if tz := os.environ.get(f"{ENV_PREFIX}TIMEZONE"):
            kwargs["timezone"] = tz

        return cls(**kwargs)  # type: ignore[arg-type]
