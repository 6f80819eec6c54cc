"""Tests for ReportConfig validation and environment overrides."""

import pytest

from bar_core.config import ReportConfig
from bar_core.exceptions import BarCoreError, ConfigError


class TestReportConfig:
    def test_defaults(self) -> None:
        config = ReportConfig()
        assert config.top_n == 10
        assert config.default_monthly_expenses == 0.0
        assert config.timezone is None
        assert config.max_tab_hours is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"top_n": 0},
            {"default_monthly_expenses": -1.0},
            {"max_tab_hours": 0},
            {"timezone": "Mars/Olympus_Mons"},
        ],
    )
    def test_invalid_values_raise(self, kwargs: dict) -> None:
        with pytest.raises(ConfigError):
            ReportConfig(**kwargs)

    def test_config_error_is_a_bar_core_error(self) -> None:
        with pytest.raises(BarCoreError):
            ReportConfig(top_n=-1)


class TestFromEnv:
    def test_unset_variables_keep_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("TOP_N", "DEFAULT_MONTHLY_EXPENSES", "MAX_TAB_HOURS", "TIMEZONE"):
            monkeypatch.delenv(f"BAR_CORE_{name}", raising=False)
        assert ReportConfig.from_env() == ReportConfig()

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BAR_CORE_TOP_N", "5")
        monkeypatch.setenv("BAR_CORE_DEFAULT_MONTHLY_EXPENSES", "30000")
        monkeypatch.setenv("BAR_CORE_MAX_TAB_HOURS", "12")
        monkeypatch.setenv("BAR_CORE_TIMEZONE", "UTC")

        config = ReportConfig.from_env()

        assert config.top_n == 5
        assert config.default_monthly_expenses == 30000.0
        assert config.max_tab_hours == 12
        assert config.timezone == "UTC"

    def test_unparseable_value_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BAR_CORE_TOP_N", "ten")
        with pytest.raises(ConfigError, match="BAR_CORE_"):
            ReportConfig.from_env()
