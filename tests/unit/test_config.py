"""Unit tests for configuration management."""

import pytest
from pathlib import Path

import yaml

from midas_app.config.defaults import ServiceParams, TradeDefaults, get_default_config
from midas_app.config.loader import ConfigLoader
from midas_app.config.validation import ConfigValidator
from midas_app.engine import BatchSimulationEngine
from midas_app.errors import ValidationError
from midas_app.models.trade import PriceMode


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        """Test that default configuration can be created."""
        config = get_default_config()
        assert config is not None
        assert config.trade.quantity == 100.0
        assert config.trade.max_hold_days == 60
        assert config.batch.entry_offset_days == 1
        assert config.batch.max_workers == 1


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        """Test that ConfigLoader can be created."""
        loader = ConfigLoader.create()
        assert loader is not None
        assert isinstance(loader.config_dir, Path)

    def test_merge_config_defaults_only(self, tmp_path) -> None:
        """Test config merging with defaults only."""
        loader = ConfigLoader.create(tmp_path)
        config = loader.merge_config()

        assert config["trade"]["stop_loss_pct"] == 5.0
        assert config["service"]["simulate_path"] == "/backtest/simulate_trade"

    def test_settings_file_overrides_defaults(self, tmp_path) -> None:
        """Test that settings.yaml overrides global defaults."""
        (tmp_path / "settings.yaml").write_text(yaml.safe_dump({
            "service": {"base_url": "https://midas.example.com"},
            "batch": {"max_workers": 4},
        }))
        loader = ConfigLoader.create(tmp_path)

        config = loader.merge_config()

        assert config["service"]["base_url"] == "https://midas.example.com"
        assert config["service"]["timeout_seconds"] == 30
        assert config["batch"]["max_workers"] == 4

    def test_call_overrides_win(self, tmp_path) -> None:
        """Test that per-call overrides beat the settings file."""
        (tmp_path / "settings.yaml").write_text(yaml.safe_dump({"trade": {"quantity": 50}}))
        loader = ConfigLoader.create(tmp_path)

        config = loader.merge_config({"trade": {"quantity": 25}})

        assert config["trade"]["quantity"] == 25
        # Other defaults should remain
        assert config["trade"]["max_hold_days"] == 60

    def test_empty_settings_file(self, tmp_path) -> None:
        """Test that an empty settings file is ignored."""
        (tmp_path / "settings.yaml").write_text("")
        assert ConfigLoader.create(tmp_path).load_file_config() == {}

    def test_build_params_ignores_unknown_keys(self) -> None:
        """Test that parameter dataclasses are rebuilt from known keys only."""
        params = ConfigLoader.build_params(
            ServiceParams, {"base_url": "http://svc", "unknown": True}
        )
        assert params == ServiceParams(base_url="http://svc")

    def test_build_template_percent_defaults(self) -> None:
        """Test that the default trade section builds a percent template."""
        loader = ConfigLoader.create()
        template = loader.build_template({"trade": vars(TradeDefaults())})

        assert template.quantity == 100.0
        assert template.stop_loss.mode is PriceMode.PERCENT
        assert template.stop_loss.percent == 5.0
        assert template.take_profit.percent == 10.0

    def test_build_template_absolute_price(self) -> None:
        """Test that an explicit price selects absolute mode for that level."""
        template = ConfigLoader.build_template({"trade": {
            "quantity": 10,
            "max_hold_days": 20,
            "stop_loss_pct": 5.0,
            "stop_loss_price": 90.0,
            "take_profit_pct": 10.0,
        }})

        assert template.stop_loss.mode is PriceMode.ABSOLUTE
        assert template.stop_loss.absolute == 90.0
        assert template.take_profit.mode is PriceMode.PERCENT


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_default_config(self) -> None:
        """Test that the merged defaults validate cleanly."""
        config = ConfigLoader.create().merge_config()
        assert ConfigValidator.validate_config(config) == []

    @pytest.mark.parametrize("params, field", [
        ({"quantity": 0}, "quantity"),
        ({"max_hold_days": 1.5}, "max_hold_days"),
        ({"stop_loss_pct": 100.5}, "stop_loss_pct"),
        ({"stop_loss_pct": 0}, "stop_loss_pct"),
        ({"take_profit_pct": -1}, "take_profit_pct"),
        ({"stop_loss_price": -3}, "stop_loss_price"),
    ])
    def test_invalid_trade_params(self, params, field) -> None:
        """Test validation of invalid trade parameters."""
        errors = ConfigValidator.validate_trade_params(params)
        assert len(errors) == 1
        assert errors[0].field == field

    def test_full_stop_is_allowed(self) -> None:
        """Test that a 100% stop-loss passes config validation."""
        assert ConfigValidator.validate_trade_params({"stop_loss_pct": 100}) == []

    def test_unset_price_overrides_pass(self) -> None:
        """Test that None price overrides are ignored."""
        assert ConfigValidator.validate_trade_params({"stop_loss_price": None}) == []

    def test_invalid_service_params(self) -> None:
        """Test validation of service connection parameters."""
        errors = ConfigValidator.validate_service_params({"base_url": "ftp://host", "timeout_seconds": 0})
        assert [e.field for e in errors] == ["base_url", "timeout_seconds"]

    def test_invalid_batch_params(self) -> None:
        """Test validation of batch parameters."""
        errors = ConfigValidator.validate_batch_params({"entry_offset_days": -1, "max_workers": 0})
        assert [e.field for e in errors] == ["entry_offset_days", "max_workers"]

    @pytest.mark.parametrize("params, field", [
        ({"stop_loss_adr_mult": "2x"}, "stop_loss_adr_mult"),
        ({"stop_loss_cap_pct": 0}, "stop_loss_cap_pct"),
        ({"take_profit_adr_mult": None}, "take_profit_adr_mult"),
        ({"take_profit_floor_pct": float("nan")}, "take_profit_floor_pct"),
    ])
    def test_invalid_suggestion_params(self, params, field) -> None:
        """Test validation of ADR suggestion constants."""
        errors = ConfigValidator.validate_suggestion_params(params)
        assert len(errors) == 1
        assert errors[0].field == field

    def test_invalid_ranking_params(self) -> None:
        """Test validation of rankings request parameters."""
        errors = ConfigValidator.validate_ranking_params({
            "top_n": 0,
            "max_workers": "5",
            "rate_limit_per_minute": True,
            "sort_by": "",
            "sort_order": "DESC",
        })
        assert [e.field for e in errors] == [
            "top_n", "max_workers", "rate_limit_per_minute", "sort_by", "sort_order"
        ]

    def test_config_checks_suggestion_and_ranking_sections(self) -> None:
        """Test that every section of the merged config is validated."""
        config = ConfigLoader.create().merge_config({
            "suggestion": {"stop_loss_adr_mult": "2x"},
            "ranking": {"sort_order": "sideways"},
        })

        assert [e.field for e in ConfigValidator.validate_config(config)] == [
            "stop_loss_adr_mult", "sort_order"
        ]

    def test_engine_rejects_non_numeric_suggestion(self, fake_simulator, tmp_path) -> None:
        """Test that a bad suggestion constant fails at startup, not at suggestion time."""
        with pytest.raises(ValidationError) as exc_info:
            BatchSimulationEngine(
                simulator=fake_simulator,
                config_dir=tmp_path,
                overrides={"suggestion": {"stop_loss_adr_mult": "2x"}},
            )

        assert exc_info.value.field == "stop_loss_adr_mult"
