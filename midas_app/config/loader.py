"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from midas_app.models.trade import PriceLevel, TradeParameterTemplate

from .defaults import DefaultConfig, get_default_config

SETTINGS_FILE = "settings.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load deployment overrides from the settings file, if present."""
        settings_file = self.config_dir / SETTINGS_FILE

        if not settings_file.exists():
            return {}

        with open(settings_file) as f:
            settings = yaml.safe_load(f)

        return settings or {}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-call overrides (highest priority)
        2. Settings file overrides
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    @staticmethod
    def build_params(params_cls: type, section: dict[str, Any]) -> Any:
        """Rebuild a parameter dataclass from a merged config section, ignoring unknown keys."""
        known = {name: section[name] for name in params_cls.__dataclass_fields__ if name in section}
        return params_cls(**known)

    @staticmethod
    def build_template(config: dict[str, Any]) -> TradeParameterTemplate:
        """
        Build a trade template from the ``trade`` section of a merged config.

        An explicit ``stop_loss_price``/``take_profit_price`` selects absolute
        mode for that level; otherwise the percentage is used.
        """
        trade = config.get("trade", {})

        stop_price = trade.get("stop_loss_price")
        take_price = trade.get("take_profit_price")

        return TradeParameterTemplate(
            quantity=trade.get("quantity"),
            max_hold_days=trade.get("max_hold_days"),
            stop_loss=(
                PriceLevel.from_absolute(stop_price) if stop_price is not None
                else PriceLevel.from_percent(trade.get("stop_loss_pct"))
            ),
            take_profit=(
                PriceLevel.from_absolute(take_price) if take_price is not None
                else PriceLevel.from_percent(trade.get("take_profit_pct"))
            ),
        )

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
