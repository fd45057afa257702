"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse


@dataclass(frozen=True)
class FieldError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_trade_params(params: dict[str, Any]) -> list[FieldError]:
        """Validate trade template defaults."""
        errors = []

        # Validate quantity
        if "quantity" in params:
            value = params["quantity"]
            if not _is_number(value) or value <= 0:
                errors.append(FieldError(
                    field="quantity",
                    message="Must be a positive number",
                    value=value
                ))

        # Validate max_hold_days
        if "max_hold_days" in params:
            value = params["max_hold_days"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(FieldError(
                    field="max_hold_days",
                    message="Must be a positive integer",
                    value=value
                ))

        # Validate stop_loss_pct
        if "stop_loss_pct" in params:
            value = params["stop_loss_pct"]
            if not _is_number(value) or value <= 0 or value > 100:
                errors.append(FieldError(
                    field="stop_loss_pct",
                    message="Must be a positive number no greater than 100",
                    value=value
                ))

        # Validate take_profit_pct
        if "take_profit_pct" in params:
            value = params["take_profit_pct"]
            if not _is_number(value) or value <= 0:
                errors.append(FieldError(
                    field="take_profit_pct",
                    message="Must be a positive number",
                    value=value
                ))

        # Validate absolute price overrides
        for name in ("stop_loss_price", "take_profit_price"):
            if params.get(name) is not None:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(FieldError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_service_params(params: dict[str, Any]) -> list[FieldError]:
        """Validate remote service connection parameters."""
        errors = []

        if "base_url" in params:
            value = params["base_url"]
            parsed = urlparse(value) if isinstance(value, str) else None
            if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append(FieldError(
                    field="base_url",
                    message="Must be an http(s) URL",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(FieldError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_batch_params(params: dict[str, Any]) -> list[FieldError]:
        """Validate batch execution parameters."""
        errors = []

        if "entry_offset_days" in params:
            value = params["entry_offset_days"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(FieldError(
                    field="entry_offset_days",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "max_workers" in params:
            value = params["max_workers"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(FieldError(
                    field="max_workers",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_suggestion_params(params: dict[str, Any]) -> list[FieldError]:
        """Validate ADR-based suggestion constants."""
        errors = []

        for name in ("stop_loss_adr_mult", "stop_loss_cap_pct",
                     "take_profit_adr_mult", "take_profit_floor_pct"):
            if name in params:
                value = params[name]
                if not _is_number(value) or not value > 0:
                    errors.append(FieldError(
                        field=name,
                        message="Must be a positive number",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_ranking_params(params: dict[str, Any]) -> list[FieldError]:
        """Validate historical rankings request parameters."""
        errors = []

        for name in ("top_n", "max_workers", "rate_limit_per_minute"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                    errors.append(FieldError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        if "sort_by" in params:
            value = params["sort_by"]
            if not isinstance(value, str) or not value.strip():
                errors.append(FieldError(
                    field="sort_by",
                    message="Must be a non-empty string",
                    value=value
                ))

        if "sort_order" in params:
            value = params["sort_order"]
            if value not in ("asc", "desc"):
                errors.append(FieldError(
                    field="sort_order",
                    message="Must be 'asc' or 'desc'",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[FieldError]:
        """Validate complete configuration."""
        errors = []

        if "trade" in config:
            errors.extend(ConfigValidator.validate_trade_params(config["trade"]))

        if "service" in config:
            errors.extend(ConfigValidator.validate_service_params(config["service"]))

        if "batch" in config:
            errors.extend(ConfigValidator.validate_batch_params(config["batch"]))

        if "suggestion" in config:
            errors.extend(ConfigValidator.validate_suggestion_params(config["suggestion"]))

        if "ranking" in config:
            errors.extend(ConfigValidator.validate_ranking_params(config["ranking"]))

        return errors
