"""
Trade parameter resolution.

Turns a trade template into concrete stop-loss and take-profit prices for a
given anchor price, keeps the percentage and absolute representations of a
level consistent while a single trade is being edited, and suggests
ADR-scaled defaults to pre-populate the inputs.

Conversions are plain functions of (mode, source value, anchor price): an
edit event calls ``sync_level`` once instead of letting the two fields update
each other.
"""

import math
from dataclasses import replace
from typing import Any, Optional

import structlog

from midas_app.config.defaults import SuggestionParams, TradeDefaults
from midas_app.errors import ValidationError
from midas_app.models.candidate import Candidate
from midas_app.models.trade import (
    PriceLevel,
    PriceMode,
    ResolvedTradeParameters,
    TradeParameterTemplate,
)

logger = structlog.get_logger(__name__)

STOP_LOSS = "stop_loss"
TAKE_PROFIT = "take_profit"


def _parse_number(value: Any, field: str) -> float:
    """Parse a numeric input, rejecting blanks, non-numbers and non-finite values."""
    if value is None or isinstance(value, bool):
        raise ValidationError("Value is required", field=field, value=value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Value is not a number", field=field, value=value)
    if not math.isfinite(number):
        raise ValidationError("Value must be finite", field=field, value=value)
    return number


def _require_positive(value: Any, field: str) -> float:
    number = _parse_number(value, field)
    if number <= 0:
        raise ValidationError("Must be greater than zero", field=field, value=value)
    return number


def _parse_mode(level: PriceLevel, side: str) -> PriceMode:
    """Price mode of a level; unknown or missing modes name the level's mode field."""
    try:
        return PriceMode(level.mode)
    except (TypeError, ValueError):
        raise ValidationError(
            "Must be 'percent' or 'absolute'", field=f"{side}.mode", value=level.mode
        )


# -- percent <-> absolute conversion ----------------------------------------

def stop_loss_price(anchor_price: float, percent: float) -> float:
    """Stop-loss price ``percent`` below the anchor."""
    return anchor_price * (1 - percent / 100)


def take_profit_price(anchor_price: float, percent: float) -> float:
    """Take-profit price ``percent`` above the anchor."""
    return anchor_price * (1 + percent / 100)


def stop_loss_percent(anchor_price: float, price: float) -> float:
    """Distance of a stop-loss price below the anchor, in percent."""
    return (anchor_price - price) / anchor_price * 100


def take_profit_percent(anchor_price: float, price: float) -> float:
    """Distance of a take-profit price above the anchor, in percent."""
    return (price - anchor_price) / anchor_price * 100


_TO_PRICE = {STOP_LOSS: stop_loss_price, TAKE_PROFIT: take_profit_price}
_TO_PERCENT = {STOP_LOSS: stop_loss_percent, TAKE_PROFIT: take_profit_percent}


def level_price(level: PriceLevel, anchor_price: float, side: str) -> float:
    """
    Absolute price of a level for the given anchor.

    Args:
        level: Stop-loss or take-profit specification
        anchor_price: Entry or reference price
        side: ``"stop_loss"`` or ``"take_profit"``

    Raises:
        ValidationError: If the authoritative value is missing or not a number
    """
    if _parse_mode(level, side) is PriceMode.PERCENT:
        percent = _parse_number(level.percent, f"{side}.percent")
        return _TO_PRICE[side](anchor_price, percent)
    return _parse_number(level.absolute, f"{side}.absolute")


def sync_level(level: PriceLevel, anchor_price: float, side: str) -> PriceLevel:
    """
    Recompute the non-authoritative value of a level.

    In PERCENT mode the absolute price is derived from the percentage; in
    ABSOLUTE mode the percentage is derived from the price. The authoritative
    value is returned unchanged, so syncing an already synced level is a
    no-op.
    """
    anchor = _require_positive(anchor_price, "anchor_price")

    if _parse_mode(level, side) is PriceMode.PERCENT:
        percent = _parse_number(level.percent, f"{side}.percent")
        return replace(level, percent=percent, absolute=_TO_PRICE[side](anchor, percent))

    absolute = _parse_number(level.absolute, f"{side}.absolute")
    return replace(level, absolute=absolute, percent=_TO_PERCENT[side](anchor, absolute))


def sync_template(template: TradeParameterTemplate, anchor_price: float) -> TradeParameterTemplate:
    """Sync both price levels of a template against an anchor price."""
    return replace(
        template,
        stop_loss=sync_level(template.stop_loss, anchor_price, STOP_LOSS),
        take_profit=sync_level(template.take_profit, anchor_price, TAKE_PROFIT),
    )


# -- validation and resolution ---------------------------------------------

def validate_template(template: TradeParameterTemplate) -> None:
    """
    Validate the anchor-independent fields of a template.

    Raises:
        ValidationError: Naming the first field that failed
    """
    _require_positive(template.quantity, "quantity")

    hold_days = _require_positive(template.max_hold_days, "max_hold_days")
    if not hold_days.is_integer():
        raise ValidationError(
            "Must be a whole number of days", field="max_hold_days", value=template.max_hold_days
        )

    if _parse_mode(template.stop_loss, STOP_LOSS) is PriceMode.PERCENT:
        percent = _require_positive(template.stop_loss.percent, "stop_loss.percent")
        if percent > 100:
            raise ValidationError(
                "Must not exceed 100", field="stop_loss.percent", value=template.stop_loss.percent
            )
    else:
        _require_positive(template.stop_loss.absolute, "stop_loss.absolute")

    if _parse_mode(template.take_profit, TAKE_PROFIT) is PriceMode.PERCENT:
        _require_positive(template.take_profit.percent, "take_profit.percent")
    else:
        _require_positive(template.take_profit.absolute, "take_profit.absolute")


def resolve_parameters(
    template: TradeParameterTemplate,
    anchor_price: float,
    ticker: str = "",
) -> ResolvedTradeParameters:
    """
    Resolve a template into concrete trade parameters for one candidate.

    Args:
        template: Trade template
        anchor_price: Candidate's current price, or an explicitly entered price
        ticker: Ticker the parameters are resolved for

    Returns:
        Resolved parameters with absolute, positive prices

    Raises:
        ValidationError: If a template field or a resolved price is invalid
    """
    validate_template(template)
    anchor = _require_positive(anchor_price, "anchor_price")

    stop = level_price(template.stop_loss, anchor, STOP_LOSS)
    take = level_price(template.take_profit, anchor, TAKE_PROFIT)

    if not math.isfinite(stop) or stop <= 0:
        raise ValidationError("Resolved stop-loss price must be positive", field="stop_loss_price", value=stop)
    if not math.isfinite(take) or take <= 0:
        raise ValidationError("Resolved take-profit price must be positive", field="take_profit_price", value=take)

    return ResolvedTradeParameters(
        ticker=ticker,
        quantity=float(template.quantity),
        stop_loss_price=stop,
        take_profit_price=take,
        max_hold_days=int(float(template.max_hold_days)),
    )


# -- suggested defaults ----------------------------------------------------

def suggest_distances(
    adr_percentage: Optional[float],
    params: Optional[SuggestionParams] = None,
    defaults: Optional[TradeDefaults] = None,
) -> tuple[float, float]:
    """
    Suggested stop-loss and take-profit distances in percent.

    Stop distance is ``min(2 x ADR, 5%)`` and target distance is
    ``max(3 x ADR, 10%)`` with the default constants. Without an ADR the
    template defaults are used.
    """
    params = params or SuggestionParams()
    defaults = defaults or TradeDefaults()

    if adr_percentage is None or not math.isfinite(adr_percentage):
        return defaults.stop_loss_pct, defaults.take_profit_pct

    stop_pct = min(adr_percentage * params.stop_loss_adr_mult, params.stop_loss_cap_pct)
    take_pct = max(adr_percentage * params.take_profit_adr_mult, params.take_profit_floor_pct)
    return stop_pct, take_pct


def suggest_template(
    candidate: Candidate,
    params: Optional[SuggestionParams] = None,
    defaults: Optional[TradeDefaults] = None,
    anchor_price: Optional[float] = None,
) -> TradeParameterTemplate:
    """
    Pre-populated single-trade template for a candidate.

    Prices are rounded to cents and the template is in absolute mode, as the
    user edits prices directly; percentages are kept in sync for display.
    The suggestion is a convenience default and never overrides user input.
    """
    defaults = defaults or TradeDefaults()
    anchor = anchor_price if anchor_price is not None else candidate.current_price
    stop_pct, take_pct = suggest_distances(candidate.adr_percentage, params, defaults)

    template = TradeParameterTemplate(
        quantity=defaults.quantity,
        max_hold_days=defaults.max_hold_days,
        stop_loss=PriceLevel.from_absolute(round(stop_loss_price(anchor, stop_pct), 2)),
        take_profit=PriceLevel.from_absolute(round(take_profit_price(anchor, take_pct), 2)),
    )

    logger.debug(
        "Suggested trade template",
        ticker=candidate.ticker,
        adr_percentage=candidate.adr_percentage,
        stop_loss_pct=stop_pct,
        take_profit_pct=take_pct
    )
    return sync_template(template, anchor)
