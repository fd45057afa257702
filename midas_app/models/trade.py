"""
Trade parameter, simulation and batch data models.

This module defines the immutable structures that flow through a batch
simulation: the caller's trade template, the per-candidate resolved
parameters, the request and result of one remote simulation, the batch run
accumulator and the summary statistics derived from it.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Optional

from midas_app.utils.dates import parse_date, parse_optional_date, to_iso


class PriceMode(str, Enum):
    """How a stop-loss or take-profit level is specified."""
    PERCENT = "percent"
    ABSOLUTE = "absolute"


class ExitReason(str, Enum):
    """Condition that closed a simulated trade."""
    TAKE_PROFIT = "TAKE_PROFIT"
    STOP_LOSS = "STOP_LOSS"
    MAX_HOLD_DAYS = "MAX_HOLD_DAYS"
    OPEN = "OPEN"


@dataclass(frozen=True)
class PriceLevel:
    """
    Stop-loss or take-profit specification.

    ``mode`` selects which of ``percent``/``absolute`` is authoritative. Both
    may be populated; the non-authoritative one is kept consistent with the
    authoritative one relative to an anchor price by the parameter resolver.
    """
    mode: PriceMode
    percent: Optional[float] = None      # Distance from anchor, in percent
    absolute: Optional[float] = None     # Price level

    @classmethod
    def from_percent(cls, percent: float) -> "PriceLevel":
        return cls(mode=PriceMode.PERCENT, percent=percent)

    @classmethod
    def from_absolute(cls, absolute: float) -> "PriceLevel":
        return cls(mode=PriceMode.ABSOLUTE, absolute=absolute)


@dataclass(frozen=True)
class TradeParameterTemplate:
    """Caller-supplied trade parameters shared by every item of a batch."""
    quantity: float
    max_hold_days: int
    stop_loss: PriceLevel
    take_profit: PriceLevel


@dataclass(frozen=True)
class ResolvedTradeParameters:
    """Concrete trade parameters for one candidate, prices always absolute."""
    ticker: str
    quantity: float
    stop_loss_price: float
    take_profit_price: float
    max_hold_days: int


@dataclass(frozen=True)
class SimulateRequest:
    """Request for one remote trade simulation."""
    ticker: str
    entry_date: date
    entry_price: float
    quantity: float
    stop_loss_price: float
    take_profit_price: float
    max_hold_days: int
    session_id: Optional[str] = None     # Backtest session the trade is recorded in

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the remote service's field names."""
        payload = {
            "ticker": self.ticker,
            "entry_date": to_iso(self.entry_date),
            "entry_price": self.entry_price,
            "quantity": self.quantity,
            "stop_loss": self.stop_loss_price,
            "take_profit": self.take_profit_price,
            "max_hold_days": self.max_hold_days,
        }
        if self.session_id:
            payload["session_id"] = self.session_id
        return payload


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one completed remote trade simulation."""
    ticker: str
    entry_date: date
    entry_price: float
    quantity: float
    total_cost: float
    profit_loss: float
    profit_loss_pct: float
    hold_days: float
    exit_date: Optional[date] = None
    exit_price: Optional[float] = None
    exit_reason: Optional[ExitReason] = None
    total_proceeds: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any], ticker: Optional[str] = None) -> "SimulationResult":
        """
        Parse a simulation response of the remote service.

        Args:
            payload: Response body
            ticker: Ticker to tag the result with; falls back to the payload's

        Raises:
            ValueError: If required fields are missing or malformed
        """
        tagged = ticker or payload.get("ticker")
        if not tagged:
            raise ValueError("simulation result has no ticker")

        try:
            reason = payload.get("exit_reason")
            return cls(
                ticker=str(tagged),
                entry_date=parse_date(payload["entry_date"]),
                entry_price=float(payload["entry_price"]),
                quantity=float(payload["quantity"]),
                total_cost=float(payload["total_cost"]),
                profit_loss=float(payload["profit_loss"]),
                profit_loss_pct=float(payload["profit_loss_pct"]),
                hold_days=float(payload.get("hold_days") or 0),
                exit_date=parse_optional_date(payload.get("exit_date")),
                exit_price=_optional_float(payload.get("exit_price")),
                exit_reason=ExitReason(reason) if reason else None,
                total_proceeds=_optional_float(payload.get("total_proceeds")),
            )
        except KeyError as e:
            raise ValueError(f"simulation result missing field {e}") from e
        except TypeError as e:
            raise ValueError(f"simulation result malformed: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "entry_date": to_iso(self.entry_date),
            "entry_price": self.entry_price,
            "exit_date": to_iso(self.exit_date),
            "exit_price": self.exit_price,
            "exit_reason": self.exit_reason.value if self.exit_reason else None,
            "quantity": self.quantity,
            "total_cost": self.total_cost,
            "total_proceeds": self.total_proceeds,
            "profit_loss": self.profit_loss,
            "profit_loss_pct": self.profit_loss_pct,
            "hold_days": self.hold_days,
        }


@dataclass(frozen=True)
class BatchRun:
    """
    Accumulated outcome of one batch run.

    Runs are grown one item at a time through ``with_success`` and
    ``with_failure``, each returning a new run, so every processed item is
    counted exactly once.
    """
    results: tuple[SimulationResult, ...] = ()
    success_count: int = 0
    failure_count: int = 0
    cancelled: bool = False

    @property
    def processed(self) -> int:
        return self.success_count + self.failure_count

    def with_success(self, result: SimulationResult) -> "BatchRun":
        return replace(
            self,
            results=self.results + (result,),
            success_count=self.success_count + 1,
        )

    def with_failure(self) -> "BatchRun":
        return replace(self, failure_count=self.failure_count + 1)

    def mark_cancelled(self) -> "BatchRun":
        return replace(self, cancelled=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "cancelled": self.cancelled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatchRun":
        results = tuple(SimulationResult.from_payload(r) for r in data.get("results", []))
        return cls(
            results=results,
            success_count=int(data.get("success_count", len(results))),
            failure_count=int(data.get("failure_count", 0)),
            cancelled=bool(data.get("cancelled", False)),
        )


@dataclass(frozen=True)
class SummaryStats:
    """Summary metrics over the succeeded results of a batch."""
    total_profit: float = 0.0
    total_loss: float = 0.0                      # Sum of losing P&L, <= 0
    net_pl: float = 0.0
    win_count: int = 0
    loss_count: int = 0
    win_rate_pct: float = 0.0
    avg_hold_days: float = 0.0
    avg_profit_per_winner: float = 0.0
    avg_loss_per_loser: float = 0.0              # Magnitude, >= 0
    avg_pl_pct: float = 0.0
    exit_reason_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_profit": self.total_profit,
            "total_loss": self.total_loss,
            "net_pl": self.net_pl,
            "win_count": self.win_count,
            "loss_count": self.loss_count,
            "win_rate_pct": self.win_rate_pct,
            "avg_hold_days": self.avg_hold_days,
            "avg_profit_per_winner": self.avg_profit_per_winner,
            "avg_loss_per_loser": self.avg_loss_per_loser,
            "avg_pl_pct": self.avg_pl_pct,
            "exit_reason_counts": dict(self.exit_reason_counts),
        }


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None
