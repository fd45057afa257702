"""
Candidate data model for screened instruments.

A candidate is one row of a ranking or screener response: a ticker with its
current price, the overall signal and score computed by the remote service,
and any indicator fields the service chose to include.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Signal(str, Enum):
    """Overall technical signal of a candidate."""
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"

    @classmethod
    def parse(cls, value: Any) -> "Signal":
        """Parse a remote signal label; anything unrecognized is neutral."""
        if isinstance(value, Signal):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.NEUTRAL


# Ranking row keys mapped onto Candidate attributes
_CORE_KEYS = ("ticker", "current_price", "overall_signal", "overall_score", "adr_percentage")


@dataclass(frozen=True)
class Candidate:
    """Screened instrument considered for a batch operation."""
    ticker: str
    current_price: float
    signal: Signal = Signal.NEUTRAL
    score: float = 0.0
    adr_percentage: Optional[float] = None       # Average daily range, in percent
    indicators: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Candidate":
        """
        Build a candidate from a ranking row of the remote service.

        Args:
            payload: Row with at least ``ticker`` and ``current_price``

        Returns:
            Parsed candidate; non-core fields are kept in ``indicators``

        Raises:
            ValueError: If ticker or price is missing or not numeric
        """
        ticker = payload.get("ticker")
        if not ticker:
            raise ValueError("ranking row has no ticker")

        price = payload.get("current_price")
        if price is None:
            raise ValueError(f"ranking row for {ticker} has no current_price")

        adr = payload.get("adr_percentage")
        return cls(
            ticker=str(ticker).upper(),
            current_price=float(price),
            signal=Signal.parse(payload.get("overall_signal")),
            score=float(payload.get("overall_score") or 0.0),
            adr_percentage=float(adr) if adr is not None else None,
            indicators={k: v for k, v in payload.items() if k not in _CORE_KEYS},
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize back into a ranking row."""
        return {
            **self.indicators,
            "ticker": self.ticker,
            "current_price": self.current_price,
            "overall_signal": self.signal.value,
            "overall_score": self.score,
            "adr_percentage": self.adr_percentage,
        }
