"""Pytest configuration and shared fixtures."""

import pytest
from datetime import date
from typing import Dict, Any, List, Optional

from midas_app.errors import SimulationError
from midas_app.models.candidate import Candidate, Signal
from midas_app.models.trade import (
    PriceLevel,
    SimulateRequest,
    SimulationResult,
    TradeParameterTemplate,
)
from midas_app.service.base import SimulationService


class FakeSimulator(SimulationService):
    """In-process simulator returning canned P&L and failing on chosen tickers."""

    def __init__(self, profit_by_ticker: Optional[Dict[str, float]] = None,
                 failing: Optional[set] = None):
        super().__init__("fake")
        self.profit_by_ticker = profit_by_ticker or {}
        self.failing = failing or set()
        self.requests: List[SimulateRequest] = []

    def simulate(self, request: SimulateRequest) -> SimulationResult:
        self._call_count += 1
        self.requests.append(request)
        if request.ticker in self.failing:
            self._error_count += 1
            raise SimulationError("remote validation failed", ticker=request.ticker, status_code=422)

        profit = self.profit_by_ticker.get(request.ticker, 10.0)
        cost = request.entry_price * request.quantity
        return SimulationResult(
            ticker=request.ticker,
            entry_date=request.entry_date,
            entry_price=request.entry_price,
            quantity=request.quantity,
            total_cost=cost,
            profit_loss=profit,
            profit_loss_pct=profit / cost * 100,
            hold_days=5,
            exit_date=date(2024, 3, 8),
            exit_price=request.entry_price + profit / request.quantity,
            exit_reason=None,
            total_proceeds=cost + profit,
        )

    def health_check(self) -> bool:
        return True


@pytest.fixture
def sample_ranking_rows() -> List[Dict[str, Any]]:
    """Historical ranking rows as returned by the backtest service."""
    return [
        {
            "ticker": "AAA",
            "current_price": 100.0,
            "overall_signal": "BULLISH",
            "overall_score": 2.0,
            "adr_percentage": 4.0,
            "rsi": 61.2,
            "performance_1m": 18.5,
        },
        {
            "ticker": "BBB",
            "current_price": 50.0,
            "overall_signal": "BEARISH",
            "overall_score": -1.0,
            "adr_percentage": 1.5,
            "rsi": 38.0,
            "performance_1m": -4.1,
        },
        {
            "ticker": "CCC",
            "current_price": 20.0,
            "overall_signal": "NEUTRAL",
            "overall_score": 0.5,
            "adr_percentage": 6.0,
            "rsi": 50.0,
            "performance_1m": 2.0,
        },
    ]


@pytest.fixture
def sample_candidates(sample_ranking_rows) -> List[Candidate]:
    """Candidates parsed from the sample ranking rows."""
    return [Candidate.from_payload(row) for row in sample_ranking_rows]


@pytest.fixture
def pipeline_candidates() -> List[Candidate]:
    """Two-candidate pool used by the full pipeline scenario."""
    return [
        Candidate(ticker="AAA", current_price=100.0, signal=Signal.BULLISH, score=2.0),
        Candidate(ticker="BBB", current_price=50.0, signal=Signal.BEARISH, score=-1.0),
    ]


@pytest.fixture
def percent_template() -> TradeParameterTemplate:
    """10 shares, 5% stop, 10% target, 30 day hold."""
    return TradeParameterTemplate(
        quantity=10,
        max_hold_days=30,
        stop_loss=PriceLevel.from_percent(5),
        take_profit=PriceLevel.from_percent(10),
    )


@pytest.fixture
def sample_simulation_payload() -> Dict[str, Any]:
    """Simulation response body of the backtest service."""
    return {
        "entry_date": "2024-03-01",
        "entry_price": 100.0,
        "exit_date": "2024-03-08T00:00:00",
        "exit_price": 110.0,
        "exit_reason": "TAKE_PROFIT",
        "quantity": 10,
        "total_cost": 1000.0,
        "total_proceeds": 1100.0,
        "profit_loss": 100.0,
        "profit_loss_pct": 10.0,
        "hold_days": 7,
        "price_history": [],
    }


@pytest.fixture
def fake_simulator() -> FakeSimulator:
    """Simulator that succeeds for every ticker."""
    return FakeSimulator()


@pytest.fixture
def make_simulator():
    """Factory for simulators with canned profits and failing tickers."""
    def _make(profit_by_ticker=None, failing=None) -> FakeSimulator:
        return FakeSimulator(profit_by_ticker=profit_by_ticker, failing=failing)
    return _make
