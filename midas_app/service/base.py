"""Base classes for the external collaborators of the batch orchestrator."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Optional

import structlog

from midas_app.models.candidate import Candidate
from midas_app.models.trade import SimulateRequest, SimulationResult


class SimulationService(ABC):
    """Remote engine that walks a price path and decides a trade's exit."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.logger = structlog.get_logger(f"midas.service.{name}")
        self._call_count = 0
        self._error_count = 0

    @abstractmethod
    def simulate(self, request: SimulateRequest) -> SimulationResult:
        """
        Simulate one trade.

        Safe to retry: the same request always describes the same trade.

        Raises:
            SimulationError: If the simulation could not be completed
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the service is reachable."""
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get call statistics."""
        return {
            "name": self.name,
            "call_count": self._call_count,
            "error_count": self._error_count,
            "success_rate": (
                (self._call_count - self._error_count) / self._call_count
                if self._call_count > 0 else 0.0
            )
        }

    def reset_stats(self):
        """Reset call statistics."""
        self._call_count = 0
        self._error_count = 0


class CandidateSource(ABC):
    """Supplier of the candidate pool a selection is drawn from."""

    # Session the source filed the last fetched pool under, if it keeps sessions
    last_session_id: Optional[str] = None

    @abstractmethod
    def list_candidates(self, filter_criteria: Optional[dict[str, Any]] = None) -> list[Candidate]:
        """
        Fetch candidates matching opaque filter criteria.

        Args:
            filter_criteria: Pass-through screening parameters (sector, price
                range, performance windows, indicator thresholds, ...)

        Raises:
            SourceError: If the pool could not be fetched
        """
        pass


class InMemoryCandidateSource(CandidateSource):
    """Candidate source over a fixed pool, e.g. a saved ranking file."""

    def __init__(self, candidates: Sequence[Candidate]) -> None:
        self._candidates = list(candidates)

    def list_candidates(self, filter_criteria: Optional[dict[str, Any]] = None) -> list[Candidate]:
        top_n = (filter_criteria or {}).get("top_n")
        if top_n is None:
            return list(self._candidates)
        return self._candidates[:int(top_n)]
