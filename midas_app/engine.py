"""
Main batch simulation engine coordinator.

Orchestrates the batch backtest pipeline, coordinating candidate retrieval,
selection, parameter resolution, remote simulation, statistics and session
persistence.
"""

import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from .batch.orchestrator import BatchOrchestrator, ProgressFn
from .config.defaults import SuggestionParams, TradeDefaults
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .errors import (
    EmptySelectionError,
    SimulationError,
    SourceError,
    ValidationError,
)
from .metrics.statistics import format_completion, summarize
from .models.candidate import Candidate
from .models.trade import (
    BatchRun,
    SimulateRequest,
    SimulationResult,
    SummaryStats,
    TradeParameterTemplate,
)
from .params.resolver import resolve_parameters, suggest_template
from .persistence.session_store import SessionStore
from .selection.resolver import ScoreRange, SelectionMode, select_for_batch
from .service.base import CandidateSource, SimulationService
from .utils.dates import next_entry_date, parse_date

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BatchReport:
    """Outcome of one batch backtest as reported to the caller."""
    run: BatchRun
    stats: SummaryStats
    entry_date: date
    message: str
    session_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "entry_date": self.entry_date.isoformat(),
            "session_id": self.session_id,
            "success_count": self.run.success_count,
            "failure_count": self.run.failure_count,
            "cancelled": self.run.cancelled,
            "stats": self.stats.to_dict(),
            "results": [r.to_dict() for r in self.run.results],
        }


class BatchSimulationEngine:
    """
    Main coordinator for batch trade backtests.

    Manages the backtest pipeline:
    Ranking → Selection → Parameters → Simulation → Statistics → Session
    """

    def __init__(
        self,
        simulator: SimulationService,
        source: Optional[CandidateSource] = None,
        session_store: Optional[SessionStore] = None,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize the engine with its collaborators and merged configuration."""
        self.logger = logger

        self.simulator = simulator
        self.source = source
        self.session_store = session_store

        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        self.config = self.config_loader.merge_config(overrides)

        config_errors = ConfigValidator.validate_config(self.config)
        if config_errors:
            first = config_errors[0]
            self.logger.error(
                "Configuration validation failed",
                errors=[f"{err.field}: {err.message} (got: {err.value})" for err in config_errors]
            )
            raise ValidationError(first.message, field=first.field, value=first.value)

        self.orchestrator = BatchOrchestrator(max_workers=self.config["batch"]["max_workers"])

        # Session of the most recently fetched candidate pool
        self.session_id: Optional[str] = None

        self.logger.info("Batch simulation engine initialized")

    def default_template(self) -> TradeParameterTemplate:
        """Trade template built from the configured trade defaults."""
        return self.config_loader.build_template(self.config)

    def entry_date_for(self, reference_date: Union[date, str]) -> date:
        """Entry date of trades simulated from a ranking snapshot."""
        return next_entry_date(reference_date, self.config["batch"]["entry_offset_days"])

    def fetch_candidates(
        self,
        reference_date: Union[date, str],
        filters: Optional[dict[str, Any]] = None,
        refresh: bool = False,
    ) -> list[Candidate]:
        """
        Fetch the candidate pool ranked as of a reference date.

        With a session store, a pool already saved for the reference date is
        reused instead of asking the source again, and a freshly fetched pool
        is saved. Either way the pool's session becomes the engine's current
        session, which later simulations are recorded in.

        Args:
            reference_date: Ranking date
            filters: Opaque screening filters passed through to the source
            refresh: Ignore a saved pool and fetch from the source

        Raises:
            SourceError: If no source is configured or the fetch fails
        """
        if self.session_store is not None and not refresh:
            cached = self._cached_candidates(reference_date)
            if cached is not None:
                return cached

        if self.source is None:
            raise SourceError("No candidate source configured")

        ranking = self.config["ranking"]
        criteria = {
            "reference_date": parse_date(reference_date).isoformat(),
            "top_n": ranking["top_n"],
            "sort_by": ranking["sort_by"],
            "sort_order": ranking["sort_order"],
            "max_workers": ranking["max_workers"],
            "rate_limit_per_minute": ranking["rate_limit_per_minute"],
        }
        if filters:
            criteria.update(filters)

        try:
            candidates = self.source.list_candidates(criteria)
        except SourceError as e:
            self.logger.error(
                "Candidate fetch failed",
                reference_date=criteria["reference_date"],
                error=str(e)
            )
            raise

        # A session filed by the source is mirrored locally under the same id
        self.session_id = self.source.last_session_id
        if self.session_store is not None:
            self.session_id = self.session_store.save_rankings(
                candidates, reference_date, self.session_id
            )
        return candidates

    def _cached_candidates(self, reference_date: Union[date, str]) -> Optional[list[Candidate]]:
        """Candidate pool saved for a reference date, if any."""
        summary = self.session_store.find_by_date(reference_date)
        if summary is None or summary.num_rankings == 0:
            return None

        candidates = self.session_store.load_rankings(summary.session_id)
        if candidates is None:
            return None

        self.session_id = summary.session_id
        self.logger.info(
            "Loaded cached candidate pool",
            session_id=summary.session_id,
            reference_date=summary.reference_date.isoformat(),
            count=len(candidates),
            updated_at=summary.updated_at
        )
        return candidates

    def run_batch(
        self,
        candidates: Sequence[Candidate],
        reference_date: Union[date, str],
        mode: SelectionMode = SelectionMode.ALL,
        template: Optional[TradeParameterTemplate] = None,
        manual_set: Optional[Iterable[str]] = None,
        score_range: Optional[ScoreRange] = None,
        on_progress: Optional[ProgressFn] = None,
        cancel_event: Optional[threading.Event] = None,
        session_id: Optional[str] = None,
    ) -> BatchReport:
        """
        Select candidates and simulate a trade for each.

        Args:
            candidates: Candidate pool, in display order
            reference_date: Ranking date; trades enter on the following day
            mode: Selection rule
            template: Trade template; configured defaults if None
            manual_set: Tickers picked by hand (MANUAL mode)
            score_range: Score bounds (SCORE_RANGE mode)
            on_progress: Called with the run so far after each success
            cancel_event: When set, the batch stops before the next item
            session_id: Session to record the batch in; the current session if None

        Returns:
            Batch report with run, statistics and completion message

        Raises:
            EmptySelectionError: If the selection matches no candidate
            ValidationError: If the template is invalid
        """
        template = template or self.default_template()
        session_id = session_id or self.session_id

        try:
            subset = select_for_batch(candidates, mode, manual_set, score_range)
        except EmptySelectionError as e:
            self.logger.warning("Batch rejected - empty selection", mode=e.mode)
            raise

        entry_date = self.entry_date_for(reference_date)

        try:
            run = self.orchestrator.run(
                subset,
                template,
                entry_date,
                self.simulator.simulate,
                on_progress=on_progress,
                cancel_event=cancel_event,
                session_id=session_id,
            )
        except ValidationError as e:
            self.logger.error(
                "Batch rejected - invalid trade template",
                field=e.field,
                value=e.value,
                error=str(e)
            )
            raise

        stats = summarize(run.results)
        message = format_completion(run)

        saved_id = session_id
        if self.session_store is not None:
            saved_id = self.session_store.save(run, reference_date, session_id)
            self.session_id = saved_id

        self.logger.info(
            "Batch backtest finished",
            result=message,
            net_pl=stats.net_pl,
            win_rate_pct=stats.win_rate_pct,
            session_id=saved_id
        )

        return BatchReport(
            run=run,
            stats=stats,
            entry_date=entry_date,
            message=message,
            session_id=saved_id,
        )

    def simulate_single(
        self,
        candidate: Candidate,
        reference_date: Union[date, str],
        template: Optional[TradeParameterTemplate] = None,
        anchor_price: Optional[float] = None,
    ) -> SimulationResult:
        """
        Simulate one trade for a candidate.

        Args:
            candidate: Instrument to trade
            reference_date: Ranking date; the trade enters on the following day
            template: Trade template; an ADR-based suggestion if None
            anchor_price: Explicit entry price; the candidate's price if None

        Raises:
            ValidationError: If the template does not resolve
            SimulationError: If the remote simulation fails
        """
        anchor = anchor_price if anchor_price is not None else candidate.current_price
        template = template or self.suggest(candidate, anchor)
        params = resolve_parameters(template, anchor, candidate.ticker)

        request = SimulateRequest(
            ticker=candidate.ticker,
            entry_date=self.entry_date_for(reference_date),
            entry_price=anchor,
            quantity=params.quantity,
            stop_loss_price=params.stop_loss_price,
            take_profit_price=params.take_profit_price,
            max_hold_days=params.max_hold_days,
            session_id=self.session_id,
        )

        try:
            return self.simulator.simulate(request)
        except SimulationError as e:
            self.logger.error("Single trade simulation failed", ticker=candidate.ticker, error=str(e))
            raise

    def suggest(self, candidate: Candidate, anchor_price: Optional[float] = None) -> TradeParameterTemplate:
        """ADR-based single-trade template suggestion for a candidate."""
        return suggest_template(
            candidate,
            params=self.config_loader.build_params(SuggestionParams, self.config["suggestion"]),
            defaults=self.config_loader.build_params(TradeDefaults, self.config["trade"]),
            anchor_price=anchor_price,
        )

