"""
Batch trade-simulation orchestrator.

Drives the remote trade simulator across a resolved candidate subset. Items
are simulated in subset order and folded into a ``BatchRun``; a failed item
is counted and logged and never aborts the batch. A cancellation event is
checked before each item is dispatched, and a cancelled run keeps whatever
it had accumulated.

With ``max_workers > 1`` up to that many simulations are in flight at once,
but outcomes are still folded, and progress still reported, in subset order.
"""

import threading
from collections import deque
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from datetime import date
from functools import reduce
from typing import Optional, Union

import structlog

from midas_app.errors import SimulationError, ValidationError
from midas_app.logging.config import get_batch_logger, log_item_outcome
from midas_app.models.candidate import Candidate
from midas_app.models.trade import (
    BatchRun,
    SimulateRequest,
    SimulationResult,
    TradeParameterTemplate,
)
from midas_app.params.resolver import resolve_parameters, validate_template
from midas_app.utils.dates import parse_date

logger = structlog.get_logger(__name__)
batch_logger = get_batch_logger(__name__)

SimulateFn = Callable[[SimulateRequest], SimulationResult]
ProgressFn = Callable[[BatchRun], None]
Outcome = Union[SimulationResult, SimulationError]


class BatchOrchestrator:
    """
    Runs one remote simulation per selected candidate.

    The orchestrator owns the run it builds until ``run`` returns it; there
    is no state shared between runs.
    """

    def __init__(self, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self.logger = logger
        self.batch_logger = batch_logger

    def build_requests(
        self,
        subset: Sequence[Candidate],
        template: TradeParameterTemplate,
        entry_date: date,
        session_id: Optional[str] = None,
    ) -> list[SimulateRequest]:
        """
        Resolve trade parameters for every candidate of the subset.

        Raises:
            ValidationError: If the subset is empty or any parameter is invalid
        """
        if not subset:
            raise ValidationError("Batch subset is empty", field="subset", value=[])

        validate_template(template)
        entry = parse_date(entry_date)

        requests = []
        for candidate in subset:
            try:
                params = resolve_parameters(template, candidate.current_price, candidate.ticker)
            except ValidationError as e:
                e.context.setdefault("ticker", candidate.ticker)
                raise
            requests.append(SimulateRequest(
                ticker=candidate.ticker,
                entry_date=entry,
                entry_price=candidate.current_price,
                quantity=params.quantity,
                stop_loss_price=params.stop_loss_price,
                take_profit_price=params.take_profit_price,
                max_hold_days=params.max_hold_days,
                session_id=session_id,
            ))
        return requests

    def run(
        self,
        subset: Sequence[Candidate],
        template: TradeParameterTemplate,
        entry_date: date,
        simulate: SimulateFn,
        on_progress: Optional[ProgressFn] = None,
        cancel_event: Optional[threading.Event] = None,
        session_id: Optional[str] = None,
    ) -> BatchRun:
        """
        Simulate a trade for each candidate of the subset.

        Args:
            subset: Selected candidates, in the order results should appear
            template: Trade template shared by every item
            entry_date: Entry date of every simulated trade
            simulate: Remote simulation call for one request
            on_progress: Called with the run so far after each success
            cancel_event: When set, no further items are dispatched
            session_id: Backtest session every request is recorded in

        Returns:
            The batch run; ``success_count + failure_count`` equals the subset
            size unless the run was cancelled

        Raises:
            ValidationError: Before any remote call, if the subset is empty or
                the template does not resolve
        """
        requests = self.build_requests(subset, template, entry_date, session_id)

        self.logger.info(
            "Starting batch simulation",
            items=len(requests),
            entry_date=requests[0].entry_date.isoformat(),
            max_workers=self.max_workers
        )

        def step(run: BatchRun, item: tuple[int, SimulateRequest, Outcome]) -> BatchRun:
            index, request, outcome = item
            if isinstance(outcome, SimulationError):
                log_item_outcome(self.batch_logger, request.ticker, index, False, reason=str(outcome))
                return run.with_failure()

            run = run.with_success(outcome)
            log_item_outcome(
                self.batch_logger, request.ticker, index, True,
                reason=outcome.exit_reason.value if outcome.exit_reason else None,
                context={"profit_loss": outcome.profit_loss}
            )
            if on_progress is not None:
                on_progress(run)
            return run

        if self.max_workers == 1:
            outcomes = self._sequential_outcomes(requests, simulate, cancel_event)
        else:
            outcomes = self._pooled_outcomes(requests, simulate, cancel_event)

        run = reduce(step, outcomes, BatchRun())

        if run.processed < len(requests):
            run = run.mark_cancelled()
            self.logger.warning(
                "Batch simulation cancelled",
                processed=run.processed,
                remaining=len(requests) - run.processed
            )

        self.logger.info(
            "Batch simulation complete",
            succeeded=run.success_count,
            failed=run.failure_count,
            cancelled=run.cancelled
        )
        return run

    def _sequential_outcomes(
        self,
        requests: list[SimulateRequest],
        simulate: SimulateFn,
        cancel_event: Optional[threading.Event],
    ) -> Iterator[tuple[int, SimulateRequest, Outcome]]:
        """One call in flight at a time, in subset order."""
        for index, request in enumerate(requests):
            if _cancelled(cancel_event):
                return
            yield index, request, _simulate_one(simulate, request)

    def _pooled_outcomes(
        self,
        requests: list[SimulateRequest],
        simulate: SimulateFn,
        cancel_event: Optional[threading.Event],
    ) -> Iterator[tuple[int, SimulateRequest, Outcome]]:
        """At most ``max_workers`` calls in flight, yielded in subset order."""
        window: deque[tuple[int, SimulateRequest, Future]] = deque()

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="batch-sim") as pool:
            for index, request in enumerate(requests):
                if _cancelled(cancel_event):
                    break
                window.append((index, request, pool.submit(_simulate_one, simulate, request)))
                if len(window) >= self.max_workers:
                    head_index, head_request, future = window.popleft()
                    yield head_index, head_request, future.result()

            # Items already dispatched are collected even after cancellation
            while window:
                head_index, head_request, future = window.popleft()
                yield head_index, head_request, future.result()


def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def _simulate_one(simulate: SimulateFn, request: SimulateRequest) -> Outcome:
    """Run one simulation, returning the error instead of raising it."""
    try:
        result = simulate(request)
    except SimulationError as e:
        if e.ticker is None:
            e.ticker = request.ticker
        return e
    except Exception as e:
        return SimulationError(f"Unexpected simulation failure: {e}", ticker=request.ticker)

    if result.ticker != request.ticker:
        result = replace(result, ticker=request.ticker)
    return result
