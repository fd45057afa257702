"""
Summary statistics for batch simulation results.

``summarize`` is total: it accepts any result list, including an empty or
partial one, and never raises. Zero profit/loss results count as neither
winners nor losers.
"""

from collections import Counter
from collections.abc import Sequence

from midas_app.models.trade import BatchRun, SimulationResult, SummaryStats

UNKNOWN_REASON = "UNKNOWN"


def _safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def summarize(results: Sequence[SimulationResult]) -> SummaryStats:
    """
    Compute summary metrics over simulation results.

    Args:
        results: Succeeded simulation results, possibly empty

    Returns:
        Summary statistics; all zero for an empty input
    """
    count = len(results)
    if count == 0:
        return SummaryStats()

    profits = [r.profit_loss for r in results if r.profit_loss > 0]
    losses = [r.profit_loss for r in results if r.profit_loss < 0]

    total_profit = sum(profits)
    total_loss = sum(losses)

    exit_reasons = Counter(
        r.exit_reason.value if r.exit_reason else UNKNOWN_REASON for r in results
    )

    return SummaryStats(
        total_profit=total_profit,
        total_loss=total_loss,
        net_pl=sum(r.profit_loss for r in results),
        win_count=len(profits),
        loss_count=len(losses),
        win_rate_pct=len(profits) / count * 100,
        avg_hold_days=sum(r.hold_days for r in results) / count,
        avg_profit_per_winner=_safe_div(total_profit, len(profits)),
        avg_loss_per_loser=_safe_div(abs(total_loss), len(losses)),
        avg_pl_pct=sum(r.profit_loss_pct for r in results) / count,
        exit_reason_counts=dict(exit_reasons),
    )


def format_completion(run: BatchRun) -> str:
    """User-facing completion line, e.g. ``"8 succeeded, 2 failed"``."""
    message = f"{run.success_count} succeeded, {run.failure_count} failed"
    if run.cancelled:
        message += ", cancelled"
    return message
