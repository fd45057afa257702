"""
Selection resolution for batch operations.

Selection is a pure function of the candidate list and the selection mode:
the input list is never mutated and the output always follows the order of
the candidate list.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from midas_app.errors import EmptySelectionError
from midas_app.models.candidate import Candidate, Signal

logger = structlog.get_logger(__name__)


class SelectionMode(str, Enum):
    """Named rule choosing the candidates a batch acts on."""
    ALL = "all"
    NONE = "none"
    BULLISH = "bullish"
    BEARISH = "bearish"
    SCORE_RANGE = "score_range"
    MANUAL = "manual"


@dataclass(frozen=True)
class ScoreRange:
    """Inclusive score bounds; an unset bound is unbounded."""
    min_score: Optional[float] = None
    max_score: Optional[float] = None

    @classmethod
    def parse(cls, min_score: Any = None, max_score: Any = None) -> "ScoreRange":
        """Build a range from form input, treating blanks and non-numbers as unset."""
        return cls(min_score=_parse_bound(min_score), max_score=_parse_bound(max_score))

    def contains(self, score: float) -> bool:
        if self.min_score is None and self.max_score is None:
            return True
        # NaN compares False against either bound
        if not math.isfinite(score):
            return False
        if self.min_score is not None and score < self.min_score:
            return False
        if self.max_score is not None and score > self.max_score:
            return False
        return True


def _parse_bound(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        bound = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(bound) else bound


def resolve_selection(
    candidates: Sequence[Candidate],
    mode: SelectionMode,
    manual_set: Optional[Iterable[str]] = None,
    score_range: Optional[ScoreRange] = None,
) -> list[Candidate]:
    """
    Return the candidates a batch operation will act on.

    Args:
        candidates: Candidate pool, in display order
        mode: Selection rule
        manual_set: Tickers picked by hand (MANUAL mode)
        score_range: Inclusive score bounds (SCORE_RANGE mode)

    Returns:
        New list of selected candidates, in candidate-list order
    """
    mode = SelectionMode(mode)

    if mode is SelectionMode.ALL:
        return list(candidates)

    if mode is SelectionMode.NONE:
        return []

    if mode is SelectionMode.BULLISH:
        return [c for c in candidates if c.signal is Signal.BULLISH]

    if mode is SelectionMode.BEARISH:
        return [c for c in candidates if c.signal is Signal.BEARISH]

    if mode is SelectionMode.SCORE_RANGE:
        bounds = score_range or ScoreRange()
        return [c for c in candidates if bounds.contains(c.score)]

    # MANUAL
    picked = frozenset(manual_set or ())
    return [c for c in candidates if c.ticker in picked]


def select_for_batch(
    candidates: Sequence[Candidate],
    mode: SelectionMode,
    manual_set: Optional[Iterable[str]] = None,
    score_range: Optional[ScoreRange] = None,
) -> list[Candidate]:
    """
    Resolve a selection that must not be empty.

    Raises:
        EmptySelectionError: If no candidate matches
    """
    selected = resolve_selection(candidates, mode, manual_set, score_range)

    if not selected:
        raise EmptySelectionError(
            "No candidates selected for simulation",
            mode=SelectionMode(mode).value,
            candidate_count=len(candidates),
        )

    logger.info(
        "Resolved batch selection",
        mode=SelectionMode(mode).value,
        selected=len(selected),
        candidates=len(candidates)
    )
    return selected
