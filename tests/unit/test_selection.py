"""Unit tests for batch selection resolution."""

import copy

import pytest

from midas_app.errors import EmptySelectionError
from midas_app.models.candidate import Candidate, Signal
from midas_app.selection.resolver import (
    ScoreRange,
    SelectionMode,
    resolve_selection,
    select_for_batch,
)


def tickers(candidates):
    return [c.ticker for c in candidates]


class TestResolveSelection:
    """Test suite for resolve_selection."""

    def test_all_preserves_order(self, sample_candidates) -> None:
        """ALL returns every candidate in input order."""
        selected = resolve_selection(sample_candidates, SelectionMode.ALL)
        assert tickers(selected) == ["AAA", "BBB", "CCC"]
        assert selected is not sample_candidates

    def test_none_is_empty(self, sample_candidates) -> None:
        """NONE selects nothing."""
        assert resolve_selection(sample_candidates, SelectionMode.NONE) == []

    def test_bullish_and_bearish(self, sample_candidates) -> None:
        """Signal modes filter on signal equality."""
        assert tickers(resolve_selection(sample_candidates, SelectionMode.BULLISH)) == ["AAA"]
        assert tickers(resolve_selection(sample_candidates, SelectionMode.BEARISH)) == ["BBB"]

    def test_score_range_inclusive_bounds(self, sample_candidates) -> None:
        """Score bounds are inclusive on both ends."""
        selected = resolve_selection(
            sample_candidates, SelectionMode.SCORE_RANGE, score_range=ScoreRange(0.5, 2.0)
        )
        assert tickers(selected) == ["AAA", "CCC"]

    def test_score_range_min_only(self, sample_candidates) -> None:
        """An unset max bound is unbounded."""
        selected = resolve_selection(
            sample_candidates, SelectionMode.SCORE_RANGE, score_range=ScoreRange(min_score=0)
        )
        assert tickers(selected) == ["AAA", "CCC"]

    def test_score_range_without_bounds_behaves_as_all(self, sample_candidates) -> None:
        """SCORE_RANGE with no bounds selects everything."""
        selected = resolve_selection(sample_candidates, SelectionMode.SCORE_RANGE)
        assert tickers(selected) == tickers(sample_candidates)

    def test_score_range_excludes_nan_scores(self) -> None:
        """Candidates without a finite score never fall inside a bounded range."""
        candidates = [
            Candidate(ticker="A", current_price=1.0, score=1.0),
            Candidate(ticker="N", current_price=1.0, score=float("nan")),
        ]

        bounded = resolve_selection(candidates, SelectionMode.SCORE_RANGE, score_range=ScoreRange(max_score=5))
        unbounded = resolve_selection(candidates, SelectionMode.SCORE_RANGE, score_range=ScoreRange())

        assert tickers(bounded) == ["A"]
        assert tickers(unbounded) == ["A", "N"]

    def test_manual_follows_candidate_order(self) -> None:
        """MANUAL keeps candidate-list order, not manual-set order."""
        candidates = [
            Candidate(ticker="C", current_price=1.0),
            Candidate(ticker="A", current_price=1.0),
            Candidate(ticker="B", current_price=1.0),
        ]
        selected = resolve_selection(candidates, SelectionMode.MANUAL, manual_set=["B", "A"])
        assert tickers(selected) == ["A", "B"]

    def test_manual_without_set_is_empty(self, sample_candidates) -> None:
        """MANUAL with no picked tickers selects nothing."""
        assert resolve_selection(sample_candidates, SelectionMode.MANUAL) == []

    def test_mode_accepts_string_value(self, sample_candidates) -> None:
        """Mode can be given by its string value."""
        assert tickers(resolve_selection(sample_candidates, "bullish")) == ["AAA"]

    @pytest.mark.parametrize("mode", list(SelectionMode))
    def test_resolve_is_pure(self, sample_candidates, mode) -> None:
        """Repeated calls return equal output and never mutate the input."""
        before = copy.deepcopy(sample_candidates)
        kwargs = {"manual_set": {"BBB"}, "score_range": ScoreRange(min_score=0)}

        first = resolve_selection(sample_candidates, mode, **kwargs)
        second = resolve_selection(sample_candidates, mode, **kwargs)

        assert first == second
        assert sample_candidates == before


class TestScoreRange:
    """Test suite for ScoreRange parsing."""

    def test_parse_blank_and_invalid_bounds(self) -> None:
        """Blank and non-numeric form input leaves a bound unset."""
        bounds = ScoreRange.parse("", "abc")
        assert bounds.min_score is None
        assert bounds.max_score is None

    def test_parse_numeric_strings(self) -> None:
        """Numeric strings are parsed into floats."""
        bounds = ScoreRange.parse("0", "5")
        assert bounds == ScoreRange(0.0, 5.0)

    def test_parse_nan_is_unset(self) -> None:
        """NaN bounds are treated as unset."""
        assert ScoreRange.parse(float("nan")).min_score is None


class TestSelectForBatch:
    """Test suite for select_for_batch."""

    def test_empty_selection_raises(self, sample_candidates) -> None:
        """An empty selection is surfaced as EmptySelectionError."""
        with pytest.raises(EmptySelectionError) as exc_info:
            select_for_batch(sample_candidates, SelectionMode.NONE)

        assert exc_info.value.mode == "none"
        assert exc_info.value.candidate_count == 3

    def test_score_range_matching_nothing_raises(self, sample_candidates) -> None:
        """A score range matching no candidate is an empty selection."""
        with pytest.raises(EmptySelectionError):
            select_for_batch(
                sample_candidates, SelectionMode.SCORE_RANGE, score_range=ScoreRange(min_score=10)
            )

    def test_non_empty_selection_returned(self, sample_candidates) -> None:
        """A non-empty selection is returned unchanged."""
        selected = select_for_batch(sample_candidates, SelectionMode.BEARISH)
        assert [c.signal for c in selected] == [Signal.BEARISH]
