"""Unit tests for the run_batch command-line entry point."""

from unittest.mock import patch

import orjson
import pytest

from midas_app.models.trade import SimulationResult
from scripts.run_batch import build_overrides, main, parse_args


class TestBuildOverrides:
    """Test suite for flag to configuration override mapping."""

    def test_unset_flags_add_nothing(self) -> None:
        """Test that flags left out do not override settings."""
        overrides = build_overrides(parse_args(["--reference-date", "2024-03-01"]))

        assert overrides == {"trade": {}}

    @pytest.mark.parametrize("workers", ["0", "-1", "3"])
    def test_workers_flag_is_always_passed(self, workers) -> None:
        """Test that every explicit worker count reaches the validator, zero included."""
        overrides = build_overrides(parse_args(["--reference-date", "2024-03-01", "--workers", workers]))

        assert overrides["batch"] == {"max_workers": int(workers)}

    def test_percent_flag_clears_absolute_price(self) -> None:
        """Test that a percentage flag wins over a configured absolute price."""
        overrides = build_overrides(parse_args(["--reference-date", "2024-03-01", "--stop-loss-pct", "4"]))

        assert overrides["trade"] == {"stop_loss_pct": 4.0, "stop_loss_price": None}


class TestMain:
    """Test suite for the command-line run."""

    @pytest.mark.parametrize("workers", ["0", "-2"])
    def test_invalid_worker_count_rejected(self, tmp_path, capsys, workers) -> None:
        """Test that a non-positive worker count is rejected before any fetch."""
        argv = [
            "--reference-date", "2024-03-01",
            "--workers", workers,
            "--config-dir", str(tmp_path),
        ]

        with patch("scripts.run_batch.configure_logging"), \
             patch("scripts.run_batch.HttpBacktestClient.list_candidates") as mock_fetch:
            assert main(argv) == 2

        mock_fetch.assert_not_called()
        assert "Batch rejected" in capsys.readouterr().err

    def test_runs_from_candidates_file(self, tmp_path, capsys, sample_ranking_rows, sample_simulation_payload) -> None:
        """Test a full run over a saved ranking file."""
        rows_file = tmp_path / "rankings.json"
        rows_file.write_bytes(orjson.dumps(sample_ranking_rows))
        argv = [
            "--reference-date", "2024-03-01",
            "--mode", "bullish",
            "--candidates-file", str(rows_file),
            "--config-dir", str(tmp_path),
        ]

        def simulate(request):
            return SimulationResult.from_payload(sample_simulation_payload, ticker=request.ticker)

        with patch("scripts.run_batch.configure_logging"), \
             patch("scripts.run_batch.HttpBacktestClient.simulate", side_effect=simulate):
            assert main(argv) == 0

        report = orjson.loads(capsys.readouterr().out)
        assert report["success_count"] == 1
        assert [r["ticker"] for r in report["results"]] == ["AAA"]
