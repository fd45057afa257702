#!/usr/bin/env python3
"""Run a batch trade backtest from the command line."""

import argparse
import signal
import sys
import threading
from pathlib import Path

import orjson

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from midas_app.config.defaults import ServiceParams
from midas_app.config.loader import ConfigLoader
from midas_app.engine import BatchSimulationEngine
from midas_app.errors import BatchInputError, ExternalServiceError
from midas_app.logging import configure_logging
from midas_app.models.candidate import Candidate
from midas_app.persistence.session_store import SessionStore
from midas_app.selection.resolver import ScoreRange, SelectionMode
from midas_app.service.base import InMemoryCandidateSource
from midas_app.service.http_client import HttpBacktestClient


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate trades for a ranked candidate pool")
    parser.add_argument("--reference-date", required=True, help="Ranking date (YYYY-MM-DD)")
    parser.add_argument("--mode", default="all", choices=[m.value for m in SelectionMode])
    parser.add_argument("--min-score", help="Lower score bound (score_range mode)")
    parser.add_argument("--max-score", help="Upper score bound (score_range mode)")
    parser.add_argument("--tickers", default="", help="Comma-separated tickers (manual mode)")
    parser.add_argument("--candidates-file", help="JSON file of ranking rows instead of the remote source")

    trade = parser.add_argument_group("trade template")
    trade.add_argument("--quantity", type=float)
    trade.add_argument("--max-hold-days", type=int)
    stop = trade.add_mutually_exclusive_group()
    stop.add_argument("--stop-loss-pct", type=float)
    stop.add_argument("--stop-loss-price", type=float)
    take = trade.add_mutually_exclusive_group()
    take.add_argument("--take-profit-pct", type=float)
    take.add_argument("--take-profit-price", type=float)

    parser.add_argument("--base-url", help="Backtest service base URL")
    parser.add_argument("--workers", type=int, help="Simulations in flight at once")
    parser.add_argument("--config-dir", help="Directory holding settings.yaml")
    parser.add_argument("--session-db", help="Save the run to this SQLite session store")
    parser.add_argument("--session-id", help="Existing session to save into")
    parser.add_argument("--refresh", action="store_true", help="Ignore a candidate pool saved for the date")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--json-logs", action="store_true")
    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict:
    """Per-call configuration overrides from command-line flags."""
    trade = {
        "quantity": args.quantity,
        "max_hold_days": args.max_hold_days,
        "stop_loss_pct": args.stop_loss_pct,
        "stop_loss_price": args.stop_loss_price,
        "take_profit_pct": args.take_profit_pct,
        "take_profit_price": args.take_profit_price,
    }
    overrides = {"trade": {k: v for k, v in trade.items() if v is not None}}
    # A percentage flag wins over an absolute price from settings.yaml
    if args.stop_loss_pct is not None:
        overrides["trade"]["stop_loss_price"] = None
    if args.take_profit_pct is not None:
        overrides["trade"]["take_profit_price"] = None
    if args.base_url is not None:
        overrides["service"] = {"base_url": args.base_url}
    if args.workers is not None:
        overrides["batch"] = {"max_workers": args.workers}
    return overrides


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.json_logs)

    overrides = build_overrides(args)
    loader = ConfigLoader.create(Path(args.config_dir) if args.config_dir else None)
    service = loader.build_params(ServiceParams, loader.merge_config(overrides)["service"])
    client = HttpBacktestClient(config=service)

    if args.candidates_file:
        rows = orjson.loads(Path(args.candidates_file).read_bytes())
        source = InMemoryCandidateSource([Candidate.from_payload(r) for r in rows])
    else:
        source = client

    session_store = SessionStore(args.session_db) if args.session_db else None

    try:
        engine = BatchSimulationEngine(
            simulator=client,
            source=source,
            session_store=session_store,
            config_dir=args.config_dir,
            overrides=overrides,
        )
        candidates = engine.fetch_candidates(args.reference_date, refresh=args.refresh)

        cancel_event = threading.Event()
        signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())

        report = engine.run_batch(
            candidates,
            args.reference_date,
            mode=SelectionMode(args.mode),
            manual_set={t.strip().upper() for t in args.tickers.split(",") if t.strip()},
            score_range=ScoreRange.parse(args.min_score, args.max_score),
            cancel_event=cancel_event,
            session_id=args.session_id,
        )

    except BatchInputError as e:
        print(f"Batch rejected: {e}", file=sys.stderr)
        return 2
    except ExternalServiceError as e:
        print(f"Service error: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(orjson.dumps(report.to_dict(), option=orjson.OPT_INDENT_2).decode() + "\n")
    print(f"Batch simulation complete: {report.message}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
