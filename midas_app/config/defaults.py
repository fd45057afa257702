"""Default configuration parameters for the batch trade simulator."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TradeDefaults:
    """Trade template defaults used when the caller leaves a field empty."""
    quantity: float = 100.0
    max_hold_days: int = 60                          # Swing-trade horizon
    stop_loss_pct: float = 5.0                       # Below entry
    take_profit_pct: float = 10.0                    # Above entry


@dataclass(frozen=True)
class SuggestionParams:
    """ADR-scaled stop-loss/take-profit suggestion constants."""
    stop_loss_adr_mult: float = 2.0                  # Stop distance in ADRs
    stop_loss_cap_pct: float = 5.0                   # Stop distance never wider than this
    take_profit_adr_mult: float = 3.0                # Target distance in ADRs
    take_profit_floor_pct: float = 10.0              # Target distance never closer than this


@dataclass(frozen=True)
class ServiceParams:
    """Remote market-data/backtest service connection."""
    base_url: str = "http://localhost:8000/midas"
    simulate_path: str = "/backtest/simulate_trade"
    rankings_path: str = "/backtest/historical_rankings"
    timeout_seconds: int = 30


@dataclass(frozen=True)
class RankingParams:
    """Pass-through parameters for the historical rankings request."""
    top_n: int = 50
    sort_by: str = "adr"
    sort_order: str = "desc"
    max_workers: int = 5                             # Remote-side fetch parallelism
    rate_limit_per_minute: int = 200


@dataclass(frozen=True)
class BatchParams:
    """Batch execution parameters."""
    entry_offset_days: int = 1                       # Entry = reference date + offset
    max_workers: int = 1                             # 1 = strictly sequential


@dataclass(frozen=True)
class SessionParams:
    """Backtest session persistence parameters."""
    db_path: str = "backtest_sessions.db"


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    trade: TradeDefaults
    suggestion: SuggestionParams
    service: ServiceParams
    ranking: RankingParams
    batch: BatchParams
    session: SessionParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        trade=TradeDefaults(),
        suggestion=SuggestionParams(),
        service=ServiceParams(),
        ranking=RankingParams(),
        batch=BatchParams(),
        session=SessionParams(),
    )
