"""
Trade parameter module.

Resolution of trade templates into concrete stop-loss and take-profit
prices, percent/absolute synchronisation and ADR-based suggestions.
"""
from .resolver import (
    resolve_parameters,
    suggest_template,
    sync_level,
    sync_template,
    validate_template,
)

__all__ = [
    "resolve_parameters",
    "suggest_template",
    "sync_level",
    "sync_template",
    "validate_template",
]
