"""
Persistence module.

SQLite storage for backtest sessions.
"""
from .session_store import SessionStore, SessionSummary

__all__ = ["SessionStore", "SessionSummary"]
