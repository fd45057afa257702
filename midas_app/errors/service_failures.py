"""
External service error classifications.

These exceptions wrap failures of the collaborators the orchestrator talks
to: the remote trade simulator, the candidate ranking source and the
session store.
"""

from typing import Any, Optional, Dict


class ExternalServiceError(Exception):
    """Base class for failures of an external collaborator."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class SimulationError(ExternalServiceError):
    """A single remote trade simulation failed; the batch carries on."""

    def __init__(self, message: str, ticker: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.ticker = ticker
        self.status_code = status_code
        self.recoverable = True


class SourceError(ExternalServiceError):
    """The candidate pool could not be fetched."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class SessionStoreError(ExternalServiceError):
    """Saving, loading or deleting a backtest session failed."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 session_id: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.session_id = session_id
