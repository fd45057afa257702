"""
Error classification for batch trade simulation.

Input errors block a batch before any remote call is made. External service
errors describe failures of the remote simulator, the candidate source and
the session store; only per-item simulation failures are recovered locally.
"""

from .batch_input import (
    BatchInputError,
    ValidationError,
    EmptySelectionError,
)
from .service_failures import (
    ExternalServiceError,
    SimulationError,
    SourceError,
    SessionStoreError,
)

__all__ = [
    # Input Errors
    "BatchInputError",
    "ValidationError",
    "EmptySelectionError",
    # External Service Failures
    "ExternalServiceError",
    "SimulationError",
    "SourceError",
    "SessionStoreError",
]
