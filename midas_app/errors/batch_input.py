"""
Input error classifications raised before a batch starts.

These exceptions reject the whole batch: no remote simulation call is made
once one of them has been raised.
"""

from typing import Any, Optional, Dict


class BatchInputError(Exception):
    """Base class for caller input that prevents a batch from running."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ValidationError(BatchInputError):
    """A trade template field is missing, unparseable or out of range."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            return f"{self.field}: {base}"
        return base


class EmptySelectionError(BatchInputError):
    """The selection resolved to no candidates."""

    def __init__(self, message: str, mode: Optional[str] = None,
                 candidate_count: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.mode = mode
        self.candidate_count = candidate_count
