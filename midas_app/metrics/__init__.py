"""
Batch metrics module.

Summary statistics over the succeeded results of a batch run.
"""

from .statistics import UNKNOWN_REASON, format_completion, summarize

__all__ = [
    "UNKNOWN_REASON",
    "format_completion",
    "summarize",
]
