"""
Candidate selection module.

Resolves which candidates of a ranking take part in a batch operation.
"""
from .resolver import ScoreRange, SelectionMode, resolve_selection, select_for_batch

__all__ = ["SelectionMode", "ScoreRange", "resolve_selection", "select_for_batch"]
