"""
Batch execution module.

Orchestrates remote trade simulations across a selected candidate subset.
"""
from .orchestrator import BatchOrchestrator

__all__ = ["BatchOrchestrator"]
