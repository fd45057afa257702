"""
External service module.

Contracts for the remote trade simulator and candidate source, and their
HTTP implementation against the Midas backend.
"""
from .base import CandidateSource, InMemoryCandidateSource, SimulationService
from .http_client import HttpBacktestClient

__all__ = [
    "CandidateSource",
    "InMemoryCandidateSource",
    "SimulationService",
    "HttpBacktestClient",
]
