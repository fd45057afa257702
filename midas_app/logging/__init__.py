"""
Logging configuration and utilities for the Midas batch simulator.
"""
from .config import configure_logging, get_batch_logger, get_logger, log_item_outcome

__all__ = ["configure_logging", "get_logger", "get_batch_logger", "log_item_outcome"]
