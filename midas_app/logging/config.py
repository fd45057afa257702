"""
Centralized logging configuration for the Midas batch simulator.

This module provides standardized logging configuration using structlog
for all components. Every module obtains its logger through this module
so batch runs produce a single, consistently structured audit trail.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_batch_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound to the batch subsystem.

    Per-item outcomes of a batch run are logged through this logger so they
    can be filtered out of the general application log.
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="batch",
        audit_trail=True
    )


def log_item_outcome(
    logger: FilteringBoundLogger,
    ticker: str,
    index: int,
    succeeded: bool,
    reason: Optional[str] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of one batch item with standardized format.

    Args:
        logger: Structlog logger instance
        ticker: Ticker of the simulated candidate
        index: Position of the candidate in the batch subset
        succeeded: Whether the remote simulation completed
        reason: Failure reason or exit reason of the simulated trade
        context: Additional context data
    """
    bound_logger = logger.bind(
        ticker=ticker,
        item_index=index,
        item_result="SUCCESS" if succeeded else "FAILURE",
        reason=reason,
        log_type="batch_item"
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if succeeded:
        bound_logger.info("Batch item simulated")
    else:
        bound_logger.warning("Batch item failed")
