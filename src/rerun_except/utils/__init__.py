"""Utility modules for rerun-except"""

from .logging_setup import (
    TRACE_LEVEL,
    configure_logging,
    get_logger,
    log_with_context,
)

__all__ = ['TRACE_LEVEL', 'configure_logging', 'get_logger', 'log_with_context']
