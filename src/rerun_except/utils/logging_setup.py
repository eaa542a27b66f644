"""
Logging configuration for rerun-except.

Provides logging that:
- Uses stderr exclusively, since stdout carries the rebuild directives
- Outputs JSON lines when RERUN_EXCEPT_LOG_FORMAT=json
- Provides human-readable output otherwise
- Includes custom TRACE level for per-entry decisions
"""

import sys
import logging
import json
import os
from datetime import datetime, timezone
from typing import Optional, Any, TextIO

# Define TRACE level (lower number = more detailed)
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

DEFAULT_LOG_LEVEL = 'WARNING'


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, message, args, **kwargs)


def add_trace_to_logger():
    """Ensure trace method is available on all logger instances"""
    if not hasattr(logging.Logger, 'trace'):
        logging.Logger.trace = trace


add_trace_to_logger()


class JsonFormatter(logging.Formatter):
    """JSON lines formatter for CI log collectors"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage(),
            'pid': os.getpid(),
        }

        # Add any extra fields
        if hasattr(record, 'extra'):
            log_data.update(record.extra)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def resolve_level(level_str: Optional[str]) -> int:
    """
    Convert a level name to a numeric level, handling the custom TRACE level

    Unknown names fall back to the default level.
    """
    name = (level_str or DEFAULT_LOG_LEVEL).upper()
    if name == 'TRACE':
        return TRACE_LEVEL
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    return logging.getLevelName(DEFAULT_LOG_LEVEL)


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the ``rerun_except`` logger hierarchy.

    Build scripts call this once if they want to see what the walk did; the
    library itself never installs handlers.

    Args:
        log_level: Override log level (defaults to RERUN_EXCEPT_LOG_LEVEL,
            then LOG_LEVEL, then WARNING)
        log_format: 'text' or 'json' (defaults to RERUN_EXCEPT_LOG_FORMAT)
        stream: Output stream, stderr unless overridden. Never pass stdout:
            the build orchestrator parses it.
    """
    level_str = (log_level
                 or os.environ.get('RERUN_EXCEPT_LOG_LEVEL')
                 or os.environ.get('LOG_LEVEL'))
    level = resolve_level(level_str)
    fmt = (log_format or os.environ.get('RERUN_EXCEPT_LOG_FORMAT', 'text')).lower()

    package_logger = logging.getLogger('rerun_except')
    package_logger.handlers = []

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    if fmt == 'json':
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    # Keep records out of whatever the host configured on the root logger
    package_logger.propagate = False

    package_logger.debug(
        f"Logging configured - Level: {logging.getLevelName(level)}, Format: {fmt}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance with the trace method available
    """
    add_trace_to_logger()
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any
) -> None:
    """
    Log a message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (e.g., logging.INFO)
        message: Log message
        **context: Additional fields to include in structured logs
    """
    extra = {'extra': context} if context else {}
    logger.log(level, message, extra=extra)
