"""
VOID Logging Infrastructure

Exports the structured logging subsystem and log context helpers.
"""

from voidcore.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    LoggingHealth,
    clear_log_context,
    get_log_context,
    get_logger,
    get_logging_health,
    set_log_context,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "get_logging_health",
    "LogContext",
    "get_log_context",
    "set_log_context",
    "clear_log_context",
    "ContextFilter",
    "JSONFormatter",
    "LoggingHealth",
]
