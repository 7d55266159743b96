"""Public observability primitives: structured logging and correlation scopes."""

from aggregate_planner.observability.logging import (
    LoggingConfig,
    StructuredLoggingHandle,
    correlation_scope,
    get_correlation_context,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
