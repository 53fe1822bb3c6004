"""Observability: structured JSON-lines logging with secret redaction."""

from safesave.observability.logging import (
    LoggingConfig,
    StructuredLoggingHandle,
    redact_text,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "redact_text",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
