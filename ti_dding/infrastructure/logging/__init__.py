"""Structured logging infrastructure.

Centralized logging configuration and utilities built on structlog.

Public API:
    - configure_logging(): Install the stderr handler for the loaded settings
    - get_logger(): Get a logger instance with a specific name
    - get_module_logger(): Get a logger for the calling module
    - bind_command_context(): Context manager binding command name and run id

Processors:
    - add_app_info(): Processor to add app name/version
    - mask_sensitive_data(): Processor to redact secrets and tokens
    - truncate_large_values(): Processor to limit string lengths
    - scrub_query_secrets(): Blank credentials in URLs and error messages
"""

from ti_dding.infrastructure.logging.setup import (
    configure_logging,
    get_logger,
    get_module_logger,
)

from ti_dding.infrastructure.logging.context import (
    bind_command_context,
)

from ti_dding.infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    scrub_query_secrets,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_module_logger",
    "bind_command_context",
    "add_app_info",
    "mask_sensitive_data",
    "scrub_query_secrets",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
