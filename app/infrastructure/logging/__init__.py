"""Structured logging for the translation service.

Loggers come from ``get_module_logger()``; operation context (correlation
id, shop, task id) is attached with ``bind_request_context()``. Logging is
configured once when ``infrastructure.logging.setup`` is imported.
"""

from infrastructure.logging.context import (
    bind_request_context,
    clear_request_context,
    get_correlation_id,
    set_correlation_id,
)
from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)
from infrastructure.logging.setup import (
    build_processors,
    configure_logging,
    get_logger,
    get_module_logger,
)

__all__ = [
    "SENSITIVE_PATTERNS",
    "add_app_info",
    "bind_request_context",
    "build_processors",
    "clear_request_context",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "get_module_logger",
    "mask_sensitive_data",
    "set_correlation_id",
    "truncate_large_values",
]
