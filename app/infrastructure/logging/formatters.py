"""Structlog processors used by ``configure_logging``.

- add_app_info(): service name and deployed version on every entry
- mask_sensitive_data(): redacts shop access tokens, webhook HMACs and other
  credentials, including inside nested dicts such as request headers
- truncate_large_values(): bounds serialized webhook payloads and provider
  error bodies
"""

from typing import Any

EventDict = dict[str, Any]

SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "credential",
        "hmac",
        "signature",
        "cookie",
    }
)


def add_app_info(app_name: str, app_version: str = "unknown"):
    """Processor stamping ``app_name`` and ``app_version`` on each entry."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor replacing credential values with ``mask_value``.

    A key is sensitive when its lowercased form contains one of
    ``SENSITIVE_PATTERNS`` (plus ``additional_patterns``). Dict values are
    masked recursively. ``None`` is left as is so missing credentials stay
    visible in logs.

    Args:
        mask_value: Replacement for sensitive values.
        additional_patterns: Extra key fragments to treat as sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS | (additional_patterns or frozenset())

    def is_sensitive(key: Any) -> bool:
        lowered = str(key).lower()
        return any(pattern in lowered for pattern in patterns)

    def mask(data: dict) -> dict:
        masked = {}
        for key, value in data.items():
            if value is not None and is_sensitive(key):
                masked[key] = mask_value
            elif isinstance(value, dict):
                masked[key] = mask(value)
            else:
                masked[key] = value
        return masked

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        return mask(event_dict)

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor cutting string values longer than ``max_length``."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    f"{value[:max_length]}...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
