"""structlog processors shared by every ti-dding log line.

DingTalk credentials travel as query parameters (``appkey``, ``appsecret``,
``access_token``), so they can turn up under a sensitive key, nested inside
a params dict, or embedded in a URL or exception message. The masking
processor covers all three.
"""

import re
from typing import Any, Dict, FrozenSet, Optional

EventDict = Dict[str, Any]

SENSITIVE_PATTERNS: FrozenSet[str] = frozenset(
    {
        "password",
        "secret",
        "token",
        "appkey",
        "app_key",
        "authorization",
        "credential",
    }
)

_QUERY_SECRET = re.compile(r"(access_token|appsecret|appkey)=[^&\s'\"]+")


def scrub_query_secrets(text: str, mask_value: str = "***") -> str:
    """Blank out credentials carried as query parameters in ``text``."""
    return _QUERY_SECRET.sub(lambda m: f"{m.group(1)}={mask_value}", text)


def add_app_info(app_name: str, app_version: str = "unknown"):
    """Stamp ``app_name``/``app_version`` on every event."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app_name", app_name)
        event_dict.setdefault("app_version", app_version)
        return event_dict

    return processor


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: Optional[FrozenSet[str]] = None,
):
    """Build a processor redacting credentials from events.

    Args:
        mask_value: Replacement for a redacted value.
        additional_patterns: Extra key fragments to treat as sensitive.
    """
    patterns = SENSITIVE_PATTERNS | (additional_patterns or frozenset())

    def is_sensitive(key: str) -> bool:
        key_lower = key.lower()
        return any(pattern in key_lower for pattern in patterns)

    def scrub(value: Any) -> Any:
        if isinstance(value, str):
            return scrub_query_secrets(value, mask_value)
        if isinstance(value, dict):
            return {
                k: mask_value if is_sensitive(str(k)) and v is not None else scrub(v)
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [scrub(item) for item in value]
        return value

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        return scrub(event_dict)

    return processor


def truncate_large_values(max_length: int = 500):
    """Build a processor cutting string values longer than ``max_length``.

    Response bodies logged on decode errors are the usual offenders.
    """

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    f"{value[:max_length]}...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
