"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

KNOWN_SECTIONS = {"facets", "logging", "api"}
LARGE_EMPLOYER_LIMIT = 50
LONG_QUERY_TIMEOUTS = {"2m", "3m", "4m", "5m", "pt2m", "pt3m", "pt4m", "pt5m"}


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    unknown = sorted(str(key) for key in config_dict if key not in KNOWN_SECTIONS)
    if unknown:
        warning_messages.append(f"Unknown configuration sections will be ignored: {', '.join(unknown)}")

    facets = config_dict.get("facets", {})
    if isinstance(facets, dict):
        limit = facets.get("employer_limit", 20)
        if isinstance(limit, int) and limit > LARGE_EMPLOYER_LIMIT:
            warning_messages.append(
                f"Large employer_limit ({limit}) makes the employer facet slow to render"
            )

        timeout = facets.get("query_timeout", "10s")
        if isinstance(timeout, str) and timeout.strip().lower() in LONG_QUERY_TIMEOUTS:
            warning_messages.append(
                f"Long query_timeout ({timeout}) keeps browse requests waiting on a stalled store"
            )

    api = config_dict.get("api", {})
    if isinstance(api, dict) and api.get("host") == "0.0.0.0":
        warning_messages.append("API host 0.0.0.0 exposes the service on every interface")

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
