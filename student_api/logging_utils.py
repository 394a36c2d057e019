"""
Logging Utilities

Helpers that strip sensitive data before request details reach the logs.
"""

import json
from typing import Any, Dict


# Keys that should never be logged
SENSITIVE_KEYS = {
    "password", "secret", "token", "api_key", "apikey", "auth",
    "authorization", "cookie", "session", "csrf", "client_secret",
    "access_token", "refresh_token", "id_token", "bearer"
}

# Headers that are safe to include in request logs
SAFE_HEADERS = {
    "content-type", "content-length", "accept",
    "user-agent", "referer", "origin"
}


def sanitize_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Drop sensitive keys from a dictionary, recursively.

    Example:
        >>> sanitize_dict({"email": "a@b.c", "password": "x", "page": 2})
        {"email": "a@b.c", "page": 2}
    """
    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        key_lower = str(key).lower()

        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            continue

        if isinstance(value, dict):
            sanitized[key] = sanitize_dict(value)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def sanitize_headers(headers) -> Dict[str, str]:
    """
    Keep only the safe subset of HTTP headers.

    Args:
        headers: Mapping or werkzeug Headers

    Returns:
        Sanitized headers safe for logging
    """
    sanitized = {}
    for key, value in headers.items():
        key_lower = key.lower()

        if key_lower not in SAFE_HEADERS:
            continue

        if key_lower == "user-agent" and len(value) > 100:
            sanitized[key] = value[:100] + "..."
        else:
            sanitized[key] = value

    return sanitized


def safe_str(value: Any, max_length: int = 200) -> str:
    """Convert any value to a sanitized, truncated string for logging."""
    try:
        if isinstance(value, dict):
            result = json.dumps(sanitize_dict(value), separators=(',', ':'), default=str)
        else:
            result = str(value)
    except (TypeError, ValueError):
        result = "[Unable to serialize]"

    if len(result) > max_length:
        result = result[:max_length] + "..."

    return result
