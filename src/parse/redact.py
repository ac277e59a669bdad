"""Mask Mercado Livre credentials in error messages, logs and stored payloads."""
import re
from typing import Any, Dict

REDACTED = "[REDACTED]"

SECRET_KEYS = {
    "access_token",
    "refresh_token",
    "authorization",
    "client_secret",
    "service_role",
}

_PATTERNS = [
    (re.compile(r"Bearer\s+[A-Za-z0-9_\-.]+", re.IGNORECASE), f"Bearer {REDACTED}"),
    # ML user tokens look like APP_USR-1234567890-010101-abcdef...-123456
    (re.compile(r"\b(APP_USR|TG)-[A-Za-z0-9\-]{10,}"), REDACTED),
    (
        re.compile(r"(access_token|refresh_token)([\"']?\s*[:=]\s*[\"']?)([^\"'&\s,}]+)", re.IGNORECASE),
        rf"\1\2{REDACTED}",
    ),
]


def redact_string(text: str) -> str:
    """Redact secrets from a string."""
    if not text:
        return text
    result = text
    for pattern, replacement in _PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def redact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively redact secrets from a dictionary."""
    redacted = {}
    for key, value in data.items():
        if isinstance(key, str) and key.lower() in SECRET_KEYS:
            redacted[key] = REDACTED
        else:
            redacted[key] = redact_json(value)
    return redacted


def redact_json(data: Any) -> Any:
    """Redact secrets from JSON-serializable data."""
    if isinstance(data, dict):
        return redact_dict(data)
    elif isinstance(data, list):
        return [redact_json(item) for item in data]
    elif isinstance(data, str):
        return redact_string(data)
    else:
        return data
