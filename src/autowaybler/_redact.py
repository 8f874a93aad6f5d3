"""Helpers for safe debug logging.

The client handles account credentials and a bearer token that also rides
in the push-feed query string. Everything logged at DEBUG goes through
these helpers first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from yarl import URL

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "email",
        "token",
        "jwt",
        "authorization",
    }
)

_REDACTED = "<redacted>"


def _is_sensitive(key: object) -> bool:
    return str(key).lower() in _SENSITIVE_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with credential fields masked and long strings cut."""
    if _depth > 20:
        return "<max-depth>"

    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, Mapping):
        return {
            str(k): _REDACTED if _is_sensitive(k) else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)


def redact_url(url: str | URL) -> str:
    """Mask sensitive query parameters (``jwt`` and friends) in *url*."""
    parsed = URL(str(url))
    if not parsed.query:
        return str(parsed)
    query = [(k, _REDACTED if _is_sensitive(k) else v) for k, v in parsed.query.items()]
    return str(parsed.with_query(query))
