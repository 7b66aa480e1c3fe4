"""Input validation helpers for proxied requests."""

from __future__ import annotations

import re
from typing import Any

# RFC 9110 token: one or more tchar
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def validate_method(method: str) -> None:
    """Validate that an HTTP method is a syntactically valid token."""
    if not isinstance(method, str) or not _METHOD_RE.fullmatch(method):
        msg = f"Invalid HTTP method: {method!r}. Must be a non-empty RFC 9110 token."
        raise ValueError(msg)


def validate_api_path(api_path: str) -> None:
    """Validate that a sub-API path is absolute."""
    if not isinstance(api_path, str) or not api_path.startswith("/"):
        msg = f"Invalid API path: {api_path!r}. Must start with '/'."
        raise ValueError(msg)


def validate_environment_id(environment_id: Any) -> None:
    """Validate a Portainer environment (endpoint) identifier."""
    # bool is an int subclass; True would silently become environment 1
    if isinstance(environment_id, bool) or not isinstance(environment_id, int):
        msg = f"Invalid environment id: {environment_id!r}. Must be an integer."
        raise ValueError(msg)
