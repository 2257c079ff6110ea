# =============================================================================
# lib/sanitize.py - Request Data Sanitizers
# =============================================================================
# Pure functions used by the request pipeline:
# - strip_operator_keys: drop keys that could smuggle database operators
# - escape_html: neutralize markup in string values
# - collapse_repeated: resolve HTTP parameter pollution
#
# None of these raise on unexpected input; unknown types pass through.
# =============================================================================

from __future__ import annotations

import html
import json
import re
from typing import Any

# Keys starting with "$" or containing "." address operators / nested paths
PROHIBITED_KEY = re.compile(r"^\$|\.")
_BRACKET_SPLIT = re.compile(r"[\[\]]+")

JSON_COOKIE_PREFIX = "j:"


# =============================================================================
# Operator Injection
# =============================================================================

def _key_segments(key: str) -> list[str]:
    """Split bracket notation (`price[$gt]`) into its segments."""
    return [segment for segment in _BRACKET_SPLIT.split(key) if segment]


def is_prohibited_key(key: str) -> bool:
    """True when any segment of key looks like an operator or dotted path."""
    return any(PROHIBITED_KEY.search(segment) for segment in _key_segments(key) or [key])


def _replace_key(key: str, replace_with: str) -> str:
    segments = re.split(r"([\[\]]+)", key)
    return "".join(
        PROHIBITED_KEY.sub(replace_with, segment) if not _BRACKET_SPLIT.fullmatch(segment) else segment
        for segment in segments
    )


def strip_operator_keys(value: Any, replace_with: str | None = None) -> Any:
    """
    Remove (or rewrite) operator-like keys from nested dicts and lists.

    Args:
        value: Parsed body or form data
        replace_with: When given, prohibited characters are replaced instead
            of the whole key being dropped

    Returns:
        The same object, sanitized in place
    """
    if isinstance(value, dict):
        for key in list(value.keys()):
            child = strip_operator_keys(value[key], replace_with)
            if isinstance(key, str) and is_prohibited_key(key):
                del value[key]
                if replace_with is not None:
                    value[_replace_key(key, replace_with)] = child
            else:
                value[key] = child
    elif isinstance(value, list):
        for index, item in enumerate(value):
            value[index] = strip_operator_keys(item, replace_with)
    return value


def strip_operator_query(
    items: list[tuple[str, str]],
    replace_with: str | None = None,
) -> list[tuple[str, str]]:
    """Apply the operator key policy to flat query items."""
    result = []
    for key, item in items:
        if not is_prohibited_key(key):
            result.append((key, item))
        elif replace_with is not None:
            result.append((_replace_key(key, replace_with), item))
    return result


# =============================================================================
# Cross-Site Scripting
# =============================================================================

def escape_html(value: Any) -> Any:
    """Escape &, < and > in every string inside value (recursive)."""
    if isinstance(value, str):
        return html.escape(value, quote=False)
    if isinstance(value, dict):
        for key in value:
            value[key] = escape_html(value[key])
        return value
    if isinstance(value, list):
        return [escape_html(item) for item in value]
    return value


def escape_query(items: list[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(key, html.escape(item, quote=False)) for key, item in items]


# =============================================================================
# HTTP Parameter Pollution
# =============================================================================

def collapse_repeated(
    items: list[tuple[str, str]],
    whitelist: frozenset[str] | set[str] = frozenset(),
) -> tuple[list[tuple[str, str]], dict[str, list[str]]]:
    """
    Keep only the last value of every repeated query key.

    Keys in whitelist keep all their values.

    Returns:
        Tuple of (collapsed items in first-seen key order, polluted values)
    """
    values: dict[str, list[str]] = {}
    for key, item in items:
        values.setdefault(key, []).append(item)

    collapsed: list[tuple[str, str]] = []
    polluted: dict[str, list[str]] = {}
    for key, all_values in values.items():
        if len(all_values) > 1 and key not in whitelist:
            polluted[key] = all_values
            collapsed.append((key, all_values[-1]))
        else:
            collapsed.extend((key, item) for item in all_values)
    return collapsed, polluted


# =============================================================================
# Cookies
# =============================================================================

def decode_json_cookie(value: str) -> Any:
    """Decode a `j:`-prefixed JSON cookie; other values are returned unchanged."""
    if not value.startswith(JSON_COOKIE_PREFIX):
        return value
    try:
        return json.loads(value[len(JSON_COOKIE_PREFIX):])
    except ValueError:
        return value
