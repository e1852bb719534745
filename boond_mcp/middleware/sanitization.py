"""Recursive neutralization of tool arguments before they reach handlers.

Sanitization is permissive: suspicious input is rewritten, never rejected.
"""

import re
from typing import Any, TypeVar

T = TypeVar("T")

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_INJECTION_TOKENS = re.compile(r"--|/\*|\*/|;")
_INJECTION_REPLACEMENTS = {
    "--": " - - ",
    "/*": "/ *",
    "*/": "* /",
    ";": " ",
}

_HTML_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
    "`": "&#96;",
})


def sanitize_string(value: str) -> str:
    """Neutralize one string.

    Control characters are stripped first, then SQL-comment style tokens and
    ``;`` are broken up, and only then are HTML-significant characters
    escaped, so the ``;`` of an entity like ``&lt;`` is never rewritten.
    """
    without_controls = _CONTROL_CHARS.sub("", value)
    neutralized = _INJECTION_TOKENS.sub(
        lambda match: _INJECTION_REPLACEMENTS[match.group(0)], without_controls
    )
    return neutralized.translate(_HTML_ESCAPES)


def _sanitize_value(value: Any, visited: set[int]) -> Any:
    if isinstance(value, str):
        return sanitize_string(value)

    if not isinstance(value, (list, tuple, dict)):
        return value

    if id(value) in visited:
        return value
    visited.add(id(value))

    if isinstance(value, list):
        return [_sanitize_value(item, visited) for item in value]

    if type(value) is tuple:
        return tuple(_sanitize_value(item, visited) for item in value)

    # Only plain dicts are rebuilt; subclasses and named tuples pass through
    if type(value) is dict:
        return {key: _sanitize_value(item, visited) for key, item in value.items()}

    return value


def sanitize_input(value: T) -> T:
    """Return a deep copy of *value* with every string leaf sanitized.

    Lists, tuples and plain dicts are walked recursively (dict keys are kept
    verbatim). Other objects, and containers already seen on the current walk,
    are returned as-is, which makes self-referencing structures safe.
    """
    return _sanitize_value(value, set())
