"""
Functions available inside templates.

Each function is registered both as a global and as a filter, so these two
lines are equivalent:

    {{ base64(execute("my.tmpl", data)) }}
    {{ execute("my.tmpl", data) | base64 }}
"""

import base64
import dataclasses
import json
from typing import Any, Callable, Dict

from ztp.errors import SerializationError, UnsupportedTypeError


def _has_own_str(value: Any) -> bool:
    """Check if the class of the value defines a string representation of its own."""
    return type(value).__str__ is not object.__str__


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    if _has_own_str(value):
        return str(value).encode("utf-8")
    raise UnsupportedTypeError(value)


def base64_func(value: Any) -> str:
    """
    Encode the given value using Base64 and return the result as a string.

    Bytes are encoded directly. Strings are converted to bytes using UTF-8.
    Objects whose class defines __str__ are converted to a string first, and
    then to bytes using UTF-8. Any other kind of value, numbers, lists and
    dictionaries included, results in an UnsupportedTypeError.
    """
    return base64.b64encode(_to_bytes(value)).decode("ascii")


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def json_func(value: Any) -> str:
    """
    Encode the given value as JSON.

    The result is a complete JSON document, so a string gets its surrounding
    quotes. That makes it possible to embed the text of another template as a
    field of a JSON document:

        "content": {{ execute("my.tmpl", data) | json }}

    Note that the value of the 'content' field doesn't need to be surrounded
    by quotes. The characters <, > and & are written as they are, not as
    Unicode escapes.
    """
    try:
        return json.dumps(
            value,
            default=_json_default,
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError, RecursionError) as e:
        raise SerializationError(
            f"Failed to encode value of type {type(value).__name__} as JSON: {e}", value
        ) from e


def build_functions(execute: Callable[[str, Any], str]) -> Dict[str, Callable[..., str]]:
    """
    Build the table of template functions.

    Args:
        execute: Callable that renders a template of the set by name and
                 returns the text, used to implement the execute function

    Returns:
        Dictionary mapping function name to callable
    """
    return {
        "base64": base64_func,
        "execute": execute,
        "json": json_func,
    }
