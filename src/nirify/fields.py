"""Read typed values out of a :class:`~nirify.document.Document`.

Getters return ``None`` when any path segment is missing.  The ``load_*``
helpers assign a value onto an object only when the document provides one,
so callers can layer several documents over the same model.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from .document import Document, Node
from .types import Color

logger = logging.getLogger(__name__)

T = TypeVar("T")

I32_MIN, I32_MAX = -(2**31), 2**31 - 1
U32_MAX = 2**32 - 1


def navigate(doc: Document, path: Sequence[str]) -> Node | None:
    """Walk *path* through nested children and return the final node."""
    node: Node | None = None
    current = doc
    for segment in path:
        node = current.get(segment)
        if node is None:
            return None
        current = node.children
    return node


def _first(doc: Document, path: Sequence[str]) -> Any:
    node = navigate(doc, path)
    if node is None:
        return None
    return node.first_arg


def get_string(doc: Document, path: Sequence[str]) -> str | None:
    value = _first(doc, path)
    return value if isinstance(value, str) else None


def get_integer(doc: Document, path: Sequence[str]) -> int | None:
    value = _first(doc, path)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_float(doc: Document, path: Sequence[str]) -> float | None:
    value = _first(doc, path)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def get_bool(doc: Document, path: Sequence[str]) -> bool | None:
    value = _first(doc, path)
    return value if isinstance(value, bool) else None


def has_flag(doc: Document, path: Sequence[str]) -> bool:
    """Presence means enabled; an explicit boolean argument overrides it."""
    node = navigate(doc, path)
    if node is None:
        return False
    value = node.first_arg
    if isinstance(value, bool):
        return value
    return True


def has_flag_in_node(node: Node, flag: str) -> bool:
    """Return True if *flag* is one of the node's string arguments."""
    return any(isinstance(a, str) and a == flag for a in node.args)


def prop_int(node: Node, name: str) -> int | None:
    value = node.props.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def prop_float(node: Node, name: str) -> float | None:
    value = node.props.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def prop_string(node: Node, name: str) -> str | None:
    value = node.props.get(name)
    return value if isinstance(value, str) else None


def prop_bool(node: Node, name: str) -> bool | None:
    value = node.props.get(name)
    return value if isinstance(value, bool) else None


def string_args(node: Node) -> list[str]:
    return [a for a in node.args if isinstance(a, str)]


# ---------------------------------------------------------------------------
# Assign-if-present helpers
# ---------------------------------------------------------------------------

def load_flag(doc: Document, path: Sequence[str], target: object, attr: str) -> None:
    if navigate(doc, path) is not None:
        setattr(target, attr, has_flag(doc, path))


def load_string(doc: Document, path: Sequence[str], target: object, attr: str) -> None:
    value = get_string(doc, path)
    if value is not None:
        setattr(target, attr, value)


load_optional_string = load_string


def load_int(doc: Document, path: Sequence[str], target: object, attr: str) -> None:
    value = get_integer(doc, path)
    if value is not None:
        setattr(target, attr, value)


def _load_ranged(
    doc: Document,
    path: Sequence[str],
    target: object,
    attr: str,
    low: int,
    high: int,
    kind: str,
) -> None:
    value = get_integer(doc, path)
    if value is None:
        return
    if low <= value <= high:
        setattr(target, attr, value)
    else:
        logger.warning(
            "value %s for %s is out of %s range, ignoring", value, "/".join(path), kind
        )


def load_i32(doc: Document, path: Sequence[str], target: object, attr: str) -> None:
    _load_ranged(doc, path, target, attr, I32_MIN, I32_MAX, "i32")


def load_u32(doc: Document, path: Sequence[str], target: object, attr: str) -> None:
    _load_ranged(doc, path, target, attr, 0, U32_MAX, "u32")


def load_float(doc: Document, path: Sequence[str], target: object, attr: str) -> None:
    value = get_float(doc, path)
    if value is not None:
        setattr(target, attr, value)


def load_color(doc: Document, path: Sequence[str], target: object, attr: str) -> None:
    value = get_string(doc, path)
    if value is None:
        return
    color = Color.from_hex(value)
    if color is None:
        logger.warning("invalid color %r for %s", value, "/".join(path))
        return
    setattr(target, attr, color)


def load_enum(
    doc: Document,
    path: Sequence[str],
    target: object,
    attr: str,
    convert: Callable[[str], T | None],
) -> None:
    value = get_string(doc, path)
    if value is None:
        return
    converted = convert(value)
    if converted is None:
        logger.warning("unknown value %r for %s", value, "/".join(path))
        return
    setattr(target, attr, converted)


def safe_i32(value: int, context: str) -> int | None:
    if I32_MIN <= value <= I32_MAX:
        return value
    logger.warning("value %s out of i32 range for %s, ignoring", value, context)
    return None


def clamp_opacity(value: float, context: str) -> float:
    if not 0.0 <= value <= 1.0:
        logger.warning("opacity %s out of range (0.0-1.0) for %s, clamping", value, context)
    return min(max(value, 0.0), 1.0)


__all__ = [
    "navigate",
    "get_string",
    "get_integer",
    "get_float",
    "get_bool",
    "has_flag",
    "has_flag_in_node",
    "load_flag",
    "load_string",
    "load_optional_string",
    "load_int",
    "load_i32",
    "load_u32",
    "load_float",
    "load_color",
    "load_enum",
]
