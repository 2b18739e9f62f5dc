"""Adapter between ``kdl-py`` documents and the editor's node tree.

The editor never touches ``kdl`` objects directly: :func:`parse_document`
converts them into :class:`Document` and :class:`Node` values holding plain
Python scalars, and :class:`KdlWriter` renders KDL text for generated files.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import kdl

from .errors import DocumentParseError

logger = logging.getLogger(__name__)


@dataclass
class Node:
    name: str
    args: list[Any] = field(default_factory=list)
    props: dict[str, Any] = field(default_factory=dict)
    children: Document = field(default_factory=lambda: Document())
    leading_comment: str | None = None

    @property
    def first_arg(self) -> Any:
        return self.args[0] if self.args else None

    @property
    def has_children(self) -> bool:
        return bool(self.children.nodes)

    def prop(self, name: str, default: Any = None) -> Any:
        return self.props.get(name, default)

    def get(self, name: str) -> Node | None:
        return self.children.get(name)

    def has_arg(self, value: Any) -> bool:
        """Return True if *value* appears as a positional argument."""
        return any(type(a) is type(value) and a == value for a in self.args)


@dataclass
class Document:
    nodes: list[Node] = field(default_factory=list)

    def get(self, name: str) -> Node | None:
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    def all(self, name: str) -> Iterator[Node]:
        return (node for node in self.nodes if node.name == name)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __bool__(self) -> bool:
        return bool(self.nodes)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

_PARSE_CONFIG = kdl.ParseConfig(nativeUntaggedValues=False, nativeTaggedValues=False)


def _decimal(value: kdl.Decimal) -> int | float:
    mantissa, exponent = value.mantissa, value.exponent
    if isinstance(mantissa, int) and exponent >= 0:
        return mantissa * 10**exponent
    return float(mantissa) * 10.0**exponent


def _native(value: Any) -> Any:
    """Turn a ``kdl-py`` value into a plain scalar.

    Integer literals stay ``int``; ``kdl-py``'s own native conversion would
    turn ``250`` into ``250.0``.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, kdl.Decimal):
        return _decimal(value)
    if isinstance(value, (kdl.Hex, kdl.Octal, kdl.Binary)):
        return int(value.value)
    if isinstance(value, kdl.Null):
        return None
    # strings, booleans and tagged values keep their payload on ``.value``
    return getattr(value, "value", value)


def _convert(raw: Any) -> Node:
    children = Document([_convert(child) for child in getattr(raw, "nodes", [])])
    return Node(
        name=str(raw.name),
        args=[_native(v) for v in getattr(raw, "args", [])],
        props={str(k): _native(v) for k, v in dict(getattr(raw, "props", {})).items()},
        children=children,
    )


def parse_document(text: str) -> Document:
    """Parse KDL *text* into a :class:`Document`.

    Raises
    ------
    DocumentParseError
        If ``kdl-py`` rejects the text.
    """
    try:
        raw = kdl.parse(text, _PARSE_CONFIG)
    except kdl.ParseError as exc:
        raise DocumentParseError(str(exc)) from exc
    doc = Document([_convert(node) for node in raw.nodes])
    _attach_leading_comments(doc, text)
    return doc


def _brace_delta(line: str) -> int:
    """Net ``{``/``}`` count of *line*, ignoring strings and comments."""
    delta = 0
    i = 0
    in_string = False
    raw_close: str | None = None
    while i < len(line):
        ch = line[i]
        if raw_close is not None:
            if line.startswith(raw_close, i):
                i += len(raw_close)
                raw_close = None
                continue
        elif in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == "r" and re.match(r'r#*"', line[i:]):
            hashes = len(re.match(r"r(#*)", line[i:]).group(1))
            raw_close = '"' + "#" * hashes
            i += 2 + hashes
            continue
        elif ch == '"':
            in_string = True
        elif line.startswith("//", i):
            break
        elif ch == "{":
            delta += 1
        elif ch == "}":
            delta -= 1
        i += 1
    return delta


def _top_level_comments(text: str) -> list[str | None]:
    comments: list[str | None] = []
    depth = 0
    pending: str | None = None
    for line in text.splitlines():
        stripped = line.strip()
        if depth == 0:
            if stripped.startswith("//"):
                pending = stripped[2:].strip() or pending
                continue
            if not stripped:
                continue
            if stripped.startswith("/-"):
                pending = None
            else:
                comments.append(pending)
                pending = None
        depth = max(depth + _brace_delta(line), 0)
    return comments


def _attach_leading_comments(doc: Document, text: str) -> None:
    comments = _top_level_comments(text)
    if len(comments) != len(doc.nodes):
        logger.debug(
            "comment scan found %d nodes, parser found %d; skipping names",
            len(comments),
            len(doc.nodes),
        )
        return
    for node, comment in zip(doc.nodes, comments):
        node.leading_comment = comment


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

_BARE_IDENT = re.compile(r"^[A-Za-z_+\-.*?!@$%^&|~`:'][^\s\\/(){}<>;\[\]=,\"]*$")
_RESERVED = {"true", "false", "null"}
# control characters plus every code point KDL treats as a newline
_COMMENT_BREAKS = re.compile(r"[\x00-\x1f\x7f\x85\u2028\u2029]+")


def escape_string(value: str) -> str:
    out = []
    for ch in value:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\r":
            out.append("\\r")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{{{ord(ch):04x}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def format_identifier(name: str) -> str:
    if name and name not in _RESERVED and _BARE_IDENT.match(name):
        # identifiers may not look like numbers
        if not re.match(r"^[+\-.]?[0-9]", name):
            return name
    return escape_string(name)


def format_float(value: float) -> str:
    if value == int(value):
        return f"{value:.1f}"
    text = f"{value:.6f}".rstrip("0")
    return text if not text.endswith(".") else text + "0"


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    return escape_string(str(value))


class KdlWriter:
    """Small line-oriented builder for generated KDL files."""

    def __init__(self, header: str | None = None, indent: str = "    ") -> None:
        self._lines: list[str] = []
        self._depth = 0
        self._indent = indent
        if header:
            self.comment(header)
            self.newline()

    def _emit(self, text: str) -> None:
        self._lines.append(self._indent * self._depth + text)

    def _render(self, name: str, args: tuple[Any, ...], props: Mapping[str, Any] | None) -> str:
        parts = [format_identifier(name)]
        parts.extend(format_value(a) for a in args)
        for key, value in (props or {}).items():
            parts.append(f"{format_identifier(key)}={format_value(value)}")
        return " ".join(parts)

    def comment(self, text: str) -> None:
        """Emit a single-line comment; line breaks in *text* become spaces."""
        self._emit("// " + _COMMENT_BREAKS.sub(" ", text).strip())

    def newline(self) -> None:
        if self._lines and self._lines[-1] != "":
            self._lines.append("")

    def raw(self, text: str) -> None:
        self._emit(text)

    def node(self, name: str, *args: Any, props: Mapping[str, Any] | None = None) -> None:
        self._emit(self._render(name, args, props))

    def flag(self, name: str) -> None:
        self._emit(format_identifier(name))

    def optional_flag(self, name: str, enabled: bool) -> None:
        if enabled:
            self.flag(name)

    def optional(self, name: str, value: Any) -> None:
        if value is not None:
            self.node(name, value)

    @contextmanager
    def block(
        self, name: str, *args: Any, props: Mapping[str, Any] | None = None
    ) -> Iterator[KdlWriter]:
        self._emit(self._render(name, args, props) + " {")
        self._depth += 1
        try:
            yield self
        finally:
            self._depth -= 1
            self._emit("}")

    def build(self) -> str:
        lines = list(self._lines)
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n"


__all__ = [
    "Document",
    "Node",
    "KdlWriter",
    "parse_document",
    "escape_string",
    "format_value",
]
