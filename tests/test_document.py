from __future__ import annotations

import pytest

from nirify.document import KdlWriter, escape_string, format_value, parse_document
from nirify.errors import DocumentParseError


def test_parse_converts_values():
    doc = parse_document('node "s" 1 2.5 true prop="v" n=3\n')
    node = doc.get("node")
    assert node.args == ["s", 1, 2.5, True]
    assert node.props == {"prop": "v", "n": 3}


def test_integer_literals_stay_integers():
    node = parse_document("a 250 -3 0x10 1.5 x=3 y=2.0\n").get("a")
    assert node.args == [250, -3, 16, 1.5]
    assert [type(v) for v in node.args] == [int, int, int, float]
    assert type(node.props["x"]) is int
    assert type(node.props["y"]) is float


def test_parse_error_raises():
    with pytest.raises(DocumentParseError):
        parse_document("node {\n")


def test_leading_comments_attach_to_top_level_nodes():
    text = (
        "// header\n"
        "\n"
        "// First\n"
        "window-rule {\n"
        "    // not a name\n"
        "    opacity 0.5\n"
        "}\n"
        "window-rule {\n"
        "}\n"
    )
    doc = parse_document(text)
    first, second = list(doc.all("window-rule"))
    assert first.leading_comment == "First"
    assert second.leading_comment is None


def test_escape_string_control_characters():
    assert escape_string('a"b\\c\n') == '"a\\"b\\\\c\\n"'


def test_format_value():
    assert format_value(True) == "true"
    assert format_value(3) == "3"
    assert format_value(1.0) == "1.0"
    assert format_value(0.25) == "0.25"
    assert format_value("x") == '"x"'


def test_writer_blocks_and_header():
    w = KdlWriter(header="Demo settings")
    with w.block("outer"):
        w.node("value", 1, props={"k": "v"})
        w.flag("on")
        w.optional("skip", None)
    text = w.build()
    assert text.splitlines() == [
        "// Demo settings",
        "",
        "outer {",
        '    value 1 k="v"',
        "    on",
        "}",
    ]
    assert parse_document(text).get("outer").get("value").first_arg == 1


def test_comments_never_span_lines():
    w = KdlWriter()
    w.comment("one\ntwo\r\nthree four")
    assert w.build() == "// one two three four\n"
