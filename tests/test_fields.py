from __future__ import annotations

import logging

import pytest

from nirify.document import parse_document
from nirify.fields import (
    get_float,
    get_integer,
    get_string,
    has_flag,
    load_color,
    load_flag,
    load_i32,
    load_u32,
)
from nirify.types import Color


class Target:
    value = None


def test_has_flag_presence_and_explicit_bool():
    doc = parse_document("a\nb true\nc false\n")
    assert has_flag(doc, ["a"]) is True
    assert has_flag(doc, ["b"]) is True
    assert has_flag(doc, ["c"]) is False
    assert has_flag(doc, ["missing"]) is False


def test_load_flag_leaves_absent_fields_alone():
    doc = parse_document("present\n")
    target = Target()
    target.value = True
    load_flag(doc, ["missing"], target, "value")
    assert target.value is True
    load_flag(doc, ["present"], target, "value")
    assert target.value is True


def test_nested_getters():
    doc = parse_document('outer {\n    inner {\n        name "x"\n        n 3\n    }\n}\n')
    assert get_string(doc, ["outer", "inner", "name"]) == "x"
    assert get_integer(doc, ["outer", "inner", "n"]) == 3
    assert get_float(doc, ["outer", "inner", "n"]) == 3.0
    assert get_string(doc, ["outer", "nope", "name"]) is None


def test_get_integer_rejects_floats():
    doc = parse_document("ratio 0.5\n")
    assert get_integer(doc, ["ratio"]) is None
    assert get_float(doc, ["ratio"]) == 0.5


def test_narrowing_loads_reject_out_of_range(caplog):
    doc = parse_document("big 4294967296\nneg -1\nok 12\n")
    target = Target()
    with caplog.at_level(logging.WARNING, logger="nirify.fields"):
        load_i32(doc, ["big"], target, "value")
        load_u32(doc, ["neg"], target, "value")
    assert target.value is None
    assert "out of" in caplog.text
    load_u32(doc, ["ok"], target, "value")
    assert target.value == 12


@pytest.mark.parametrize(
    "text, expected",
    [
        ("#abc", Color(0xAA, 0xBB, 0xCC, 255)),
        ("#abcd", Color(0xAA, 0xBB, 0xCC, 0xDD)),
        ("#7fc8ff", Color(0x7F, 0xC8, 0xFF, 255)),
        ("#00000070", Color(0, 0, 0, 0x70)),
    ],
)
def test_color_forms(text, expected):
    assert Color.from_hex(text) == expected


@pytest.mark.parametrize("text", ["#12", "#12345", "#1234567", "#ggg", "", "#"])
def test_color_rejects_other_lengths(text):
    assert Color.from_hex(text) is None


def test_color_hex_is_idempotent():
    for text in ("#7fc8ff", "#00000070"):
        assert Color.from_hex(text).to_hex() == text
    assert Color.from_hex("#abc").to_hex() == "#aabbcc"


def test_load_color_skips_invalid(caplog):
    doc = parse_document('good "#fff"\nbad "#12"\n')
    target = Target()
    with caplog.at_level(logging.WARNING, logger="nirify.fields"):
        load_color(doc, ["bad"], target, "value")
    assert target.value is None
    assert "invalid color" in caplog.text
    load_color(doc, ["good"], target, "value")
    assert target.value == Color(255, 255, 255, 255)
