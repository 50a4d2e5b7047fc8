"""Tests for small utility helpers."""

import logging

import pytest

from nemoprefs.utils.coerce import (
    coerce_float_text,
    coerce_int_text,
    parse_boolish,
)
from nemoprefs.utils.json_utils import parse_json_payload, safe_parse_json
from nemoprefs.utils.log import StructuredFormatter, init_logger


def test_parse_boolish():
    assert parse_boolish("ON")
    assert not parse_boolish("0", default=True)
    assert parse_boolish("unknown", default=True)
    assert not parse_boolish(None)


def test_numeric_text_coercion():
    assert coerce_int_text("42") == 42
    assert coerce_int_text(42.0) == 42.0
    assert coerce_float_text("1.5") == 1.5
    assert coerce_float_text(None) is None
    with pytest.raises(ValueError):
        coerce_int_text("4k")
    with pytest.raises(ValueError):
        coerce_float_text("nan")


def test_safe_parse_json():
    assert safe_parse_json('{"a": 1}') == {"a": 1}
    assert safe_parse_json("{bad") is None
    assert safe_parse_json("") is None


def test_parse_json_payload():
    assert parse_json_payload('{"a": 1}') == {"a": 1}
    assert parse_json_payload(b"[1]") == [1]
    assert parse_json_payload({"a": 1}) == {"a": 1}
    with pytest.raises(ValueError):
        parse_json_payload("{bad")


def test_structured_formatter_appends_extras():
    formatter = StructuredFormatter("%(message)s")
    record = logging.LogRecord("nemoprefs", logging.INFO, __file__, 1, "hello", (), None)
    record.source = "storage"
    assert formatter.format(record) == 'hello | {"source": "storage"}'


def _file_handlers():
    return [h for h in logging.getLogger("nemoprefs").handlers if isinstance(h, logging.FileHandler)]


def test_init_logger_writes_file(tmp_path):
    logger = init_logger(tmp_path)
    try:
        logger.debug("[test] file logging works", extra={"case": 1})
        files = list(tmp_path.glob("nemoprefs_*.log"))
        assert len(files) == 1
        assert "file logging works" in files[0].read_text(encoding="utf-8")
    finally:
        logger.logger.removeHandler(logger._file_handler)
        logger._file_handler.close()
        logger._file_handler = None
        logger._file_handler_path = None


def test_init_logger_replaces_file_handler(tmp_path):
    before = len(_file_handlers())
    first = init_logger(tmp_path / "a")
    second = init_logger(tmp_path / "a")
    third = init_logger(tmp_path / "b")
    try:
        assert first is second is third
        assert len(_file_handlers()) == before + 1
        assert third._file_handler_path.parent == tmp_path / "b"
    finally:
        third.logger.removeHandler(third._file_handler)
        third._file_handler.close()
        third._file_handler = None
        third._file_handler_path = None
