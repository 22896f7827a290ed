import pytest

from tailquant.parsers import parse_value


@pytest.mark.parametrize(
    "line,expected",
    [("42\n", 42), ("  -7 ", -7), ("3.5", 3.5), ("1e3", 1000.0), ("", None), ("abc", None), ("12 ms", None)],
)
def test_bare_numbers(line, expected):
    assert parse_value(line) == expected


def test_integers_stay_integers():
    assert isinstance(parse_value("17"), int)
    assert isinstance(parse_value("17.0"), float)


def test_key_value_field():
    line = "2025-10-04T00:00:01Z INFO GET /api latency=125ms status=200"
    assert parse_value(line, field="latency") == 125
    assert parse_value(line, field="status") == 200
    assert parse_value(line, field="missing") is None
    # prefix of another key does not match
    assert parse_value("xlatency=5 latency=9", field="latency") == 9


def test_json_field():
    assert parse_value('{"latency": 12.5, "path": "/a"}', field="latency") == 12.5
    assert parse_value('{"latency": "40"}', field="latency") == 40
    assert parse_value('{"latency": true}', field="latency") is None
    assert parse_value('{"other": 1}', field="latency") is None
    assert parse_value('{not json}', field="latency") is None
