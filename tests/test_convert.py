import math

import pytest

from sleepeec.convert import (
    normalize_basic,
    normalize_literal,
    parse_bool,
    parse_float,
    parse_int,
    parse_string,
    parse_timestamp,
    value_type,
)
from sleepeec.errors import TomlError


def test_parse_bool_values():
    assert parse_bool("true") is True
    assert parse_bool("false") is False


@pytest.mark.parametrize("raw", ["True", "yes", "", "1", "false "])
def test_parse_bool_rejects(raw):
    with pytest.raises(TomlError):
        parse_bool(raw)


@pytest.mark.parametrize("number", [0, 7, 1234567, -42, 2**63 - 1, -(2**63)])
def test_parse_int_decimal_round_trip(number):
    assert parse_int(str(number)) == number


@pytest.mark.parametrize("number", [1, 255, 4096])
def test_parse_int_prefixed_forms(number):
    assert parse_int("0x" + format(number, "X")) == number
    assert parse_int("0x" + format(number, "x")) == number
    assert parse_int("0o" + format(number, "o")) == number
    assert parse_int("0b" + format(number, "b")) == number


def test_parse_int_underscores_and_sign():
    assert parse_int("1_000_000") == parse_int("1000000")
    assert parse_int("+17") == parse_int("17")
    assert parse_int("-0") == 0


@pytest.mark.parametrize(
    "raw",
    [
        "1__0",
        "10_",
        "_10",
        "+_10",
        "012",
        "0.5",
        "1e3",
        "abc",
        "+",
        "0b102",
        str(2**63),
        str(-(2**63) - 1),
        "1" * 100,
    ],
)
def test_parse_int_rejects(raw):
    with pytest.raises(TomlError):
        parse_int(raw)


@pytest.mark.parametrize("raw", ["3.14", "-0.5", "1e5", "6.626e-34", "+1.5", "0.0", "5E+22", "42"])
def test_parse_float_matches_python(raw):
    assert parse_float(raw) == float(raw)


def test_parse_float_underscores():
    assert parse_float("9_224_617.445_991") == float("9224617.445991")


def test_parse_float_special_values():
    assert math.isinf(parse_float("inf")) and parse_float("inf") > 0
    assert parse_float("-inf") < 0
    assert math.isnan(parse_float("nan"))


@pytest.mark.parametrize("raw", [".5", "5.", "01.5", "1._5", "1e", "1e999", "_1.0", "1.0_", "abc", "+"])
def test_parse_float_rejects(raw):
    with pytest.raises(TomlError):
        parse_float(raw)


def test_parse_timestamp_date_time_utc():
    ts = parse_timestamp("1979-05-27T07:32:00Z")
    assert (ts.year, ts.month, ts.day) == (1979, 5, 27)
    assert (ts.hour, ts.minute, ts.second) == (7, 32, 0)
    assert ts.millisec is None
    assert ts.z == "Z"


def test_parse_timestamp_offset_and_fraction():
    ts = parse_timestamp("1979-05-27 00:32:00.999-07:00")
    assert ts.hour == 0
    assert ts.millisec == 999
    assert ts.z == "-07:00"


def test_parse_timestamp_lowercase_separators():
    ts = parse_timestamp("1979-05-27t07:32:00z")
    assert ts.z == "Z"
    assert ts.minute == 32


def test_parse_timestamp_date_only():
    ts = parse_timestamp("1979-05-27")
    assert ts.day == 27
    assert ts.hour is None and ts.z is None


def test_parse_timestamp_time_only():
    ts = parse_timestamp("07:32:00")
    assert ts.year is None
    assert ts.second == 0


def test_parse_timestamp_short_fraction():
    assert parse_timestamp("07:32:00.5").millisec == 500


@pytest.mark.parametrize(
    "raw",
    ["1979-05-27X07:32:00", "1979-05-27T", "07:32", "07:32:00+7", "1979-05-27T07:32:00 extra"],
)
def test_parse_timestamp_rejects(raw):
    with pytest.raises(TomlError):
        parse_timestamp(raw)


@pytest.mark.parametrize(
    "raw, kind",
    [
        ('"x"', "s"),
        ("'x'", "s"),
        ("true", "b"),
        ("42", "i"),
        ("3.5", "d"),
        ("1979-05-27T07:32:00Z", "T"),
        ("1979-05-27", "D"),
        ("07:32:00", "t"),
        ("hello", "u"),
    ],
)
def test_value_type(raw, kind):
    assert value_type(raw) == kind


def test_parse_string_basic_escape():
    assert parse_string('"a\\tb"') == "a\tb"
    assert parse_string('"say \\"hi\\""') == 'say "hi"'


def test_parse_string_literal_is_verbatim():
    raw = "'C:\\dir\\n'"
    assert parse_string(raw) == raw[1:-1]


def test_parse_string_empty():
    assert parse_string('""') == ""
    assert parse_string("''") == ""


def test_parse_string_multiline_drops_first_newline():
    assert parse_string('"""\nline one\nline two"""') == "line one\nline two"
    assert parse_string("'''\r\nkeep \\n raw'''") == "keep \\n raw"


def test_parse_string_line_ending_backslash():
    assert parse_string('"""The quick \\\n   brown"""') == "The quick brown"


def test_parse_string_unicode_escapes():
    assert parse_string('"\\u00E9"') == "\u00e9"
    assert parse_string('"\\U0001F600"') == "\U0001F600"


@pytest.mark.parametrize(
    "raw, message",
    [
        ('"bad \\q"', "illegal escape char"),
        ('"\\u00e9"', "invalid hex chars"),
        ('"\\uD800"', "illegal ucs code"),
        ('"end\\"', "last backslash is invalid"),
        ('"\\u12"', "expects 4 hex chars"),
        ('"a\nb"', "invalid char"),
        ('"tab\x01"', "invalid char"),
    ],
)
def test_parse_string_errors(raw, message):
    with pytest.raises(TomlError, match=message):
        parse_string(raw)


@pytest.mark.parametrize("raw", ["plain", '"unterminated', "'''ab''", "'"])
def test_parse_string_rejects_unquoted_or_unterminated(raw):
    with pytest.raises(TomlError):
        parse_string(raw)


def test_normalize_literal_multiline_newlines():
    assert normalize_literal("a\nb", True) == "a\nb"
    with pytest.raises(TomlError, match="invalid char"):
        normalize_literal("a\nb", False)


def test_normalize_basic_allows_tab():
    assert normalize_basic("tab\there", False) == "tab\there"
    assert normalize_basic("x\\ny", False) == "x\ny"