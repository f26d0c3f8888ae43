"""Conversion of raw TOML value text into Python values."""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import TomlError
from .lexer import scan_date, scan_time
from .utf8 import ucs_to_utf8

_DIGITS = "0123456789"
_UPPER_HEX = "0123456789ABCDEF"
_SIMPLE_ESCAPES = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    '"': '"',
    "\\": "\\",
}
_BASE_DIGITS = {
    2: "01",
    8: "01234567",
    10: _DIGITS,
    16: "0123456789abcdefABCDEF",
}
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_NUMBER_BUFFER = 100
_FLOAT_RE = re.compile(
    r"[+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)
_SPECIAL_FLOAT_RE = re.compile(r"[+-]?(?:inf(?:inity)?|nan)", re.IGNORECASE)


@dataclass
class Timestamp:
    """A TOML date, time or date-time; fields that do not apply are None."""

    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    second: Optional[int] = None
    millisec: Optional[int] = None
    z: Optional[str] = None


def _char(text: str, index: int) -> str:
    return text[index] if 0 <= index < len(text) else ""


def _is_digit(ch: str) -> bool:
    return len(ch) == 1 and ch in _DIGITS


def _is_forbidden_control(ch: str, multiline: bool) -> bool:
    code = ord(ch)
    forbidden = code <= 0x08 or 0x0A <= code <= 0x1F or code == 0x7F
    return forbidden and not (multiline and ch in "\r\n")


def _skip(text: str, pos: int, chars: str) -> int:
    while pos < len(text) and text[pos] in chars:
        pos += 1
    return pos


def normalize_literal(text: str, multiline: bool) -> str:
    """Check the body of a literal string and return it unchanged."""
    for ch in text:
        if _is_forbidden_control(ch, multiline):
            raise TomlError(f"invalid char U+{ord(ch):04x}")
    return text


def normalize_basic(text: str, multiline: bool) -> str:
    """Resolve the escapes in the body of a basic string."""
    out: list[str] = []
    pos = 0
    end = len(text)
    while pos < end:
        ch = text[pos]
        pos += 1
        if ch != "\\":
            if _is_forbidden_control(ch, multiline):
                raise TomlError(f"invalid char U+{ord(ch):04x}")
            out.append(ch)
            continue

        if pos >= end:
            raise TomlError("last backslash is invalid")

        if multiline:
            after_blanks = _skip(text, pos, " \t\r")
            if _char(text, after_blanks) == "\n":
                pos = _skip(text, pos, " \t\r\n")
                continue

        escape = text[pos]
        pos += 1
        if escape in "uU":
            nhex = 4 if escape == "u" else 8
            code = 0
            for _ in range(nhex):
                if pos >= end:
                    raise TomlError(f"\\{escape} expects {nhex} hex chars")
                digit = text[pos]
                pos += 1
                if digit not in _UPPER_HEX:
                    raise TomlError("invalid hex chars for \\u or \\U")
                code = code * 16 + _UPPER_HEX.index(digit)
            try:
                ucs_to_utf8(code)
            except ValueError:
                raise TomlError("illegal ucs code in \\u or \\U") from None
            if code > sys.maxunicode:
                raise TomlError("illegal ucs code in \\u or \\U")
            out.append(chr(code))
            continue

        replacement = _SIMPLE_ESCAPES.get(escape)
        if replacement is None:
            raise TomlError(f"illegal escape char \\{escape}")
        out.append(replacement)
    return "".join(out)


def _strip_underscores(text: str, raw: str, kind: str) -> str:
    kept: list[str] = []
    for index, ch in enumerate(text):
        if ch == "_":
            if text[index + 1 : index + 2] in ("_", ""):
                raise TomlError(f"invalid {kind}: {raw!r}")
            continue
        kept.append(ch)
    return "".join(kept)


def _split_sign(raw: str) -> tuple[str, str]:
    if raw[:1] in ("+", "-") and raw:
        return raw[0], raw[1:]
    return "", raw


def parse_bool(raw: str) -> bool:
    """Convert ``true`` or ``false``."""
    if raw == "true":
        return True
    if raw == "false":
        return False
    raise TomlError(f"invalid boolean: {raw!r}")


def parse_int(raw: str) -> int:
    """Convert a TOML integer, including 0x, 0o and 0b forms, to a 64-bit int."""
    sign, rest = _split_sign(raw)
    if rest.startswith("_"):
        raise TomlError(f"invalid integer: {raw!r}")

    base = 10
    if rest.startswith("0"):
        prefix = rest[1:2]
        if prefix in ("x", "o", "b") and prefix:
            base = {"x": 16, "o": 8, "b": 2}[prefix]
            rest = rest[2:]
        elif prefix == "":
            return 0
        else:
            raise TomlError(f"invalid integer: {raw!r}")

    body = _strip_underscores(rest, raw, "integer")
    if len(sign) + len(body) >= _NUMBER_BUFFER:
        raise TomlError(f"integer too long: {raw!r}")
    if not body:
        if sign:
            raise TomlError(f"invalid integer: {raw!r}")
        return 0
    allowed = _BASE_DIGITS[base]
    if any(ch not in allowed for ch in body):
        raise TomlError(f"invalid integer: {raw!r}")

    value = int(sign + body, base)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise TomlError(f"integer out of range: {raw!r}")
    return value


def parse_float(raw: str) -> float:
    """Convert a TOML float."""
    sign, rest = _split_sign(raw)
    if rest.startswith("_"):
        raise TomlError(f"invalid float: {raw!r}")

    dot = rest.find(".")
    if dot != -1:
        if dot == 0 or not _is_digit(rest[dot - 1]) or not _is_digit(_char(rest, dot + 1)):
            raise TomlError(f"invalid float: {raw!r}")

    if rest[:1] == "0" and len(rest) > 1 and rest[1] not in "eE.":
        raise TomlError(f"invalid float: {raw!r}")

    body = _strip_underscores(rest, raw, "float")
    if len(sign) + len(body) >= _NUMBER_BUFFER:
        raise TomlError(f"float too long: {raw!r}")
    if not body:
        if sign:
            raise TomlError(f"invalid float: {raw!r}")
        return 0.0

    text = sign + body
    if not _FLOAT_RE.fullmatch(text):
        raise TomlError(f"invalid float: {raw!r}")
    value = float(text)
    if not _SPECIAL_FLOAT_RE.fullmatch(text):
        mantissa = re.split("[eE]", body)[0]
        underflow = value == 0.0 and any(ch in "123456789" for ch in mantissa)
        if math.isinf(value) or underflow:
            raise TomlError(f"float out of range: {raw!r}")
    return value


def _parse_millisec(raw: str, pos: int) -> tuple[int, int]:
    value = 0
    unit = 100
    while _is_digit(_char(raw, pos)):
        value += int(raw[pos]) * unit
        unit //= 10
        pos += 1
    return value, pos


def _parse_two_digits(raw: str, pos: int) -> str:
    pair = raw[pos : pos + 2]
    if len(pair) != 2 or not all(_is_digit(ch) for ch in pair):
        raise TomlError(f"invalid timestamp: {raw!r}")
    return pair


def parse_timestamp(raw: str) -> Timestamp:
    """Convert a TOML date, time or date-time."""
    ts = Timestamp()
    pos = 0
    must_parse_time = False

    date = scan_date(raw, 0)
    if date is not None:
        ts.year, ts.month, ts.day = date
        pos = 10
        if pos < len(raw):
            if raw[pos] not in "Tt ":
                raise TomlError(f"invalid timestamp: {raw!r}")
            must_parse_time = True
            pos += 1

    time = scan_time(raw, pos)
    if time is not None:
        ts.hour, ts.minute, ts.second = time
        pos += 8
        if _char(raw, pos) == ".":
            ts.millisec, pos = _parse_millisec(raw, pos + 1)

        if pos < len(raw):
            ch = raw[pos]
            ts.z = ""
            if ch in "Zz":
                ts.z = "Z"
                pos += 1
            elif ch in "+-":
                zone = ch + _parse_two_digits(raw, pos + 1)
                pos += 3
                if _char(raw, pos) == ":":
                    zone += ":" + _parse_two_digits(raw, pos + 1)
                    pos += 3
                ts.z = zone

    if pos < len(raw):
        raise TomlError(f"invalid timestamp: {raw!r}")
    if must_parse_time and ts.hour is None:
        raise TomlError(f"invalid timestamp: {raw!r}")
    return ts


def parse_string(raw: str) -> str:
    """Convert a quoted TOML string (basic, literal, or their multi-line forms)."""
    quote = raw[:1]
    if quote not in ("'", '"') or not quote:
        raise TomlError(f"not a string: {raw!r}")

    if raw[1:3] == quote * 2:
        multiline = True
        start = 3
        stop = len(raw) - 3
        if not (start <= stop and raw[stop:] == quote * 3):
            raise TomlError(f"unterminated string: {raw!r}")
        if raw[start : start + 1] == "\n":
            start += 1
        elif raw[start : start + 2] == "\r\n":
            start += 2
    else:
        multiline = False
        start = 1
        stop = len(raw) - 1
        if not (start <= stop and raw[stop] == quote):
            raise TomlError(f"unterminated string: {raw!r}")

    body = raw[start:stop]
    if quote == "'":
        return normalize_literal(body, multiline)
    return normalize_basic(body, multiline)


def _accepts(convert: Callable[[str], object], raw: str) -> bool:
    try:
        convert(raw)
    except TomlError:
        return False
    return True


def value_type(raw: str) -> str:
    """Classify raw value text.

    Returns 's' string, 'b' bool, 'i' int, 'd' float, 'T' date-time,
    'D' date, 't' time or 'u' unknown.
    """
    if raw[:1] in ("'", '"') and raw:
        return "s"
    if _accepts(parse_bool, raw):
        return "b"
    if _accepts(parse_int, raw):
        return "i"
    if _accepts(parse_float, raw):
        return "d"
    try:
        ts = parse_timestamp(raw)
    except TomlError:
        return "u"
    if ts.year is not None and ts.hour is not None:
        return "T"
    if ts.year is not None:
        return "D"
    return "t"