"""Tokenizer for TOML documents."""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .errors import TomlSyntaxError

_DIGITS = "0123456789"
_UPPER_HEX = "0123456789ABCDEF"
_SIMPLE_ESCAPES = 'btnfr"\\'
_TIMESTAMP_CHARS = "0123456789.:+-Tt Zz"
_LITERAL_CHARS = string.ascii_letters + "0123456789+-_."


class TokenType(Enum):
    INVALID = auto()
    DOT = auto()
    COMMA = auto()
    EQUAL = auto()
    LBRACE = auto()
    RBRACE = auto()
    NEWLINE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    STRING = auto()


_PUNCTUATION = {
    ",": TokenType.COMMA,
    "=": TokenType.EQUAL,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "\n": TokenType.NEWLINE,
}


@dataclass(frozen=True)
class Token:
    """One token: its type, starting line, offset and exact text."""

    type: TokenType
    lineno: int
    pos: int
    text: str
    eof: bool = False

    @property
    def length(self) -> int:
        return len(self.text)


def _scan_digits(text: str, pos: int, count: int) -> Optional[int]:
    chunk = text[pos : pos + count] if pos >= 0 else ""
    if len(chunk) != count or not all(ch in _DIGITS for ch in chunk):
        return None
    return int(chunk)


def _char(text: str, index: int) -> str:
    return text[index] if 0 <= index < len(text) else ""


def scan_date(text: str, pos: int) -> Optional[tuple[int, int, int]]:
    """Read ``YYYY-MM-DD`` at ``pos``; return (year, month, day) or None."""
    year = _scan_digits(text, pos, 4)
    if year is None or _char(text, pos + 4) != "-":
        return None
    month = _scan_digits(text, pos + 5, 2)
    if month is None or _char(text, pos + 7) != "-":
        return None
    day = _scan_digits(text, pos + 8, 2)
    if day is None:
        return None
    return year, month, day


def scan_time(text: str, pos: int) -> Optional[tuple[int, int, int]]:
    """Read ``HH:MM:SS`` at ``pos``; return (hour, minute, second) or None."""
    hour = _scan_digits(text, pos, 2)
    if hour is None or _char(text, pos + 2) != ":":
        return None
    minute = _scan_digits(text, pos + 3, 2)
    if minute is None or _char(text, pos + 5) != ":":
        return None
    second = _scan_digits(text, pos + 6, 2)
    if second is None:
        return None
    return hour, minute, second


class Lexer:
    """Produces tokens one at a time; ``token`` holds the current one.

    Input stops at the first NUL character. The lexer starts on an empty
    NEWLINE token at line 1.
    """

    def __init__(self, text: str) -> None:
        self.text = text.split("\0", 1)[0]
        self.token = Token(TokenType.NEWLINE, 1, 0, "")

    def next_token(self, dot_is_special: bool) -> Token:
        """Move past the current token and return the next one."""
        text = self.text
        end = len(text)
        lineno = self.token.lineno + self.token.text.count("\n")
        pos = self.token.pos + self.token.length

        while pos < end:
            ch = text[pos]
            if ch == "#":
                newline = text.find("\n", pos)
                pos = end if newline == -1 else newline
                continue
            if dot_is_special and ch == ".":
                return self._emit(TokenType.DOT, lineno, pos, pos + 1)
            kind = _PUNCTUATION.get(ch)
            if kind is not None:
                return self._emit(kind, lineno, pos, pos + 1)
            if ch in "\r \t":
                pos += 1
                continue
            return self._scan_string(pos, lineno, dot_is_special)

        self.token = Token(TokenType.NEWLINE, lineno, end, "", eof=True)
        return self.token

    def _emit(self, kind: TokenType, lineno: int, start: int, stop: int) -> Token:
        self.token = Token(kind, lineno, start, self.text[start:stop])
        return self.token

    def _line_ending_backslash(self, pos: int) -> bool:
        text = self.text
        while pos < len(text) and text[pos] in " \t\r":
            pos += 1
        return _char(text, pos) == "\n"

    def _scan_string(self, pos: int, lineno: int, dot_is_special: bool) -> Token:
        text = self.text
        end = len(text)

        if text.startswith("'''", pos):
            close = text.find("'''", pos + 3)
            if close == -1:
                raise TomlSyntaxError(lineno, "unterminated triple-s-quote")
            while _char(text, close + 3) == "'":
                close += 1
            return self._emit(TokenType.STRING, lineno, pos, close + 3)

        if text.startswith('"""', pos):
            close = pos + 3
            while True:
                close = text.find('"""', close)
                if close == -1:
                    raise TomlSyntaxError(lineno, "unterminated triple-d-quote")
                if text[close - 1] == "\\":
                    close += 1
                    continue
                while _char(text, close + 3) == '"':
                    close += 1
                break
            self._check_escapes(pos + 3, close, lineno, multiline=True)
            return self._emit(TokenType.STRING, lineno, pos, close + 3)

        if text[pos] == "'":
            close = pos + 1
            while close < end and text[close] not in "\n'":
                close += 1
            if _char(text, close) != "'":
                raise TomlSyntaxError(lineno, "unterminated s-quote")
            return self._emit(TokenType.STRING, lineno, pos, close + 1)

        if text[pos] == '"':
            close = self._check_escapes(pos + 1, end, lineno, multiline=False)
            if _char(text, close) != '"':
                raise TomlSyntaxError(lineno, "unterminated quote")
            return self._emit(TokenType.STRING, lineno, pos, close + 1)

        if scan_date(text, pos) is not None or scan_time(text, pos) is not None:
            stop = pos
            while stop < end and text[stop] in _TIMESTAMP_CHARS:
                stop += 1
            while text[stop - 1] == " ":
                stop -= 1
            return self._emit(TokenType.STRING, lineno, pos, stop)

        stop = pos
        while stop < end and text[stop] != "\n":
            ch = text[stop]
            if ch == "." and dot_is_special:
                break
            if ch not in _LITERAL_CHARS:
                break
            stop += 1
        return self._emit(TokenType.STRING, lineno, pos, stop)

    def _check_escapes(self, start: int, stop: int, lineno: int, multiline: bool) -> int:
        """Validate escapes in ``text[start:stop]``.

        For a single-line string, scanning ends at a closing quote or a
        newline; the returned index is where scanning stopped.
        """
        text = self.text
        hex_needed = 0
        escape = False
        pos = start
        while pos < stop:
            ch = text[pos]
            if escape:
                escape = False
                if ch in _SIMPLE_ESCAPES:
                    pass
                elif ch == "u":
                    hex_needed = 4
                elif ch == "U":
                    hex_needed = 8
                elif not (multiline and self._line_ending_backslash(pos)):
                    raise TomlSyntaxError(lineno, "bad escape char")
            elif hex_needed:
                hex_needed -= 1
                if ch not in _UPPER_HEX:
                    raise TomlSyntaxError(lineno, "expect hex char")
            elif ch == "\\":
                escape = True
            elif not multiline:
                if ch == "'" and text[pos + 1 : pos + 3] == "''":
                    raise TomlSyntaxError(lineno, "triple-s-quote inside string lit")
                if ch in '\n"':
                    return pos
            pos += 1
        if multiline:
            if escape:
                raise TomlSyntaxError(lineno, "expect an escape char")
            if hex_needed:
                raise TomlSyntaxError(lineno, "expected more hex char")
        return pos