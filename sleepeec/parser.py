"""Parser building a ``Table`` tree from TOML text."""

from __future__ import annotations

from typing import IO, Optional, Union

from .convert import normalize_basic, value_type
from .document import Array, Table
from .errors import TomlError, TomlSyntaxError
from .lexer import Lexer, Token, TokenType

_MAX_TABLE_DEPTH = 10
_ANONYMOUS_KEY = "__anon__"


def _is_bare_key_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch in "_-")


class _Parser:
    def __init__(self, text: str) -> None:
        self.lexer = Lexer(text)
        self.root = Table()
        self.curtab = self.root
        self.path: list[tuple[Token, str]] = []

    @property
    def tok(self) -> Token:
        return self.lexer.token

    def advance(self, dot_is_special: bool) -> Token:
        return self.lexer.next_token(dot_is_special)

    def eat(self, kind: TokenType, dot_is_special: bool) -> None:
        if self.tok.type is not kind:
            raise TomlError(f"internal error: expected {kind.name}, found {self.tok.type.name}")
        self.advance(dot_is_special)

    # keys

    def normalize_key(self, token: Token) -> str:
        text = token.text
        quote = text[:1]
        if quote in ("'", '"') and quote:
            if text[1:3] == quote * 2:
                body, multiline = text[3:-3], True
            else:
                body, multiline = text[1:-1], False
            if quote == "'":
                key = body
            else:
                try:
                    key = normalize_basic(body, multiline)
                except TomlSyntaxError:
                    raise
                except TomlError as exc:
                    raise TomlSyntaxError(token.lineno, str(exc)) from None
            if "\n" in key:
                raise TomlSyntaxError(token.lineno, "bad key")
            return key

        if not all(_is_bare_key_char(ch) for ch in text):
            raise TomlSyntaxError(token.lineno, "bad key")
        return text

    def new_value_key(self, tab: Table, token: Token) -> str:
        key = self.normalize_key(token)
        if tab.key_exists(key):
            raise TomlSyntaxError(token.lineno, "key exists")
        return key

    def new_table(self, tab: Table, token: Token) -> Table:
        key = self.normalize_key(token)
        if tab.key_exists(key):
            existing = tab.table_in(key)
            if existing is not None and existing.implicit:
                existing.implicit = False
                return existing
            raise TomlSyntaxError(token.lineno, "key exists")
        table = Table(key)
        tab.tables[key] = table
        return table

    def new_array(self, tab: Table, token: Token, kind: Optional[str]) -> Array:
        key = self.normalize_key(token)
        if tab.key_exists(key):
            raise TomlSyntaxError(token.lineno, "key exists")
        array = Array(key, kind)
        tab.arrays[key] = array
        return array

    # values

    def skip_newlines(self, dot_is_special: bool) -> None:
        while self.tok.type is TokenType.NEWLINE:
            self.advance(dot_is_special)
            if self.tok.eof:
                break

    def parse_inline_table(self, tab: Table) -> None:
        self.eat(TokenType.LBRACE, True)
        while True:
            if self.tok.type is TokenType.NEWLINE:
                raise TomlSyntaxError(self.tok.lineno, "newline not allowed in inline table")
            if self.tok.type is TokenType.RBRACE:
                break
            if self.tok.type is not TokenType.STRING:
                raise TomlSyntaxError(self.tok.lineno, "expect a string")
            self.parse_keyval(tab)
            if self.tok.type is TokenType.NEWLINE:
                raise TomlSyntaxError(self.tok.lineno, "newline not allowed in inline table")
            if self.tok.type is TokenType.COMMA:
                self.eat(TokenType.COMMA, True)
                continue
            break
        self.eat(TokenType.RBRACE, True)
        tab.readonly = True

    @staticmethod
    def _set_kind(arr: Array, kind: str) -> None:
        if arr.kind is None:
            arr.kind = kind
        elif arr.kind != kind:
            arr.kind = "m"

    def parse_array(self, arr: Array) -> None:
        self.eat(TokenType.LBRACKET, False)
        while True:
            self.skip_newlines(False)
            tok = self.tok
            if tok.type is TokenType.RBRACKET:
                break
            if tok.type is TokenType.STRING:
                self._set_kind(arr, "v")
                arr.items.append(tok.text)
                vtype = value_type(tok.text)
                if len(arr.items) == 1:
                    arr.item_type = vtype
                elif arr.item_type != vtype:
                    arr.item_type = "m"
                self.eat(TokenType.STRING, False)
            elif tok.type is TokenType.LBRACKET:
                self._set_kind(arr, "a")
                sub = Array()
                arr.items.append(sub)
                self.parse_array(sub)
            elif tok.type is TokenType.LBRACE:
                self._set_kind(arr, "t")
                table = Table()
                arr.items.append(table)
                self.parse_inline_table(table)
            else:
                raise TomlSyntaxError(tok.lineno, "syntax error")

            self.skip_newlines(False)
            if self.tok.type is TokenType.COMMA:
                self.eat(TokenType.COMMA, False)
                continue
            break
        self.eat(TokenType.RBRACKET, True)

    def parse_keyval(self, tab: Table) -> None:
        if tab.readonly:
            raise TomlSyntaxError(self.tok.lineno, "cannot insert new entry into existing table")

        key = self.tok
        self.eat(TokenType.STRING, True)

        if self.tok.type is TokenType.DOT:
            subtab = tab.table_in(self.normalize_key(key))
            if subtab is None:
                subtab = self.new_table(tab, key)
            self.advance(True)
            self.parse_keyval(subtab)
            return

        if self.tok.type is not TokenType.EQUAL:
            raise TomlSyntaxError(self.tok.lineno, "missing =")
        self.advance(False)

        tok = self.tok
        if tok.type is TokenType.STRING:
            name = self.new_value_key(tab, key)
            tab.values[name] = tok.text
            self.advance(True)
        elif tok.type is TokenType.LBRACKET:
            self.parse_array(self.new_array(tab, key, None))
        elif tok.type is TokenType.LBRACE:
            self.parse_inline_table(self.new_table(tab, key))
        else:
            raise TomlSyntaxError(tok.lineno, "syntax error")

    # table headers

    def fill_path(self) -> None:
        lineno = self.tok.lineno
        self.path = []
        while True:
            if len(self.path) >= _MAX_TABLE_DEPTH:
                raise TomlSyntaxError(
                    lineno, f"table path is too deep; max allowed is {_MAX_TABLE_DEPTH}."
                )
            if self.tok.type is not TokenType.STRING:
                raise TomlSyntaxError(lineno, "invalid or missing key")
            self.path.append((self.tok, self.normalize_key(self.tok)))
            self.advance(True)
            if self.tok.type is TokenType.RBRACKET:
                break
            if self.tok.type is not TokenType.DOT:
                raise TomlSyntaxError(lineno, "invalid key")
            self.advance(True)

    def walk_path(self) -> None:
        current = self.root
        for token, key in self.path:
            kind = current.kind_of(key)
            if kind == "t":
                current = current.tables[key]
            elif kind == "a":
                arr = current.arrays[key]
                if arr.kind != "t" or not arr.items:
                    raise TomlError(f"internal error: cannot descend into array {key!r}")
                last = arr.items[-1]
                if not isinstance(last, Table):
                    raise TomlError(f"internal error: cannot descend into array {key!r}")
                current = last
            elif kind == "v":
                raise TomlSyntaxError(token.lineno, "key exists")
            else:
                table = Table(key, implicit=True)
                current.tables[key] = table
                current = table
        self.curtab = current

    def parse_select(self) -> None:
        text = self.lexer.text
        start = self.tok.pos
        double = text[start + 1 : start + 2] == "["

        self.eat(TokenType.LBRACKET, True)
        if double:
            self.eat(TokenType.LBRACKET, True)

        self.fill_path()
        last_token, _ = self.path.pop()
        self.walk_path()

        if not double:
            self.curtab = self.new_table(self.curtab, last_token)
        else:
            arr = self.curtab.array_in(self.normalize_key(last_token))
            if arr is None:
                arr = self.new_array(self.curtab, last_token, "t")
            if arr.kind != "t":
                raise TomlSyntaxError(last_token.lineno, "array mismatch")
            table = Table(_ANONYMOUS_KEY)
            arr.items.append(table)
            self.curtab = table

        if self.tok.type is not TokenType.RBRACKET:
            raise TomlSyntaxError(self.tok.lineno, "expects ]")
        if double:
            if text[self.tok.pos + 1 : self.tok.pos + 2] != "]":
                raise TomlSyntaxError(self.tok.lineno, "expects ]]")
            self.eat(TokenType.RBRACKET, True)
        self.eat(TokenType.RBRACKET, True)

        if self.tok.type is not TokenType.NEWLINE:
            raise TomlSyntaxError(self.tok.lineno, "extra chars after ] or ]]")

    def run(self) -> Table:
        while not self.tok.eof:
            tok = self.tok
            if tok.type is TokenType.NEWLINE:
                self.advance(True)
            elif tok.type is TokenType.STRING:
                self.parse_keyval(self.curtab)
                if self.tok.type is not TokenType.NEWLINE:
                    raise TomlSyntaxError(self.tok.lineno, "extra chars after value")
                self.eat(TokenType.NEWLINE, True)
            elif tok.type is TokenType.LBRACKET:
                self.parse_select()
            else:
                raise TomlSyntaxError(tok.lineno, "syntax error")
        return self.root


def parse(text: str) -> Table:
    """Parse a TOML document and return its root table.

    Raises ``TomlSyntaxError`` (or another ``TomlError``) on malformed input.
    """
    return _Parser(text).run()


def parse_file(fp: Union[IO[str], IO[bytes]]) -> Table:
    """Read a whole open file, text or binary, and parse it."""
    data = fp.read()
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TomlError(f"file is not valid UTF-8: {exc}") from None
    return parse(data)