"""Exceptions raised while reading TOML documents."""

from __future__ import annotations


class TomlError(ValueError):
    """Base class for every error raised while parsing or converting TOML."""


class TomlSyntaxError(TomlError):
    """A syntax error tied to a line of the input document."""

    def __init__(self, lineno: int, message: str) -> None:
        self.lineno = lineno
        self.message = message
        super().__init__(f"line {lineno}: {message}")