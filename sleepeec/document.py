"""In-memory TOML document: tables and arrays holding raw value text.

Values are kept exactly as they appear in the source document and converted
on request. The typed accessors return ``None`` when nothing is stored
under the key or index. They raise ``TomlError`` when the stored value
cannot be read as the requested type.
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar, Union

from .convert import (
    Timestamp,
    parse_bool,
    parse_float,
    parse_int,
    parse_string,
    parse_timestamp,
)

_T = TypeVar("_T")

ArrayItem = Union[str, "Array", "Table"]


def _convert(raw: Optional[str], convert: Callable[[str], _T]) -> Optional[_T]:
    if raw is None:
        return None
    return convert(raw)


class Table:
    """A TOML table.

    Entries fall into three groups, each kept in insertion order:
    ``values`` maps keys to raw value text, ``arrays`` maps keys to
    ``Array`` objects and ``tables`` maps keys to sub-tables. A key may
    appear in only one group. ``implicit`` marks a table created only as
    part of a dotted path. ``readonly`` marks a table, such as an inline
    table, that accepts no more entries.
    """

    def __init__(self, key: str = "", implicit: bool = False) -> None:
        self.key = key
        self.implicit = implicit
        self.readonly = False
        self.values: dict[str, str] = {}
        self.arrays: dict[str, Array] = {}
        self.tables: dict[str, Table] = {}

    def __repr__(self) -> str:
        return (
            f"Table(key={self.key!r}, values={self.values!r}, "
            f"arrays={list(self.arrays)!r}, tables={list(self.tables)!r})"
        )

    def key_at(self, index: int) -> Optional[str]:
        """Return the key at ``index``: values first, then arrays, then tables."""
        if index < 0:
            return None
        for group in (self.values, self.arrays, self.tables):
            if index < len(group):
                return list(group)[index]
            index -= len(group)
        return None

    def key_exists(self, key: str) -> bool:
        """Whether ``key`` names a value, an array or a table here."""
        return self.kind_of(key) is not None

    def kind_of(self, key: str) -> Optional[str]:
        """Return 'v', 'a' or 't' for the kind of entry under ``key``, or None."""
        if key in self.values:
            return "v"
        if key in self.arrays:
            return "a"
        if key in self.tables:
            return "t"
        return None

    def raw_in(self, key: str) -> Optional[str]:
        """Return the raw text of the value under ``key``, or None."""
        return self.values.get(key)

    def array_in(self, key: str) -> Optional[Array]:
        """Return the array under ``key``, or None."""
        return self.arrays.get(key)

    def table_in(self, key: str) -> Optional[Table]:
        """Return the sub-table under ``key``, or None."""
        return self.tables.get(key)

    def string_in(self, key: str) -> Optional[str]:
        """Return the value under ``key`` as a string."""
        return _convert(self.raw_in(key), parse_string)

    def bool_in(self, key: str) -> Optional[bool]:
        """Return the value under ``key`` as a boolean."""
        return _convert(self.raw_in(key), parse_bool)

    def int_in(self, key: str) -> Optional[int]:
        """Return the value under ``key`` as an integer."""
        return _convert(self.raw_in(key), parse_int)

    def float_in(self, key: str) -> Optional[float]:
        """Return the value under ``key`` as a float."""
        return _convert(self.raw_in(key), parse_float)

    def timestamp_in(self, key: str) -> Optional[Timestamp]:
        """Return the value under ``key`` as a timestamp."""
        return _convert(self.raw_in(key), parse_timestamp)


class Array:
    """A TOML array.

    ``items`` holds raw value text, nested ``Array`` objects or ``Table``
    objects. ``kind`` is 'v' (values), 'a' (arrays), 't' (tables) or 'm'
    (mixed), and None while the array is empty. ``item_type`` is the
    common type letter of the values (see ``convert.value_type``), or 'm'
    if they differ.
    """

    def __init__(self, key: str = "", kind: Optional[str] = None) -> None:
        self.key = key
        self.kind = kind
        self.item_type: Optional[str] = None
        self.items: list[ArrayItem] = []

    def __repr__(self) -> str:
        return f"Array(key={self.key!r}, kind={self.kind!r}, items={self.items!r})"

    def __len__(self) -> int:
        return len(self.items)

    def _item(self, index: int) -> Optional[ArrayItem]:
        if 0 <= index < len(self.items):
            return self.items[index]
        return None

    def raw_at(self, index: int) -> Optional[str]:
        """Return the raw text of the value at ``index``, or None."""
        item = self._item(index)
        return item if isinstance(item, str) else None

    def array_at(self, index: int) -> Optional[Array]:
        """Return the nested array at ``index``, or None."""
        item = self._item(index)
        return item if isinstance(item, Array) else None

    def table_at(self, index: int) -> Optional[Table]:
        """Return the table at ``index``, or None."""
        item = self._item(index)
        return item if isinstance(item, Table) else None

    def string_at(self, index: int) -> Optional[str]:
        """Return the value at ``index`` as a string."""
        return _convert(self.raw_at(index), parse_string)

    def bool_at(self, index: int) -> Optional[bool]:
        """Return the value at ``index`` as a boolean."""
        return _convert(self.raw_at(index), parse_bool)

    def int_at(self, index: int) -> Optional[int]:
        """Return the value at ``index`` as an integer."""
        return _convert(self.raw_at(index), parse_int)

    def float_at(self, index: int) -> Optional[float]:
        """Return the value at ``index`` as a float."""
        return _convert(self.raw_at(index), parse_float)

    def timestamp_at(self, index: int) -> Optional[Timestamp]:
        """Return the value at ``index`` as a timestamp."""
        return _convert(self.raw_at(index), parse_timestamp)

    def value_kind(self) -> Optional[str]:
        """Return the value type letter for a non-empty value array, else None."""
        if self.kind != "v" or not self.items:
            return None
        return self.item_type