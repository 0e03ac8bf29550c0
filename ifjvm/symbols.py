"""Symbols, chained hash symbol tables, and the string helpers sort and find."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Callable, Iterator, Optional

HTAB_DEFAULT_SIZE = 101


class SymbolType(Enum):
    """Kind of value a symbol stands for."""

    NULL = 0
    INT = 1
    DOUBLE = 2
    BOOL = 3
    STRING = 4
    FUNCTION = 5
    CLASS = 6


@dataclass(eq=False)
class FunctionData:
    """Signature and code location of a function symbol."""

    arguments: list = field(default_factory=list)
    return_type: SymbolType = SymbolType.NULL
    instruction_index: int = 0
    local_table: Optional["SymbolTable"] = None

    @property
    def number_of_arguments(self) -> int:
        return len(self.arguments)


@dataclass(eq=False)
class Symbol:
    """A named entry of a symbol table.

    ``value`` holds the data of literals and static variables, ``function``
    the data of a function and ``members`` the local table of a class.
    ``index`` is the slot in a local frame, -1 while unassigned.
    """

    name: Optional[str] = None
    type: SymbolType = SymbolType.NULL
    defined: bool = False
    const: bool = False
    index: int = -1
    value: Any = None
    function: Optional[FunctionData] = None
    members: Optional["SymbolTable"] = None

    def copy(self) -> "Symbol":
        """Return a new symbol with the same fields; nested data is shared."""
        return replace(self)

    def add_argument(self, argument: "Symbol") -> "Symbol":
        """Register ``argument`` as the next parameter of this function."""
        if self.type is not SymbolType.FUNCTION:
            raise ValueError(f"symbol {self.name!r} is not a function")
        if self.function is None:
            self.function = FunctionData()
        self.function.arguments.append(argument)
        return argument


def hash_name(name: str, size: int) -> int:
    """Hash a symbol name into a bucket index in ``range(size)``."""
    h = 0
    for byte in name.encode("utf-8"):
        h = (65599 * h + byte) & 0xFFFFFFFF
    return h % size


class SymbolTable:
    """Hash table of symbols with separate chaining.

    Newly added symbols go to the front of their bucket; iteration walks the
    buckets in order and each bucket from its front.
    """

    def __init__(self, size: int = HTAB_DEFAULT_SIZE, parent: Optional[Symbol] = None) -> None:
        if size <= 0:
            raise ValueError("table size must be positive")
        self.size = size
        self.parent = parent
        self._buckets: list[list[Symbol]] = [[] for _ in range(size)]

    def _bucket(self, name: str) -> list[Symbol]:
        return self._buckets[hash_name(name, self.size)]

    def add(self, symbol: Symbol, overwrite: bool = False) -> Optional[Symbol]:
        """Store a copy of ``symbol`` and return the stored symbol.

        If a symbol of that name exists, return None unless ``overwrite`` is
        set, in which case the existing symbol takes over every field of
        ``symbol`` except its name and is returned.
        """
        if symbol.name is None:
            raise ValueError("symbol has no name")
        found = self.get(symbol.name)
        if found is not None:
            if not overwrite:
                return None
            for f in fields(Symbol):
                if f.name != "name":
                    setattr(found, f.name, getattr(symbol, f.name))
            return found
        stored = symbol.copy()
        self._bucket(stored.name).insert(0, stored)
        return stored

    def get(self, name: str) -> Optional[Symbol]:
        """Return the symbol called ``name``, or None."""
        return next((s for s in self._bucket(name) if s.name == name), None)

    def remove(self, name: str) -> None:
        """Remove the symbol called ``name`` if there is one."""
        bucket = self._bucket(name)
        for position, symbol in enumerate(bucket):
            if symbol.name == name:
                del bucket[position]
                return

    def clear(self) -> None:
        """Remove every symbol."""
        for bucket in self._buckets:
            bucket.clear()

    def copy(self) -> "SymbolTable":
        """Return a table of the same size holding copies of every symbol."""
        table = SymbolTable(self.size)
        table._buckets = [[symbol.copy() for symbol in bucket] for bucket in self._buckets]
        return table

    def for_each(self, func: Callable[[Symbol], Optional[Symbol]]) -> bool:
        """Call ``func`` on every symbol; True if it never returned None."""
        ok = True
        for symbol in self:
            if func(symbol) is None:
                ok = False
        return ok

    def generate_indices(self) -> None:
        """Give frame slots to the locals of a function table.

        Arguments take the first slots in declaration order, then the
        remaining symbols in iteration order. Symbols that already have a
        slot keep it.
        """
        parent = self.parent
        if parent is None or parent.type is not SymbolType.FUNCTION or parent.function is None:
            return
        counter = 0
        for argument in parent.function.arguments:
            if argument.const:
                raise RuntimeError(f"argument {argument.name!r} is marked constant")
            if argument.index == -1:
                argument.index = counter
                counter += 1
        for symbol in self:
            if symbol.index == -1:
                symbol.index = counter
                counter += 1

    def __iter__(self) -> Iterator[Symbol]:
        for bucket in self._buckets:
            yield from list(bucket)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None


def sort_chars(s: str) -> str:
    """Return the characters of ``s`` in ascending order."""
    return "".join(sorted(s))


def find(s: str, search: str) -> int:
    """Index of the first occurrence of ``search`` in ``s``, or -1.

    Uses Knuth-Morris-Pratt matching; an empty pattern is found at 0.
    """
    if len(s) < len(search):
        return -1
    if not search:
        return 0

    fail = [-1] * len(search)
    for k in range(1, len(search)):
        r = fail[k - 1]
        while r > -1 and search[r] != search[k - 1]:
            r = fail[r]
        fail[k] = r + 1

    s_index = 0
    search_index = 0
    while s_index < len(s) and search_index < len(search):
        if search_index == -1 or s[s_index] == search[search_index]:
            s_index += 1
            search_index += 1
        else:
            search_index = fail[search_index]

    if search_index >= len(search):
        return s_index - len(search)
    return -1