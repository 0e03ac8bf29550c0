"""Local frames of function calls and the stack that holds them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import ErrorCode, IFJError
from .symbols import Symbol, SymbolType


@dataclass
class FrameItem:
    """One local variable slot of a frame."""

    value: Any = None
    initialized: bool = False
    type: SymbolType = SymbolType.NULL


@dataclass
class Frame:
    """Storage for the locals of one function activation.

    Constant symbols (literals and static variables) keep their data in the
    symbol itself; every other symbol owns the slot given by its ``index``.
    """

    items: list[FrameItem] = field(default_factory=list)
    return_type: SymbolType = SymbolType.NULL
    call_instruction: int = 0
    return_instruction: int = 0

    @classmethod
    def for_function(cls, function: Symbol) -> "Frame":
        """Build an empty frame with one slot per local of ``function``."""
        if function.type is not SymbolType.FUNCTION or function.function is None:
            raise ValueError(f"symbol {function.name!r} is not a function")
        data = function.function
        items: list[FrameItem] = []
        if data.local_table is not None:
            slots = max((s.index for s in data.local_table), default=-1) + 1
            slots = max(slots, len(data.local_table))
            items = [FrameItem() for _ in range(slots)]
            for symbol in data.local_table:
                if 0 <= symbol.index < len(items):
                    items[symbol.index].type = symbol.type
        return cls(
            items=items,
            return_type=data.return_type,
            call_instruction=data.instruction_index,
        )

    def _slot(self, symbol: Symbol) -> FrameItem:
        if not 0 <= symbol.index < len(self.items):
            raise IFJError(
                ErrorCode.INTERN,
                f"Symbol {symbol.name} has no slot in the current frame.",
            )
        return self.items[symbol.index]

    def is_initialized(self, symbol: Symbol) -> bool:
        """True if ``symbol`` holds a value in this frame or globally."""
        if symbol.const:
            return symbol.defined
        return self._slot(symbol).initialized

    def get(self, symbol: Symbol) -> Any:
        """Return the value of ``symbol`` as seen from this frame."""
        if symbol.const:
            return symbol.value
        return self._slot(symbol).value

    def set(self, symbol: Symbol, value: Any) -> None:
        """Store ``value`` for ``symbol`` and mark it initialized."""
        if symbol.const:
            symbol.value = value
            symbol.defined = True
            return
        slot = self._slot(symbol)
        slot.value = value
        slot.initialized = True
        slot.type = symbol.type


class FrameStack:
    """Call stack of frames, the frame being prepared for the next call,
    and the value returned by the last call."""

    def __init__(self) -> None:
        self._frames: list[Frame] = []
        self.prepared: Optional[Frame] = None
        self.argument_index = 0
        self.return_type = SymbolType.NULL
        self.return_value: Any = None

    @property
    def current(self) -> Optional[Frame]:
        """The frame on top of the stack, or None when empty."""
        return self._frames[-1] if self._frames else None

    def prepare(self, function: Symbol) -> Frame:
        """Build the frame for a call of ``function`` and reset argument passing."""
        self.prepared = Frame.for_function(function)
        self.argument_index = 0
        return self.prepared

    def push_argument(self, value: Any, symbol_type: SymbolType) -> None:
        """Put ``value`` into the next argument slot of the prepared frame."""
        if self.prepared is None:
            raise IFJError(ErrorCode.INTERN, "No frame prepared for arguments.")
        if self.argument_index >= len(self.prepared.items):
            raise IFJError(ErrorCode.INTERN, "Too many arguments for the prepared frame.")
        slot = self.prepared.items[self.argument_index]
        slot.value = value
        slot.initialized = True
        slot.type = symbol_type
        self.argument_index += 1

    def push(self) -> Frame:
        """Make the prepared frame the current one and return it."""
        if self.prepared is None:
            raise IFJError(ErrorCode.INTERN, "No frame prepared for the call.")
        frame = self.prepared
        self._frames.append(frame)
        self.prepared = None
        return frame

    def pop(self) -> Optional[Frame]:
        """Drop the current frame and return the one below it, if any."""
        if not self._frames:
            raise IFJError(ErrorCode.INTERN, "Frame stack is empty.")
        self._frames.pop()
        return self.current

    def __len__(self) -> int:
        return len(self._frames)