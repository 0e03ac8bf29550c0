"""Three-address instructions and the instruction tape the interpreter runs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterator, Optional

from .errors import ErrorCode, IFJError
from .symbols import Symbol, SymbolType

_NORMAL = "\x1b[0m"
_GREEN = "\x1b[32m"
_YELLOW = "\x1b[33m"
_MAGENTA = "\x1b[35m"
_CYAN = "\x1b[36m"
_BOLD = "\x1b[1m"
_RESET = "\x1b[0m"


class Opcode(IntEnum):
    """Instruction types; operands are ``dst``, ``arg1`` and ``arg2``."""

    STOP = 0  # end of program
    MOV = 1  # dst = arg1
    FRAME = 2  # prepare a frame for function arg1
    PUSH = 3  # pass arg1 as the next argument of the prepared frame
    CALL = 4  # call the prepared function
    RET = 5  # return arg1, which may be None
    GETRETVAL = 6  # dst = value returned by the last call
    INC = 7  # dst = dst + 1
    DEC = 8  # dst = dst - 1
    ADD = 9  # dst = arg1 + arg2
    SUB = 10  # dst = arg1 - arg2
    MUL = 11  # dst = arg1 * arg2
    DIV = 12  # dst = arg1 / arg2
    NEG = 13  # dst = -arg1
    LE = 14  # dst = arg1 <= arg2
    LT = 15  # dst = arg1 < arg2
    GE = 16  # dst = arg1 >= arg2
    GT = 17  # dst = arg1 > arg2
    EQ = 18  # dst = arg1 == arg2
    NEQ = 19  # dst = arg1 != arg2
    LAND = 20  # dst = arg1 && arg2
    LOR = 21  # dst = arg1 || arg2
    LNOT = 22  # dst = !arg1
    GOTO = 23  # jump to instruction index dst
    IFGOTO = 24  # if arg1: jump to dst
    IFNGOTO = 25  # if not arg1: jump to dst
    CONV2STR = 26  # dst = (string) arg1
    CONV2INT = 27  # dst = (int) arg1
    CONV2BOOL = 28  # dst = (boolean) arg1
    CONV2DOUBLE = 29  # dst = (double) arg1
    PRINT = 30  # print string arg1
    READ = 31  # read input into dst
    LEN = 32  # dst = length(arg1)
    COMPARE = 33  # dst = compare(arg1, arg2)
    FIND = 34  # dst = find(arg1, arg2)
    SORT = 35  # dst = sort(arg1)
    SUBSTR = 36  # return value = substr(dst, arg1, arg2)
    INT = 37  # padding after each function body; catches a missing return

    @property
    def is_jump(self) -> bool:
        """True for instructions whose ``dst`` is an instruction index."""
        return self in (Opcode.GOTO, Opcode.IFGOTO, Opcode.IFNGOTO)

    @property
    def label(self) -> str:
        return "i" + self.name


@dataclass
class Instruction:
    """One instruction; for jumps ``dst`` is the target index."""

    opcode: Opcode
    dst: Any = None
    arg1: Any = None
    arg2: Any = None


def _format_operand(operand: Any) -> str:
    if operand is None:
        return "= NULL "
    if isinstance(operand, Symbol):
        if operand.name is not None:
            return f"Name: {operand.name} "
        kind = operand.type
        value = operand.value
        if kind is SymbolType.NULL:
            return "eNULL "
        if kind is SymbolType.INT:
            return f"eINT: {value} "
        if kind is SymbolType.DOUBLE:
            return f"eDOUBLE: {value:f} "
        if kind is SymbolType.BOOL:
            return f"eBOOL: {'true' if value else 'false'} "
        if kind is SymbolType.STRING:
            return f"eSTRING: {value if value is not None else 'NULL'} "
    return "*UnknownType* "


class InstructionList:
    """Growable tape of instructions with an active-instruction cursor.

    A new list holds a STOP instruction at index 0, so a jump to 0 ends
    the program.
    """

    def __init__(self) -> None:
        self._instructions: list[Instruction] = []
        self._first = -1
        self._active = -1
        self.append(Instruction(Opcode.STOP))

    def append(self, instruction: Instruction) -> int:
        """Add ``instruction`` at the end and return its index."""
        self._instructions.append(instruction)
        return len(self._instructions) - 1

    def next_instruction(self) -> Instruction:
        """Advance the cursor and return the instruction it now points at."""
        if self._first < 0:
            raise IFJError(ErrorCode.INTERN, "Entry point of the instruction list is not set.")
        self._active += 1
        if not 0 <= self._active < len(self._instructions):
            raise IFJError(ErrorCode.INTERN, "Error getting next instruction.")
        return self._instructions[self._active]

    def active_instruction(self) -> Optional[Instruction]:
        """The instruction being processed, or None before the first step."""
        if not 0 <= self._active < len(self._instructions):
            return None
        return self._instructions[self._active]

    def active_index(self) -> int:
        """Index of the instruction being processed."""
        return self._active

    def next_index(self) -> int:
        """Index the next appended instruction will get."""
        return len(self._instructions)

    def set_first(self, index: int) -> None:
        """Make ``index`` the entry point; the next step executes it."""
        if not 0 <= index < len(self._instructions):
            raise IndexError(f"instruction index {index} out of range")
        self._first = index
        self._active = index - 1

    def goto(self, index: int) -> None:
        """Make the next step execute the instruction at ``index``."""
        self._active = index - 1

    def __getitem__(self, index: int) -> Instruction:
        if not 0 <= index < len(self._instructions):
            raise IndexError(f"instruction index {index} out of range")
        return self._instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def format_listing(self) -> str:
        """Return a coloured, one-line-per-instruction dump of the tape."""
        lines = []
        for position, instruction in enumerate(self._instructions):
            if instruction.opcode.is_jump:
                dst = f"idx: {instruction.dst}"
            else:
                dst = _format_operand(instruction.dst)
            lines.append(
                f"{position:4d}.: "
                f"{_YELLOW}{_BOLD}{instruction.opcode.label:>13}{_RESET}{_NORMAL} "
                f"  |   {_MAGENTA}Dst {dst}"
                f"{_NORMAL}  |  {_GREEN} Arg1 {_format_operand(instruction.arg1)}"
                f"{_NORMAL}  |  {_CYAN} Arg2 {_format_operand(instruction.arg2)}"
                f"{_NORMAL}\n"
            )
        return "".join(lines)