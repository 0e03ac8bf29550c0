"""Execution of an instruction tape against the class symbol tables."""

from __future__ import annotations

import operator
import re
import sys
from typing import Any, Callable, Optional, TextIO

from .errors import ErrorCode, IFJError
from .frames import Frame, FrameStack
from .instructions import Instruction, InstructionList, Opcode
from .symbols import Symbol, SymbolTable, SymbolType, find, sort_chars

_VALUE_TYPES = (SymbolType.INT, SymbolType.DOUBLE, SymbolType.BOOL, SymbolType.STRING)
_NUMERIC_TYPES = (SymbolType.INT, SymbolType.DOUBLE)
_INT_RE = re.compile(r"[0-9]+")
_DOUBLE_RE = re.compile(r"[0-9]+(\.[0-9]+)?([eE][+-]?[0-9]+)?")
_INT_MAX = 2**31 - 1


def _int32(value: int) -> int:
    """Wrap ``value`` to a signed 32-bit integer."""
    value &= 0xFFFFFFFF
    return value - 2**32 if value >= 2**31 else value


def _int_div(a: int, b: int) -> int:
    """Integer division truncating towards zero."""
    quotient = abs(a) // abs(b)
    return _int32(-quotient if (a < 0) != (b < 0) else quotient)


def value_to_string(symbol_type: SymbolType, value: Any) -> str:
    """Render a value of ``symbol_type`` the way the language prints it."""
    if symbol_type is SymbolType.INT:
        return str(value)
    if symbol_type is SymbolType.DOUBLE:
        return f"{value:g}"
    if symbol_type is SymbolType.BOOL:
        return "true" if value else "false"
    if symbol_type is SymbolType.STRING:
        return value
    raise IFJError(ErrorCode.SEM_TYPE, f"Cannot convert {symbol_type.name} to string.")


def substr(s: str, index: int, length: int) -> str:
    """Return ``length`` characters of ``s`` starting at ``index``."""
    if index < 0 or length < 0 or index + length > len(s):
        raise IFJError(
            ErrorCode.RUN_OTHER,
            f"Substring ({index}, {length}) is out of range of a string of length {len(s)}.",
        )
    return s[index:index + length]


def _to_int(symbol_type: SymbolType, value: Any) -> int:
    if symbol_type is SymbolType.INT:
        return value
    if symbol_type is SymbolType.DOUBLE:
        return _int32(int(value))
    if symbol_type is SymbolType.BOOL:
        return int(bool(value))
    raise IFJError(ErrorCode.SEM_TYPE, f"Cannot convert {symbol_type.name} to int.")


def _to_double(symbol_type: SymbolType, value: Any) -> float:
    if symbol_type in (SymbolType.INT, SymbolType.DOUBLE, SymbolType.BOOL):
        return float(value)
    raise IFJError(ErrorCode.SEM_TYPE, f"Cannot convert {symbol_type.name} to double.")


def _to_bool(symbol_type: SymbolType, value: Any) -> bool:
    if symbol_type in (SymbolType.INT, SymbolType.DOUBLE):
        return value != 0
    if symbol_type is SymbolType.BOOL:
        return bool(value)
    raise IFJError(ErrorCode.SEM_TYPE, f"Cannot convert {symbol_type.name} to boolean.")


def _prepare_tables(table: SymbolTable) -> None:
    """Assign frame slots to the locals of every function in the hierarchy."""
    for symbol in table:
        if symbol.type is SymbolType.CLASS and symbol.members is not None:
            _prepare_tables(symbol.members)
        elif symbol.type is SymbolType.FUNCTION and symbol.function is not None:
            local = symbol.function.local_table
            if local is not None:
                local.generate_indices()


def _name(symbol: Optional[Symbol]) -> str:
    return symbol.name if symbol is not None and symbol.name is not None else "(literal)"


class Interpreter:
    """Runs ``Main.run`` of a program whose code lives in ``instructions``."""

    def __init__(
        self,
        classes: SymbolTable,
        instructions: InstructionList,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ) -> None:
        self.classes = classes
        self.instructions = instructions
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self._frames = FrameStack()
        self._frame: Optional[Frame] = None
        self._handlers: dict[Opcode, Callable[[Instruction], None]] = {
            Opcode.MOV: self._mov,
            Opcode.FRAME: self._prepare_frame,
            Opcode.PUSH: self._push,
            Opcode.CALL: self._call,
            Opcode.RET: self._ret,
            Opcode.GETRETVAL: self._get_return_value,
            Opcode.INC: self._step(1, "increment"),
            Opcode.DEC: self._step(-1, "decrement"),
            Opcode.ADD: self._add,
            Opcode.SUB: self._arithmetic(operator.sub, "subtraction"),
            Opcode.MUL: self._arithmetic(operator.mul, "multiplication"),
            Opcode.DIV: self._div,
            Opcode.NEG: self._neg,
            Opcode.LE: self._compare(operator.le, _NUMERIC_TYPES),
            Opcode.LT: self._compare(operator.lt, _NUMERIC_TYPES),
            Opcode.GE: self._compare(operator.ge, _NUMERIC_TYPES),
            Opcode.GT: self._compare(operator.gt, _NUMERIC_TYPES),
            Opcode.EQ: self._compare(operator.eq, _VALUE_TYPES),
            Opcode.NEQ: self._compare(operator.ne, _VALUE_TYPES),
            Opcode.LAND: self._logic(lambda a, b: a and b),
            Opcode.LOR: self._logic(lambda a, b: a or b),
            Opcode.LNOT: self._lnot,
            Opcode.GOTO: self._goto,
            Opcode.IFGOTO: self._conditional_goto(True),
            Opcode.IFNGOTO: self._conditional_goto(False),
            Opcode.CONV2STR: self._convert(value_to_string),
            Opcode.CONV2INT: self._convert(_to_int),
            Opcode.CONV2BOOL: self._convert(_to_bool),
            Opcode.CONV2DOUBLE: self._convert(_to_double),
            Opcode.PRINT: self._print,
            Opcode.READ: self._read,
            Opcode.LEN: self._len,
            Opcode.COMPARE: self._string_compare,
            Opcode.FIND: self._find,
            Opcode.SORT: self._sort,
            Opcode.SUBSTR: self._substr,
            Opcode.INT: self._interrupt,
        }

    def run(self) -> None:
        """Execute the program until STOP; raise IFJError on failure."""
        _prepare_tables(self.classes)
        main = self._entry_point()
        self._frames = FrameStack()
        self._frames.prepare(main)
        self._frame = self._frames.push()
        self.instructions.set_first(main.function.instruction_index)

        while True:
            instruction = self.instructions.next_instruction()
            if instruction.opcode == Opcode.STOP:
                return
            handler = self._handlers.get(instruction.opcode)
            if handler is None:
                raise IFJError(ErrorCode.INTERN, "Invalid instruction.")
            handler(instruction)

    def _entry_point(self) -> Symbol:
        main_class = self.classes.get("Main")
        if main_class is None or main_class.type is not SymbolType.CLASS or not main_class.defined:
            raise IFJError(ErrorCode.SEM, "Class Main does not exist.")
        run = main_class.members.get("run") if main_class.members is not None else None
        if (
            run is None
            or run.type is not SymbolType.FUNCTION
            or run.function is None
            or run.function.number_of_arguments != 0
            or run.function.return_type is not SymbolType.NULL
            or not run.defined
        ):
            raise IFJError(ErrorCode.SEM, "In class Main there is no run method.")
        return run

    # frame access

    def _require(self, *symbols: Symbol) -> None:
        for symbol in symbols:
            if not self._frame.is_initialized(symbol):
                raise IFJError(
                    ErrorCode.RUN_UNINITIALIZED,
                    f"Accessing uninitialized variable {_name(symbol)}.",
                )

    def _get(self, symbol: Symbol) -> Any:
        return self._frame.get(symbol)

    def _set(self, symbol: Symbol, value: Any) -> None:
        self._frame.set(symbol, value)

    def _return(self) -> None:
        self.instructions.goto(self._frame.return_instruction)
        self._frame = self._frames.pop()

    # data movement and calls

    def _mov(self, i: Instruction) -> None:
        self._require(i.arg1)
        value = self._get(i.arg1)
        kind = i.dst.type
        if kind is SymbolType.DOUBLE:
            value = float(value)
        elif kind not in _VALUE_TYPES:
            raise IFJError(ErrorCode.SEM_TYPE, "Trying to assign class or func.")
        self._set(i.dst, value)

    def _prepare_frame(self, i: Instruction) -> None:
        func = i.arg1
        if not func.defined or func.type is not SymbolType.FUNCTION:
            raise IFJError(ErrorCode.SEM, f"Calling undefined function {_name(func)}.")
        self._frames.prepare(func)

    def _push(self, i: Instruction) -> None:
        self._require(i.arg1)
        kind = i.arg1.type
        if kind not in _VALUE_TYPES:
            raise IFJError(ErrorCode.SEM_TYPE, "Trying to pass class or func into the function.")
        value = self._get(i.arg1)
        prepared = self._frames.prepared
        position = self._frames.argument_index
        if (
            kind is SymbolType.INT
            and prepared is not None
            and position < len(prepared.items)
            and prepared.items[position].type is SymbolType.DOUBLE
        ):
            value, kind = float(value), SymbolType.DOUBLE
        self._frames.push_argument(value, kind)

    def _call(self, i: Instruction) -> None:
        return_instruction = self.instructions.active_index() + 1
        self._frame = self._frames.push()
        self._frame.return_instruction = return_instruction
        self.instructions.goto(self._frame.call_instruction)

    def _ret(self, i: Instruction) -> None:
        source = i.arg1
        if source is None:
            self._frames.return_type = SymbolType.NULL
            self._frames.return_value = None
        else:
            self._require(source)
            kind = source.type
            if kind not in _VALUE_TYPES:
                raise IFJError(ErrorCode.SEM_TYPE, "Trying to return class or func.")
            value = self._get(source)
            if kind is SymbolType.INT and self._frame.return_type is SymbolType.DOUBLE:
                value, kind = float(value), SymbolType.DOUBLE
            self._frames.return_value = value
            self._frames.return_type = kind
        self._return()

    def _get_return_value(self, i: Instruction) -> None:
        kind = i.dst.type
        if kind not in _VALUE_TYPES:
            raise IFJError(ErrorCode.SEM_TYPE, "Trying to assign class or func.")
        value = self._frames.return_value
        if kind is SymbolType.DOUBLE:
            value = float(value)
        self._set(i.dst, value)
        if kind is SymbolType.STRING:
            self._frames.return_value = None

    def _interrupt(self, i: Instruction) -> None:
        if self._frame.return_type is not SymbolType.NULL:
            raise IFJError(ErrorCode.RUN_UNINITIALIZED, "Non void function must return a value.")
        self._frames.return_type = SymbolType.NULL
        self._frames.return_value = None
        self._return()

    # arithmetic

    def _step(self, delta: int, verb: str) -> Callable[[Instruction], None]:
        def handler(i: Instruction) -> None:
            self._require(i.dst)
            if i.dst.type is not SymbolType.INT:
                raise IFJError(ErrorCode.SEM_TYPE, f"Trying to {verb} non int.")
            self._set(i.dst, _int32(self._get(i.dst) + delta))

        return handler

    def _operands(self, i: Instruction) -> tuple[Any, Any]:
        self._require(i.arg1, i.arg2)
        return self._get(i.arg1), self._get(i.arg2)

    def _unsupported(self, i: Instruction, what: str) -> IFJError:
        return IFJError(
            ErrorCode.SEM_TYPE,
            f"Operands {_name(i.arg1)} and {_name(i.arg2)} doesnt support {what}.",
        )

    def _arithmetic(self, op: Callable[[Any, Any], Any], what: str) -> Callable[[Instruction], None]:
        def handler(i: Instruction) -> None:
            a, b = self._operands(i)
            kind = i.dst.type
            if kind is SymbolType.INT:
                self._set(i.dst, _int32(op(a, b)))
            elif kind is SymbolType.DOUBLE:
                self._set(i.dst, float(op(a, b)))
            else:
                raise self._unsupported(i, what)

        return handler

    def _add(self, i: Instruction) -> None:
        if i.dst.type is SymbolType.STRING:
            a, b = self._operands(i)
            self._set(i.dst, a + b)
        else:
            self._arithmetic(operator.add, "addition")(i)

    def _div(self, i: Instruction) -> None:
        a, b = self._operands(i)
        kind = i.dst.type
        if kind not in _NUMERIC_TYPES:
            raise self._unsupported(i, "division")
        if b == 0:
            raise IFJError(ErrorCode.RUN_ZERODIV, f"Trying to divide by 0. Operand {_name(i.arg2)}")
        if kind is SymbolType.INT:
            self._set(i.dst, _int_div(a, b))
        else:
            self._set(i.dst, a / b)

    def _neg(self, i: Instruction) -> None:
        self._require(i.arg1)
        value = self._get(i.arg1)
        kind = i.dst.type
        if kind is SymbolType.INT:
            self._set(i.dst, _int32(-value))
        elif kind is SymbolType.DOUBLE:
            self._set(i.dst, -value)
        else:
            raise IFJError(
                ErrorCode.SEM_TYPE,
                f"Operand {_name(i.arg1)} doesnt support arithmetic negation.",
            )

    # comparison and logic

    def _compare(
        self, op: Callable[[Any, Any], bool], allowed: tuple[SymbolType, ...]
    ) -> Callable[[Instruction], None]:
        def handler(i: Instruction) -> None:
            a, b = self._operands(i)
            if i.arg1.type not in allowed:
                raise IFJError(
                    ErrorCode.SEM_TYPE,
                    f"Operand {_name(i.arg1)} doesnt support logic comparision.",
                )
            self._set(i.dst, bool(op(a, b)))

        return handler

    def _logic(self, op: Callable[[bool, bool], bool]) -> Callable[[Instruction], None]:
        def handler(i: Instruction) -> None:
            a, b = self._operands(i)
            self._set(i.dst, bool(op(a, b)))

        return handler

    def _lnot(self, i: Instruction) -> None:
        self._require(i.arg1)
        self._set(i.dst, not self._get(i.arg1))

    # control flow

    def _goto(self, i: Instruction) -> None:
        self.instructions.goto(int(i.dst))

    def _conditional_goto(self, when: bool) -> Callable[[Instruction], None]:
        def handler(i: Instruction) -> None:
            self._require(i.arg1)
            if bool(self._get(i.arg1)) is when:
                self.instructions.goto(int(i.dst))

        return handler

    # conversions and built-ins

    def _convert(self, func: Callable[[SymbolType, Any], Any]) -> Callable[[Instruction], None]:
        def handler(i: Instruction) -> None:
            self._require(i.arg1)
            self._set(i.dst, func(i.arg1.type, self._get(i.arg1)))

        return handler

    def _print(self, i: Instruction) -> None:
        self._require(i.arg1)
        self.stdout.write(self._get(i.arg1))

    def _read(self, i: Instruction) -> None:
        self._set(i.dst, self._read_value(i.dst.type))

    def _read_value(self, kind: SymbolType) -> Any:
        line = self.stdin.readline()
        if line.endswith("\n"):
            line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
        if kind is SymbolType.STRING:
            return line
        if kind is SymbolType.INT:
            if not _INT_RE.fullmatch(line) or int(line) > _INT_MAX:
                raise IFJError(ErrorCode.RUN_INPUT, f"Invalid integer input {line!r}.")
            return int(line)
        if kind is SymbolType.DOUBLE:
            if not _DOUBLE_RE.fullmatch(line):
                raise IFJError(ErrorCode.RUN_INPUT, f"Invalid double input {line!r}.")
            return float(line)
        raise IFJError(ErrorCode.SEM_TYPE, f"Cannot read a value of type {kind.name}.")

    def _len(self, i: Instruction) -> None:
        self._require(i.arg1)
        self._set(i.dst, len(self._get(i.arg1)))

    def _string_compare(self, i: Instruction) -> None:
        a, b = self._operands(i)
        self._set(i.dst, (a > b) - (a < b))

    def _find(self, i: Instruction) -> None:
        a, b = self._operands(i)
        self._set(i.dst, find(a, b))

    def _sort(self, i: Instruction) -> None:
        self._require(i.arg1)
        self._set(i.dst, sort_chars(self._get(i.arg1)))

    def _substr(self, i: Instruction) -> None:
        self._require(i.dst, i.arg1, i.arg2)
        self._frames.return_type = SymbolType.STRING
        self._frames.return_value = None
        self._frames.return_value = substr(self._get(i.dst), self._get(i.arg1), self._get(i.arg2))


def interpret(
    classes: SymbolTable,
    instructions: InstructionList,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> None:
    """Run ``Main.run``; raise IFJError on any error."""
    Interpreter(classes, instructions, stdin, stdout).run()