"""Error codes reported by the interpreter and the exception that carries them."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Outcome of a run; the value doubles as the process exit status."""

    OK = 0
    LEX = 1
    SYNTAX = 2
    SEM = 3
    SEM_TYPE = 4
    SEM_OTHER = 6
    RUN_INPUT = 7
    RUN_UNINITIALIZED = 8
    RUN_ZERODIV = 9
    RUN_OTHER = 10
    INTERN = 99


class IFJError(Exception):
    """An error raised while parsing or interpreting a program."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.name}: {self.message}" if self.message else self.code.name