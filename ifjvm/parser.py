"""First pass over a program: checks the syntax and fills the symbol tables.

This pass records classes, static variables, functions and function
parameters. Expressions, statements and local variables are only skipped
over; the instruction generator handles them in a later pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Iterable, Iterator, Optional

from .errors import ErrorCode, IFJError
from .symbols import FunctionData, Symbol, SymbolTable, SymbolType


class TokenType(IntEnum):
    """Kinds of tokens.

    Every kind ordered before ASSIGNMENT may appear inside a parenthesised
    condition or argument list; the first pass stops skipping such a list
    at any kind from ASSIGNMENT on.
    """

    IDENTIFIER = auto()
    FULL_IDENTIFIER = auto()
    KEYWORD = auto()
    INT_LITERAL = auto()
    DOUBLE_LITERAL = auto()
    STRING_LITERAL = auto()
    PLUS = auto()
    MINUS = auto()
    MULTIPLY = auto()
    DIVIDE = auto()
    INCREMENT = auto()
    DECREMENT = auto()
    LESS = auto()
    GREATER = auto()
    LESS_EQUAL = auto()
    GREATER_EQUAL = auto()
    EQUAL = auto()
    NOT_EQUAL = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    COMMA = auto()
    LEFT_ROUND_BRACKET = auto()
    RIGHT_ROUND_BRACKET = auto()
    ASSIGNMENT = auto()
    SEMICOLON = auto()
    LEFT_CURLY_BRACKET = auto()
    RIGHT_CURLY_BRACKET = auto()
    EOF = auto()


class Keyword(Enum):
    """Reserved words of the language."""

    BOOLEAN = "boolean"
    BREAK = "break"
    CLASS = "class"
    CONTINUE = "continue"
    DO = "do"
    DOUBLE = "double"
    ELSE = "else"
    FALSE = "false"
    FOR = "for"
    IF = "if"
    INT = "int"
    RETURN = "return"
    STRING = "String"
    STATIC = "static"
    TRUE = "true"
    VOID = "void"
    WHILE = "while"


@dataclass(frozen=True)
class Token:
    """A lexical token; ``keyword`` is set for KEYWORD tokens."""

    type: TokenType
    text: str = ""
    keyword: Optional[Keyword] = None
    line: int = 1


_TYPE_KEYWORDS = {
    Keyword.INT: SymbolType.INT,
    Keyword.DOUBLE: SymbolType.DOUBLE,
    Keyword.BOOLEAN: SymbolType.BOOL,
    Keyword.STRING: SymbolType.STRING,
}

RESERVED_CLASS_NAME = "ifj16"


def _symbol_type(keyword: Optional[Keyword]) -> SymbolType:
    """Symbol type named by a type keyword; NULL for anything else."""
    return _TYPE_KEYWORDS.get(keyword, SymbolType.NULL)


class DeclarationParser:
    """Parses a token stream and records its declarations in ``global_table``."""

    def __init__(self, tokens: Iterable[Token], global_table: SymbolTable) -> None:
        self.global_table = global_table
        self._tokens: Iterator[Token] = iter(tokens)
        self._token = Token(TokenType.EOF)
        self._current_class: Optional[Symbol] = None
        self._current_function: Optional[Symbol] = None

    # token handling

    def _advance(self) -> Token:
        nxt = next(self._tokens, None)
        if nxt is None:
            nxt = Token(TokenType.EOF, line=self._token.line)
        self._token = nxt
        return nxt

    def _error(self, code: ErrorCode, message: str) -> IFJError:
        return IFJError(code, f"Line: {self._token.line} - {message}")

    def _is_keyword(self, keyword: Keyword) -> bool:
        return self._token.type is TokenType.KEYWORD and self._token.keyword is keyword

    def _is_type_keyword(self) -> bool:
        return self._token.type is TokenType.KEYWORD and self._token.keyword in _TYPE_KEYWORDS

    def _expect(self, token_type: TokenType, message: str) -> None:
        if self._token.type is not token_type:
            raise self._error(ErrorCode.SYNTAX, message)

    def _skip_expression(self) -> None:
        """Skip tokens up to the terminating semicolon."""
        while self._token.type is not TokenType.SEMICOLON:
            if self._advance().type is TokenType.EOF:
                raise self._error(ErrorCode.SYNTAX, "Unexpected end of file in expression.")

    def _skip_parenthesised(self) -> None:
        """Skip from an opening round bracket to its matching closing one."""
        depth = 1
        while self._token.type < TokenType.ASSIGNMENT and depth != 0:
            token_type = self._advance().type
            if token_type is TokenType.LEFT_ROUND_BRACKET:
                depth += 1
            elif token_type is TokenType.RIGHT_ROUND_BRACKET:
                depth -= 1
            elif token_type is TokenType.EOF:
                raise self._error(ErrorCode.SYNTAX, "Unexpected end of file.")
        if depth != 0:
            raise self._error(ErrorCode.SYNTAX, ") expected.")

    # declarations

    def parse(self) -> SymbolTable:
        """Parse the whole stream; return the filled global table."""
        self._advance()
        if self._token.type is TokenType.EOF:
            raise self._error(ErrorCode.SEM, "Input file is empty")
        if self._is_keyword(Keyword.CLASS):
            self._class_list()
        if self._token.type is not TokenType.EOF:
            raise self._error(
                ErrorCode.SYNTAX, "Unexpected token violating {PROG -> CLASS_LIST eof}"
            )
        return self.global_table

    def _class_list(self) -> None:
        while True:
            self._advance()
            self._expect(TokenType.IDENTIFIER, "Identifier expected.")
            name = self._token.text
            self._advance()
            self._expect(TokenType.LEFT_CURLY_BRACKET, "{ expected.")
            self._create_class(name)

            self._advance()
            if self._is_keyword(Keyword.STATIC):
                self._class_body()
                self._current_class = None

            if self._token.type is not TokenType.RIGHT_CURLY_BRACKET:
                raise self._error(ErrorCode.SYNTAX, "Declaration expected.")
            self._advance()
            if not self._is_keyword(Keyword.CLASS):
                return

    def _create_class(self, name: str) -> None:
        if name == RESERVED_CLASS_NAME:
            raise self._error(ErrorCode.SEM, "Class name ifj16 is reserved.")
        if name in self.global_table:
            raise self._error(ErrorCode.SEM, "Redefining symbol.")
        members = SymbolTable()
        added = self.global_table.add(
            Symbol(name=name, type=SymbolType.CLASS, const=True, defined=True, members=members),
            overwrite=True,
        )
        members.parent = added
        self._current_class = added

    def _class_body(self) -> None:
        while True:
            self._class_member()
            if self._token.type is TokenType.RIGHT_CURLY_BRACKET:
                return
            if not self._is_keyword(Keyword.STATIC):
                return

    def _class_member(self) -> None:
        self._advance()
        if self._token.type is not TokenType.KEYWORD:
            raise self._error(ErrorCode.SYNTAX, "Type declaration expected.")
        declared_type = _symbol_type(self._token.keyword)

        self._advance()
        self._expect(TokenType.IDENTIFIER, "Identifier expected.")
        name = self._token.text
        is_run = self._current_class.name == "Main" and name == "run"

        self._advance()
        token_type = self._token.type
        if token_type is TokenType.SEMICOLON:
            if declared_type is SymbolType.NULL:
                raise self._error(ErrorCode.SYNTAX, "Type declaration expected")
            self._create_static_variable(declared_type, name)
            self._advance()
        elif token_type is TokenType.ASSIGNMENT:
            if declared_type is SymbolType.NULL:
                raise self._error(ErrorCode.SYNTAX, "Type declaration expected")
            self._skip_expression()
            self._create_static_variable(declared_type, name)
            self._advance()
        elif token_type is TokenType.LEFT_ROUND_BRACKET:
            self._create_function(declared_type, name)
            self._parameters(is_run)
            self._advance()
            self._expect(TokenType.LEFT_CURLY_BRACKET, "{ expected.")
            self._advance()
            if self._token.type is not TokenType.RIGHT_CURLY_BRACKET:
                self._func_body()
                self._expect(TokenType.RIGHT_CURLY_BRACKET, "} expected.")
            self._current_function = None
            self._advance()
        else:
            raise self._error(
                ErrorCode.SYNTAX, "Declaration/definition expected. Missing ';' ?"
            )

    def _create_static_variable(self, symbol_type: SymbolType, name: str) -> None:
        members = self._current_class.members
        if name in members:
            raise self._error(ErrorCode.SEM, "Redefining symbol.")
        members.add(Symbol(name=name, type=symbol_type, const=True, defined=False))

    def _create_function(self, return_type: SymbolType, name: str) -> None:
        members = self._current_class.members
        for symbol in members:
            if symbol.name == name:
                raise self._error(ErrorCode.SEM, "Redefining symbol.")
            if (
                symbol.type is SymbolType.FUNCTION
                and symbol.function is not None
                and symbol.function.local_table is not None
                and name in symbol.function.local_table
            ):
                raise self._error(ErrorCode.SEM, "Redefining symbol.")
        local_table = SymbolTable()
        added = members.add(
            Symbol(
                name=name,
                type=SymbolType.FUNCTION,
                defined=True,
                function=FunctionData(return_type=return_type, local_table=local_table),
            )
        )
        local_table.parent = added
        self._current_function = added

    def _parameters(self, is_run: bool) -> None:
        self._advance()
        if is_run and self._token.type is not TokenType.RIGHT_ROUND_BRACKET:
            raise self._error(ErrorCode.SYNTAX, "Violating run's signature")
        while self._token.type is not TokenType.RIGHT_ROUND_BRACKET:
            if self._token.type is not TokenType.KEYWORD:
                raise self._error(ErrorCode.SYNTAX, "Type declaration expected.")
            parameter_type = _symbol_type(self._token.keyword)
            self._advance()
            self._expect(TokenType.IDENTIFIER, "Identifier expected.")
            name = self._token.text
            self._advance()
            if self._token.type is TokenType.COMMA:
                self._advance()
                if self._token.type is TokenType.RIGHT_ROUND_BRACKET:
                    raise self._error(ErrorCode.SYNTAX, "Type declaration expected.")
            self._create_argument(parameter_type, name)

    def _create_argument(self, symbol_type: SymbolType, name: str) -> None:
        function = self._current_function
        local_table = function.function.local_table
        clash = self._current_class.members.get(name)
        if name in local_table or (clash is not None and clash.type is SymbolType.FUNCTION):
            raise self._error(ErrorCode.SEM, "Redefining symbol.")
        added = local_table.add(Symbol(name=name, type=symbol_type, const=False, defined=True))
        function.add_argument(added)

    # function bodies

    def _func_body(self) -> None:
        while True:
            if self._is_type_keyword():
                self._var()
                self._advance()
            else:
                self._stmt()
            if self._token.type is TokenType.RIGHT_CURLY_BRACKET:
                return

    def _stmt_body(self) -> None:
        self._advance()
        while self._token.type is not TokenType.RIGHT_CURLY_BRACKET:
            if self._is_type_keyword():
                raise self._error(ErrorCode.SYNTAX, "Declarations in scope are not permitted.")
            self._stmt()

    def _condition(self) -> None:
        self._advance()
        self._expect(TokenType.LEFT_ROUND_BRACKET, "( expected.")
        self._skip_parenthesised()
        self._expect(TokenType.RIGHT_ROUND_BRACKET, ") expected.")
        self._advance()

    def _stmt(self) -> None:
        token_type = self._token.type
        if token_type is TokenType.LEFT_CURLY_BRACKET:
            self._stmt_body()
            self._advance()
        elif token_type is TokenType.KEYWORD:
            keyword = self._token.keyword
            if keyword is Keyword.RETURN:
                self._skip_expression()
                self._advance()
            elif keyword in (Keyword.IF, Keyword.WHILE):
                self._condition()
                self._stmt()
            elif keyword is Keyword.ELSE:
                self._advance()
                self._stmt()
            else:
                raise self._error(ErrorCode.SYNTAX, "Statment expected.")
        elif token_type in (TokenType.IDENTIFIER, TokenType.FULL_IDENTIFIER):
            self._advance()
            if self._token.type is TokenType.ASSIGNMENT:
                self._skip_expression()
            elif self._token.type is TokenType.LEFT_ROUND_BRACKET:
                self._skip_parenthesised()
                self._advance()
            else:
                raise self._error(
                    ErrorCode.SYNTAX,
                    "Assignment, unary operator or function call expected.",
                )
            self._expect(TokenType.SEMICOLON, "; expected.")
            self._advance()
        elif token_type is TokenType.EOF:
            raise self._error(ErrorCode.SYNTAX, "Unexpected end of file.")
        else:
            raise self._error(ErrorCode.SYNTAX, "Unexpected token.")

    def _var(self) -> None:
        self._advance()
        self._expect(TokenType.IDENTIFIER, "Identifier expected.")
        self._advance()
        if self._token.type is TokenType.ASSIGNMENT:
            self._skip_expression()
        self._expect(TokenType.SEMICOLON, "Assignment expected. Missing ';'?")


def fill_symbol_table(tokens: Iterable[Token], global_table: SymbolTable) -> SymbolTable:
    """Run the first pass over ``tokens``; raise IFJError on any error."""
    return DeclarationParser(tokens, global_table).parse()