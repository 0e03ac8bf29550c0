# ifjvm

`ifjvm` is the back end of an interpreter for IFJ16, a small statically
typed, class-based language. It provides symbol tables for classes,
static variables and functions, a three-address instruction list, call
frames, and the loop that executes a program. It also provides the first
parser pass, which checks the structure of a token stream and records
its declarations.

## Modules

- `ifjvm.errors`: `ErrorCode`, the numeric result codes (`OK`, `SYNTAX`,
  `SEM`, `SEM_TYPE`, `RUN_INPUT`, `RUN_UNINITIALIZED`, `RUN_ZERODIV`,
  `RUN_OTHER`, `INTERN` and others), and `IFJError(code, message)`, the
  exception that carries one of them.
- `ifjvm.symbols`: `SymbolType`, `Symbol`, `FunctionData` and
  `SymbolTable`, a hash table with separate chaining keyed by symbol
  name. It offers `add`, `get`, `remove`, `clear`, `copy`, `for_each`,
  `generate_indices`, iteration, `len()` and `in`. `hash_name` is the
  bucket hash. The helpers for the built-in string functions are here
  too: `sort_chars` returns the characters of a string in ascending
  order, and `find` returns the index of the first occurrence of a
  substring, or `-1`.
- `ifjvm.instructions`: `Opcode`, `Instruction` and `InstructionList`.
  A new list always holds a `STOP` instruction at index 0.
  `format_listing()` returns a coloured dump of the list, one line per
  instruction.
- `ifjvm.frames`: `FrameItem`, `Frame` and `FrameStack`. A frame holds
  the locals of one function call. Constant symbols keep their value in
  the symbol itself.
- `ifjvm.interpreter`: `Interpreter`, `interpret(classes, instructions,
  stdin, stdout)`, `value_to_string` and `substr`. The interpreter looks
  up class `Main` and its argument-less `void` method `run`, assigns
  frame slots to the locals of every function, and executes instructions
  until it reaches `STOP`. `stdin` and `stdout` default to the process
  streams.
- `ifjvm.parser`: `TokenType`, `Keyword`, `Token`, `DeclarationParser`
  and `fill_symbol_table(tokens, global_table)`. This pass checks the
  syntax. It records classes, static variables, functions and function
  parameters in the given global `SymbolTable`. Expressions, statements
  and local variables inside function bodies are checked for shape and
  skipped.

Every failure is raised as `IFJError`. Its `code` tells a syntax error,
a semantic or type error, bad input, an uninitialised variable, a
division by zero and an internal failure apart.

## Quick look

```python
from ifjvm.symbols import SymbolTable, find, sort_chars
from ifjvm.instructions import InstructionList

print(sort_chars("dcba"))      # abcd
print(find("hello", "ll"))     # 2
print(find("hello", "xyz"))    # -1

print(len(SymbolTable(101, None)))  # 0
print(len(InstructionList()))       # 1, the leading STOP instruction
```

## Running a hand-built program

```python
import io

from ifjvm.instructions import Instruction, InstructionList, Opcode
from ifjvm.interpreter import interpret
from ifjvm.symbols import FunctionData, Symbol, SymbolTable, SymbolType

classes = SymbolTable()
members = SymbolTable()
main = classes.add(Symbol(name="Main", type=SymbolType.CLASS,
                          const=True, defined=True, members=members))
members.parent = main

local = SymbolTable()
run = members.add(Symbol(name="run", type=SymbolType.FUNCTION, defined=True,
                         function=FunctionData(local_table=local,
                                               instruction_index=1)))
local.parent = run

code = InstructionList()
greeting = Symbol(type=SymbolType.STRING, const=True, defined=True, value="hi\n")
code.append(Instruction(Opcode.PRINT, arg1=greeting))
code.append(Instruction(Opcode.INT))   # end of the void function body

out = io.StringIO()
interpret(classes, code, None, out)
print(out.getvalue(), end="")          # hi
```

## What this package does not do

- It has no lexer. `fill_symbol_table` takes `Token` objects that the
  caller has already produced.
- It has no instruction generator. Nothing here turns function bodies or
  static initialisers into an `InstructionList`, so the caller must build
  the instructions.
- It has no command-line program that runs a source file.