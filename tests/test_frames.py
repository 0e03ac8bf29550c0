import pytest

from ifjvm.errors import ErrorCode, IFJError
from ifjvm.frames import Frame, FrameItem, FrameStack
from ifjvm.symbols import FunctionData, Symbol, SymbolTable, SymbolType


def make_function(arg_types=(), local_types=(), return_type=SymbolType.NULL, index=5):
    func = Symbol(name="f", type=SymbolType.FUNCTION, defined=True)
    table = SymbolTable(11)
    func.function = FunctionData(return_type=return_type, instruction_index=index, local_table=table)
    stored = func.copy()
    table.parent = stored
    for n, t in enumerate(arg_types):
        arg = table.add(Symbol(name=f"a{n}", type=t))
        stored.add_argument(arg)
    for n, t in enumerate(local_types):
        table.add(Symbol(name=f"l{n}", type=t))
    table.generate_indices()
    return stored


def test_for_function_builds_slots_and_metadata():
    func = make_function((SymbolType.INT,), (SymbolType.STRING, SymbolType.BOOL),
                         return_type=SymbolType.INT, index=7)
    frame = Frame.for_function(func)
    assert len(frame.items) == 3
    assert frame.return_type is SymbolType.INT
    assert frame.call_instruction == 7
    assert all(not item.initialized for item in frame.items)
    arg = func.function.arguments[0]
    assert frame.items[arg.index].type is SymbolType.INT


def test_for_function_rejects_non_function():
    with pytest.raises(ValueError):
        Frame.for_function(Symbol(name="x", type=SymbolType.INT))


def test_local_set_get_and_initialized():
    func = make_function((), (SymbolType.DOUBLE,))
    local = func.function.local_table.get("l0")
    frame = Frame.for_function(func)
    assert frame.is_initialized(local) is False
    frame.set(local, 2.5)
    assert frame.is_initialized(local) is True
    assert frame.get(local) == 2.5
    assert frame.items[local.index] == FrameItem(2.5, True, SymbolType.DOUBLE)


def test_const_symbol_uses_symbol_storage():
    static = Symbol(name="s", type=SymbolType.INT, const=True)
    frame = Frame()
    assert frame.is_initialized(static) is False
    frame.set(static, 42)
    assert static.value == 42
    assert static.defined is True
    assert frame.get(static) == 42


def test_symbol_without_slot_raises():
    frame = Frame()
    with pytest.raises(IFJError) as info:
        frame.get(Symbol(name="z", type=SymbolType.INT))
    assert info.value.code is ErrorCode.INTERN


def test_frames_are_independent():
    func = make_function((), (SymbolType.INT,))
    local = func.function.local_table.get("l0")
    first = Frame.for_function(func)
    second = Frame.for_function(func)
    first.set(local, 1)
    assert second.is_initialized(local) is False


def test_stack_prepare_push_arguments_and_call():
    func = make_function((SymbolType.INT, SymbolType.STRING))
    stack = FrameStack()
    stack.prepare(func)
    stack.push_argument(3, SymbolType.INT)
    stack.push_argument("hi", SymbolType.STRING)
    frame = stack.push()
    assert len(stack) == 1
    assert stack.current is frame
    assert stack.prepared is None
    a0, a1 = func.function.arguments
    assert frame.get(a0) == 3
    assert frame.get(a1) == "hi"
    assert frame.is_initialized(a1)


def test_too_many_arguments_raises():
    func = make_function((SymbolType.INT,))
    stack = FrameStack()
    stack.prepare(func)
    stack.push_argument(1, SymbolType.INT)
    with pytest.raises(IFJError) as info:
        stack.push_argument(2, SymbolType.INT)
    assert info.value.code is ErrorCode.INTERN


def test_prepare_resets_argument_index():
    func = make_function((SymbolType.INT,))
    stack = FrameStack()
    stack.prepare(func)
    stack.push_argument(1, SymbolType.INT)
    stack.prepare(func)
    assert stack.argument_index == 0


def test_push_without_prepared_raises():
    stack = FrameStack()
    with pytest.raises(IFJError):
        stack.push()
    with pytest.raises(IFJError):
        stack.push_argument(1, SymbolType.INT)


def test_pop_returns_previous_frame():
    func = make_function()
    stack = FrameStack()
    stack.prepare(func)
    outer = stack.push()
    stack.prepare(func)
    stack.push()
    assert len(stack) == 2
    assert stack.pop() is outer
    assert stack.pop() is None
    assert len(stack) == 0
    with pytest.raises(IFJError):
        stack.pop()


def test_new_stack_has_no_return_value():
    stack = FrameStack()
    assert stack.return_type is SymbolType.NULL
    assert stack.return_value is None
    assert stack.current is None