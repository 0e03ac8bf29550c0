from collections import Counter

import pytest

from ifjvm.symbols import (
    HTAB_DEFAULT_SIZE,
    FunctionData,
    Symbol,
    SymbolTable,
    SymbolType,
    find,
    hash_name,
    sort_chars,
)


def make(name, type_=SymbolType.INT, **kw):
    return Symbol(name=name, type=type_, **kw)


def test_new_symbol_has_unassigned_index():
    assert Symbol().index == -1


def test_add_stores_copy_and_get_finds_it():
    table = SymbolTable()
    original = make("x", value=5)
    stored = table.add(original)
    assert stored is not original
    assert table.get("x") is stored
    assert stored.value == 5
    assert len(table) == 1
    assert "x" in table


def test_add_duplicate_without_overwrite_returns_none():
    table = SymbolTable()
    first = table.add(make("x", value=1))
    assert table.add(make("x", value=2)) is None
    assert table.get("x") is first
    assert first.value == 1
    assert len(table) == 1


def test_add_overwrite_updates_in_place():
    table = SymbolTable()
    first = table.add(make("x", value=1))
    result = table.add(make("x", SymbolType.DOUBLE, value=2.5), overwrite=True)
    assert result is first
    assert first.type is SymbolType.DOUBLE
    assert first.value == 2.5
    assert first.name == "x"
    assert len(table) == 1


def test_get_missing_returns_none():
    table = SymbolTable()
    table.add(make("a"))
    assert table.get("b") is None
    assert "b" not in table


def test_remove_from_shared_bucket():
    table = SymbolTable(1)
    for name in ("a", "b", "c"):
        table.add(make(name))
    table.remove("b")
    assert table.get("b") is None
    assert table.get("a") is not None and table.get("c") is not None
    table.remove("c")
    assert [s.name for s in table] == ["a"]
    table.remove("missing")
    assert len(table) == 1


def test_new_symbols_go_to_bucket_front():
    table = SymbolTable(1)
    for name in ("a", "b", "c"):
        table.add(make(name))
    assert [s.name for s in table] == ["c", "b", "a"]


def test_clear_empties_table():
    table = SymbolTable(7)
    for name in ("a", "b", "c", "d"):
        table.add(make(name))
    table.clear()
    assert len(table) == 0
    assert list(table) == []


def test_copy_is_independent():
    table = SymbolTable(5)
    for name in ("a", "b", "c"):
        table.add(make(name, value=name))
    dup = table.copy()
    assert [s.name for s in dup] == [s.name for s in table]
    assert dup.size == table.size
    dup.get("a").value = "changed"
    dup.remove("b")
    assert table.get("a").value == "a"
    assert "b" in table


def test_for_each_reports_none_results():
    table = SymbolTable()
    for name in ("a", "b"):
        table.add(make(name))
    seen = []
    assert table.for_each(lambda s: seen.append(s.name) or s) is True
    assert sorted(seen) == ["a", "b"]
    assert table.for_each(lambda s: None if s.name == "a" else s) is False


def test_generate_indices_arguments_first():
    func = make("f", SymbolType.FUNCTION, function=FunctionData())
    locals_ = SymbolTable(3, parent=func)
    func.function.local_table = locals_
    stored_func = func
    local_y = locals_.add(make("y"))
    arg_a = locals_.add(make("a"))
    arg_b = locals_.add(make("b"))
    stored_func.add_argument(arg_a)
    stored_func.add_argument(arg_b)
    locals_.generate_indices()
    assert arg_a.index == 0
    assert arg_b.index == 1
    assert local_y.index == 2


def test_generate_indices_keeps_existing():
    func = make("f", SymbolType.FUNCTION, function=FunctionData())
    locals_ = SymbolTable(parent=func)
    pre = locals_.add(make("p", index=7))
    other = locals_.add(make("q"))
    locals_.generate_indices()
    assert pre.index == 7
    assert other.index == 0


def test_generate_indices_rejects_const_argument():
    func = make("f", SymbolType.FUNCTION, function=FunctionData())
    locals_ = SymbolTable(parent=func)
    func.add_argument(locals_.add(make("a", const=True)))
    with pytest.raises(RuntimeError):
        locals_.generate_indices()


def test_generate_indices_ignores_class_tables():
    cls = make("Main", SymbolType.CLASS)
    members = SymbolTable(parent=cls)
    x = members.add(make("x"))
    members.generate_indices()
    assert x.index == -1


def test_add_argument_counts_and_rejects_non_function():
    func = make("f", SymbolType.FUNCTION, function=FunctionData())
    arg = make("a")
    assert func.add_argument(arg) is arg
    assert func.function.number_of_arguments == 1
    assert func.function.arguments == [arg]
    with pytest.raises(ValueError):
        make("v").add_argument(arg)


@pytest.mark.parametrize("name", ["", "a", "Main", "run", "Main.run", "žluťoučký"])
@pytest.mark.parametrize("size", [1, 3, HTAB_DEFAULT_SIZE])
def test_hash_name_in_range_and_stable(name, size):
    h = hash_name(name, size)
    assert 0 <= h < size
    assert hash_name(name, size) == h


def test_hash_name_empty_is_zero():
    assert hash_name("", HTAB_DEFAULT_SIZE) == 0


@pytest.mark.parametrize("text", ["", "a", "dcba", "hello world", "zzyyxx", "9a0B"])
def test_sort_chars_is_sorted_permutation(text):
    out = sort_chars(text)
    assert Counter(out) == Counter(text)
    assert all(a <= b for a, b in zip(out, out[1:]))


def test_sort_chars_example():
    assert sort_chars("dcba") == "abcd"


@pytest.mark.parametrize(
    "s,search",
    [
        ("abcabd", "abd"),
        ("aaaab", "aab"),
        ("abababc", "ababc"),
        ("hello", "hello"),
        ("hello", "lo"),
        ("mississippi", "issip"),
    ],
)
def test_find_locates_first_occurrence(s, search):
    idx = find(s, search)
    assert idx >= 0
    assert s[idx: idx + len(search)] == search
    assert all(s[i: i + len(search)] != search for i in range(idx))


@pytest.mark.parametrize(
    "s,search",
    [("abc", "abcd"), ("abc", "x"), ("aaaa", "ab"), ("", "a")],
)
def test_find_missing_returns_minus_one(s, search):
    assert find(s, search) == -1


def test_find_empty_pattern_at_start():
    assert find("abc", "") == 0
    assert find("", "") == 0