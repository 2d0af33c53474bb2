"""
Value model tests for Lispy
Construction, ownership and printing of every variant
"""

import pytest
from values import (
  ERROR_BUFFER_SIZE,
  INT64_MAX,
  INT64_MIN,
  Error,
  Function,
  Number,
  QExpr,
  SExpr,
  Symbol,
  append_child,
  copy_value,
  make_error,
  make_function,
  make_number,
  make_qexpr,
  make_sexpr,
  make_symbol,
  pop_child,
  release,
  render,
  retag_as_qexpr,
  take_child,
  type_name,
  wrap_int64,
)


def sample_builtin(env, a):
  return a


class TestConstruction:
  """Test constructors for each variant"""

  def test_number(self):
    assert make_number(42) == Number(42)
    assert make_number(-7).num == -7

  def test_number_wraps_to_64_bits(self):
    assert Number(INT64_MAX + 1).num == INT64_MIN
    assert Number(INT64_MIN - 1).num == INT64_MAX
    assert wrap_int64(-1) == -1

  def test_error_formats_message(self):
    err = make_error("unbound symbol '{}'", "y")
    assert isinstance(err, Error)
    assert err.err == "unbound symbol 'y'"

  def test_error_without_arguments_is_taken_verbatim(self):
    assert make_error("braces {} stay").err == "braces {} stay"

  def test_error_message_is_capped(self):
    err = make_error("{}", "x" * 2000)
    assert len(err.err) == ERROR_BUFFER_SIZE - 1

  def test_symbol_and_function(self):
    assert make_symbol("foo").sym == "foo"
    fun = make_function(sample_builtin, "sample")
    assert fun.fun is sample_builtin
    assert fun.name == "sample"

  def test_empty_expressions(self):
    assert make_sexpr().cells == []
    assert make_qexpr().cells == []
    assert make_sexpr() != make_qexpr()

  def test_type_names(self):
    assert type_name(Number) == "Number"
    assert type_name(Error) == "Error"
    assert type_name(Symbol) == "Symbol"
    assert type_name(Function) == "Function"
    assert type_name(SExpr) == "S-Expression"
    assert type_name(QExpr) == "Q-Expression"


class TestChildren:
  """Test adding and removing children"""

  def test_append_child_returns_parent(self):
    parent = make_qexpr()
    assert append_child(parent, Number(1)) is parent
    append_child(parent, Number(2))
    assert parent.cells == [Number(1), Number(2)]

  def test_append_child_to_leaf_fails(self):
    with pytest.raises(TypeError):
      append_child(Number(1), Number(2))

  def test_pop_and_take(self):
    parent = QExpr([Number(1), Number(2), Number(3)])
    assert pop_child(parent, 1) == Number(2)
    assert parent.cells == [Number(1), Number(3)]

    assert take_child(parent, 1) == Number(3)
    assert parent.cells == []

  def test_retag_moves_children(self):
    sexpr = SExpr([Number(1), Symbol("x")])
    quoted = retag_as_qexpr(sexpr)
    assert quoted == QExpr([Number(1), Symbol("x")])
    assert sexpr.cells == []


class TestOwnership:
  """Test deep copy and release"""

  def test_copy_is_deep(self):
    original = QExpr([Number(1), SExpr([Symbol("x"), Error("boom")])])
    duplicate = copy_value(original)
    assert duplicate == original

    duplicate.cells[1].cells.append(Number(9))
    duplicate.cells[0].num = 100
    assert original == QExpr([Number(1), SExpr([Symbol("x"), Error("boom")])])

  def test_copy_survives_release_of_original(self):
    original = SExpr([Number(1), QExpr([Number(2), Number(3)])])
    duplicate = copy_value(original)
    release(original)

    assert original.cells == []
    assert duplicate == SExpr([Number(1), QExpr([Number(2), Number(3)])])
    release(duplicate)
    assert duplicate.cells == []

  def test_copy_keeps_function_identity(self):
    fun = Function(sample_builtin, "sample")
    assert copy_value(fun).fun is sample_builtin

  def test_release_empties_nested_children(self):
    inner = QExpr([Number(2)])
    outer = SExpr([Number(1), inner])
    release(outer)
    assert inner.cells == []
    assert outer.cells == []


class TestRender:
  """Test printing of values"""

  @pytest.mark.parametrize("value, expected", [
    (Number(-12), "-12"),
    (Error("Division by zero"), "Error: Division by zero"),
    (Symbol("def"), "def"),
    (Function(sample_builtin, "head"), "<function: 'head'>"),
    (SExpr(), "()"),
    (QExpr(), "{}"),
    (QExpr([Number(1), SExpr([Symbol("+"), Number(2)])]), "{1 (+ 2)}"),
  ])
  def test_render(self, value, expected):
    assert render(value) == expected
    assert str(value) == expected
