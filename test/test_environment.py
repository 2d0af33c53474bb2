"""
Environment tests for Lispy
"""

import pytest
from environment import Environment, NO_NAME_FOUND
from stdlib import BUILTINS, add_builtins, builtin_head
from values import Error, Function, Number, QExpr


class TestEnvironment:
  """Test lookup, binding and reverse lookup"""

  @pytest.fixture
  def env(self):
    environment = Environment()
    yield environment
    environment.release()

  def test_lookup_unbound(self, env):
    assert env.lookup("y") == Error("unbound symbol 'y'")
    assert len(env) == 0

  def test_bind_then_lookup(self, env):
    env.bind("x", Number(5))
    assert env.lookup("x") == Number(5)

  def test_rebind_replaces(self, env):
    env.bind("x", Number(5))
    env.bind("x", Number(10))
    assert env.lookup("x") == Number(10)
    assert env.names() == ["x"]

  def test_bind_copies_callers_value(self, env):
    value = QExpr([Number(1)])
    env.bind("q", value)
    value.cells.append(Number(2))
    assert env.lookup("q") == QExpr([Number(1)])

  def test_lookup_returns_copy(self, env):
    env.bind("q", QExpr([Number(1)]))
    looked_up = env.lookup("q")
    looked_up.cells.clear()
    assert env.lookup("q") == QExpr([Number(1)])

  def test_rebind_releases_old_value(self, env):
    env.bind("q", QExpr([Number(1)]))
    stored = env.bindings["q"]
    env.bind("q", Number(2))
    assert stored.cells == []

  def test_insertion_order_is_stable(self, env):
    for name in ["b", "a", "c"]:
      env.bind(name, Number(0))
    env.bind("a", Number(1))
    assert [name for name, _ in env] == ["b", "a", "c"]
    assert "a" in env
    assert "z" not in env

  def test_register_builtin_and_name_of(self, env):
    env.register_builtin("head", builtin_head)
    assert env.lookup("head") == Function(builtin_head, "head")
    assert env.name_of(builtin_head) == "head"

  def test_name_of_unregistered(self, env):
    assert env.name_of(lambda e, a: a) == NO_NAME_FOUND

  def test_release_empties_table(self, env):
    env.bind("q", QExpr([Number(1)]))
    stored = env.bindings["q"]
    env.release()
    assert len(env) == 0
    assert stored.cells == []


class TestBuiltinRegistration:
  """Test the builtin table seeded into every session"""

  def test_all_builtins_registered(self):
    env = add_builtins(Environment())
    assert env.names() == list(BUILTINS)
    for name in ["list", "head", "tail", "eval", "join", "cons", "len", "init",
                 "+", "-", "*", "/", "%", "def"]:
      assert isinstance(env.lookup(name), Function)
      assert env.name_of(BUILTINS[name]) == name
