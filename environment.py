"""
Lispy environment
Ordered symbol table mapping names to owned values, shared by one interpreter session
"""

from typing import Callable, Dict, Iterator, List, Tuple

from values import (
  Function,
  Value,
  copy_value,
  make_error,
  make_function,
  release,
)


NO_NAME_FOUND = "No name found"


class Environment:
  """
  Names are unique and the last write wins. Stored values are owned by the
  environment: they go in and come out as copies.
  """

  def __init__(self, debug: bool = False):
    self.bindings: Dict[str, Value] = {}
    self.debug = debug

  def lookup(self, name: str) -> Value:
    """Copy of the value bound to name, or an unbound symbol Error"""
    if name in self.bindings:
      return copy_value(self.bindings[name])
    return make_error("unbound symbol '{}'", name)

  def bind(self, name: str, value: Value) -> None:
    """Bind name to a copy of value, releasing any value it replaces"""
    if name in self.bindings:
      release(self.bindings[name])
    self.bindings[name] = copy_value(value)

  def register_builtin(self, name: str, fun: Callable) -> None:
    self.bind(name, make_function(fun, name))

  def name_of(self, fun: Callable) -> str:
    """Name a builtin is registered under, for display only"""
    for name, value in self.bindings.items():
      if isinstance(value, Function) and value.fun is fun:
        return name
    return NO_NAME_FOUND

  def names(self) -> List[str]:
    return list(self.bindings)

  def release(self) -> None:
    """Release every stored value; the environment is empty afterwards"""
    for value in self.bindings.values():
      release(value)
    self.bindings.clear()

  def __contains__(self, name: str) -> bool:
    return name in self.bindings

  def __len__(self) -> int:
    return len(self.bindings)

  def __iter__(self) -> Iterator[Tuple[str, Value]]:
    return iter(self.bindings.items())
