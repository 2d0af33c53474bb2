"""
Lispy value model
Tagged variants for every runtime datum, plus construction, copy, release and printing
"""

from dataclasses import dataclass, field
from typing import Callable, List, Union


INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

# Error text is capped like the 512-byte buffer it was formatted into
ERROR_BUFFER_SIZE = 512


def wrap_int64(n: int) -> int:
  """Reduce an int to signed 64-bit two's complement"""
  return ((n - INT64_MIN) & 0xFFFFFFFFFFFFFFFF) + INT64_MIN


# ============================================================================
# VARIANTS
# ============================================================================

class LispyValue:
  """Base for every variant. Never instantiated directly."""
  kind = "Unknown"

  def __str__(self) -> str:
    return render(self)


@dataclass(eq=True)
class Number(LispyValue):
  num: int
  kind = "Number"

  def __post_init__(self):
    self.num = wrap_int64(self.num)


@dataclass(eq=True)
class Error(LispyValue):
  err: str
  kind = "Error"


@dataclass(eq=True)
class Symbol(LispyValue):
  sym: str
  kind = "Symbol"


@dataclass(eq=True)
class Function(LispyValue):
  fun: Callable
  name: str
  kind = "Function"


@dataclass(eq=True)
class SExpr(LispyValue):
  cells: List['Value'] = field(default_factory=list)
  kind = "S-Expression"


@dataclass(eq=True)
class QExpr(LispyValue):
  cells: List['Value'] = field(default_factory=list)
  kind = "Q-Expression"


Value = Union[Number, Error, Symbol, Function, SExpr, QExpr]
Expr = Union[SExpr, QExpr]


def type_name(value_type: type) -> str:
  """Human readable name of a variant class, as used in error messages"""
  return getattr(value_type, 'kind', "Unknown")


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def make_number(num: int) -> Number:
  return Number(num)


def make_error(fmt: str, *args) -> Error:
  """
  Create an Error value from a format template

  Args:
    fmt: str.format template
    *args: Values substituted into the template

  Returns:
    Error whose message is at most ERROR_BUFFER_SIZE - 1 characters
  """
  message = fmt.format(*args) if args else fmt
  return Error(message[:ERROR_BUFFER_SIZE - 1])


def make_symbol(name: str) -> Symbol:
  return Symbol(name)


def make_function(fun: Callable, name: str) -> Function:
  return Function(fun, name)


def make_sexpr() -> SExpr:
  return SExpr()


def make_qexpr() -> QExpr:
  return QExpr()


# ============================================================================
# CHILD MANIPULATION
# ============================================================================

def is_expr(value: Value) -> bool:
  return isinstance(value, (SExpr, QExpr))


def append_child(parent: Expr, child: Value) -> Expr:
  """Append child to an S- or Q-expression; the parent takes ownership"""
  if not is_expr(parent):
    raise TypeError(f"Cannot add a child to {parent.kind}")
  parent.cells.append(child)
  return parent


def pop_child(parent: Expr, index: int) -> Value:
  """Remove and return the child at index; the caller owns it afterwards"""
  return parent.cells.pop(index)


def take_child(parent: Expr, index: int) -> Value:
  """Pop the child at index and release what is left of the parent"""
  child = pop_child(parent, index)
  release(parent)
  return child


def retag_as_qexpr(expr: Expr) -> QExpr:
  """Move the children of expr into a Q-expression without copying them"""
  quoted = QExpr(expr.cells)
  expr.cells = []
  return quoted


def retag_as_sexpr(expr: Expr) -> SExpr:
  """Move the children of expr into an S-expression without copying them"""
  unquoted = SExpr(expr.cells)
  expr.cells = []
  return unquoted


# ============================================================================
# OWNERSHIP
# ============================================================================

def copy_value(value: Value) -> Value:
  """Deep, independent copy of value"""
  if isinstance(value, Number):
    return Number(value.num)
  if isinstance(value, Error):
    return Error(value.err)
  if isinstance(value, Symbol):
    return Symbol(value.sym)
  if isinstance(value, Function):
    return Function(value.fun, value.name)
  if isinstance(value, SExpr):
    return SExpr([copy_value(cell) for cell in value.cells])
  if isinstance(value, QExpr):
    return QExpr([copy_value(cell) for cell in value.cells])
  raise TypeError(f"Unknown value type: {type(value).__name__}")


def release(value: Value) -> None:
  """
  Release value and everything it owns, children first.
  The value must not be used afterwards and must not be released twice.
  """
  if is_expr(value):
    for cell in value.cells:
      release(cell)
    value.cells.clear()


# ============================================================================
# PRINTING
# ============================================================================

def render_expr(value: Expr, open_char: str, close_char: str) -> str:
  return open_char + " ".join(render(cell) for cell in value.cells) + close_char


def render(value: Value) -> str:
  """Textual form of value, as the REPL prints it"""
  if isinstance(value, Number):
    return str(value.num)
  if isinstance(value, Error):
    return f"Error: {value.err}"
  if isinstance(value, Symbol):
    return value.sym
  if isinstance(value, Function):
    return f"<function: '{value.name}'>"
  if isinstance(value, SExpr):
    return render_expr(value, '(', ')')
  if isinstance(value, QExpr):
    return render_expr(value, '{', '}')
  return f"<{type(value).__name__}>"
