"""
Lispy Standard Library
Built-in functions registered in every session environment

Every builtin receives the session environment and an owned argument list
(an S-expression) and returns a freshly owned value. The argument list, or
whatever is left of it, is released on every path.
"""

from typing import Callable, Dict
import operator

from environment import Environment
from utilities import (
  check,
  check_all_types,
  check_arity,
  check_min_arity,
  check_not_empty,
  check_one_of_types,
  check_type,
)
from values import (
  Function,
  Number,
  QExpr,
  SExpr,
  Symbol,
  Value,
  append_child,
  make_error,
  make_sexpr,
  pop_child,
  release,
  retag_as_qexpr,
  retag_as_sexpr,
  take_child,
  wrap_int64,
)


Builtin = Callable[[Environment, SExpr], Value]


# ============================================================================
# LIST FUNCTIONS
# ============================================================================

def builtin_list(env: Environment, a: SExpr) -> Value:
  """Turn the arguments themselves into a Q-expression"""
  return retag_as_qexpr(a)


def builtin_head(env: Environment, a: SExpr) -> Value:
  """First element of a Q-expression, still quoted"""
  error = (check_arity("head", a, 1)
           or check_type("head", a, 0, QExpr)
           or check_not_empty("head", a, 0))
  if error:
    return error

  v = take_child(a, 0)
  while len(v.cells) > 1:
    release(pop_child(v, 1))
  return v


def builtin_tail(env: Environment, a: SExpr) -> Value:
  """Q-expression without its first element"""
  error = (check_arity("tail", a, 1)
           or check_type("tail", a, 0, QExpr)
           or check_not_empty("tail", a, 0))
  if error:
    return error

  v = take_child(a, 0)
  release(pop_child(v, 0))
  return v


def builtin_eval(env: Environment, a: SExpr) -> Value:
  """Evaluate a Q-expression as if it were an S-expression"""
  error = check_arity("eval", a, 1) or check_type("eval", a, 0, QExpr)
  if error:
    return error

  # interpreter imports this module to seed environments
  from interpreter import evaluate

  x = retag_as_sexpr(take_child(a, 0))
  return evaluate(env, x)


def join_exprs(x: QExpr, y: QExpr) -> QExpr:
  while y.cells:
    append_child(x, pop_child(y, 0))
  release(y)
  return x


def builtin_join(env: Environment, a: SExpr) -> Value:
  """Concatenate one or more Q-expressions"""
  error = check_min_arity("join", a, 1) or check_all_types("join", a, QExpr)
  if error:
    return error

  x = pop_child(a, 0)
  while a.cells:
    x = join_exprs(x, pop_child(a, 0))
  release(a)
  return x


def builtin_cons(env: Environment, a: SExpr) -> Value:
  """Prepend a number or function to a Q-expression"""
  # TODO: decide whether symbols and nested expressions may be consed too
  error = (check_arity("cons", a, 2)
           or check_one_of_types("cons", a, 0, (Number, Function))
           or check_type("cons", a, 1, QExpr))
  if error:
    return error

  x = pop_child(a, 0)
  q = pop_child(a, 0)
  q.cells.insert(0, x)
  release(a)
  return q


def builtin_len(env: Environment, a: SExpr) -> Value:
  """Number of elements in a Q-expression"""
  error = check_arity("len", a, 1) or check_type("len", a, 0, QExpr)
  if error:
    return error

  x = Number(len(a.cells[0].cells))
  release(a)
  return x


def builtin_init(env: Environment, a: SExpr) -> Value:
  """Q-expression without its last element"""
  error = (check_arity("init", a, 1)
           or check_type("init", a, 0, QExpr)
           or check_not_empty("init", a, 0))
  if error:
    return error

  v = take_child(a, 0)
  release(pop_child(v, len(v.cells) - 1))
  return v


# ============================================================================
# MATHEMATICAL FUNCTIONS
# ============================================================================

def truncating_div(x: int, y: int) -> int:
  """Integer division rounding toward zero"""
  q = abs(x) // abs(y)
  return q if (x < 0) == (y < 0) else -q


def truncating_mod(x: int, y: int) -> int:
  """Remainder whose sign follows the dividend"""
  return x - y * truncating_div(x, y)


ARITHMETIC_OPS: Dict[str, Callable[[int, int], int]] = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': truncating_div,
    '%': truncating_mod,
}


def builtin_op(env: Environment, a: SExpr, op: str) -> Value:
  """Left fold of op over the Number arguments"""
  error = check_min_arity(op, a, 1) or check_all_types(op, a, Number)
  if error:
    return error

  x = pop_child(a, 0)

  if op == '-' and not a.cells:
    x.num = wrap_int64(-x.num)

  fn = ARITHMETIC_OPS[op]
  while a.cells:
    y = pop_child(a, 0)

    if op in ('/', '%') and y.num == 0:
      release(x)
      release(y)
      x = make_error("Division by zero")
      break

    x.num = wrap_int64(fn(x.num, y.num))
    release(y)

  release(a)
  return x


def builtin_add(env: Environment, a: SExpr) -> Value:
  return builtin_op(env, a, '+')


def builtin_sub(env: Environment, a: SExpr) -> Value:
  return builtin_op(env, a, '-')


def builtin_mul(env: Environment, a: SExpr) -> Value:
  return builtin_op(env, a, '*')


def builtin_div(env: Environment, a: SExpr) -> Value:
  return builtin_op(env, a, '/')


def builtin_rem(env: Environment, a: SExpr) -> Value:
  return builtin_op(env, a, '%')


# ============================================================================
# VARIABLE FUNCTIONS
# ============================================================================

def builtin_def(env: Environment, a: SExpr) -> Value:
  """Bind each symbol of a Q-expression to the matching remaining argument"""
  error = check_min_arity("def", a, 1) or check_type("def", a, 0, QExpr)
  if error:
    return error

  syms = a.cells[0]
  error = (check(a, all(isinstance(s, Symbol) for s in syms.cells),
                 "Function 'def' cannot define non-symbol")
           or check(a, len(syms.cells) == len(a.cells) - 1,
                    "Function 'def' cannot define incorrect number of values to symbols"))
  if error:
    return error

  for sym, value in zip(syms.cells, a.cells[1:]):
    env.bind(sym.sym, value)

  release(a)
  return make_sexpr()


# ============================================================================
# REGISTRATION
# ============================================================================

BUILTINS: Dict[str, Builtin] = {
    # List functions
    'list': builtin_list,
    'head': builtin_head,
    'tail': builtin_tail,
    'eval': builtin_eval,
    'join': builtin_join,
    'cons': builtin_cons,
    'len': builtin_len,
    'init': builtin_init,

    # Mathematical functions
    '%': builtin_rem,
    '+': builtin_add,
    '-': builtin_sub,
    '*': builtin_mul,
    '/': builtin_div,

    # Variable functions
    'def': builtin_def,
}


def add_builtins(env: Environment) -> Environment:
  """Register every builtin in env"""
  for name, fun in BUILTINS.items():
    env.register_builtin(name, fun)
  return env
