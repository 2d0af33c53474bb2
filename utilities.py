"""
Utilities module for the Lispy builtins
Argument validation helpers shared by every builtin
"""

from typing import Optional, Tuple, Type

from values import (
  Error,
  SExpr,
  Value,
  make_error,
  release,
  type_name,
)


# ==================== ERROR MESSAGE BUILDERS ====================

def arity_error(func_name: str, expected: int, got: int) -> Error:
  """
  Generate arity mismatch error

  Args:
    func_name: Function name
    expected: Expected number of arguments
    got: Actual number of arguments

  Returns:
    Error value with formatted message
  """
  return make_error(
    "Function '{}' passed an incorrect number of arguments. Expected {}, Got {}.",
    func_name, expected, got
  )


def type_mismatch_error(func_name: str, position: int, expected: str, actual: Value) -> Error:
  """
  Generate type mismatch error

  Args:
    func_name: Function name
    position: 0-based argument position
    expected: Expected kind name
    actual: Offending argument

  Returns:
    Error value with formatted message
  """
  return make_error(
    "Function '{}' passed an incorrect type for argument {}. Expected {}, Got {}.",
    func_name, position, expected, actual.kind
  )


def empty_argument_error(func_name: str, position: int) -> Error:
  return make_error("Function '{}' passed {{}} for argument {}.", func_name, position)


# ==================== VALIDATION UTILITIES ====================
#
# Every check takes ownership of args only when it fails: the argument list is
# released and the Error returned. On success it returns None and args is
# untouched, so checks chain with `or`.

def fail(args: SExpr, error: Error) -> Error:
  release(args)
  return error


def check(args: SExpr, cond: bool, fmt: str, *fmt_args) -> Optional[Error]:
  if cond:
    return None
  return fail(args, make_error(fmt, *fmt_args))


def check_arity(func_name: str, args: SExpr, expected: int) -> Optional[Error]:
  got = len(args.cells)
  if got == expected:
    return None
  return fail(args, arity_error(func_name, expected, got))


def check_min_arity(func_name: str, args: SExpr, minimum: int) -> Optional[Error]:
  got = len(args.cells)
  if got >= minimum:
    return None
  return fail(args, make_error(
    "Function '{}' passed an incorrect number of arguments. Expected at least {}, Got {}.",
    func_name, minimum, got
  ))


def check_type(
  func_name: str,
  args: SExpr,
  position: int,
  expected: Type[Value]
) -> Optional[Error]:
  actual = args.cells[position]
  if isinstance(actual, expected):
    return None
  return fail(args, type_mismatch_error(func_name, position, type_name(expected), actual))


def check_all_types(func_name: str, args: SExpr, expected: Type[Value]) -> Optional[Error]:
  for position in range(len(args.cells)):
    error = check_type(func_name, args, position, expected)
    if error is not None:
      return error
  return None


def check_one_of_types(
  func_name: str,
  args: SExpr,
  position: int,
  allowed: Tuple[Type[Value], ...]
) -> Optional[Error]:
  if isinstance(args.cells[position], allowed):
    return None
  expected = " or ".join(type_name(t) for t in allowed)
  return fail(args, make_error(
    "Function '{}' passed incorrect type for argument {}. Expected {}.",
    func_name, position, expected
  ))


def check_not_empty(func_name: str, args: SExpr, position: int) -> Optional[Error]:
  if args.cells[position].cells:
    return None
  return fail(args, empty_argument_error(func_name, position))
