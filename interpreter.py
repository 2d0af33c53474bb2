"""
Lispy Interpreter
Evaluation of value trees against a session environment, and construction of
value trees from parsed expressions
"""

from typing import Iterable, List, Optional

from environment import Environment
from parsing import CSTNode, LispyParser, create_parser
from stdlib import add_builtins
from values import (
  INT64_MAX,
  INT64_MIN,
  Error,
  Function,
  SExpr,
  Symbol,
  Value,
  append_child,
  make_error,
  make_number,
  make_qexpr,
  make_sexpr,
  make_symbol,
  pop_child,
  release,
  render,
  take_child,
)


# ============================================================================
# EVALUATION
# ============================================================================

def evaluate(env: Environment, value: Value) -> Value:
  """
  Reduce value to a self-evaluating value.
  Takes ownership of value; the result is owned by the caller.
  """
  if env.debug:
    print(f"Evaluating: {render(value)}")

  if isinstance(value, Symbol):
    x = env.lookup(value.sym)
    release(value)
    return x
  if isinstance(value, SExpr):
    return eval_sexpr(env, value)
  return value


def eval_sexpr(env: Environment, v: SExpr) -> Value:
  """Evaluate every child, then apply the first to the rest"""
  v.cells = [evaluate(env, cell) for cell in v.cells]

  for i, cell in enumerate(v.cells):
    if isinstance(cell, Error):
      return take_child(v, i)

  if not v.cells:
    return v

  if len(v.cells) == 1:
    return take_child(v, 0)

  first = pop_child(v, 0)
  if not isinstance(first, Function):
    release(first)
    release(v)
    return make_error("S-expression does not begin with symbol!")

  if env.debug:
    print(f"Applying {first.name} to {render(v)}")

  result = first.fun(env, v)
  release(first)
  return result


# ============================================================================
# READING
# ============================================================================

# Punctuation and anchors carry no value of their own
SKIPPED_NODE_TYPES = ("CHAR", "REGEX")


def read_number(node: CSTNode) -> Value:
  x = int(node.value)
  if x < INT64_MIN or x > INT64_MAX:
    return make_error("invalid number")
  return make_number(x)


def build_value_from_parsed_tree(node: CSTNode) -> Value:
  """Convert a parsed expression tree into an owned value tree"""
  if node.type == "NUMBER":
    return read_number(node)
  if node.type == "SYMBOL":
    return make_symbol(node.value)

  if node.type in ("PROGRAM", "SEXPR"):
    x = make_sexpr()
  elif node.type == "QEXPR":
    x = make_qexpr()
  else:
    raise ValueError(f"Cannot build a value from {node.type} node")

  for child in node.children:
    if child.type in SKIPPED_NODE_TYPES:
      continue
    append_child(x, build_value_from_parsed_tree(child))
  return x


# ============================================================================
# SESSION
# ============================================================================

def create_session_env(debug: bool = False) -> Environment:
  """Fresh environment holding only the builtins"""
  return add_builtins(Environment(debug=debug))


class LispyInterpreter:
  """One interpreter session: a parser and the environment it mutates"""

  def __init__(self, debug: bool = False, parser: Optional[LispyParser] = None):
    self.debug = debug
    self.parser = parser or create_parser(debug)
    self.env = create_session_env(debug)

  def eval_value(self, value: Value) -> Value:
    return evaluate(self.env, value)

  def eval_string(self, text: str, filename: str = "<stdin>") -> Value:
    """Parse one line of input and evaluate it as a top-level S-expression"""
    cst = self.parser.parse_string(text, filename)
    return self.eval_value(build_value_from_parsed_tree(cst))

  def run_lines(self, lines: Iterable[str], filename: str = "<input>") -> List[str]:
    """Evaluate each non-blank line in turn and collect the printed results"""
    outputs = []
    for line in lines:
      if not line.strip():
        continue
      result = self.eval_string(line, filename)
      outputs.append(render(result))
      release(result)
    return outputs

  def close(self) -> None:
    self.env.release()


def create_interpreter(debug: bool = False) -> LispyInterpreter:
  """Factory function returning an interpreter"""
  return LispyInterpreter(debug=debug)


def create_debug_interpreter() -> LispyInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
