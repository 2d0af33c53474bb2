"""
Lispy - Main Entry Point
A small Lisp with S-expressions, Q-expressions and a handful of builtins
"""

import sys
import argparse
import atexit
from pathlib import Path
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, create_debug_parser, LispyParseError, pretty_print_cst
from interpreter import LispyInterpreter, create_interpreter, create_debug_interpreter
from stdlib import BUILTINS
from values import Function, release, render


VERSION = "0.0.0.1"
PROMPT = "lispy> "
HISTORY_FILE = "~/.lispy_history"
HISTORY_LENGTH = 1000
REPL_COMMANDS = [":parse", ":env", ":help", "exit"]


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Lispy - a small Lisp with S-expressions and Q-expressions',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s                        # Interactive mode
  %(prog)s script.lspy            # Run a script, one expression per line
  %(prog)s --parse script.lspy    # Parse and show CST
  %(prog)s --debug script.lspy    # Run with evaluation trace
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Lispy script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show CST (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'Lispy version {VERSION}'
  )

  return parser


def eval_and_print(interpreter: LispyInterpreter, code: str, filename: str = "<stdin>") -> None:
  """Evaluate one line of input, print the result and release it"""
  result = interpreter.eval_string(code, filename)
  print(render(result))
  release(result)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a Lispy script file and show the CST"""
  try:
    parser = create_debug_parser() if debug else create_parser()

    print(f"Parsing {script_path}...")
    cst_nodes = parser.parse_file(script_path)

    print(f"\nParsed {len(cst_nodes)} lines:")
    print("=" * 50)

    for i, node in enumerate(cst_nodes, 1):
      print(f"\nLine {i}:")
      print(pretty_print_cst(node))

  except LispyParseError as e:
    print(f"Parse error in '{script_path}': {e}")
    sys.exit(1)


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run a Lispy script, evaluating each non-blank line in one session"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      lines = f.read().split('\n')
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)

  interpreter = create_debug_interpreter() if debug else create_interpreter()
  line_num = 0
  try:
    for line_num, code in enumerate(lines, 1):
      if not code.strip():
        continue
      if debug:
        print(f"{script_path}:{line_num}: {code}")
      eval_and_print(interpreter, code, script_path)
  except LispyParseError as e:
    print(f"Parse error in '{script_path}' on line {line_num}: {e}")
    sys.exit(1)
  finally:
    interpreter.close()


def setup_readline() -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(HISTORY_LENGTH)

  completions = list(BUILTINS) + REPL_COMMANDS

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  def save_history():
    try:
      readline.write_history_file(history_file)
    except OSError:
      pass

  atexit.register(save_history)


def show_env(interpreter: LispyInterpreter) -> None:
  """Print user bindings, leaving out the builtins"""
  print("Current environment:")
  user_bindings = [(name, value) for name, value in interpreter.env
                   if not (isinstance(value, Function) and name in BUILTINS)]
  if not user_bindings:
    print("  (no user-defined bindings)")
    return
  for name, value in user_bindings:
    val_str = render(value)
    if len(val_str) > 60:
      val_str = val_str[:57] + "..."
    print(f"  {name} = {val_str}")


def show_help() -> None:
  print("REPL Commands:")
  print("  :parse <expr>     - Show parsed CST")
  print("  :env              - Show current environment")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  + 1 2                     - Top-level S-expression")
  print("  (* 2 (+ 1 2))             - Nested application")
  print("  {1 2 3}                   - Q-expression (quoted list)")
  print("  head {1 2 3}              - List builtins: list head tail join eval cons len init")
  print("  def {x y} 1 2             - Bind symbols")


def run_interactive_mode(debug: bool = False) -> None:
  """Run Lispy in interactive mode"""
  print(f"Lispy version {VERSION}")
  print("Press Ctrl-C to exit\n")
  if debug:
    print("Debug mode enabled")

  setup_readline()

  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      code = input(PROMPT)

      if code.strip() == "exit":
        break

      if not code.strip():
        continue

      if code.startswith(":parse "):
        try:
          cst = interpreter.parser.parse_string(code[7:], "<stdin>")
          print("Expression CST:")
          print(pretty_print_cst(cst))
        except LispyParseError as e:
          print(f"Parse error: {e}")
        continue

      if code.strip() == ":env":
        show_env(interpreter)
        continue

      if code.strip() == ":help":
        show_help()
        continue

      try:
        eval_and_print(interpreter, code)
      except LispyParseError as e:
        print(f"Parse error: {e}")

    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break
    except Exception as e:
      print(f"Unexpected error: {e}")
      if debug:
        import traceback
        traceback.print_exc()
      print("  Hint: If this keeps happening, try restarting or use --debug for more details")

  interpreter.close()


def main() -> None:
  """Main entry point for Lispy"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug)
    return

  run_interactive_mode(debug=args.debug)


if __name__ == "__main__":
  main()
