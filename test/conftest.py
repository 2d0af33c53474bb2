"""
Test configuration for Lispy tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter
from parsing import create_parser


@pytest.fixture
def parser():
  """Fresh parser for each test"""
  return create_parser()


@pytest.fixture
def interpreter():
  """Fresh interpreter session for each test"""
  session = create_interpreter()
  yield session
  session.close()


@pytest.fixture
def run(interpreter):
  """Evaluate a line of Lispy and return its printed form"""
  def run_line(code: str) -> str:
    return interpreter.run_lines([code])[0]
  return run_line
