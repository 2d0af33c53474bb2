"""
Lispy Language Parser
pyparsing grammar producing a concrete syntax tree with source spans
"""

from typing import List, Dict, Any, Optional, Callable
from dataclasses import dataclass, field

# Import pyparsing with error handling
try:
    from pyparsing import (
        Regex, Literal, Forward, ZeroOrMore, StringStart, StringEnd,
        ParseException, ParseResults, ParserElement, col, lineno,
    )
    # Enable packrat parsing for performance
    ParserElement.enable_packrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import LispyErrorHandler, LispyParseError


@dataclass(frozen=True)
class SourceSpan:
    """Source location information for preserving CST"""
    filename: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    text: str = ""

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_col}"
        return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


@dataclass(frozen=True)
class CSTNode:
    """
    Concrete Syntax Tree node

    type is one of PROGRAM, NUMBER, SYMBOL, SEXPR, QEXPR or CHAR. Leaves keep
    their literal text in value; S- and Q-expressions keep their delimiters as
    CHAR children so the tree mirrors the source exactly.
    """
    type: str
    value: Any
    children: List['CSTNode'] = field(default_factory=list)
    span: Optional[SourceSpan] = None

    def __str__(self) -> str:
        if self.children:
            children_str = ", ".join(str(child) for child in self.children)
            return f"{self.type}([{children_str}])"
        return f"{self.type}({self.value})"


# Characters allowed in a symbol, besides letters and digits
SYMBOL_CHARS = r"_+\-*/\\=<>!&%"


class LispyGrammar:
    """Lispy grammar definition using pyparsing"""

    def __init__(self, debug: bool = False, filename: str = "<input>"):
        self.debug = debug
        self.filename = filename
        self._setup_grammar()

    def _leaf(self, node_type: str) -> Callable:
        def action(source: str, loc: int, tokens: ParseResults) -> CSTNode:
            text = tokens[0]
            if self.debug:
                print(f"Matched {node_type} {text!r} at {lineno(loc, source)}:{col(loc, source)}")
            span = SourceSpan(
                self.filename,
                lineno(loc, source), col(loc, source),
                lineno(loc, source), col(loc, source) + len(text),
                text,
            )
            return CSTNode(node_type, text, [], span)
        return action

    def _branch(self, node_type: str) -> Callable:
        def action(source: str, loc: int, tokens: ParseResults) -> CSTNode:
            children = list(tokens)
            start_line, start_col = lineno(loc, source), col(loc, source)
            if children:
                last = children[-1].span
                span = SourceSpan(self.filename, start_line, start_col, last.end_line, last.end_col)
            else:
                span = SourceSpan(self.filename, start_line, start_col, start_line, start_col)
            return CSTNode(node_type, None, children, span)
        return action

    def _setup_grammar(self):
        """Setup the Lispy grammar"""

        # Forward declaration for the recursive expression rule
        expression = Forward()

        # Literals
        number = Regex(r"-?[0-9]+").set_parse_action(self._leaf("NUMBER"))
        symbol = Regex(rf"[a-zA-Z0-9{SYMBOL_CHARS}]+").set_parse_action(self._leaf("SYMBOL"))

        # Delimiters stay in the tree as CHAR nodes
        lparen = Literal("(").set_parse_action(self._leaf("CHAR"))
        rparen = Literal(")").set_parse_action(self._leaf("CHAR"))
        lbrace = Literal("{").set_parse_action(self._leaf("CHAR"))
        rbrace = Literal("}").set_parse_action(self._leaf("CHAR"))

        # S-expressions are evaluated, Q-expressions are quoted
        sexpr = (lparen + ZeroOrMore(expression) + rparen).set_parse_action(self._branch("SEXPR"))
        qexpr = (lbrace + ZeroOrMore(expression) + rbrace).set_parse_action(self._branch("QEXPR"))

        expression <<= number | symbol | sexpr | qexpr

        # A whole line of input
        program = (StringStart() + ZeroOrMore(expression) + StringEnd()).set_parse_action(
            self._branch("PROGRAM"))

        self.number = number
        self.symbol = symbol
        self.sexpr = sexpr
        self.qexpr = qexpr
        self.expression = expression
        self.program = program
        self.single_expression = StringStart() + expression + StringEnd()

    def _parse(self, element: ParserElement, text: str) -> CSTNode:
        try:
            return element.parse_string(text, parse_all=True)[0]
        except ParseException as e:
            raise LispyErrorHandler(text, self.filename).enhance_parse_exception(e) from e

    def parse_program(self, text: str) -> CSTNode:
        """Parse a line of input into a PROGRAM node"""
        return self._parse(self.program, text)

    def parse_expression(self, text: str) -> CSTNode:
        """Parse exactly one expression"""
        return self._parse(self.single_expression, text)


class LispyParser:
    """Main Lispy parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._grammars: Dict[str, LispyGrammar] = {}

    def grammar(self, filename: str = "<input>") -> LispyGrammar:
        if filename not in self._grammars:
            self._grammars[filename] = LispyGrammar(self.debug, filename)
        return self._grammars[filename]

    def parse_file(self, filepath: str) -> List[CSTNode]:
        """Parse a Lispy source file, one PROGRAM node per non-blank line"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                lines = f.read().split('\n')
        except FileNotFoundError:
            raise LispyParseError(f"File not found: {filepath}")
        except UnicodeDecodeError as e:
            raise LispyParseError(f"Cannot decode file {filepath}: {e}")

        grammar = self.grammar(filepath)
        return [grammar.parse_program(text) for text in lines if text.strip()]

    def parse_string(self, text: str, filename: str = "<input>") -> CSTNode:
        """Parse Lispy source code from string"""
        return self.grammar(filename).parse_program(text)

    def parse_expression(self, text: str, filename: str = "<input>") -> CSTNode:
        """Parse a single Lispy expression"""
        return self.grammar(filename).parse_expression(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> LispyParser:
    """Create a Lispy parser"""
    return LispyParser(debug=debug)


def create_debug_parser() -> LispyParser:
    """Create a Lispy parser with debug enabled"""
    return LispyParser(debug=True)


# Utility functions for working with CST
def find_nodes_by_type(cst: CSTNode, node_type: str) -> List[CSTNode]:
    """Find all nodes of a specific type in CST"""
    result = []

    def search(node: CSTNode):
        if node.type == node_type:
            result.append(node)
        for child in node.children:
            search(child)

    search(cst)
    return result


def pretty_print_cst(cst: CSTNode, indent: int = 0) -> str:
    """Pretty print a CST node for debugging"""
    result = "  " * indent + f"{cst.type}"
    if cst.value is not None:
        result += f"({repr(cst.value)})"
    result += "\n"

    for child in cst.children:
        result += pretty_print_cst(child, indent + 1)

    return result


def cst_to_dict(cst: CSTNode) -> Dict[str, Any]:
    """Convert CST to dictionary representation"""
    result = {
        "type": cst.type,
        "value": cst.value,
        "span": {
            "filename": cst.span.filename,
            "start_line": cst.span.start_line,
            "start_col": cst.span.start_col,
            "end_line": cst.span.end_line,
            "end_col": cst.span.end_col,
        } if cst.span else None,
        "children": [cst_to_dict(child) for child in cst.children]
    }
    return result
