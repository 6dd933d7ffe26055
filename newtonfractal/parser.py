"""
Minimal parser and evaluator for complex-valued formulas such as "x^3-1".

A formula is split at one operator outside of brackets and both halves are
parsed recursively. The split operator is the first occurrence of the operator
with the highest split priority in OPERATORS, so "8-2-1" is read as 8-(2-1)
and "2*3+1" as (2*3)+1. Terminals are single lowercase variables or unsigned
decimal numbers. The parsed tree is cached per formula text.
"""
import re
import string
from dataclasses import dataclass
from functools import lru_cache

from newtonfractal import complex_math
from newtonfractal.complex_math import NAN, ComplexNumber
from newtonfractal.errors import BindingError, ConfigurationError, ParseError

# Split priority, highest first
OPERATORS = "+-/*^"

INPUT_PATTERN = re.compile(r"[x0-9\-+*/^().]+")

_NUMBER = re.compile(r"\d+\.?\d*|\.\d+")

_OPERATIONS = {
    "+": complex_math.add,
    "-": complex_math.sub,
    "*": complex_math.mul,
    "/": complex_math.div,
    "^": complex_math.pow,
}


@dataclass(frozen=True)
class Literal:
    value: ComplexNumber


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: object
    right: object


def validate_formula(formula):
    """Reject formulas with characters outside of [x0-9+-*/^().]."""
    if not isinstance(formula, str) or not INPUT_PATTERN.fullmatch(formula):
        raise ConfigurationError(f"Invalid formula: {formula!r}")


def _closing_bracket(text):
    """Index of the bracket closing text[0], or -1."""
    depth = 0
    for i, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def strip_outer_brackets(text):
    while len(text) > 2 and text[0] == "(" and _closing_bracket(text) == len(text) - 1:
        text = text[1:-1]
    return text


def find_split_operator(text):
    """
    Position of the operator to split at, or -1 for a terminal.

    Brackets are tracked with a flag rather than a depth counter: any ")"
    ends the bracketed region. Only singly nested regions survive this, deeper
    nesting has to be reached through strip_outer_brackets first.
    """
    inside = False
    position = -1
    best_priority = len(OPERATORS)

    for i, char in enumerate(text):
        if char == "(" or char == ")":
            inside = char == "("
        if inside:
            continue
        priority = OPERATORS.find(char)
        if -1 < priority < best_priority:
            position = i
            best_priority = priority

    return position


def _parse_terminal(text, allow_empty):
    if not text:
        # A leading sign reads as 0-x
        if allow_empty:
            return Literal(complex_math.ZERO)
        raise ParseError("Missing operand")
    if len(text) == 1 and text in string.ascii_lowercase:
        return Variable(text)
    if not _NUMBER.fullmatch(text):
        raise ParseError(f"Cannot parse {text!r}")
    return Literal(ComplexNumber(float(text), 0.0))


def _parse(text, allow_empty=False):
    text = strip_outer_brackets(text)
    position = find_split_operator(text)
    if position < 0:
        return _parse_terminal(text, allow_empty)

    op = text[position]
    left = _parse(text[:position], allow_empty=op in "+-")
    right = _parse(text[position + 1:])
    return BinaryOp(op, left, right)


@lru_cache(maxsize=128)
def parse_formula(formula):
    """Parse formula text into a tree of Literal, Variable and BinaryOp nodes."""
    if not formula:
        raise ParseError("Empty formula")
    return _parse(formula)


def evaluate_tree(node, variables):
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Variable):
        try:
            return variables[node.name]
        except KeyError:
            raise BindingError(f"Unknown variable: {node.name}") from None

    left = evaluate_tree(node.left, variables)
    right = evaluate_tree(node.right, variables)

    # Undefined operands contaminate the whole result
    if left.is_nan or right.is_nan:
        return NAN

    return _OPERATIONS[node.op](left, right)


def evaluate(formula, variables=None):
    """
    Evaluate a formula with the given single-letter variable bindings.

    Example: evaluate("x^3-1", {"x": ComplexNumber(2, 0)}) -> ComplexNumber(7, 0)
    """
    return evaluate_tree(parse_formula(formula), variables or {})
