"""
Value typing - Turns the right-hand side of an assignment into a value.

Typing is lenient:
  "text" / 'text'      -> str
  42, 1.5              -> int / float
  true / false         -> bool
  2 * gridUnit         -> number (units resolved at parse time)
  ["a", "b"]           -> "a,b" (string lists are stored comma-joined)
  anything else        -> the source text, as an opaque string

Arithmetic is evaluated with simpleeval, restricted to + - * / % and
unary signs over literals and names: no builtins, no attribute access,
no function calls, no Python-only operators. Strings only concatenate
with '+'; '%' keeps the dividend's sign. Non-finite results are
rejected. Unit names are looked up through a caller-supplied resolver
since unit sizes belong to the host shell.
"""

import ast
import keyword
import math
import operator as op
from typing import Callable, Mapping, Optional

from loguru import logger
from simpleeval import InvalidExpression, NameNotDefined, SimpleEval

from layoutctl.errors import ErrorKind, ParseError
from layoutctl.interpreter.lexer import IDENT, NUMBER, OP, STRING, Token, split_arguments
from layoutctl.model import ConfigValue

UnitResolver = Callable[[str], Optional[float]]

_KEYWORDS = {"true": True, "false": False}
_BINARY = set("+-*/%")
_UNARY = set("+-")


def _numeric(func):
    """Wrap an operator so string operands are rejected ('+' concatenates, nothing else does)."""
    def apply(*operands):
        if any(isinstance(operand, str) for operand in operands):
            raise TypeError("only '+' accepts string operands")
        return func(*operands)
    return apply


def _remainder(a, b):
    """Remainder taking the sign of the dividend (-7 % 3 == -1)."""
    if b == 0:
        raise ZeroDivisionError("remainder by zero")
    if isinstance(a, int) and isinstance(b, int):
        result = abs(a) % abs(b)
        return -result if a < 0 else result
    return math.fmod(a, b)


_OPERATORS = {
    ast.Add: op.add,
    ast.Sub: _numeric(op.sub),
    ast.Mult: _numeric(op.mul),
    ast.Div: _numeric(op.truediv),
    ast.Mod: _numeric(_remainder),
    ast.USub: _numeric(op.neg),
    ast.UAdd: _numeric(op.pos),
}


def no_units(name: str) -> Optional[float]:
    """Resolver that knows no units at all."""
    return None


def make_unit_resolver(units: Mapping[str, float]) -> UnitResolver:
    """
    Build a resolver from a name -> size mapping.

    Example:
        resolve = make_unit_resolver({"gridUnit": 22})
        resolve("gridUnit")  # 22
    """
    sizes = dict(units)
    return sizes.get


def _tidy(number):
    """Collapse whole floats to int (44.0 -> 44)."""
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _is_operand_name(text: str) -> bool:
    return text in _KEYWORDS or (text.isidentifier() and not keyword.iskeyword(text))


def _is_arithmetic(tokens: list[Token]) -> bool:
    """
    True if tokens form operand (operator operand)*, where operands are
    literals, names or parenthesized sub-expressions with optional signs.
    """
    pos = 0

    def operand() -> bool:
        nonlocal pos
        while pos < len(tokens) and tokens[pos].kind == OP and tokens[pos].text in _UNARY:
            pos += 1
        if pos >= len(tokens):
            return False
        token = tokens[pos]
        if token.kind in (NUMBER, STRING):
            pos += 1
            return True
        if token.kind == IDENT and _is_operand_name(token.text):
            pos += 1
            return True
        if token.is_op("("):
            pos += 1
            if not expression() or pos >= len(tokens) or not tokens[pos].is_op(")"):
                return False
            pos += 1
            return True
        return False

    def expression() -> bool:
        nonlocal pos
        if not operand():
            return False
        while pos < len(tokens) and tokens[pos].kind == OP and tokens[pos].text in _BINARY:
            pos += 1
            if not operand():
                return False
        return True

    return expression() and pos == len(tokens)


def _expression_text(tokens: list[Token]) -> str:
    parts = []
    for token in tokens:
        if token.kind in (STRING, NUMBER):
            parts.append(repr(token.value))
        else:
            parts.append(token.text)
    return " ".join(parts)


def _evaluate_expression(tokens: list[Token], raw: str, resolve_unit: UnitResolver) -> ConfigValue:
    def lookup(node):
        if node.id in _KEYWORDS:
            return _KEYWORDS[node.id]
        size = resolve_unit(node.id)
        if size is None:
            raise KeyError(node.id)
        return size

    expression = _expression_text(tokens)
    evaluator = SimpleEval(operators=_OPERATORS, functions={}, names=lookup)

    try:
        result = evaluator.eval(expression)
    except NameNotDefined as e:
        raise ParseError(
            ErrorKind.UNRESOLVED_UNIT,
            f"unknown unit '{e.name}' in '{raw}'",
            field=e.name,
            value=raw,
        )
    except SyntaxError:
        raise ParseError(ErrorKind.SYNTAX_ERROR, f"malformed expression '{raw}'", value=raw)
    except InvalidExpression as e:
        raise ParseError(ErrorKind.INVALID_VALUE, f"cannot evaluate '{raw}': {e}", value=raw)
    except (TypeError, ValueError, ZeroDivisionError, OverflowError) as e:
        raise ParseError(ErrorKind.INVALID_VALUE, f"cannot evaluate '{raw}': {e}", value=raw)

    if not isinstance(result, (str, bool, int, float)):
        raise ParseError(ErrorKind.INVALID_VALUE, f"'{raw}' is not a scalar value", value=raw)
    if isinstance(result, float) and not math.isfinite(result):
        raise ParseError(ErrorKind.INVALID_VALUE, f"'{raw}' is not a finite number", value=raw)

    logger.debug(f"Evaluated '{raw}' -> {result!r}")
    return _tidy(result)


def _list_item_text(value: ConfigValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def evaluate(tokens: list[Token], raw: str, resolve_unit: UnitResolver = no_units) -> ConfigValue:
    """
    Evaluate right-hand-side tokens to a typed value.

    Args:
        tokens: Tokens of the value (non-empty)
        raw: The value's source text, returned for opaque values
        resolve_unit: Maps a unit name to its size, or None if unknown

    Raises:
        ParseError: UNRESOLVED_UNIT, INVALID_VALUE or SYNTAX_ERROR for
            arithmetic that can't be evaluated
    """
    if len(tokens) == 1:
        token = tokens[0]
        if token.kind in (STRING, NUMBER):
            return token.value
        if token.kind == IDENT:
            if token.text in _KEYWORDS:
                return _KEYWORDS[token.text]
            size = resolve_unit(token.text)
            return _tidy(size) if size is not None else raw
        return raw

    if tokens[0].is_op("[") and tokens[-1].is_op("]"):
        items = []
        for item in split_arguments(tokens[1:-1]):
            if not item:
                return raw
            item_raw = " ".join(token.text for token in item)
            items.append(_list_item_text(evaluate(item, item_raw, resolve_unit)))
        return ",".join(items)

    if _is_arithmetic(tokens):
        return _evaluate_expression(tokens, raw, resolve_unit)

    return raw


def string_list(tokens: list[Token], field: str) -> list[str]:
    """
    Read an array literal of strings, e.g. ["Configuration", "General"].

    Raises:
        ParseError: INVALID_VALUE if the tokens aren't a non-empty array of strings
    """
    raw = " ".join(token.text for token in tokens)
    if len(tokens) < 2 or not tokens[0].is_op("[") or not tokens[-1].is_op("]"):
        raise ParseError(ErrorKind.INVALID_VALUE, f"{field} must be an array of strings", field=field, value=raw)

    path = []
    for item in split_arguments(tokens[1:-1]):
        if len(item) != 1 or item[0].kind != STRING:
            raise ParseError(ErrorKind.INVALID_VALUE, f"{field} must be an array of strings", field=field, value=raw)
        path.append(item[0].value)

    if not path:
        raise ParseError(ErrorKind.INVALID_VALUE, f"{field} must not be empty", field=field, value=raw)
    return path
