"""
Lexer - Splits a layout script into tokens and statements.

Understands the small JavaScript subset layout scripts are written in:
identifiers, numbers, single/double quoted strings, punctuation, and
// or /* */ comments. Newlines end statements except inside () or [].
"""

import math
import re
from dataclasses import dataclass
from typing import Any, Iterator

from layoutctl.errors import ErrorKind, ParseError

IDENT = "ident"
NUMBER = "number"
STRING = "string"
OP = "op"
NEWLINE = "newline"

_TOKEN_RE = re.compile(
    r"""
      (?P<newline>\n)
    | (?P<space>[ \t\r\f\v]+)
    | (?P<line_comment>//[^\n]*)
    | (?P<block_comment>/\*.*?\*/)
    | (?P<open_comment>/\*)
    | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    | (?P<ident>[A-Za-z_$][A-Za-z0-9_$]*)
    | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
    | (?P<open_string>["'])
    | (?P<op>[=.()\[\],;*/+\-%])
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.DOTALL)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
    "\n": "",  # line continuation
}

_OPENERS = {"(": ")", "[": "]"}


@dataclass(frozen=True)
class Token:
    """A lexical token. `value` holds the decoded string or number."""
    kind: str
    text: str
    line: int
    start: int
    end: int
    value: Any = None

    def is_op(self, text: str) -> bool:
        return self.kind == OP and self.text == text

    def is_ident(self, text: str = None) -> bool:
        return self.kind == IDENT and (text is None or self.text == text)


def _unescape(body: str) -> str:
    def replace(match: re.Match) -> str:
        code = match.group(1)
        if code[0] in "ux" and len(code) > 1:
            return chr(int(code[1:], 16))
        return _SIMPLE_ESCAPES.get(code, code)

    return _ESCAPE_RE.sub(replace, body)


def _number(text: str):
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def tokenize(source: str) -> Iterator[Token]:
    """
    Yield tokens for `source`, with NEWLINE tokens marking statement breaks.

    Newlines inside parentheses or brackets are dropped so multi-line
    argument lists and arrays read as one statement.

    Raises:
        ParseError: SYNTAX_ERROR on characters or literals that can't be lexed
    """
    pos = 0
    line = 1
    depth: list[str] = []

    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise ParseError(
                ErrorKind.SYNTAX_ERROR,
                f"unexpected character {source[pos]!r}",
                value=source[pos],
                line=line,
            )

        kind = match.lastgroup
        text = match.group()
        start, pos = match.start(), match.end()

        if kind == "newline":
            if not depth:
                yield Token(NEWLINE, text, line, start, pos)
            line += 1
        elif kind == "block_comment":
            breaks = text.count("\n")
            if breaks and not depth:
                yield Token(NEWLINE, "\n", line, start, pos)
            line += breaks
        elif kind == "open_comment":
            raise ParseError(ErrorKind.SYNTAX_ERROR, "unterminated comment", line=line)
        elif kind == "open_string":
            raise ParseError(ErrorKind.SYNTAX_ERROR, "unterminated string", line=line)
        elif kind == "number":
            number = _number(text)
            if isinstance(number, float) and not math.isfinite(number):
                raise ParseError(
                    ErrorKind.INVALID_VALUE,
                    f"number {text} is out of range",
                    value=text,
                    line=line,
                )
            yield Token(NUMBER, text, line, start, pos, number)
        elif kind == "string":
            yield Token(STRING, text, line, start, pos, _unescape(text[1:-1]))
            line += text.count("\n")
        elif kind == "ident":
            yield Token(IDENT, text, line, start, pos)
        elif kind == "op":
            if text in _OPENERS:
                depth.append(_OPENERS[text])
            elif text in (")", "]"):
                if not depth or depth.pop() != text:
                    raise ParseError(
                        ErrorKind.SYNTAX_ERROR,
                        f"unbalanced {text!r}",
                        value=text,
                        line=line,
                    )
            yield Token(OP, text, line, start, pos)
        # spaces and line comments produce nothing

    if depth:
        raise ParseError(
            ErrorKind.SYNTAX_ERROR,
            f"missing {depth[-1]!r} before end of script",
            line=line,
        )


def statements(source: str) -> Iterator[list[Token]]:
    """Group tokens into statements split on newlines and ';'."""
    current: list[Token] = []
    for token in tokenize(source):
        if token.kind == NEWLINE or token.is_op(";"):
            if current:
                yield current
                current = []
        else:
            current.append(token)
    if current:
        yield current


def split_arguments(tokens: list[Token]) -> list[list[Token]]:
    """Split tokens on top-level commas (those not nested in () or [])."""
    if not tokens:
        return []

    parts: list[list[Token]] = [[]]
    depth = 0
    for token in tokens:
        if token.kind == OP and token.text in "([":
            depth += 1
        elif token.kind == OP and token.text in ")]":
            depth -= 1
        elif token.is_op(",") and depth == 0:
            parts.append([])
            continue
        parts[-1].append(token)
    return parts
