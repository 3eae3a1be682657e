"""
Parse errors - Typed failures raised by the layout interpreter.

Every failure carries an ErrorKind so callers (the CLI, batch tools) can
branch on what went wrong without matching on message text.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Category of a layout parse failure."""
    UNKNOWN_PROPERTY = "UnknownProperty"
    NO_ACTIVE_GROUP = "NoActiveGroup"
    INVALID_VALUE = "InvalidValue"
    UNRESOLVED_UNIT = "UnresolvedUnit"
    SYNTAX_ERROR = "SyntaxError"


class ParseError(Exception):
    """
    A layout script could not be turned into a descriptor.

    Attributes:
        kind: ErrorKind category
        message: Human readable description
        field: Offending property, key or name (if any)
        value: Offending value (if any)
        line: 1-based source line (if known)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        line: Optional[int] = None,
    ):
        self.kind = kind
        self.message = message
        self.field = field
        self.value = value
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        location = f"line {self.line}: " if self.line is not None else ""
        return f"{location}{self.kind.value}: {self.message}"

    def at_line(self, line: int) -> "ParseError":
        """Return this error with a line number attached, keeping an existing one."""
        if self.line is None:
            self.line = line
            self.args = (str(self),)
        return self

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "field": self.field,
            "value": self.value,
            "line": self.line,
        }
