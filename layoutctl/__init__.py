# layoutctl Package
"""
Loader, validator and exporter for declarative desktop panel layouts.

Components:
  - Interpreter: layout script -> LayoutDescriptor
  - Serializer: LayoutDescriptor -> layout script / JSON
  - CLI: layoutctl validate | export | render
"""

from .errors import ErrorKind, ParseError
from .interpreter import LayoutInterpreter, ParseResult, make_unit_resolver, parse
from .model import (
    Alignment,
    ConfigGroup,
    HidingMode,
    LayoutDescriptor,
    LengthMode,
    Location,
    PanelSpec,
    WidgetSpec,
)
from .serializer import render, to_json

__version__ = "0.1.0"

__all__ = [
    "Alignment",
    "ConfigGroup",
    "ErrorKind",
    "HidingMode",
    "LayoutDescriptor",
    "LayoutInterpreter",
    "LengthMode",
    "Location",
    "PanelSpec",
    "ParseError",
    "ParseResult",
    "WidgetSpec",
    "make_unit_resolver",
    "parse",
    "render",
    "to_json",
]
