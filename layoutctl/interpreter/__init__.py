"""
Interpreter package - Layout script parsing.

Lexes the script, types values (resolving unit expressions), checks panel
properties against a fixed schema, and builds the LayoutDescriptor.
"""

from .parser import LayoutInterpreter, ParseResult, parse
from .values import make_unit_resolver, no_units

__all__ = ["LayoutInterpreter", "ParseResult", "parse", "make_unit_resolver", "no_units"]
