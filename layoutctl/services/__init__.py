"""
Services package - Lookup data shared by the interpreter and tooling.
"""

from .catalog import DEFAULT_WIDGETS, WidgetCatalog

__all__ = ["DEFAULT_WIDGETS", "WidgetCatalog"]
