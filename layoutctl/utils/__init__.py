# layoutctl Utilities Package
"""
Shared helpers: settings loading, interpreter setup, batch validation.
"""

from .helpers import build_interpreter, load_layout, load_settings, validate_files

__all__ = ["build_interpreter", "load_layout", "load_settings", "validate_files"]
