"""
Helper utilities for layoutctl.

Provides common functions used by the CLI and batch tooling:
- Settings loading (TOML with defaults)
- Interpreter construction from settings
- Layout file loading and parallel validation
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import toml
from loguru import logger

from layoutctl.errors import ErrorKind, ParseError
from layoutctl.interpreter import LayoutInterpreter, ParseResult, make_unit_resolver
from layoutctl.model import LayoutDescriptor
from layoutctl.services.catalog import DEFAULT_WIDGETS, WidgetCatalog

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "layoutctl" / "settings.toml"


def default_settings() -> Dict[str, Any]:
    return {
        "units": {
            "gridUnit": 18,
        },
        "validation": {
            "strict_widgets": False,
        },
        "widgets": {
            "known": [],
        },
    }


def load_settings(settings_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load layoutctl settings from a TOML file.

    Args:
        settings_path: File to read; defaults to ~/.config/layoutctl/settings.toml

    Returns:
        Dictionary containing settings with defaults applied

    Example settings.toml:
        [units]
        gridUnit = 22

        [validation]
        strict_widgets = true

        [widgets]
        known = ["com.example.weather"]
    """
    defaults = default_settings()
    settings_path = Path(settings_path) if settings_path else DEFAULT_SETTINGS_PATH

    if not settings_path.exists():
        logger.debug(f"Settings file not found at {settings_path}, using defaults")
        return defaults

    try:
        loaded = toml.load(settings_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}; using defaults")
        return defaults

    return _check_sections(_deep_merge(defaults, loaded), settings_path)


def _check_sections(settings: Dict[str, Any], settings_path: Path) -> Dict[str, Any]:
    """Replace sections (or widgets.known) with the wrong type by their defaults."""
    defaults = default_settings()

    for section in ("units", "validation", "widgets"):
        if not isinstance(settings.get(section), dict):
            logger.warning(f"Ignoring [{section}] in {settings_path}: expected a table, using defaults")
            settings[section] = defaults[section]

    known = settings["widgets"].get("known", [])
    if not isinstance(known, list) or not all(isinstance(item, str) for item in known):
        logger.warning(f"Ignoring widgets.known in {settings_path}: expected a list of strings")
        settings["widgets"]["known"] = defaults["widgets"]["known"]

    return settings


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def build_interpreter(settings: Dict[str, Any]) -> LayoutInterpreter:
    """Create a LayoutInterpreter configured from loaded settings."""
    units = {}
    for name, size in settings.get("units", {}).items():
        if isinstance(size, bool) or not isinstance(size, (int, float)):
            logger.warning(f"Ignoring unit '{name}': size {size!r} is not a number")
            continue
        units[name] = size

    catalog = WidgetCatalog(DEFAULT_WIDGETS).extended(settings.get("widgets", {}).get("known", []))
    strict = bool(settings.get("validation", {}).get("strict_widgets", False))

    return LayoutInterpreter(
        resolve_unit=make_unit_resolver(units),
        catalog=catalog,
        strict_widgets=strict,
    )


def load_layout(path: Union[str, Path], interpreter: LayoutInterpreter) -> LayoutDescriptor:
    """
    Read and parse a layout script file.

    Raises:
        OSError: If the file can't be read
        ParseError: If the script is invalid
    """
    path = Path(path)
    source = path.read_text(encoding="utf-8")
    logger.debug(f"Parsing {path}")
    return interpreter.parse(source)


def _validate_one(path: Path, interpreter: LayoutInterpreter) -> ParseResult:
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return ParseResult(error=ParseError(ErrorKind.SYNTAX_ERROR, f"cannot read {path}: {e}", value=str(path)))
    return interpreter.try_parse(source)


def validate_files(
    paths: Iterable[Union[str, Path]],
    interpreter: LayoutInterpreter,
    max_workers: int = 4,
) -> list[tuple[Path, ParseResult]]:
    """
    Parse many layout files in parallel.

    Each file is parsed independently; a failure in one doesn't stop the
    others. Results come back in input order.
    """
    paths = [Path(p) for p in paths]
    if not paths:
        return []

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(paths)))) as pool:
        results = list(pool.map(lambda p: _validate_one(p, interpreter), paths))

    failed = sum(1 for result in results if not result.ok)
    logger.debug(f"Validated {len(paths)} layout files, {failed} failed")
    return list(zip(paths, results))
