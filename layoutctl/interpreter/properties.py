"""
Panel property schema - Which `panel.X = value` assignments are allowed.

Each property maps to a validator and the PanelSpec field it fills.
Anything outside this table is rejected instead of being set as an
open-ended attribute.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable

from layoutctl.errors import ErrorKind, ParseError
from layoutctl.model import Alignment, HidingMode, LengthMode, Location, PanelSpec
from layoutctl.services.catalog import suggest_name


@dataclass(frozen=True)
class PanelProperty:
    """A settable panel property."""
    name: str
    field: str
    validate: Callable[[str, Any], Any]
    optional: bool = False


def _invalid(name: str, value: Any, expected: str) -> ParseError:
    return ParseError(
        ErrorKind.INVALID_VALUE,
        f"invalid value {value!r} for {name} (expected {expected})",
        field=name,
        value=value,
    )


def _enum(enum_cls: type[Enum]) -> Callable[[str, Any], Enum]:
    allowed = [member.value for member in enum_cls]

    def validate(name: str, value: Any) -> Enum:
        if isinstance(value, enum_cls):
            return value
        if not isinstance(value, str) or value not in allowed:
            raise _invalid(name, value, "one of " + ", ".join(allowed))
        return enum_cls(value)

    return validate


def _boolean(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise _invalid(name, value, "true or false")
    return value


def _number(minimum: float, inclusive: bool) -> Callable[[str, Any], float]:
    def validate(name: str, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _invalid(name, value, "a number")
        if not math.isfinite(value):
            raise _invalid(name, value, "a finite number")
        if value < minimum or (value == minimum and not inclusive):
            bound = ">=" if inclusive else ">"
            raise _invalid(name, value, f"a number {bound} {minimum}")
        return value

    return validate


_positive = _number(0, inclusive=False)
_non_negative = _number(0, inclusive=True)

PANEL_PROPERTIES: dict[str, PanelProperty] = {
    prop.name: prop
    for prop in (
        PanelProperty("location", "location", _enum(Location)),
        PanelProperty("height", "height", _positive, optional=True),
        PanelProperty("floating", "floating", _boolean),
        PanelProperty("alignment", "alignment", _enum(Alignment)),
        PanelProperty("hiding", "hiding", _enum(HidingMode)),
        PanelProperty("lengthMode", "length_mode", _enum(LengthMode)),
        PanelProperty("offset", "offset", _non_negative, optional=True),
        PanelProperty("minimumLength", "minimum_length", _positive, optional=True),
        PanelProperty("maximumLength", "maximum_length", _positive, optional=True),
    )
}


def get_panel_property(name: str) -> PanelProperty:
    """
    Look up a panel property by its script name.

    Raises:
        ParseError: UNKNOWN_PROPERTY, with a "did you mean" hint when one is close
    """
    prop = PANEL_PROPERTIES.get(name)
    if prop is None:
        message = f"unknown panel property '{name}'"
        hint = suggest_name(name, PANEL_PROPERTIES)
        if hint:
            message += f" (did you mean '{hint}'?)"
        raise ParseError(ErrorKind.UNKNOWN_PROPERTY, message, field=name)
    return prop


def apply_panel_property(panel: PanelSpec, name: str, value: Any) -> PanelSpec:
    """Return a copy of `panel` with property `name` validated and set."""
    prop = get_panel_property(name)
    return replace(panel, **{prop.field: prop.validate(name, value)})


def check_panel(panel: PanelSpec) -> PanelSpec:
    """
    Cross-property checks that only make sense once all properties are set.

    Raises:
        ParseError: INVALID_VALUE if minimumLength exceeds maximumLength
    """
    if (
        panel.minimum_length is not None
        and panel.maximum_length is not None
        and panel.minimum_length > panel.maximum_length
    ):
        raise ParseError(
            ErrorKind.INVALID_VALUE,
            f"minimumLength {panel.minimum_length} exceeds maximumLength {panel.maximum_length}",
            field="minimumLength",
            value=panel.minimum_length,
        )
    return panel
