"""
Layout data model - Immutable descriptors produced by the interpreter.

A LayoutDescriptor is one PanelSpec plus the ordered widgets placed in it:

    {
        "panel": {"location": "top", "height": 44, ...},
        "widgets": [
            {"type": "org.kde.plasma.kickoff",
             "configGroups": [{"path": ["General"], "entries": {"icon": "start"}}]},
        ]
    }
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

ConfigValue = Union[str, bool, int, float]


class Location(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class HidingMode(str, Enum):
    NONE = "none"
    AUTOHIDE = "autohide"
    DODGE_WINDOWS = "dodgewindows"
    WINDOWS_BELOW = "windowsbelow"


class LengthMode(str, Enum):
    FILL = "fill"
    FIT = "fit"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PanelSpec:
    """Position and appearance of the single panel in a layout."""
    location: Location = Location.BOTTOM
    height: Optional[float] = None  # None = shell default
    floating: bool = False
    alignment: Alignment = Alignment.LEFT
    hiding: HidingMode = HidingMode.NONE
    length_mode: LengthMode = LengthMode.FILL
    offset: Optional[float] = None
    minimum_length: Optional[float] = None
    maximum_length: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        from layoutctl.interpreter.properties import PANEL_PROPERTIES

        data = {}
        for name, prop in PANEL_PROPERTIES.items():
            value = getattr(self, prop.field)
            if value is None and prop.optional:
                continue
            data[name] = value.value if isinstance(value, Enum) else value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PanelSpec":
        """Build a PanelSpec from its JSON form, validating every property."""
        from layoutctl.interpreter.properties import apply_panel_property, check_panel

        panel = cls()
        for name, value in data.items():
            if value is None:
                continue
            panel = apply_panel_property(panel, name, value)
        return check_panel(panel)


@dataclass(frozen=True)
class ConfigGroup:
    """
    Key/value settings for one widget under a group path.

    Entries are stored as ordered (key, value) pairs so the group stays
    hashable; use `entries` for a dict view.
    """
    path: tuple[str, ...]
    items: tuple[tuple[str, ConfigValue], ...] = ()

    @property
    def entries(self) -> dict[str, ConfigValue]:
        return dict(self.items)

    def get(self, key: str, default: Any = None) -> Any:
        return self.entries.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return {"path": list(self.path), "entries": self.entries}


@dataclass(frozen=True)
class WidgetSpec:
    """One widget placed in the panel, in on-screen order."""
    type: str
    config_groups: tuple[ConfigGroup, ...] = ()

    def group(self, *path: str) -> Optional[ConfigGroup]:
        """Return the config group at `path`, or None."""
        for group in self.config_groups:
            if group.path == tuple(path):
                return group
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "configGroups": [group.to_dict() for group in self.config_groups],
        }


@dataclass(frozen=True)
class LayoutDescriptor:
    """A fully resolved panel layout."""
    panel: PanelSpec = field(default_factory=PanelSpec)
    widgets: tuple[WidgetSpec, ...] = ()

    @property
    def widget_types(self) -> list[str]:
        return [widget.type for widget in self.widgets]

    def to_dict(self) -> dict[str, Any]:
        return {
            "panel": self.panel.to_dict(),
            "widgets": [widget.to_dict() for widget in self.widgets],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LayoutDescriptor":
        """
        Rebuild a descriptor from its JSON form.

        Applies the same panel validation as the interpreter, so an edited
        JSON export cannot smuggle in out-of-domain values.

        Raises:
            ParseError: On unknown properties, invalid values or a
                malformed JSON shape
        """
        from layoutctl.errors import ErrorKind, ParseError

        def expect(value: Any, kind: type, field: str, what: str) -> Any:
            if not isinstance(value, kind):
                raise ParseError(ErrorKind.INVALID_VALUE, f"{what} must be a {kind.__name__}", field=field, value=value)
            return value

        expect(data, dict, "layout", "layout")
        widgets = []
        for index, raw in enumerate(expect(data.get("widgets", []), list, "widgets", "widgets")):
            widget_type = raw.get("type") if isinstance(raw, dict) else None
            if not isinstance(widget_type, str) or not widget_type:
                raise ParseError(
                    ErrorKind.INVALID_VALUE,
                    f"widget #{index} has no type",
                    field="widget",
                    value=widget_type,
                )
            groups = []
            for raw_group in expect(raw.get("configGroups", []), list, "configGroups", f"configGroups of '{widget_type}'"):
                expect(raw_group, dict, "configGroups", f"config group of '{widget_type}'")
                raw_path = expect(raw_group.get("path", []), list, "currentConfigGroup", f"group path of '{widget_type}'")
                path = tuple(raw_path)
                if not path or not all(isinstance(part, str) for part in path):
                    raise ParseError(
                        ErrorKind.INVALID_VALUE,
                        f"widget '{widget_type}' has an invalid group path",
                        field="currentConfigGroup",
                        value=list(path),
                    )
                entries = expect(raw_group.get("entries", {}), dict, "entries", f"entries of '{widget_type}'")
                items = tuple(entries.items())
                for key, value in items:
                    if not isinstance(value, (str, bool, int, float)):
                        raise ParseError(
                            ErrorKind.INVALID_VALUE,
                            f"config entry '{key}' of '{widget_type}' is not a scalar",
                            field=key,
                            value=value,
                        )
                    if isinstance(value, float) and not math.isfinite(value):
                        raise ParseError(
                            ErrorKind.INVALID_VALUE,
                            f"config entry '{key}' of '{widget_type}' is not a finite number",
                            field=key,
                            value=value,
                        )
                groups.append(ConfigGroup(path=path, items=items))
            widgets.append(WidgetSpec(type=widget_type, config_groups=tuple(groups)))

        return cls(
            panel=PanelSpec.from_dict(expect(data.get("panel", {}), dict, "panel", "panel")),
            widgets=tuple(widgets),
        )
