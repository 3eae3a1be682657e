"""
Serializer - Renders a LayoutDescriptor back into layout script text.

Output is deterministic: panel properties in schema order, widgets in
panel order, config groups and keys in insertion order. Parsing the
rendered text gives back an equal descriptor.
"""

import json
import re
from enum import Enum

from layoutctl.interpreter.properties import PANEL_PROPERTIES
from layoutctl.model import LayoutDescriptor, WidgetSpec

PANEL_VAR = "panel"

_RESERVED = {
    PANEL_VAR, "var", "let", "const", "new", "true", "false", "null",
    "undefined", "function", "return", "if", "else", "for", "while",
    "this", "Panel", "gridUnit",
}


def literal(value) -> str:
    """Format a value as a script literal."""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    # JSON string escaping is valid script string syntax
    return json.dumps(value, ensure_ascii=False)


def _handle_name(widget: WidgetSpec, taken: set[str]) -> str:
    """Variable name for a widget handle: last id segment, camelCased, unique."""
    last = widget.type.rsplit(".", 1)[-1]
    words = [w for w in re.split(r"[^A-Za-z0-9]+", last) if w]
    base = "".join([words[0].lower(), *(w[:1].upper() + w[1:] for w in words[1:])]) if words else "widget"
    if not re.match(r"[A-Za-z_]", base):
        base = "widget" + base
    if base in _RESERVED:
        base += "Widget"

    name = base
    counter = 2
    while name in taken:
        name = f"{base}{counter}"
        counter += 1
    taken.add(name)
    return name


def render(descriptor: LayoutDescriptor) -> str:
    """
    Render `descriptor` as a layout script.

    Example output:
        var panel = new Panel
        panel.location = "top"
        panel.height = 44

        var kickoff = panel.addWidget("org.kde.plasma.kickoff")
        kickoff.currentConfigGroup = ["General"]
        kickoff.writeConfig("icon", "start-here")
    """
    lines = [f"var {PANEL_VAR} = new Panel"]

    for name, prop in PANEL_PROPERTIES.items():
        value = getattr(descriptor.panel, prop.field)
        if value is None:
            continue
        lines.append(f"{PANEL_VAR}.{name} = {literal(value)}")

    taken: set[str] = set()
    for widget in descriptor.widgets:
        lines.append("")
        add_call = f"{PANEL_VAR}.addWidget({literal(widget.type)})"
        if not widget.config_groups:
            lines.append(add_call)
            continue

        handle = _handle_name(widget, taken)
        lines.append(f"var {handle} = {add_call}")
        for group in widget.config_groups:
            path = ", ".join(literal(part) for part in group.path)
            lines.append(f"{handle}.currentConfigGroup = [{path}]")
            for key, value in group.items:
                lines.append(f"{handle}.writeConfig({literal(key)}, {literal(value)})")

    return "\n".join(lines) + "\n"


def to_json(descriptor: LayoutDescriptor, indent: int = 2) -> str:
    """Serialize `descriptor` to its JSON form."""
    return json.dumps(descriptor.to_dict(), indent=indent, ensure_ascii=False, allow_nan=False)
