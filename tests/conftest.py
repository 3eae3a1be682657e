"""
Shared test fixtures for the layoutctl test suite.

Provides layout scripts and settings files written to tmp_path
(real file I/O, no mocking of the filesystem).
"""

import pytest
import toml

from layoutctl.interpreter import LayoutInterpreter, make_unit_resolver

DESKTOP_LAYOUT = """\
// Default Desktop Layout
// Panel positioned at top with standard widgets

var panel = new Panel
panel.location = "top"
panel.height = 2 * gridUnit
panel.floating = true
panel.alignment = "center"
panel.hiding = "none"
panel.lengthMode = "fill"

// Application launcher with custom icon
var kickoff = panel.addWidget("org.kde.plasma.kickoff")
kickoff.currentConfigGroup = ["Shortcuts"]
kickoff.writeConfig("global", "Alt+F1")
kickoff.currentConfigGroup = ["General"]
kickoff.writeConfig("icon", "arxisos-start")
kickoff.writeConfig("favoritesPortedToKAstats", true)
kickoff.writeConfig("systemFavorites", "suspend,hibernate,reboot,shutdown")

// Virtual desktop pager
panel.addWidget("org.kde.plasma.pager")

var taskManager = panel.addWidget("org.kde.plasma.taskmanager")
taskManager.currentConfigGroup = ["General"]
taskManager.writeConfig("launchers", "")

panel.addWidget("org.kde.plasma.panelspacer")
panel.addWidget("org.kde.plasma.systemtray")

var clock = panel.addWidget("org.kde.plasma.digitalclock")
clock.currentConfigGroup = ["Appearance"]
clock.writeConfig("showDate", true)
clock.writeConfig("dateFormat", "shortDate")

panel.addWidget("org.kde.plasma.showdesktop")
"""


@pytest.fixture
def desktop_layout():
    """The stock top-panel layout script as text."""
    return DESKTOP_LAYOUT


@pytest.fixture
def interpreter():
    """Interpreter with gridUnit resolved to 22 pixels."""
    return LayoutInterpreter(resolve_unit=make_unit_resolver({"gridUnit": 22}))


@pytest.fixture
def tmp_layout(tmp_path, desktop_layout):
    """Write the stock layout to a real .js file."""
    layout_path = tmp_path / "org.kde.plasma.desktop-layout.js"
    layout_path.write_text(desktop_layout)
    return layout_path


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "units": {"gridUnit": 22, "smallSpacing": 4},
        "validation": {"strict_widgets": False},
        "widgets": {"known": ["com.example.weather"]},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path
