"""
Tests for the LayoutInterpreter.

Parses real layout scripts end to end: panel properties, widget order,
config group cursors, last-write-wins, and every error kind.
"""

import pytest

from layoutctl.errors import ErrorKind, ParseError
from layoutctl.interpreter import LayoutInterpreter, make_unit_resolver, parse
from layoutctl.model import Alignment, HidingMode, LengthMode, Location
from layoutctl.services.catalog import WidgetCatalog

HEADER = 'var panel = new Panel\n'


def _error(interpreter, source):
    with pytest.raises(ParseError) as exc:
        interpreter.parse(source)
    return exc.value


class TestDesktopLayout:
    """Test the stock desktop layout parses into the expected descriptor."""

    def test_panel_properties(self, interpreter, desktop_layout):
        panel = interpreter.parse(desktop_layout).panel
        assert panel.location == Location.TOP
        assert panel.height == 44
        assert panel.floating is True
        assert panel.alignment == Alignment.CENTER
        assert panel.hiding == HidingMode.NONE
        assert panel.length_mode == LengthMode.FILL

    def test_widget_order_matches_add_widget_calls(self, interpreter, desktop_layout):
        layout = interpreter.parse(desktop_layout)
        assert layout.widget_types == [
            "org.kde.plasma.kickoff",
            "org.kde.plasma.pager",
            "org.kde.plasma.taskmanager",
            "org.kde.plasma.panelspacer",
            "org.kde.plasma.systemtray",
            "org.kde.plasma.digitalclock",
            "org.kde.plasma.showdesktop",
        ]

    def test_kickoff_config_groups(self, interpreter, desktop_layout):
        kickoff = interpreter.parse(desktop_layout).widgets[0]
        assert [g.path for g in kickoff.config_groups] == [("Shortcuts",), ("General",)]
        assert kickoff.group("Shortcuts").entries == {"global": "Alt+F1"}
        assert kickoff.group("General").entries == {
            "icon": "arxisos-start",
            "favoritesPortedToKAstats": True,
            "systemFavorites": "suspend,hibernate,reboot,shutdown",
        }

    def test_unconfigured_widgets_have_no_groups(self, interpreter, desktop_layout):
        pager = interpreter.parse(desktop_layout).widgets[1]
        assert pager.config_groups == ()

    def test_empty_string_value_kept(self, interpreter, desktop_layout):
        task_manager = interpreter.parse(desktop_layout).widgets[2]
        assert task_manager.group("General").entries == {"launchers": ""}


class TestMinimalExample:
    """The single-widget example: gridUnit = 22, one kickoff widget."""

    SOURCE = (
        'var panel = new Panel\n'
        'panel.location = "top"\n'
        'panel.height = 2*gridUnit\n'
        'var kickoff = panel.addWidget("org.kde.plasma.kickoff")\n'
        'kickoff.currentConfigGroup = ["General"]\n'
        'kickoff.writeConfig("icon", "arxisos-start")\n'
    )

    def test_descriptor(self, interpreter):
        data = interpreter.parse(self.SOURCE).to_dict()
        assert data["panel"]["height"] == 44
        assert data["widgets"][0]["type"] == "org.kde.plasma.kickoff"
        assert data["widgets"][0]["configGroups"][0] == {
            "path": ["General"],
            "entries": {"icon": "arxisos-start"},
        }

    def test_module_level_parse(self):
        layout = parse(self.SOURCE, make_unit_resolver({"gridUnit": 22}))
        assert layout.panel.height == 44


class TestConfigWrites:
    """Test the current-group cursor and last-write-wins."""

    def test_last_write_wins(self, interpreter):
        layout = interpreter.parse(
            HEADER
            + 'var w = panel.addWidget("org.kde.plasma.digitalclock")\n'
            + 'w.currentConfigGroup = ["Appearance"]\n'
            + 'w.writeConfig("showDate", true)\n'
            + 'w.writeConfig("dateFormat", "shortDate")\n'
            + 'w.writeConfig("showDate", false)\n'
        )
        group = layout.widgets[0].group("Appearance")
        assert group.entries == {"showDate": False, "dateFormat": "shortDate"}
        # overwritten key keeps its original position
        assert [key for key, _ in group.items] == ["showDate", "dateFormat"]

    def test_reselecting_group_appends_to_it(self, interpreter):
        layout = interpreter.parse(
            HEADER
            + 'var w = panel.addWidget("org.kde.plasma.kickoff")\n'
            + 'w.currentConfigGroup = ["General"]\n'
            + 'w.writeConfig("icon", "a")\n'
            + 'w.currentConfigGroup = ["Shortcuts"]\n'
            + 'w.writeConfig("global", "Alt+F1")\n'
            + 'w.currentConfigGroup = ["General"]\n'
            + 'w.writeConfig("icon", "b")\n'
        )
        widget = layout.widgets[0]
        assert [g.path for g in widget.config_groups] == [("General",), ("Shortcuts",)]
        assert widget.group("General").entries == {"icon": "b"}

    def test_groups_are_per_widget(self, interpreter):
        layout = interpreter.parse(
            HEADER
            + 'var a = panel.addWidget("org.kde.plasma.kickoff")\n'
            + 'var b = panel.addWidget("org.kde.plasma.taskmanager")\n'
            + 'a.currentConfigGroup = ["General"]\n'
            + 'b.currentConfigGroup = ["General"]\n'
            + 'a.writeConfig("icon", "start")\n'
            + 'b.writeConfig("launchers", "")\n'
        )
        assert layout.widgets[0].group("General").entries == {"icon": "start"}
        assert layout.widgets[1].group("General").entries == {"launchers": ""}

    def test_nested_group_path(self, interpreter):
        layout = interpreter.parse(
            HEADER
            + 'var tray = panel.addWidget("org.kde.plasma.systemtray")\n'
            + 'tray.currentConfigGroup = ["Configuration",\n    "General"]\n'
            + 'tray.writeConfig("extraItems", ["org.kde.plasma.battery", "org.kde.plasma.volume"])\n'
        )
        group = layout.widgets[0].group("Configuration", "General")
        assert group.entries == {"extraItems": "org.kde.plasma.battery,org.kde.plasma.volume"}

    def test_selecting_group_without_writes_adds_nothing(self, interpreter):
        layout = interpreter.parse(
            HEADER
            + 'var w = panel.addWidget("org.kde.plasma.pager")\n'
            + 'w.currentConfigGroup = ["General"]\n'
        )
        assert layout.widgets[0].config_groups == ()

    def test_write_before_group_is_no_active_group(self, interpreter):
        err = _error(
            interpreter,
            HEADER
            + 'var w = panel.addWidget("org.kde.plasma.kickoff")\n'
            + 'w.writeConfig("icon", "start")\n',
        )
        assert err.kind == ErrorKind.NO_ACTIVE_GROUP
        assert err.field == "icon"
        assert err.line == 3

    def test_group_cursor_does_not_carry_to_next_widget(self, interpreter):
        err = _error(
            interpreter,
            HEADER
            + 'var a = panel.addWidget("org.kde.plasma.kickoff")\n'
            + 'a.currentConfigGroup = ["General"]\n'
            + 'var b = panel.addWidget("org.kde.plasma.pager")\n'
            + 'b.writeConfig("rows", 2)\n',
        )
        assert err.kind == ErrorKind.NO_ACTIVE_GROUP

    def test_numeric_config_value_with_unit(self, interpreter):
        layout = interpreter.parse(
            HEADER
            + 'var w = panel.addWidget("org.kde.plasma.panelspacer")\n'
            + 'w.currentConfigGroup = ["General"]\n'
            + 'w.writeConfig("length", 3 * gridUnit)\n'
        )
        assert layout.widgets[0].group("General").get("length") == 66


class TestPanelErrors:
    """Test panel property validation."""

    def test_unknown_property(self, interpreter):
        err = _error(interpreter, HEADER + "panel.rotation = 90\n")
        assert err.kind == ErrorKind.UNKNOWN_PROPERTY
        assert err.field == "rotation"
        assert err.line == 2

    def test_unknown_property_suggests_close_match(self, interpreter):
        err = _error(interpreter, HEADER + 'panel.lenghtMode = "fill"\n')
        assert err.kind == ErrorKind.UNKNOWN_PROPERTY
        assert "lengthMode" in err.message

    def test_unknown_property_checked_before_value(self, interpreter):
        err = _error(interpreter, HEADER + "panel.rotation = 2 * notAUnit\n")
        assert err.kind == ErrorKind.UNKNOWN_PROPERTY

    def test_invalid_location(self, interpreter):
        err = _error(interpreter, HEADER + 'panel.location = "middle"\n')
        assert err.kind == ErrorKind.INVALID_VALUE
        assert err.field == "location"
        assert err.value == "middle"

    def test_invalid_floating(self, interpreter):
        err = _error(interpreter, HEADER + 'panel.floating = "yes"\n')
        assert err.kind == ErrorKind.INVALID_VALUE
        assert err.field == "floating"

    def test_non_positive_height(self, interpreter):
        err = _error(interpreter, HEADER + "panel.height = 0 * gridUnit\n")
        assert err.kind == ErrorKind.INVALID_VALUE
        assert err.field == "height"

    def test_unresolved_unit(self, interpreter):
        err = _error(interpreter, HEADER + "panel.height = 2 * largeSpacing\n")
        assert err.kind == ErrorKind.UNRESOLVED_UNIT
        assert err.field == "largeSpacing"

    def test_minimum_length_above_maximum(self, interpreter):
        err = _error(interpreter, HEADER + "panel.minimumLength = 800\npanel.maximumLength = 400\n")
        assert err.kind == ErrorKind.INVALID_VALUE
        assert err.field == "minimumLength"

    def test_unknown_widget_property(self, interpreter):
        err = _error(
            interpreter,
            HEADER + 'var w = panel.addWidget("org.kde.plasma.pager")\nw.visible = false\n',
        )
        assert err.kind == ErrorKind.UNKNOWN_PROPERTY
        assert err.field == "visible"


class TestSyntax:
    """Test accepted script forms and SYNTAX_ERROR cases."""

    def test_defaults_when_properties_unset(self, interpreter):
        layout = interpreter.parse("var panel = new Panel()\n")
        assert layout.panel.location == Location.BOTTOM
        assert layout.panel.height is None
        assert layout.panel.floating is False
        assert layout.widgets == ()

    def test_semicolons_let_const_and_block_comments(self, interpreter):
        layout = interpreter.parse(
            "/* header\n comment */\n"
            "const p = new Panel; p.location = 'left';\n"
            "let w = p.addWidget('org.kde.plasma.pager'); p.addWidget('org.kde.plasma.trash');\n"
        )
        assert layout.panel.location == Location.LEFT
        assert layout.widget_types == ["org.kde.plasma.pager", "org.kde.plasma.trash"]

    def test_missing_panel(self, interpreter):
        err = _error(interpreter, "// nothing here\n")
        assert err.kind == ErrorKind.SYNTAX_ERROR

    def test_second_panel_rejected(self, interpreter):
        err = _error(interpreter, HEADER + "var other = new Panel\n")
        assert err.kind == ErrorKind.SYNTAX_ERROR
        assert err.line == 2

    def test_add_widget_on_undefined_name(self, interpreter):
        err = _error(interpreter, HEADER + 'desktop.addWidget("org.kde.plasma.pager")\n')
        assert err.kind == ErrorKind.SYNTAX_ERROR
        assert err.field == "desktop"

    def test_add_widget_on_widget_handle(self, interpreter):
        err = _error(
            interpreter,
            HEADER + 'var w = panel.addWidget("org.kde.plasma.pager")\nw.addWidget("org.kde.plasma.trash")\n',
        )
        assert err.kind == ErrorKind.SYNTAX_ERROR

    def test_add_widget_needs_string(self, interpreter):
        err = _error(interpreter, HEADER + "panel.addWidget(42)\n")
        assert err.kind == ErrorKind.INVALID_VALUE
        assert err.field == "widget"

    def test_write_config_argument_count(self, interpreter):
        err = _error(
            interpreter,
            HEADER
            + 'var w = panel.addWidget("org.kde.plasma.pager")\n'
            + 'w.currentConfigGroup = ["General"]\n'
            + 'w.writeConfig("rows")\n',
        )
        assert err.kind == ErrorKind.SYNTAX_ERROR

    def test_unsupported_declaration(self, interpreter):
        err = _error(interpreter, HEADER + "var size = 40\n")
        assert err.kind == ErrorKind.SYNTAX_ERROR

    def test_unsupported_constructor(self, interpreter):
        err = _error(interpreter, "var panel = new Desktop\n")
        assert err.kind == ErrorKind.SYNTAX_ERROR


class TestTryParse:
    """Test the Result-style entry point."""

    def test_success(self, interpreter, desktop_layout):
        result = interpreter.try_parse(desktop_layout)
        assert result.ok
        assert result.error is None
        assert len(result.descriptor.widgets) == 7

    def test_failure(self, interpreter):
        result = interpreter.try_parse(HEADER + "panel.rotation = 90\n")
        assert not result.ok
        assert result.descriptor is None
        assert result.error.kind == ErrorKind.UNKNOWN_PROPERTY

    def test_interpreter_is_reusable(self, interpreter, desktop_layout):
        first = interpreter.parse(desktop_layout)
        interpreter.try_parse("garbage ((")
        assert interpreter.parse(desktop_layout) == first


class TestWidgetCatalogChecks:
    """Test lenient and strict unknown-widget handling."""

    SOURCE = HEADER + 'panel.addWidget("org.kde.plasma.kickof")\n'

    def test_lenient_mode_keeps_unknown_widget(self):
        interpreter = LayoutInterpreter(catalog=WidgetCatalog())
        layout = interpreter.parse(self.SOURCE)
        assert layout.widget_types == ["org.kde.plasma.kickof"]

    def test_strict_mode_rejects_unknown_widget(self):
        interpreter = LayoutInterpreter(catalog=WidgetCatalog(), strict_widgets=True)
        err = _error(interpreter, self.SOURCE)
        assert err.kind == ErrorKind.INVALID_VALUE
        assert err.field == "widget"
        assert err.value == "org.kde.plasma.kickof"
        assert "org.kde.plasma.kickoff" in err.message


class TestMalformedCalls:
    """Anything after a call's closing parenthesis is a syntax error."""

    def test_chained_call_after_add_widget(self, interpreter):
        err = _error(interpreter, HEADER + 'panel.addWidget("org.kde.plasma.pager").foo()\n')
        assert err.kind == ErrorKind.SYNTAX_ERROR
        assert err.line == 2

    def test_chained_call_in_declaration(self, interpreter):
        err = _error(interpreter, HEADER + 'var w = panel.addWidget("org.kde.plasma.pager").reloadConfig()\n')
        assert err.kind == ErrorKind.SYNTAX_ERROR

    def test_member_access_after_write_config(self, interpreter):
        err = _error(
            interpreter,
            HEADER
            + 'var w = panel.addWidget("org.kde.plasma.pager")\n'
            + 'w.currentConfigGroup = ["General"]\n'
            + 'w.writeConfig("rows", 2).x\n',
        )
        assert err.kind == ErrorKind.SYNTAX_ERROR

    def test_nested_parentheses_in_arguments(self, interpreter):
        layout = interpreter.parse(
            HEADER
            + 'var w = panel.addWidget("org.kde.plasma.panelspacer")\n'
            + 'w.currentConfigGroup = ["General"]\n'
            + 'w.writeConfig("length", (1 + 2) * gridUnit)\n'
        )
        assert layout.widgets[0].group("General").get("length") == 66


class TestNonFiniteNumbers:
    """Non-finite numbers never reach the descriptor."""

    def test_huge_height_literal(self, interpreter):
        err = _error(interpreter, HEADER + "panel.height = 1e999\n")
        assert err.kind == ErrorKind.INVALID_VALUE
        assert err.line == 2

    def test_overflowing_height_expression(self, interpreter):
        err = _error(interpreter, HEADER + "panel.height = 1e308 * gridUnit\n")
        assert err.kind == ErrorKind.INVALID_VALUE
