"""
Layout Interpreter - Parses a panel layout script into a LayoutDescriptor.

Accepted statements (one per line or separated by ';'):

    var panel = new Panel
    panel.location = "top"
    panel.height = 2 * gridUnit
    var clock = panel.addWidget("org.kde.plasma.digitalclock")
    panel.addWidget("org.kde.plasma.pager")
    clock.currentConfigGroup = ["Appearance"]
    clock.writeConfig("showDate", true)

Widget handles carry a "current config group" cursor while parsing;
writeConfig() writes into whichever group the cursor points at. The
cursor is parse-time state only and never reaches the descriptor.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from layoutctl.errors import ErrorKind, ParseError
from layoutctl.interpreter.lexer import OP, STRING, Token, split_arguments, statements
from layoutctl.interpreter.properties import apply_panel_property, check_panel, get_panel_property
from layoutctl.interpreter.values import UnitResolver, evaluate, no_units, string_list
from layoutctl.model import ConfigGroup, ConfigValue, LayoutDescriptor, PanelSpec, WidgetSpec
from layoutctl.services.catalog import WidgetCatalog

_DECLARATIONS = ("var", "let", "const")
_PANEL = object()


@dataclass
class ParseResult:
    """Outcome of try_parse(): exactly one of descriptor/error is set."""
    descriptor: Optional[LayoutDescriptor] = None
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class _WidgetBuilder:
    """Accumulates one widget's config while its handle is live."""

    def __init__(self, widget_type: str):
        self.type = widget_type
        self.active_path: Optional[tuple[str, ...]] = None
        self.groups: dict[tuple[str, ...], dict[str, ConfigValue]] = {}

    def write(self, key: str, value: ConfigValue) -> None:
        if self.active_path is None:
            raise ParseError(
                ErrorKind.NO_ACTIVE_GROUP,
                f"writeConfig('{key}') on '{self.type}' before any currentConfigGroup",
                field=key,
                value=value,
            )
        # last write wins; key keeps its first position
        self.groups.setdefault(self.active_path, {})[key] = value

    def build(self) -> WidgetSpec:
        return WidgetSpec(
            type=self.type,
            config_groups=tuple(
                ConfigGroup(path=path, items=tuple(entries.items()))
                for path, entries in self.groups.items()
            ),
        )


class _ParseState:
    """Mutable state for a single parse() call."""

    def __init__(self, interpreter: "LayoutInterpreter", source: str):
        self.interpreter = interpreter
        self.source = source
        self.panel: Optional[PanelSpec] = None
        self.widgets: list[_WidgetBuilder] = []
        self.names: dict[str, object] = {}

    def raw(self, tokens: list[Token]) -> str:
        return self.source[tokens[0].start:tokens[-1].end]

    def value(self, tokens: list[Token]) -> ConfigValue:
        if not tokens:
            raise ParseError(ErrorKind.SYNTAX_ERROR, "missing value")
        return evaluate(tokens, self.raw(tokens), self.interpreter.resolve_unit)

    def lookup(self, token: Token) -> object:
        target = self.names.get(token.text)
        if target is None:
            raise ParseError(ErrorKind.SYNTAX_ERROR, f"'{token.text}' is not defined", field=token.text)
        return target

    def call_arguments(self, tokens: list[Token], open_index: int) -> list[Token]:
        """Tokens between the "(" at `open_index` and its matching ")", which must end the statement."""
        depth = 0
        for index in range(open_index, len(tokens)):
            token = tokens[index]
            if token.kind == OP and token.text in "([":
                depth += 1
            elif token.kind == OP and token.text in ")]":
                depth -= 1
                if depth == 0:
                    if index != len(tokens) - 1:
                        raise ParseError(
                            ErrorKind.SYNTAX_ERROR,
                            f"unexpected '{self.raw(tokens[index + 1:])}' after call",
                        )
                    return tokens[open_index + 1:index]
        raise ParseError(ErrorKind.SYNTAX_ERROR, f"malformed call '{self.raw(tokens)}'")

    # Statements

    def execute(self, tokens: list[Token]) -> None:
        first = tokens[0]

        if first.is_ident() and first.text in _DECLARATIONS:
            if len(tokens) < 4 or not tokens[1].is_ident() or not tokens[2].is_op("="):
                raise ParseError(ErrorKind.SYNTAX_ERROR, f"malformed '{first.text}' declaration")
            self.bind(tokens[1].text, tokens[3:])
        elif first.is_ident() and len(tokens) > 2 and tokens[1].is_op("="):
            self.bind(first.text, tokens[2:])
        elif first.is_ident() and len(tokens) > 3 and tokens[1].is_op(".") and tokens[2].is_ident():
            target = self.lookup(first)
            member = tokens[2].text
            if tokens[3].is_op("="):
                self.assign(target, first.text, member, tokens[4:])
            elif tokens[3].is_op("("):
                self.call(target, first.text, member, self.call_arguments(tokens, 3))
            else:
                raise ParseError(ErrorKind.SYNTAX_ERROR, f"unexpected '{tokens[3].text}' after '{first.text}.{member}'")
        else:
            raise ParseError(ErrorKind.SYNTAX_ERROR, f"unexpected statement '{self.raw(tokens)}'")

    def bind(self, name: str, rhs: list[Token]) -> None:
        """Handle `name = <rhs>` where rhs constructs the panel or adds a widget."""
        if rhs and rhs[0].is_ident("new"):
            constructed = [token.text for token in rhs[1:]]
            if constructed not in (["Panel"], ["Panel", "(", ")"]):
                raise ParseError(ErrorKind.SYNTAX_ERROR, f"cannot construct '{' '.join(constructed)}'")
            self.new_panel()
            self.names[name] = _PANEL
            return

        if len(rhs) > 3 and rhs[0].is_ident() and rhs[1].is_op(".") and rhs[2].is_ident() and rhs[3].is_op("("):
            arguments = self.call_arguments(rhs, 3)
            target = self.lookup(rhs[0])
            widget = self.call(target, rhs[0].text, rhs[2].text, arguments)
            if widget is None:
                raise ParseError(ErrorKind.SYNTAX_ERROR, f"'{rhs[2].text}' returns nothing to assign")
            self.names[name] = widget
            return

        raise ParseError(ErrorKind.SYNTAX_ERROR, f"unsupported value for '{name}': '{self.raw(rhs) if rhs else ''}'")

    def assign(self, target: object, owner: str, member: str, rhs: list[Token]) -> None:
        if target is _PANEL:
            get_panel_property(member)
            self.panel = apply_panel_property(self.panel, member, self.value(rhs))
            return

        if member != "currentConfigGroup":
            raise ParseError(ErrorKind.UNKNOWN_PROPERTY, f"unknown widget property '{member}'", field=member)
        if not rhs:
            raise ParseError(ErrorKind.SYNTAX_ERROR, f"missing value for '{owner}.{member}'")
        target.active_path = tuple(string_list(rhs, member))

    def call(self, target: object, owner: str, method: str, arg_tokens: list[Token]) -> Optional[_WidgetBuilder]:
        args = split_arguments(arg_tokens)
        if any(not arg for arg in args):
            raise ParseError(ErrorKind.SYNTAX_ERROR, f"empty argument in '{owner}.{method}(...)'")

        if target is _PANEL and method == "addWidget":
            if len(args) != 1:
                raise ParseError(ErrorKind.SYNTAX_ERROR, f"addWidget() takes 1 argument, got {len(args)}")
            return self.add_widget(args[0])

        if isinstance(target, _WidgetBuilder) and method == "writeConfig":
            if len(args) != 2:
                raise ParseError(ErrorKind.SYNTAX_ERROR, f"writeConfig() takes 2 arguments, got {len(args)}")
            key_tokens, value_tokens = args
            if len(key_tokens) != 1 or key_tokens[0].kind != STRING or not key_tokens[0].value:
                raise ParseError(
                    ErrorKind.INVALID_VALUE,
                    "writeConfig() key must be a non-empty string",
                    field="key",
                    value=self.raw(key_tokens),
                )
            target.write(key_tokens[0].value, self.value(value_tokens))
            return None

        raise ParseError(ErrorKind.SYNTAX_ERROR, f"unsupported call '{owner}.{method}()'", field=method)

    # Panel and widgets

    def new_panel(self) -> None:
        if self.panel is not None:
            raise ParseError(ErrorKind.SYNTAX_ERROR, "only one panel may be constructed per layout")
        self.panel = PanelSpec()

    def add_widget(self, tokens: list[Token]) -> _WidgetBuilder:
        if len(tokens) != 1 or tokens[0].kind != STRING or not tokens[0].value.strip():
            raise ParseError(
                ErrorKind.INVALID_VALUE,
                "addWidget() needs a widget type string",
                field="widget",
                value=self.raw(tokens),
            )

        widget_type = tokens[0].value
        self.interpreter.check_widget_type(widget_type)
        widget = _WidgetBuilder(widget_type)
        self.widgets.append(widget)
        return widget

    def finish(self) -> LayoutDescriptor:
        if self.panel is None:
            raise ParseError(ErrorKind.SYNTAX_ERROR, "script never constructs a panel ('new Panel')")
        return LayoutDescriptor(
            panel=check_panel(self.panel),
            widgets=tuple(widget.build() for widget in self.widgets),
        )


class LayoutInterpreter:
    """
    Turns layout script text into an immutable LayoutDescriptor.

    Instances hold configuration only (unit resolver, widget catalog), so
    one interpreter can parse any number of scripts, from any thread.

    Args:
        resolve_unit: Maps unit names (e.g. "gridUnit") to sizes; returns
            None for unknown names
        catalog: Known widget types, used for warnings or strict checks
        strict_widgets: Reject widget types missing from the catalog
    """

    def __init__(
        self,
        resolve_unit: UnitResolver = no_units,
        catalog: Optional[WidgetCatalog] = None,
        strict_widgets: bool = False,
    ):
        self.resolve_unit = resolve_unit
        self.catalog = catalog
        self.strict_widgets = strict_widgets

    def parse(self, source: str) -> LayoutDescriptor:
        """
        Parse a layout script.

        Args:
            source: Script text

        Returns:
            The fully resolved LayoutDescriptor

        Raises:
            ParseError: On the first statement that can't be applied, with
                its source line attached
        """
        state = _ParseState(self, source)
        count = 0

        for tokens in statements(source):
            try:
                state.execute(tokens)
            except ParseError as e:
                raise e.at_line(tokens[0].line)
            count += 1

        descriptor = state.finish()
        logger.debug(f"Parsed {count} statements into {len(descriptor.widgets)} widgets")
        return descriptor

    def try_parse(self, source: str) -> ParseResult:
        """Like parse(), but return the failure instead of raising it."""
        try:
            return ParseResult(descriptor=self.parse(source))
        except ParseError as e:
            return ParseResult(error=e)

    def check_widget_type(self, widget_type: str) -> None:
        if self.catalog is None or self.catalog.is_known(widget_type):
            return

        hint = self.catalog.suggest(widget_type)
        message = f"unknown widget type '{widget_type}'"
        if hint:
            message += f" (did you mean '{hint}'?)"

        if self.strict_widgets:
            raise ParseError(ErrorKind.INVALID_VALUE, message, field="widget", value=widget_type)
        logger.warning(message)


def parse(source: str, resolve_unit: UnitResolver = no_units) -> LayoutDescriptor:
    """Parse `source` with a default interpreter (no catalog checks)."""
    return LayoutInterpreter(resolve_unit=resolve_unit).parse(source)
