"""
layoutctl - Command line entry point.

Validates, exports and normalizes panel layout scripts.

Usage:
  layoutctl validate layouts/*.js
  layoutctl export org.kde.plasma.desktop-layout.js --indent 4
  layoutctl --grid-unit 22 render org.kde.plasma.desktop-layout.js
"""

import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger

from layoutctl.errors import ParseError
from layoutctl.serializer import render, to_json
from layoutctl.utils.helpers import build_interpreter, load_layout, load_settings, validate_files


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    # click.echo looks up stderr per call, so the sink follows redirection
    logger.add(
        lambda message: click.echo(message, err=True, nl=False),
        level="DEBUG" if verbose else "WARNING",
        format="{level}: {message}",
    )


@click.group()
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(file_okay=True, dir_okay=False, exists=True),
    default=None,
    help="Settings TOML file (default: ~/.config/layoutctl/settings.toml)",
)
@click.option("--grid-unit", type=float, default=None, help="Override the gridUnit size in pixels")
@click.option("--strict", is_flag=True, help="Reject widget types missing from the catalog")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def main(ctx: click.Context, settings_path: Optional[str], grid_unit: Optional[float], strict: bool, verbose: bool):
    """Validate and convert declarative desktop panel layouts."""
    _configure_logging(verbose)

    settings = load_settings(settings_path)
    if grid_unit is not None:
        settings["units"]["gridUnit"] = grid_unit
    if strict:
        settings["validation"]["strict_widgets"] = True

    ctx.obj = build_interpreter(settings)


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path))
@click.option("-j", "--jobs", type=click.IntRange(min=1), default=4, help="Files to parse in parallel")
@click.pass_obj
def validate(interpreter, files, jobs):
    """Check layout scripts, reporting every failing file."""
    failed = 0
    for path, result in validate_files(files, interpreter, max_workers=jobs):
        if result.ok:
            widgets = len(result.descriptor.widgets)
            click.echo(f"{path}: OK ({widgets} widgets)")
        else:
            failed += 1
            click.echo(f"{path}: {result.error}", err=True)

    if failed:
        click.echo(f"{failed} of {len(files)} layouts failed", err=True)
        sys.exit(1)


def _load_or_exit(path: Path, interpreter):
    try:
        return load_layout(path, interpreter)
    except ParseError as e:
        click.echo(f"{path}: {e}", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"{path}: {e}", err=True)
        sys.exit(2)


@main.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--indent", type=click.IntRange(min=0), default=2, show_default=True)
@click.pass_obj
def export(interpreter, file, indent):
    """Print a layout as a JSON descriptor."""
    descriptor = _load_or_exit(file, interpreter)
    click.echo(to_json(descriptor, indent=indent))


@main.command("render")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def render_command(interpreter, file):
    """Print a layout as a normalized script (units resolved)."""
    descriptor = _load_or_exit(file, interpreter)
    click.echo(render(descriptor), nl=False)


if __name__ == "__main__":
    main()
