#!/usr/bin/env python3
"""
CLI for inspecting how a regex compiles into an automaton.

Usage:
    rregex dot 'a|b*'
    rregex dot 'a|b*' --format svg --width 800 -o automaton.svg
    rregex dot '(ab)*' --json
    rregex annotate raw.dot --start 0 --accept 1 --accept 2
    rregex --version
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError

from rregex import __version__
from rregex.exceptions import RRegexError
from rregex.markers import MarkerStyle
from rregex.pipeline import annotate_description, convert_regex, convert_regex_result
from rregex.renderer import render
from rregex.settings import AnnotationSettings, load_settings

app = typer.Typer(
    name="rregex",
    help="rregex - Annotated automaton graphs for regular expressions",
    no_args_is_help=True,
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Output format for the dot command."""
    dot = "dot"
    svg = "svg"
    png = "png"
    pdf = "pdf"


def setup_logging(verbose: int, quiet: bool):
    """Configure logging based on verbosity flags."""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
    )


def build_settings(
    config: Optional[Path],
    marker_style: Optional[MarkerStyle] = None,
    rankdir: Optional[str] = None,
    width: Optional[int] = None,
) -> AnnotationSettings:
    """
    Load settings from --config and apply command-line overrides.

    Raises:
        typer.Exit: On a missing or invalid settings file
    """
    try:
        settings = load_settings(config) if config else AnnotationSettings.default()
        overrides = {
            key: value
            for key, value in (("marker_style", marker_style), ("rankdir", rankdir), ("width", width))
            if value is not None
        }
        if overrides:
            settings = AnnotationSettings(**{**settings.model_dump(), **overrides})
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except (ValueError, ValidationError) as e:
        typer.echo(f"Error: Invalid settings: {e}", err=True)
        raise typer.Exit(1)
    return settings


def write_output(data: bytes, output: Optional[Path]):
    """Write to --output, or stdout when no path is given."""
    if output:
        output.write_bytes(data)
        typer.echo(f"Wrote {output}", err=True)
    else:
        # PNG and PDF output is binary
        stdout = typer.get_binary_stream("stdout")
        stdout.write(data)
        stdout.flush()


def fail(error: RRegexError):
    typer.echo(f"Error [{error.kind}]: {error.message}", err=True)
    raise typer.Exit(1)


@app.command()
def dot(
    regex: str = typer.Argument(..., help="Regular expression to compile"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write output to file"),
    fmt: OutputFormat = typer.Option(OutputFormat.dot, "--format", "-f", help="Output format"),
    width: Optional[int] = typer.Option(None, "--width", "-w", help="Layout width hint in pixels"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
    marker_style: Optional[MarkerStyle] = typer.Option(None, "--marker-style", help="Start marker encoding"),
    rankdir: Optional[str] = typer.Option(None, "--rankdir", help="Layout direction (LR, RL, TB, BT)"),
    as_json: bool = typer.Option(False, "--json", help="Print the conversion result as JSON"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
):
    """Compile REGEX into a minimized DFA and print its annotated graph."""
    setup_logging(verbose, quiet)
    settings = build_settings(config, marker_style, rankdir, width)

    if as_json:
        result = asyncio.run(convert_regex_result(regex, settings=settings))
        typer.echo(result.model_dump_json(indent=2))
        if not result.ok:
            raise typer.Exit(1)
        return

    try:
        graph = asyncio.run(convert_regex(regex, settings=settings))
        if fmt is OutputFormat.dot:
            data = graph.description.encode("utf-8")
        else:
            data = render(graph, fmt=fmt.value)
    except RRegexError as e:
        fail(e)

    write_output(data, output)


@app.command()
def annotate(
    file: Path = typer.Argument(..., help="Raw engine description file"),
    start: int = typer.Option(..., "--start", "-s", help="Start state id"),
    accept: List[int] = typer.Option([], "--accept", "-a", help="Accepting state id (repeatable)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write output to file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
    marker_style: Optional[MarkerStyle] = typer.Option(None, "--marker-style", help="Start marker encoding"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
):
    """Annotate an existing engine description with role markers and layout."""
    setup_logging(verbose, quiet)
    if not file.exists():
        typer.echo(f"Error: Description file not found: {file}", err=True)
        raise typer.Exit(1)

    settings = build_settings(config, marker_style)
    try:
        text = annotate_description(file.read_text(encoding="utf-8"), start, accept, settings)
    except RRegexError as e:
        fail(e)

    write_output(text.encode("utf-8"), output)


def version_callback(value: bool):
    """Handle --version flag."""
    if value:
        typer.echo(f"rregex {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(None, "--version", callback=version_callback, is_eager=True,
                                 help="Show version and exit"),
):
    """rregex - Annotated automaton graphs for regular expressions."""


def main():
    """Entry point for the rregex CLI."""
    app()


if __name__ == "__main__":
    main()
