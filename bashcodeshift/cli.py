"""Command-line entry point.

    bashcodeshift scripts/ -t codemods/use_yarn.py --dry --print
"""

from __future__ import annotations

__all__ = [
    'app',
    'main',
]

import logging

import pydantic
import rich.console
import rich.markup
import rich.panel
import typer

from bashcodeshift import __version__
from bashcodeshift.boundaries import ErrorBoundary
from bashcodeshift.errors import BashCodeshiftError
from bashcodeshift.runner import Runner
from bashcodeshift.schemas import RunnerOptions
from bashcodeshift.types import RunnerStats

app = typer.Typer(help='Codemod toolkit for shell scripts.', add_completion=False)

boundary = ErrorBoundary(exit_code=1)


def _error(message: str) -> None:
    console = rich.console.Console(stderr=True)
    console.print(rich.panel.Panel(message, border_style='red', title='Error', title_align='left'), highlight=False)


@boundary.handler(BashCodeshiftError)
def _handle_codeshift_error(exc: BashCodeshiftError) -> None:
    _error(rich.markup.escape(str(exc)))


@boundary.handler(pydantic.ValidationError)
def _handle_invalid_options(exc: pydantic.ValidationError) -> None:
    lines = [f'{".".join(str(part) for part in error["loc"])}: {error["msg"]}' for error in exc.errors()]
    _error(rich.markup.escape('Invalid options:\n' + '\n'.join(lines)))


def _print_version(value: bool) -> None:
    if value:
        print(f'bashcodeshift {__version__}')
        raise typer.Exit()


@app.command()
def main(
    paths: list[str] = typer.Argument(..., help='Files, directories or glob patterns to transform'),
    transform: str | None = typer.Option(None, '--transform', '-t', help='Transform file or module:function'),
    parser: str = typer.Option('bash', '--parser', help='Parser to use'),
    dry: bool = typer.Option(False, '--dry', help='Report what would change without writing'),
    print_output: bool = typer.Option(False, '--print', help='Show a diff of every change'),
    verbose: bool = typer.Option(False, '--verbose', '-v', help='Report unchanged files and debug logs'),
    ignore_pattern: str | None = typer.Option(None, '--ignore-pattern', help='Skip files matching this glob'),
    version: bool = typer.Option(
        False, '--version', callback=_print_version, is_eager=True, help='Show the version and exit'
    ),
) -> None:
    """Apply a transform to shell scripts."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format='%(levelname)s %(name)s: %(message)s')

    if transform is None:
        _error('Transform file is required (--transform/-t)')
        raise SystemExit(1)

    stats = _run(
        transform,
        paths,
        parser=parser,
        dry=dry,
        print_output=print_output,
        verbose=verbose,
        ignore_pattern=ignore_pattern,
    )
    if stats.errors:
        raise SystemExit(1)


@boundary
def _run(
    transform: str,
    paths: list[str],
    *,
    parser: str,
    dry: bool,
    print_output: bool,
    verbose: bool,
    ignore_pattern: str | None,
) -> RunnerStats:
    options = RunnerOptions.model_validate(
        {
            'dry': dry,
            'print': print_output,
            'verbose': verbose,
            'ignore_pattern': ignore_pattern,
            'parser': parser,
        }
    )
    return Runner().run(transform, paths, options)
