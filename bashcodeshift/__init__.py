"""Codemod toolkit for shell scripts.

Parse a script into a canonical tree, find and edit nodes through
path-addressed handles, and print the tree back as shell text::

    import bashcodeshift

    session = bashcodeshift.Transformer().b('npm install lodash')
    for path in session.find('Command', {'name': 'npm'}):
        path.value.name = 'yarn'
    session.to_source()  # 'yarn install lodash'
"""

from __future__ import annotations

__version__ = '0.1.0'

__all__ = [
    'BashCodeshiftError',
    'BashParser',
    'Collection',
    'FileInfo',
    'LoadFailure',
    'NodePath',
    'ParseFailure',
    'ParserOptions',
    'Runner',
    'RunnerOptions',
    'RunnerStats',
    'Session',
    'SourceGenerator',
    'SourceOptions',
    'TransformAPI',
    'Transformer',
    '__version__',
    'builders',
    'parse',
    'run',
]

from collections.abc import Sequence
from pathlib import Path

from bashcodeshift import builders
from bashcodeshift.errors import BashCodeshiftError, LoadFailure, ParseFailure
from bashcodeshift.generator import SourceGenerator
from bashcodeshift.nodes import Program
from bashcodeshift.parser import BashParser
from bashcodeshift.query import Collection, NodePath
from bashcodeshift.runner import Runner
from bashcodeshift.schemas import ParserOptions, RunnerOptions, SourceOptions
from bashcodeshift.transformer import Session, Transformer
from bashcodeshift.types import FileInfo, RunnerStats, TransformAPI, TransformFunction


def parse(source: str, options: ParserOptions | None = None) -> Program:
    """Parse shell source into a ``Program``. Raises ``ParseFailure``."""
    return BashParser(options).parse(source)


def run(
    transform: TransformFunction | str | Path,
    paths: str | Path | Sequence[str | Path],
    options: RunnerOptions | None = None,
) -> RunnerStats:
    """Apply ``transform`` to every file ``paths`` expands to."""
    return Runner().run(transform, paths, options)
