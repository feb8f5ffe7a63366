"""Shared fixtures for the bashcodeshift test suite.

``b`` mirrors what a transform receives as ``api.b``: each call parses a
source string into an independent session.
"""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

import pytest
import rich.console

from bashcodeshift.transformer import Session, Transformer

REPO_ROOT = Path(__file__).resolve().parent


@pytest.fixture
def transformer() -> Transformer:
    return Transformer()


@pytest.fixture
def b(transformer: Transformer) -> Callable[[str], Session]:
    return transformer.b


@pytest.fixture(scope='session')
def examples_dir() -> Path:
    return REPO_ROOT / 'examples' / 'transforms'


@pytest.fixture
def output() -> io.StringIO:
    """Captures everything printed to ``console``."""
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> rich.console.Console:
    return rich.console.Console(file=output, width=200, color_system=None)
