"""Small helpers for writing transforms."""

from __future__ import annotations

__all__ = [
    'BUILTIN_COMMANDS',
    'COMMON_COMMANDS',
    'CommandType',
    'ParsedArguments',
    'build_command',
    'contains_variables',
    'create_command',
    'create_comment',
    'create_variable',
    'escape_bash_string',
    'extract_variables',
    'format_bash_code',
    'get_command_type',
    'is_builtin_command',
    'is_common_command',
    'is_valid_condition',
    'is_valid_identifier',
    'parse_arguments',
    'unescape_bash_string',
]

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Literal

from bashcodeshift import builders
from bashcodeshift.nodes import Command, Comment, Variable

type CommandType = Literal['builtin', 'common', 'custom']

BUILTIN_COMMANDS = frozenset(
    {
        'cd', 'echo', 'exit', 'export', 'read', 'set', 'shift', 'unset',
        'alias', 'unalias', 'bg', 'fg', 'jobs', 'kill', 'wait',
        'break', 'continue', 'for', 'function', 'if', 'select', 'until', 'while',
        'case', 'esac', 'do', 'done', 'elif', 'else', 'fi', 'in', 'then',
    }
)  # fmt: skip

COMMON_COMMANDS = frozenset(
    {
        'ls', 'cat', 'grep', 'sed', 'awk', 'find', 'xargs',
        'cp', 'mv', 'rm', 'mkdir', 'rmdir', 'touch',
        'chmod', 'chown', 'ln', 'tar', 'gzip', 'gunzip',
        'curl', 'wget', 'ssh', 'scp', 'rsync',
        'git', 'docker', 'kubectl', 'npm', 'yarn', 'node',
    }
)  # fmt: skip

# Substrings that mark a `test`/`[` expression.
_TEST_OPERATORS = ('-eq', '-ne', '-lt', '-le', '-gt', '-ge', '-f', '-d', '-e', '-r', '-w', '-x', '=', '!=', '-z', '-n')

_IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
_IDENTIFIER_LIKE_RE = re.compile(r'^[A-Za-z0-9_]+$')
_VARIABLE_RE = re.compile(r'\$([A-Za-z_][A-Za-z0-9_]*)')
_ESCAPABLE_RE = re.compile(r'(["\'$`\\])')
_ESCAPED_RE = re.compile(r'\\(["\'$`\\])')


@dataclass(frozen=True, slots=True)
class ParsedArguments:
    """Arguments split into flags and positionals.

    ``--name=value`` maps to ``'value'``; every other flag maps to ``True``.
    """

    options: Mapping[str, str | bool]
    positional: Sequence[str]


def is_valid_identifier(text: str) -> bool:
    return _IDENTIFIER_RE.match(text) is not None


def escape_bash_string(text: str) -> str:
    """Backslash-escape quotes, ``$``, backticks and backslashes."""
    return _ESCAPABLE_RE.sub(r'\\\1', text)


def unescape_bash_string(text: str) -> str:
    return _ESCAPED_RE.sub(r'\1', text)


def is_builtin_command(command: str) -> bool:
    return command in BUILTIN_COMMANDS


def is_common_command(command: str) -> bool:
    return command in COMMON_COMMANDS


def get_command_type(command: str) -> CommandType:
    if is_builtin_command(command):
        return 'builtin'
    if is_common_command(command):
        return 'common'
    return 'custom'


def parse_arguments(args: Sequence[str]) -> ParsedArguments:
    """Split ``['-v', '--out=x', 'file']`` into ``{'v': True, 'out': 'x'}`` and ``['file']``."""
    options: dict[str, str | bool] = {}
    positional: list[str] = []
    for arg in args:
        if arg.startswith('--'):
            key, _, value = arg[2:].partition('=')
            options[key] = value or True
        elif arg.startswith('-'):
            options[arg[1:]] = True
        else:
            positional.append(arg)
    return ParsedArguments(options=options, positional=positional)


def build_command(name: str, args: Sequence[str]) -> str:
    return f'{name} {" ".join(args)}'.strip()


def contains_variables(text: str) -> bool:
    return _VARIABLE_RE.search(text) is not None


def extract_variables(text: str) -> list[str]:
    """Names of ``$NAME`` references, in order of appearance, repeats included."""
    return _VARIABLE_RE.findall(text)


def is_valid_condition(text: str) -> bool:
    """Loose check: contains a test operator or is a single bare word."""
    if any(operator in text for operator in _TEST_OPERATORS):
        return True
    return _IDENTIFIER_LIKE_RE.match(text.strip()) is not None


def format_bash_code(code: str, indent: int = 0) -> str:
    """Indent every non-blank line by ``indent`` levels of two spaces."""
    prefix = '  ' * indent
    return '\n'.join(prefix + line if line.strip() else line for line in code.split('\n'))


def create_comment(text: str) -> Comment:
    return builders.comment(value=text)


def create_command(name: str, args: Sequence[str] = ()) -> Command:
    return builders.command(name=name, arguments=list(args))


def create_variable(name: str, value: str) -> Variable:
    return builders.variable(name=name, value=value)
