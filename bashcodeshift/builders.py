"""Node builders: well-formed canonical nodes from partial field sets.

Each builder accepts a mapping of fields, keyword fields, or both (keywords
win), fills everything else with the kind's defaults and validates the
result. Builder-made nodes never carry a source location.

    set_e = builders.command(name='set', arguments=['-e'])
    note = builders.comment({'value': 'generated'})
"""

from __future__ import annotations

__all__ = [
    'BUILDERS',
    'build',
    'command',
    'comment',
    'conditional',
    'function',
    'loop',
    'pipeline',
    'redirect',
    'subshell',
    'variable',
]

from collections.abc import Mapping
from typing import Any, TypeVar

from bashcodeshift.nodes import (
    NODE_KINDS,
    BaseNode,
    Command,
    Comment,
    Conditional,
    Function,
    Loop,
    Pipeline,
    Redirect,
    Subshell,
    Variable,
)

_N = TypeVar('_N', bound=BaseNode)

# Position data is owned by the normalizer; a discriminator cannot be overridden.
_UNSETTABLE = frozenset({'loc', 'range', 'type'})

BUILDERS: Mapping[str, type[BaseNode]] = {kind: model for kind, model in NODE_KINDS.items() if kind != 'Program'}


def build(kind: str, fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> BaseNode:
    """Build a node of ``kind`` ("Command", "Loop", ...)."""
    try:
        model = BUILDERS[kind]
    except KeyError:
        raise ValueError(f'Unknown node kind: {kind!r}') from None
    return _build(model, fields, overrides)


def command(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Command:
    return _build(Command, fields, overrides)


def variable(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Variable:
    return _build(Variable, fields, overrides)


def conditional(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Conditional:
    return _build(Conditional, fields, overrides)


def loop(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Loop:
    return _build(Loop, fields, overrides)


def function(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Function:
    return _build(Function, fields, overrides)


def pipeline(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Pipeline:
    return _build(Pipeline, fields, overrides)


def redirect(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Redirect:
    return _build(Redirect, fields, overrides)


def subshell(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Subshell:
    return _build(Subshell, fields, overrides)


def comment(fields: Mapping[str, Any] | None = None, /, **overrides: Any) -> Comment:
    return _build(Comment, fields, overrides)


def _build(model: type[_N], fields: Mapping[str, Any] | None, overrides: Mapping[str, Any]) -> _N:
    data = {**(fields or {}), **overrides}
    for key in _UNSETTABLE & data.keys():
        del data[key]
    return model.model_validate(data)
