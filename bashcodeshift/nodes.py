"""Canonical shell AST.

A closed set of node kinds, each a pydantic model tagged by a ``type``
literal. ``Node`` is the discriminated union of every kind that can appear in
a child sequence; ``Program`` is only ever the root.

Nodes are mutable so transforms can edit them in place
(``command.name = 'yarn'``, ``command.arguments.insert(1, '--rm')``).
Assignments are validated; in-place list edits are not.

``child_fields`` lists, in document order, the fields holding ordered child
sequences. Traversal and path-addressed mutation follow only these fields;
conditions and loop headers are opaque text.
"""

from __future__ import annotations

__all__ = [
    'NODE_KINDS',
    'BaseNode',
    'Command',
    'Comment',
    'Conditional',
    'Function',
    'Location',
    'Loop',
    'Node',
    'Pipeline',
    'Position',
    'Program',
    'Redirect',
    'Subshell',
    'Variable',
]

from typing import Annotated, ClassVar, Literal, Union

import pydantic

from bashcodeshift.schemas import StrictModel


class Position(StrictModel):
    line: int  # 1-based
    column: int  # 0-based


class Location(StrictModel):
    start: Position
    end: Position


class BaseNode(pydantic.BaseModel):
    """Fields shared by every kind."""

    model_config = pydantic.ConfigDict(
        extra='forbid',
        validate_assignment=True,
    )

    child_fields: ClassVar[tuple[str, ...]] = ()

    loc: Location | None = None
    range: tuple[int, int] | None = None  # character offsets into the parsed source


class Program(BaseNode):
    child_fields: ClassVar[tuple[str, ...]] = ('body',)

    type: Literal['Program'] = 'Program'
    body: list[Node] = pydantic.Field(default_factory=list)
    source_type: Literal['script'] = 'script'
    shebang: str | None = None  # "#!/bin/bash", re-emitted as the first line


class Command(BaseNode):
    child_fields: ClassVar[tuple[str, ...]] = ('redirects',)

    type: Literal['Command'] = 'Command'
    name: str = ''
    arguments: list[str] = pydantic.Field(default_factory=list)
    redirects: list[Redirect] | None = None


class Variable(BaseNode):
    type: Literal['Variable'] = 'Variable'
    name: str = ''
    value: str = ''
    export: bool = False
    readonly: bool = False


class Conditional(BaseNode):
    child_fields: ClassVar[tuple[str, ...]] = ('consequent', 'alternate')

    type: Literal['Conditional'] = 'Conditional'
    condition: str = ''
    consequent: list[Node] = pydantic.Field(default_factory=list)
    alternate: list[Node] | None = None


class Loop(BaseNode):
    child_fields: ClassVar[tuple[str, ...]] = ('body',)

    type: Literal['Loop'] = 'Loop'
    kind: Literal['for', 'while', 'until'] = 'for'
    variable: str | None = None
    condition: str | None = None  # while/until test, or the word list after `for x in`
    body: list[Node] = pydantic.Field(default_factory=list)


class Function(BaseNode):
    child_fields: ClassVar[tuple[str, ...]] = ('body',)

    type: Literal['Function'] = 'Function'
    name: str = ''
    parameters: list[str] | None = None
    body: list[Node] = pydantic.Field(default_factory=list)


class Pipeline(BaseNode):
    child_fields: ClassVar[tuple[str, ...]] = ('commands',)

    type: Literal['Pipeline'] = 'Pipeline'
    commands: list[Node] = pydantic.Field(default_factory=list)
    negated: bool = False


class Redirect(BaseNode):
    type: Literal['Redirect'] = 'Redirect'
    operator: str = ''  # ">", ">>", "<", ">&", ...
    target: str = ''
    fd: int | None = None
    heredoc: str | None = None  # `<<`/`<<-` body, newline-terminated lines; closed by the unquoted target


class Subshell(BaseNode):
    child_fields: ClassVar[tuple[str, ...]] = ('body',)

    type: Literal['Subshell'] = 'Subshell'
    body: list[Node] = pydantic.Field(default_factory=list)


class Comment(BaseNode):
    type: Literal['Comment'] = 'Comment'
    value: str = ''
    kind: Literal['line', 'block'] = 'line'


Node = Annotated[
    Union[Command, Variable, Conditional, Loop, Function, Pipeline, Redirect, Subshell, Comment],  # noqa: UP007
    pydantic.Field(discriminator='type'),
]

NODE_KINDS: dict[str, type[BaseNode]] = {
    model.__name__: model
    for model in (Program, Command, Variable, Conditional, Loop, Function, Pipeline, Redirect, Subshell, Comment)
}

for _model in NODE_KINDS.values():
    _model.model_rebuild()
del _model
