"""The query/mutate/generate facade handed to transforms as ``api.b``.

Every call to ``Transformer.b`` parses its source into a fresh ``Session``
that owns the resulting tree. Sessions are independent: querying or editing
one never affects another, so a transform may open as many as it likes.

    session = transformer.b('npm install lodash')
    session.find('Command', {'name': 'npm'}).for_each(lambda path: ...)
    print(session.to_source())
"""

from __future__ import annotations

__all__ = [
    'Session',
    'Transformer',
]

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from bashcodeshift import builders
from bashcodeshift.generator import SourceGenerator
from bashcodeshift.nodes import BaseNode, Program
from bashcodeshift.parser import BashParser
from bashcodeshift.query import Collection, NodePath, find
from bashcodeshift.schemas import ParserOptions, SourceOptions

_T = TypeVar('_T')


class Session:
    """One parsed tree with its query, mutation and generation entry points.

    Builders are exposed as attributes so transforms can write
    ``session.Command(name='set', arguments=['-e'])``.
    """

    Command = staticmethod(builders.command)
    Variable = staticmethod(builders.variable)
    Conditional = staticmethod(builders.conditional)
    Loop = staticmethod(builders.loop)
    Function = staticmethod(builders.function)
    Pipeline = staticmethod(builders.pipeline)
    Redirect = staticmethod(builders.redirect)
    Subshell = staticmethod(builders.subshell)
    Comment = staticmethod(builders.comment)

    def __init__(self, root: Program, source: str = '') -> None:
        self._root = root
        self.source = source

    @property
    def root(self) -> Program:
        return self._root

    def find(self, kind: str | type[BaseNode], filter: Mapping[str, Any] | None = None) -> Collection:
        return find(self._root, kind, filter)

    def filter(self, kind: str | type[BaseNode], predicate: Callable[[NodePath], bool]) -> Collection:
        """Nodes of ``kind`` for which ``predicate`` holds."""
        return self.find(kind).filter(predicate)

    def for_each(self, kind: str | type[BaseNode], callback: Callable[[NodePath], object]) -> Collection:
        return self.find(kind).for_each(callback)

    def map(self, kind: str | type[BaseNode], callback: Callable[[NodePath], _T]) -> list[_T]:
        return self.find(kind).map(callback)

    def size(self, kind: str | type[BaseNode] | None = None) -> int:
        """Number of nodes of ``kind``, or of top-level statements when no kind is given."""
        if kind is None:
            return len(self._root.body)
        return self.find(kind).size()

    def to_source(self, options: SourceOptions | Mapping[str, Any] | None = None) -> str:
        return SourceGenerator(options).generate(self._root)


class Transformer:
    """Parses sources into sessions. Holds configuration only, never a tree."""

    def __init__(self, parser_options: ParserOptions | None = None) -> None:
        self._parser = BashParser(parser_options)

    def parse(self, source: str) -> Program:
        return self._parser.parse(source)

    def b(self, source: str) -> Session:
        return Session(self._parser.parse(source), source)
