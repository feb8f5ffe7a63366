"""Normalize bashlex parse trees into the canonical node model.

bashlex yields a tree of generic ``node`` objects whose meaning depends on
``kind``. ``BashParser`` maps each kind onto a node model, recovers comments
and the shebang from the scanner's comment spans, and attaches line/column
locations and character ranges measured against the original source.

Anything bashlex raises is surfaced as ``ParseFailure``.
"""

from __future__ import annotations

__all__ = [
    'BashParser',
    'parse',
]

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from typing import Any, NamedTuple

import bashlex
import bashlex.ast

from bashcodeshift.boundaries import LibraryBoundary
from bashcodeshift.errors import ParseFailure
from bashcodeshift.nodes import (
    BaseNode,
    Command,
    Comment,
    Conditional,
    Function,
    Loop,
    Pipeline,
    Program,
    Redirect,
    Subshell,
    Variable,
)
from bashcodeshift.scanner import SourceText, scan
from bashcodeshift.schemas import ParserOptions

logger = logging.getLogger(__name__)

_ASSIGNMENT_RE = re.compile(r'^([A-Za-z_][A-Za-z0-9_]*)=(.*)$', re.DOTALL)
_DECLARATION_KEYWORDS = frozenset({'export', 'readonly'})

# Punctuation kinds with no node of their own.
_SYNTAX_KINDS = frozenset({'operator', 'pipe', 'reservedword'})


def parse(source: str, options: ParserOptions | None = None) -> Program:
    return BashParser(options).parse(source)


class BashParser:
    """Parse shell source into a ``Program``.

    Args:
        options: What to record besides the node structure. Comments, line
            locations and character ranges are all on by default.
    """

    def __init__(self, options: ParserOptions | None = None) -> None:
        self.options = options or ParserOptions()

    def parse(self, source: str) -> Program:
        scanned = scan(source)
        trees: list[bashlex.ast.node] = []
        if scanned.code.strip():
            with LibraryBoundary(ParseFailure):
                trees = bashlex.parse(scanned.code)
        return _Normalizer(source, scanned.comments, self.options).program(trees)


class _Item(NamedTuple):
    node: BaseNode
    start: int
    end: int


class _Normalizer:
    def __init__(self, source: str, comments: Sequence[tuple[int, int]], options: ParserOptions) -> None:
        self.text = SourceText(source)
        self.comments = comments
        self.options = options
        self._handlers: dict[str, Callable[[bashlex.ast.node], list[_Item]]] = {
            'command': self._command,
            'pipeline': self._pipeline,
            'list': self._flatten,
            'compound': self._compound,
            'if': self._if,
            'for': self._for,
            'while': self._while,
            'until': self._while,
            'function': self._function,
        }

    def program(self, trees: Sequence[bashlex.ast.node]) -> Program:
        source = self.text.source
        shebang = None
        comments = self.comments
        if comments and comments[0][0] == 0 and source.startswith('#!'):
            shebang = self._comment_text(*comments[0]).rstrip('\r')
            comments = comments[1:]

        body = self._body(trees, 0, len(source), comments)
        return Program(body=body, shebang=shebang, **self._span(0, len(source)))

    # --- statements ---

    def _statements(self, raw: bashlex.ast.node) -> list[_Item]:
        if raw.kind in _SYNTAX_KINDS:
            return []
        handler = self._handlers.get(raw.kind)
        if handler is None:
            logger.debug('[PARSE] Unsupported node kind %r at %s, flattening', raw.kind, raw.pos)
            return self._flatten(raw)
        return handler(raw)

    def _flatten(self, raw: bashlex.ast.node) -> list[_Item]:
        children = getattr(raw, 'parts', None) or getattr(raw, 'list', None) or []
        items: list[_Item] = []
        for child in children:
            items.extend(self._statements(child))
        return items

    def _body(
        self,
        raws: Iterable[bashlex.ast.node],
        start: int,
        end: int,
        comments: Sequence[tuple[int, int]] | None = None,
    ) -> list[Any]:
        """Statements of one block, with the comments in ``[start, end)`` merged in by position."""
        items: list[_Item] = []
        for raw in raws:
            items.extend(self._statements(raw))

        if self.options.comments:
            for comment_start, comment_end in self.comments if comments is None else comments:
                if not start <= comment_start < end:
                    continue
                if any(item.start <= comment_start < item.end for item in items):
                    continue  # belongs to a nested block
                items.append(self._comment(comment_start, comment_end))
            items.sort(key=lambda item: item.start)
        return [item.node for item in items]

    def _command(self, raw: bashlex.ast.node) -> list[_Item]:
        start, end = raw.pos
        words: list[str] = []
        redirects: list[Redirect] = []
        for part in raw.parts:
            if part.kind in ('word', 'assignment'):
                words.append(self.text.slice(*part.pos))
            elif part.kind == 'redirect':
                redirects.append(self._redirect(part))
            else:
                logger.debug('[PARSE] Ignoring command part %r at %s', part.kind, part.pos)

        span = self._span(start, end)
        if not redirects:
            declaration = self._declaration(words)
            if declaration is not None:
                name, value, keyword = declaration
                variable = Variable(
                    name=name,
                    value=value,
                    export=keyword == 'export',
                    readonly=keyword == 'readonly',
                    **span,
                )
                return [_Item(variable, start, end)]

        command = Command(
            name=words[0] if words else '',
            arguments=words[1:],
            redirects=redirects or None,
            **span,
        )
        return [_Item(command, start, end)]

    @staticmethod
    def _declaration(words: Sequence[str]) -> tuple[str, str, str | None] | None:
        """``NAME=value``, ``export NAME=value`` or ``readonly NAME=value``."""
        keyword: str | None = None
        if len(words) == 2 and words[0] in _DECLARATION_KEYWORDS:
            keyword = words[0]
            words = words[1:]
        if len(words) != 1:
            return None
        match = _ASSIGNMENT_RE.match(words[0])
        if match is None:
            return None
        return match.group(1), match.group(2), keyword

    def _redirect(self, raw: bashlex.ast.node) -> Redirect:
        output = raw.output
        target = str(output) if isinstance(output, int) else self.text.slice(*output.pos)
        fd = raw.input if isinstance(raw.input, int) else None
        heredoc = None
        document = getattr(raw, 'heredoc', None)
        if document is not None and not isinstance(output, int):
            # bashlex ends the document with the delimiter line itself.
            heredoc = document.value.removesuffix(output.word)
        return Redirect(operator=raw.type, target=target, fd=fd, heredoc=heredoc, **self._span(*raw.pos))

    def _pipeline(self, raw: bashlex.ast.node) -> list[_Item]:
        start, end = raw.pos
        negated = False
        commands: list[Any] = []
        for part in raw.parts:
            if part.kind == 'reservedword' and part.word == '!':
                negated = True
            elif part.kind == 'pipe' and part.pipe == '|&':
                self._pipe_stderr(commands[-1] if commands else None, part)
            else:
                commands.extend(item.node for item in self._statements(part))
        pipeline = Pipeline(commands=commands, negated=negated, **self._span(start, end))
        return [_Item(pipeline, start, end)]

    def _pipe_stderr(self, left: Any, pipe: bashlex.ast.node) -> None:
        """``a |& b`` is ``a 2>&1 | b``: record the duplication on the left command."""
        if not isinstance(left, Command):
            logger.debug('[PARSE] Dropping |& after %s at %s', type(left).__name__, pipe.pos)
            return
        redirect = Redirect(operator='>&', target='1', fd=2, **self._span(*pipe.pos))
        left.redirects = [*(left.redirects or ()), redirect]

    def _compound(self, raw: bashlex.ast.node) -> list[_Item]:
        start, end = raw.pos
        if getattr(raw, 'redirects', None):
            logger.debug('[PARSE] Dropping redirects on compound command at %s', raw.pos)
        if self.text.source[start] != '(':
            return self._flatten(raw)  # { ...; } groups dissolve into the enclosing block
        body = self._body(*self._inner(raw.list))
        return [_Item(Subshell(body=body, **self._span(start, end)), start, end)]

    def _if(self, raw: bashlex.ast.node) -> list[_Item]:
        start, end = raw.pos
        return [_Item(self._conditional(raw.parts, end), start, end)]

    def _conditional(self, parts: Sequence[bashlex.ast.node], end: int) -> Conditional:
        """Build from ``if``/``elif`` onwards; an ``elif`` chain nests in ``alternate``."""
        keyword = parts[0]
        then = _keyword_index(parts, ('then',), 1)
        clause = _keyword_index(parts, ('elif', 'else', 'fi'), then + 1)

        condition = self.text.slice(keyword.pos[1], parts[then].pos[0]).strip().rstrip(';').strip()
        consequent = self._body(parts[then + 1 : clause], parts[then].pos[1], parts[clause].pos[0])

        alternate: list[Any] | None = None
        if parts[clause].word == 'elif':
            alternate = [self._conditional(parts[clause:], end)]
        elif parts[clause].word == 'else':
            fi = _keyword_index(parts, ('fi',), clause + 1)
            alternate = self._body(parts[clause + 1 : fi], parts[clause].pos[1], parts[fi].pos[0])

        return Conditional(
            condition=condition,
            consequent=consequent,
            alternate=alternate,
            **self._span(keyword.pos[0], end),
        )

    def _for(self, raw: bashlex.ast.node) -> list[_Item]:
        start, end = raw.pos
        do = _keyword_index(raw.parts, ('do', '{'), 1)
        done = _keyword_index(raw.parts, ('done', '}'), do + 1)

        words = [part for part in raw.parts[1:do] if part.kind == 'word']
        variable = self.text.slice(*words[0].pos) if words else None
        items = words[1:]
        if items and items[0].word == 'in':
            items = items[1:]
        condition = self.text.slice(items[0].pos[0], items[-1].pos[1]) if items else None

        body = self._body(raw.parts[do + 1 : done], raw.parts[do].pos[1], raw.parts[done].pos[0])
        loop = Loop(kind='for', variable=variable, condition=condition, body=body, **self._span(start, end))
        return [_Item(loop, start, end)]

    def _while(self, raw: bashlex.ast.node) -> list[_Item]:
        start, end = raw.pos
        keyword = raw.parts[0]
        do = _keyword_index(raw.parts, ('do',), 1)
        done = _keyword_index(raw.parts, ('done',), do + 1)

        condition = self.text.slice(keyword.pos[1], raw.parts[do].pos[0]).strip().rstrip(';').strip()
        body = self._body(raw.parts[do + 1 : done], raw.parts[do].pos[1], raw.parts[done].pos[0])
        loop = Loop(kind=raw.kind, condition=condition, body=body, **self._span(start, end))
        return [_Item(loop, start, end)]

    def _function(self, raw: bashlex.ast.node) -> list[_Item]:
        start, end = raw.pos
        name = raw.name.word if hasattr(raw.name, 'word') else self.text.slice(*raw.name.pos)
        body = self._body(*self._inner(raw.body.list)) if raw.body.kind == 'compound' else []
        function = Function(name=name, parameters=[], body=body, **self._span(start, end))
        return [_Item(function, start, end)]

    def _inner(self, parts: Sequence[bashlex.ast.node]) -> tuple[list[bashlex.ast.node], int, int]:
        """Children of a ``( ... )`` or ``{ ... }`` and the region between the delimiters."""
        delimiters = [index for index, part in enumerate(parts) if part.kind == 'reservedword']
        if len(delimiters) < 2:
            start = parts[0].pos[0] if parts else 0
            end = parts[-1].pos[1] if parts else 0
            return list(parts), start, end
        first, last = delimiters[0], delimiters[-1]
        return list(parts[first + 1 : last]), parts[first].pos[1], parts[last].pos[0]

    # --- trivia and positions ---

    def _comment(self, start: int, end: int) -> _Item:
        value = self._comment_text(start, end)[1:].rstrip('\r')
        if value.startswith(' '):
            value = value[1:]
        return _Item(Comment(value=value, kind='line', **self._span(start, end)), start, end)

    def _comment_text(self, start: int, end: int) -> str:
        return self.text.slice(start, end)

    def _span(self, start: int, end: int) -> dict[str, Any]:
        span: dict[str, Any] = {}
        if self.options.locations:
            span['loc'] = self.text.location(start, end)
        if self.options.ranges:
            span['range'] = (start, end)
        return span


def _keyword_index(parts: Sequence[bashlex.ast.node], words: Sequence[str], start: int) -> int:
    for index in range(start, len(parts)):
        part = parts[index]
        if part.kind == 'reservedword' and part.word in words:
            return index
    raise ParseFailure(f'Expected {" or ".join(words)} after offset {parts[start - 1].pos[1]}')
