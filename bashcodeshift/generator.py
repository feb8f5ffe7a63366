"""Render a node tree back to shell text.

Output is canonical rather than a reproduction of the input layout: one
statement per line, blocks indented one unit per level, ``# text`` comments,
no trailing newline. Here-document bodies follow the line that opens them
and are never indented. Loose mappings with a known ``type`` are rendered as
the corresponding node; anything unrecognized renders as the empty string.
"""

from __future__ import annotations

__all__ = [
    'SourceGenerator',
    'generate',
]

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import pydantic

from bashcodeshift import builders
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
from bashcodeshift.schemas import SourceOptions

logger = logging.getLogger(__name__)

# Prefixes here-document lines so block indentation skips them; removed from the final text.
_VERBATIM = '\x00'
_QUOTING = str.maketrans('', '', '\'"\\')


def generate(node: Any, options: SourceOptions | Mapping[str, Any] | None = None) -> str:
    return SourceGenerator(options).generate(node)


class SourceGenerator:
    def __init__(self, options: SourceOptions | Mapping[str, Any] | None = None) -> None:
        if options is None:
            options = SourceOptions()
        elif not isinstance(options, SourceOptions):
            options = SourceOptions.model_validate(dict(options))
        self.options = options
        self._renderers: dict[type[BaseNode], Callable[[Any], str]] = {
            Program: self._program,
            Command: self._command,
            Variable: self._variable,
            Conditional: self._conditional,
            Loop: self._loop,
            Function: self._function,
            Pipeline: self._pipeline,
            Redirect: self._redirect,
            Subshell: self._subshell,
            Comment: self._comment,
        }

    def generate(self, node: Any) -> str:
        return self._render(node).replace(_VERBATIM, '')

    def _render(self, node: Any) -> str:
        node = self._coerce(node)
        if node is None:
            return ''
        return self._renderers[type(node)](node)

    def _coerce(self, node: Any) -> BaseNode | None:
        if isinstance(node, BaseNode):
            return node if type(node) in self._renderers else None
        if isinstance(node, Mapping):
            kind = node.get('type')
            if kind == 'Program' or kind in builders.BUILDERS:
                try:
                    if kind == 'Program':
                        return Program.model_validate(dict(node))
                    return builders.build(kind, node)
                except pydantic.ValidationError:
                    logger.debug('[GENERATE] Invalid %s mapping, rendering nothing', kind, exc_info=True)
                    return None
        logger.debug('[GENERATE] Unknown node %r, rendering nothing', node)
        return None

    # --- layout ---

    def _lines(self, nodes: Iterable[Any]) -> str:
        return self.options.line_ending.join(self._render(node) for node in nodes)

    def _block(self, nodes: Iterable[Any] | None) -> list[str]:
        """Children rendered one level deeper; empty when there are none."""
        text = self._lines(nodes or ())
        if not text:
            return []
        indent = self.options.indent
        return [
            indent + line if line and not line.startswith(_VERBATIM) else line
            for line in text.split(self.options.line_ending)
        ]

    def _join(self, lines: Iterable[str]) -> str:
        return self.options.line_ending.join(lines)

    def _inline(self, nodes: Iterable[Any], separator: str) -> tuple[str, list[str]]:
        """Join ``nodes`` with ``separator``; also return the here-document lines that follow."""
        heads: list[str] = []
        documents: list[str] = []
        for node in nodes:
            lines = self._render(node).split(self.options.line_ending)
            split = len(lines)
            while split > 1 and lines[split - 1].startswith(_VERBATIM):
                split -= 1
            heads.append(self._join(lines[:split]))
            documents.extend(lines[split:])
        return separator.join(heads), documents

    def _document(self, node: Redirect) -> list[str]:
        body = node.heredoc or ''
        lines = body.removesuffix('\n').split('\n') if body else []
        lines.append(node.target.translate(_QUOTING))
        return [_VERBATIM + line.rstrip('\r') for line in lines]

    # --- kinds ---

    def _program(self, node: Program) -> str:
        body = self._lines(node.body)
        if node.shebang:
            return self._join([node.shebang, body]) if body else node.shebang
        return body

    def _command(self, node: Command) -> str:
        words = [node.name, *node.arguments]
        words.extend(self._redirect(redirect) for redirect in node.redirects or ())
        line = ' '.join(word for word in words if word)
        documents = [self._document(redirect) for redirect in node.redirects or () if redirect.heredoc is not None]
        return self._join([line, *(text for document in documents for text in document)])

    def _variable(self, node: Variable) -> str:
        text = f'{node.name}={node.value}'
        if node.export:
            text = f'export {text}'
        if node.readonly:
            text = f'readonly {text}'
        return text

    def _conditional(self, node: Conditional) -> str:
        lines = [f'if {node.condition}; then', *self._block(node.consequent)]
        if node.alternate:
            lines.append('else')
            lines.extend(self._block(node.alternate))
        lines.append('fi')
        return self._join(lines)

    def _loop(self, node: Loop) -> str:
        if node.kind == 'for':
            header = f'for {node.variable or ""}'
            if node.condition:
                header += f' in {node.condition}'
        else:
            header = f'{node.kind} {node.condition or ""}'
        return self._join([f'{header}; do', *self._block(node.body), 'done'])

    def _function(self, node: Function) -> str:
        return self._join([f'function {node.name}() {{', *self._block(node.body), '}'])

    def _pipeline(self, node: Pipeline) -> str:
        text, documents = self._inline(node.commands, ' | ')
        if node.negated:
            text = f'! {text}'
        return self._join([text, *documents])

    def _redirect(self, node: Redirect) -> str:
        fd = '' if node.fd is None else str(node.fd)
        return f'{fd}{node.operator}{node.target}'

    def _subshell(self, node: Subshell) -> str:
        text, documents = self._inline(node.body, '; ')
        return self._join([f'({text})', *documents])

    def _comment(self, node: Comment) -> str:
        return f'# {node.value}'
