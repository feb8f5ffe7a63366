"""Lexical pre-pass over shell source, run before bashlex sees it.

bashlex drops comments and rejects some trivia layouts (leading blank lines,
comment-only lines between commands, trailing comments). ``scan`` records
every comment span and produces a sanitized copy of the source in which each
trivia run is rewritten to a single newline padded with spaces. The copy has
the same length as the source, so every offset bashlex reports is valid
against the original text.

Heredoc bodies are passed through untouched.
"""

from __future__ import annotations

__all__ = [
    'ScannedSource',
    'SourceText',
    'scan',
]

import bisect
import re
from dataclasses import dataclass

from bashcodeshift.nodes import Location, Position

type Span = tuple[int, int]

# A '#' opens a comment only at the start of a word.
_COMMENT_PRECEDERS = frozenset(' \t\r\n;&|()')
_BLANKS = frozenset(' \t\r')

# <<EOF  <<-EOF  <<'EOF'  <<"EOF"  <<\EOF   (but not the <<< here-string)
_HEREDOC = re.compile(r'<<(-?)[ \t]*(?:\'([^\']*)\'|"([^"]*)"|\\?([^\s;&|<>()]+))')


@dataclass(frozen=True, slots=True)
class ScannedSource:
    code: str  # sanitized source handed to bashlex, possibly shorter (trailing trivia cut)
    comments: tuple[Span, ...]  # [start, end) of each comment, '#' included, newline excluded


@dataclass(frozen=True, slots=True)
class _Heredoc:
    delimiter: str
    strip_tabs: bool


def scan(source: str) -> ScannedSource:
    return _Scanner(source).run()


class _Scanner:
    def __init__(self, source: str) -> None:
        self.source = source
        self.out = list(source)
        self.comments: list[Span] = []
        self.pending: list[_Heredoc] = []
        self.seen_content = False

    def run(self) -> ScannedSource:
        source = self.source
        n = len(source)
        i = 0
        while i < n:
            c = source[i]
            if c in _BLANKS or c == '\n' or (c == '#' and self._opens_comment(i)):
                start = i
                had_heredoc = bool(self.pending)
                i = self._trivia(i)
                if i >= n and not had_heredoc:
                    # Trailing trivia is cut; a terminating newline is kept.
                    end = start + 1 if self.out[start] == '\n' else start
                    return ScannedSource(''.join(self.out[:end]), tuple(self.comments))
                continue

            self.seen_content = True
            if c == '\\':
                i += 2
            elif c in '\'"`':
                i = self._skip_quoted(i)
            elif source.startswith('<<<', i):
                i += 3
            elif source.startswith('<<', i):
                match = _HEREDOC.match(source, i)
                if match is None:
                    i += 2
                    continue
                strip_tabs, single, double, bare = match.groups()
                delimiter = next(group for group in (single, double, bare) if group is not None)
                self.pending.append(_Heredoc(delimiter, bool(strip_tabs)))
                i = match.end()
            else:
                i += 1
        return ScannedSource(''.join(self.out), tuple(self.comments))

    def _opens_comment(self, i: int) -> bool:
        return i == 0 or self.source[i - 1] in _COMMENT_PRECEDERS

    def _trivia(self, start: int) -> int:
        """Consume one trivia run from ``start``; return the offset after it."""
        source = self.source
        n = len(source)
        i = start
        newline = False
        first_comment = len(self.comments)
        while i < n:
            c = source[i]
            if c in _BLANKS:
                i += 1
            elif c == '\n':
                if self.pending:
                    # The newline ends the heredoc's command line; the body follows verbatim.
                    self._blank_comments(first_comment)
                    return self._skip_heredocs(i + 1)
                newline = True
                i += 1
            elif c == '#' and self._opens_comment(i):
                end = source.find('\n', i)
                end = n if end == -1 else end
                self.comments.append((i, end))
                i = end
            else:
                break

        if newline:
            for j in range(start, i):
                self.out[j] = ' '
            if self.seen_content:
                self.out[start] = '\n'
        else:
            self._blank_comments(first_comment)
        return i

    def _blank_comments(self, first: int) -> None:
        for comment_start, comment_end in self.comments[first:]:
            for j in range(comment_start, comment_end):
                self.out[j] = ' '

    def _skip_heredocs(self, i: int) -> int:
        """Skip the bodies of all pending heredocs; stop on the last delimiter line's newline."""
        source = self.source
        n = len(source)
        while self.pending and i < n:
            heredoc = self.pending[0]
            end = source.find('\n', i)
            end = n if end == -1 else end
            line = source[i:end].rstrip('\r')
            if heredoc.strip_tabs:
                line = line.lstrip('\t')
            if line == heredoc.delimiter:
                self.pending.pop(0)
                if not self.pending:
                    return end
            i = end + 1
        self.pending.clear()
        return n

    def _skip_quoted(self, i: int) -> int:
        source = self.source
        quote = source[i]
        if quote == "'":
            end = source.find("'", i + 1)
            return len(source) if end == -1 else end + 1
        j = i + 1
        while j < len(source):
            if source[j] == '\\':
                j += 2
            elif source[j] == quote:
                return j + 1
            else:
                j += 1
        return len(source)


class SourceText:
    """Offset to line/column conversion over one source string."""

    def __init__(self, source: str) -> None:
        self.source = source
        self._line_starts = [0] + [match.end() for match in re.finditer('\n', source)]

    def position(self, offset: int) -> Position:
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(line=line + 1, column=offset - self._line_starts[line])

    def location(self, start: int, end: int) -> Location:
        return Location(start=self.position(start), end=self.position(end))

    def slice(self, start: int, end: int) -> str:
        return self.source[start:end]
