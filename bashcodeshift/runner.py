"""Apply a transform to a set of shell scripts.

The runner loads a transform, expands file patterns, and feeds each file
through the transform inside its own error boundary: a file that fails to
parse or whose transform raises is reported and counted, and the run goes on.
A transform that cannot be loaded stops the run before any file is touched.

Transforms are referenced by file path (``codemods/use_yarn.py``) or by
import path (``codemods.use_yarn:transform``). A module must expose a
callable ``transform`` or, failing that, ``default``.
"""

from __future__ import annotations

__all__ = [
    'Runner',
    'load_transform',
    'resolve_paths',
]

import asyncio
import difflib
import fnmatch
import importlib
import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterable, Sequence
from functools import partial
from pathlib import Path

import rich.console
import rich.markup

from bashcodeshift.boundaries import ErrorBoundary
from bashcodeshift.errors import LoadFailure
from bashcodeshift.schemas import RunnerOptions
from bashcodeshift.transformer import Transformer
from bashcodeshift.types import FileInfo, RunnerStats, TransformAPI, TransformFunction, TransformResult

logger = logging.getLogger(__name__)

SHELL_SUFFIXES = ('.sh', '.bash')
_ENTRY_POINTS = ('transform', 'default')


def load_transform(reference: str | Path) -> TransformFunction:
    """Import a transform from a ``.py`` file or a ``module:attr`` reference."""
    try:
        return _load_transform(str(reference))
    except LoadFailure:
        raise
    except Exception as exc:
        raise LoadFailure(f'Failed to load transform: {exc}') from exc


def _load_transform(reference: str) -> TransformFunction:
    attribute: str | None = None
    path = Path(reference)
    if path.suffix == '.py' or path.exists():
        if not path.is_file():
            raise LoadFailure(f'Failed to load transform: {reference} does not exist')
        module_name = f'bashcodeshift_transform_{path.stem}'
        spec = importlib.util.spec_from_file_location(module_name, path.resolve())
        if spec is None or spec.loader is None:
            raise LoadFailure(f'Failed to load transform: cannot import {reference}')
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    else:
        module_path, _, attribute = reference.partition(':')
        module = importlib.import_module(module_path)

    names = (attribute,) if attribute else _ENTRY_POINTS
    for name in names:
        candidate = getattr(module, name, None)
        if callable(candidate):
            logger.debug('[RUN] Loaded transform %s from %s', name, reference)
            return candidate
    raise LoadFailure(f'Failed to load transform: {reference} must define a callable {" or ".join(names)}')


def resolve_paths(patterns: Iterable[str | Path], ignore_pattern: str | None = None) -> list[Path]:
    """Expand files, directories and glob patterns into a de-duplicated, ordered file list.

    Directories contribute every ``*.sh`` and ``*.bash`` file beneath them.
    """
    resolved: dict[Path, None] = {}
    for pattern in patterns:
        path = Path(pattern)
        if path.is_file():
            matches = [path]
        elif path.is_dir():
            matches = sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in SHELL_SUFFIXES)
        else:
            matches = _glob(str(pattern))
        if not matches:
            logger.debug('[RUN] Pattern %r matched no files', str(pattern))
        for match in matches:
            if not _ignored(match, ignore_pattern):
                resolved.setdefault(match, None)
    return list(resolved)


def _glob(pattern: str) -> list[Path]:
    path = Path(pattern)
    if path.is_absolute():
        anchor = Path(path.anchor)
        relative = str(path.relative_to(anchor))
    else:
        anchor, relative = Path(), pattern
    if not relative or relative == '.':
        return []
    return sorted(p for p in anchor.glob(relative) if p.is_file())


def _ignored(path: Path, ignore_pattern: str | None) -> bool:
    if not ignore_pattern:
        return False
    candidates = (path.as_posix(), path.name, *path.parts)
    return any(fnmatch.fnmatch(candidate, ignore_pattern) for candidate in candidates)


class Runner:
    """Runs one transform over many files, accumulating ``RunnerStats``.

    Args:
        transformer: Source of ``api.b`` sessions handed to the transform.
        console: Where progress and the summary are printed.
    """

    def __init__(
        self,
        *,
        transformer: Transformer | None = None,
        console: rich.console.Console | None = None,
    ) -> None:
        self.transformer = transformer or Transformer()
        self.console = console or rich.console.Console()
        self.stats = RunnerStats()

    def run(
        self,
        transform: TransformFunction | str | Path,
        paths: str | Path | Sequence[str | Path],
        options: RunnerOptions | None = None,
    ) -> RunnerStats:
        options = options or RunnerOptions()
        transform_fn = transform if callable(transform) else load_transform(transform)

        patterns = [paths] if isinstance(paths, (str, Path)) else list(paths)
        files = resolve_paths(patterns, options.ignore_pattern)
        if not files:
            self._say('No files found matching the specified patterns.', style='yellow')
            return self.stats

        for path in files:
            with ErrorBoundary(exit_code=None, handler=partial(self._file_failed, path)):
                self._process(path, transform_fn, options)

        self._summary()
        return self.stats

    def _process(self, path: Path, transform: TransformFunction, options: RunnerOptions) -> None:
        self.stats.processed += 1
        source = path.read_text(encoding='utf-8')
        file_info = FileInfo(path=str(path), source=source, name=path.name)
        api = TransformAPI(b=self.transformer.b, stats=self.stats, report=self._report)

        result = self._resolve(transform(file_info, api, options.transform_options()))
        if result is None or result == source:
            logger.debug('[RUN] %s unchanged', path)
            if options.verbose:
                self._say(f'No changes: {path}', style='dim')
            return

        self.stats.changed += 1
        if options.dry:
            self._say(f'[DRY RUN] Would modify: {path}', style='yellow')
        else:
            path.write_text(result, encoding='utf-8')
            logger.info('[RUN] Wrote %s', path)
            self._say(f'Modified: {path}', style='green')

        if options.print:
            self._diff(path, source, result)

    @staticmethod
    def _resolve(result: object) -> TransformResult:
        if inspect.isawaitable(result):
            result = asyncio.run(_await(result))
        if result is not None and not isinstance(result, str):
            raise TypeError(f'Transform must return str or None, got {type(result).__name__}')
        return result

    def _file_failed(self, path: Path, exc: Exception) -> None:
        self.stats.errors += 1
        logger.debug('[RUN] %s failed', path, exc_info=exc)
        self._say(f'Error processing {path}: {exc}', style='red')

    def _report(self, message: str) -> None:
        self._say(message, style='blue')

    def _diff(self, path: Path, before: str, after: str) -> None:
        lines = difflib.unified_diff(
            before.splitlines(),
            after.splitlines(),
            fromfile=f'{path} (original)',
            tofile=f'{path} (modified)',
            lineterm='',
        )
        for line in lines:
            if line.startswith(('---', '+++')):
                style = 'bold'
            elif line.startswith('@@'):
                style = 'cyan'
            elif line.startswith('+'):
                style = 'green'
            elif line.startswith('-'):
                style = 'red'
            else:
                style = None
            self._say(line, style=style)

    def _summary(self) -> None:
        self.console.print()
        self.console.print('[bold]Summary:[/bold]', highlight=False)
        self._say(f'  Processed: {self.stats.processed} files')
        self._say(f'  Changed: {self.stats.changed} files')
        self._say(f'  Errors: {self.stats.errors} files')

    def _say(self, message: str, style: str | None = None) -> None:
        self.console.print(rich.markup.escape(message), style=style, highlight=False, soft_wrap=True)


async def _await(awaitable: object) -> object:
    return await awaitable  # type: ignore[misc]
