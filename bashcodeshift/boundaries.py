"""Error and library boundaries for the codemod pipeline.

Two complementary tools, one per edge of the pipeline:

    LibraryBoundary: translate at call sites. Wraps calls into bashlex so
        that anything it raises (``ParsingError``, but also builtins such as
        ``NotImplementedError`` for unsupported constructs) surfaces as one
        known type, with the original chained as ``__cause__``::

            with LibraryBoundary(ParseFailure):
                trees = bashlex.parse(code)

    ErrorBoundary: handle at architectural edges. The runner opens a scope
        boundary per file (report, count, continue); the CLI wraps its entry
        point in a process boundary (report, exit non-zero)::

            for path in files:
                with ErrorBoundary(exit_code=None, handler=report_failure):
                    process(path)

System exceptions (``KeyboardInterrupt``, ``SystemExit``) always pass through
both boundaries, as do the iteration control-flow exceptions.
"""

from __future__ import annotations

__all__ = [
    'ErrorBoundary',
    'ErrorHandler',
    'LibraryBoundary',
]

import functools
import sys
import traceback
from collections.abc import Callable
from functools import singledispatch
from types import TracebackType
from typing import Any, Self, TypeVar, cast

type ErrorHandler = Callable[[Exception], None]

_F = TypeVar('_F', bound=Callable[..., object])

# Exception subclasses that drive iteration; translating them breaks generators.
_PASSTHROUGH = (StopIteration, StopAsyncIteration, GeneratorExit)


class LibraryBoundary:
    """Translate exceptions from third-party calls into ``target``.

    Anything that is not already a ``target`` instance is re-raised as
    ``target(str(original))`` chained from the original. Usable as a context
    manager or as a decorator.
    """

    def __init__(self, target: type[Exception]) -> None:
        self._target = target

    def __call__(self, func: _F) -> _F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with self:
                return func(*args, **kwargs)

        return cast(_F, wrapper)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_val is None or isinstance(exc_val, self._target):
            return  # Nothing raised, or already translated
        if not isinstance(exc_val, Exception) or isinstance(exc_val, _PASSTHROUGH):
            return
        raise self._target(str(exc_val)).with_traceback(exc_tb) from exc_val


class ErrorBoundary:
    """Catch application exceptions and dispatch them to handlers by type.

    Handlers are registered with ``@boundary.handler(SomeError)`` and matched
    by MRO, so a handler for ``Exception`` is the catch-all. Without one, the
    traceback is printed to stderr.

    Args:
        handler: Catch-all handler, shorthand for ``@boundary.handler(Exception)``.
        exit_code: Exit status after handling. ``None`` suppresses the
            exception and lets the caller continue (scope boundary).
    """

    def __init__(
        self,
        *,
        handler: ErrorHandler | None = None,
        exit_code: int | None = 1,
    ) -> None:
        self._dispatch = singledispatch(_print_traceback)
        if handler is not None:
            self._dispatch.register(Exception, handler)
        self._exit_code = exit_code

    def handler(self, exc_type: type[Exception]) -> Callable[[Callable[..., None]], Callable[..., None]]:
        """Register a handler for ``exc_type`` and its subclasses."""
        return self._dispatch.register(exc_type)

    def __call__(self, func: _F) -> _F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with self:
                return func(*args, **kwargs)

        return cast(_F, wrapper)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        if not isinstance(exc_value, Exception):
            return False

        try:
            self._dispatch(exc_value)
        except Exception:
            try:  # noqa: SIM105 - a broken stderr must not breach the boundary
                _print_traceback(exc_value)
            except Exception:
                pass

        if self._exit_code is not None:
            sys.exit(self._exit_code)
        return True


def _print_traceback(exc: Exception) -> None:
    traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
