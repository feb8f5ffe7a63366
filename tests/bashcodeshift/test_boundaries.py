"""Tests for LibraryBoundary and ErrorBoundary.

LibraryBoundary is exercised both with plain exceptions and against bashlex
itself, since translating bashlex failures is what the parser relies on.
"""

from __future__ import annotations

import bashlex
import bashlex.errors
import pytest

from bashcodeshift.boundaries import ErrorBoundary, LibraryBoundary
from bashcodeshift.errors import BashCodeshiftError, LoadFailure, ParseFailure


class AppError(Exception):
    """Target exception for all tests."""


class AppErrorSubclass(AppError):
    """Subclass of target -- should also pass through the double-wrap guard."""


# ---------------------------------------------------------------------------
# LibraryBoundary
# ---------------------------------------------------------------------------


class TestContextManager:
    """Verify context manager exception translation."""

    def test_no_exception_passes_through(self) -> None:
        with LibraryBoundary(AppError):
            result = 1 + 1
        assert result == 2

    @pytest.mark.parametrize(
        'exception, message',
        [
            (ValueError, 'original'),
            (RuntimeError, 'the message'),
            (NotImplementedError, 'arithmetic expansion'),
        ],
    )
    def test_translates_exception(self, exception: type[Exception], message: str) -> None:
        with pytest.raises(AppError) as exc_info, LibraryBoundary(AppError):
            raise exception(message)
        assert exc_info.value.args == (message,)
        assert isinstance(exc_info.value.__cause__, exception)

    def test_double_wrap_guard(self) -> None:
        """Exception already the target type passes through unchanged."""
        original = AppErrorSubclass('already wrapped')
        with pytest.raises(AppErrorSubclass) as exc_info, LibraryBoundary(AppError):
            raise original
        assert exc_info.value is original

    @pytest.mark.parametrize('exception', [KeyboardInterrupt, SystemExit, GeneratorExit])
    def test_system_exception_passes_through(self, exception: type[BaseException]) -> None:
        with pytest.raises(exception), LibraryBoundary(AppError):
            raise exception

    @pytest.mark.parametrize('exception', [StopIteration, StopAsyncIteration])
    def test_control_flow_exception_passes_through(self, exception: type[Exception]) -> None:
        with pytest.raises(exception), LibraryBoundary(AppError):
            raise exception

    def test_preserves_traceback(self) -> None:
        """Original raise location is preserved as deepest traceback frame."""

        def library_function() -> None:
            raise ValueError('deep')

        with pytest.raises(AppError) as exc_info, LibraryBoundary(AppError):
            library_function()

        tb = exc_info.value.__traceback__
        assert tb is not None
        while tb.tb_next:
            tb = tb.tb_next
        assert tb.tb_frame.f_code.co_name == 'library_function'


class TestDecorator:
    """Verify decorator mode."""

    def test_translates(self) -> None:
        @LibraryBoundary(AppError)
        def fail() -> None:
            raise KeyError('missing')

        with pytest.raises(AppError) as exc_info:
            fail()
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_returns_value_and_keeps_name(self) -> None:
        @LibraryBoundary(AppError)
        def add(a: int, b: int) -> int:
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == 'add'


class TestBashlex:
    """Verify real bashlex failures translate to ParseFailure."""

    def test_parsing_error(self) -> None:
        with pytest.raises(ParseFailure) as exc_info, LibraryBoundary(ParseFailure):
            bashlex.parse('echo "unterminated')
        assert isinstance(exc_info.value.__cause__, bashlex.errors.ParsingError)

    def test_unsupported_construct(self) -> None:
        with pytest.raises(ParseFailure) as exc_info, LibraryBoundary(ParseFailure):
            bashlex.parse('echo $((1+2))')
        assert isinstance(exc_info.value.__cause__, NotImplementedError)

    def test_success(self) -> None:
        with LibraryBoundary(ParseFailure):
            trees = bashlex.parse('echo hi')
        assert [tree.kind for tree in trees] == ['command']

    def test_parse_failure_is_codeshift_error(self) -> None:
        assert issubclass(ParseFailure, BashCodeshiftError)
        assert issubclass(LoadFailure, BashCodeshiftError)


# ---------------------------------------------------------------------------
# ErrorBoundary
# ---------------------------------------------------------------------------


class TestErrorBoundaryScope:
    """Verify exit_code=None suppresses and continues."""

    def test_suppresses_and_calls_handler(self) -> None:
        seen: list[Exception] = []
        with ErrorBoundary(exit_code=None, handler=seen.append):
            raise ValueError('per file')
        assert [str(exc) for exc in seen] == ['per file']

    def test_loop_continues(self) -> None:
        seen: list[int] = []
        for item in range(3):
            with ErrorBoundary(exit_code=None, handler=lambda exc: None):
                if item == 1:
                    raise RuntimeError('skip')
                seen.append(item)
        assert seen == [0, 2]

    def test_no_handler_prints_traceback(self, capsys: pytest.CaptureFixture[str]) -> None:
        with ErrorBoundary(exit_code=None):
            raise ValueError('unhandled detail')
        assert 'ValueError: unhandled detail' in capsys.readouterr().err

    def test_failing_handler_falls_back_to_traceback(self, capsys: pytest.CaptureFixture[str]) -> None:
        def broken(exc: Exception) -> None:
            raise RuntimeError('handler broke')

        with ErrorBoundary(exit_code=None, handler=broken):
            raise ValueError('original')
        assert 'ValueError: original' in capsys.readouterr().err

    @pytest.mark.parametrize('exception', [KeyboardInterrupt, SystemExit])
    def test_system_exception_passes_through(self, exception: type[BaseException]) -> None:
        seen: list[Exception] = []
        with pytest.raises(exception), ErrorBoundary(exit_code=None, handler=seen.append):
            raise exception
        assert seen == []


class TestErrorBoundaryDispatch:
    """Verify handlers are chosen by exception type."""

    def test_most_specific_handler_wins(self) -> None:
        boundary = ErrorBoundary(exit_code=None)
        seen: list[str] = []

        @boundary.handler(BashCodeshiftError)
        def _base(exc: Exception) -> None:
            seen.append('base')

        @boundary.handler(ParseFailure)
        def _parse(exc: Exception) -> None:
            seen.append('parse')

        with boundary:
            raise ParseFailure('bad')
        with boundary:
            raise LoadFailure('missing')
        assert seen == ['parse', 'base']

    def test_unregistered_type_uses_catch_all(self) -> None:
        seen: list[str] = []
        boundary = ErrorBoundary(exit_code=None, handler=lambda exc: seen.append('any'))

        @boundary.handler(ParseFailure)
        def _parse(exc: Exception) -> None:
            seen.append('parse')

        with boundary:
            raise OSError('disk')
        assert seen == ['any']


class TestErrorBoundaryExit:
    """Verify process boundaries exit after handling."""

    def test_exits_with_code(self) -> None:
        seen: list[Exception] = []
        with pytest.raises(SystemExit) as exc_info, ErrorBoundary(exit_code=2, handler=seen.append):
            raise LoadFailure('no transform')
        assert exc_info.value.code == 2
        assert len(seen) == 1

    def test_decorator(self) -> None:
        boundary = ErrorBoundary(handler=lambda exc: None)

        @boundary
        def entry() -> None:
            raise ParseFailure('bad')

        with pytest.raises(SystemExit) as exc_info:
            entry()
        assert exc_info.value.code == 1

    def test_decorator_returns_value(self) -> None:
        @ErrorBoundary()
        def entry() -> str:
            return 'ok'

        assert entry() == 'ok'
