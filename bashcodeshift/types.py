"""Records and callable shapes shared by the transformer, runner and transforms."""

from __future__ import annotations

__all__ = [
    'FileInfo',
    'Reporter',
    'RunnerStats',
    'TransformAPI',
    'TransformFunction',
    'TransformResult',
]

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from bashcodeshift.transformer import Session

type TransformResult = str | None
type Reporter = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class FileInfo:
    """The file a transform is applied to."""

    path: str  # "scripts/deploy.sh"
    source: str
    name: str  # "deploy.sh"


@dataclass(slots=True)
class RunnerStats:
    """Counters accumulated across one run. Mutable: updated per file."""

    processed: int = 0
    changed: int = 0
    errors: int = 0


@dataclass(frozen=True, slots=True)
class TransformAPI:
    """Second argument of every transform."""

    b: Callable[[str], Session]  # parse source into a query/mutate/generate session
    stats: RunnerStats
    report: Reporter


class TransformFunction(Protocol):
    """``transform(file_info, api, options)`` returning new source, ``None`` for unchanged."""

    def __call__(
        self,
        file_info: FileInfo,
        api: TransformAPI,
        options: Mapping[str, Any],
    ) -> TransformResult | Awaitable[TransformResult]: ...
