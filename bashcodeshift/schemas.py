"""Pydantic configuration schemas for parsing, generation and runs."""

from __future__ import annotations

__all__ = [
    'ParserOptions',
    'RunnerOptions',
    'SourceOptions',
    'StrictModel',
]

from collections.abc import Mapping
from typing import Any, Literal

import pydantic


class StrictModel(pydantic.BaseModel):
    """Base model with strict validation.

    Config:
    - extra='forbid': Reject unknown fields (fail-fast)
    - strict=True: No implicit type coercion
    - frozen=True: Immutable after creation
    """

    model_config = pydantic.ConfigDict(
        extra='forbid',
        strict=True,
        frozen=True,
    )


class ParserOptions(StrictModel):
    """What the normalizer records besides the node structure."""

    locations: bool = True  # line/column span on every node
    comments: bool = True  # recover '#' comments as Comment nodes
    ranges: bool = True  # character offsets on every node


class SourceOptions(StrictModel):
    """Source generation settings.

    ``indent`` is the unit prepended once per nesting level; an int is read as
    a number of spaces.
    """

    indent: str = '  '
    line_ending: Literal['\n', '\r\n'] = '\n'

    @pydantic.field_validator('indent', mode='before')
    @classmethod
    def _spaces_from_width(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return ' ' * value
        return value


class RunnerOptions(StrictModel):
    """Flags for one run over a set of files."""

    dry: bool = False
    print: bool = False
    verbose: bool = False
    ignore_pattern: str | None = None
    parser: Literal['bash'] = 'bash'
    extra: Mapping[str, Any] = pydantic.Field(default_factory=dict)  # forwarded to transforms untouched

    def transform_options(self) -> dict[str, Any]:
        """Options as handed to a transform: run flags plus any extras."""
        options = self.model_dump(exclude={'extra'})
        options.update(self.extra)
        return options
