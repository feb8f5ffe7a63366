"""Exception hierarchy for bashcodeshift.

Only two failures are fatal to a unit of work:

    ParseFailure: bashlex rejected a script. Fatal for that file; the runner
        counts it and moves on to the next file.
    LoadFailure: a transform reference could not be resolved to a callable.
        Fatal for the whole run.

Mutating through an empty path and generating an unknown node kind are soft
failures: they log at debug level and never raise.
"""

from __future__ import annotations

__all__ = [
    'BashCodeshiftError',
    'LoadFailure',
    'ParseFailure',
]


class BashCodeshiftError(Exception):
    """Base class for all errors raised by bashcodeshift."""


class ParseFailure(BashCodeshiftError):
    """The shell parser rejected the input. Carries the parser's own message."""


class LoadFailure(BashCodeshiftError):
    """A transform could not be imported or exposes no callable entry point."""
