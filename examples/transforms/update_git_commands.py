"""Move deprecated git porcelain to its modern spelling.

    git checkout -b feature  ->  git switch -c feature
    git checkout main        ->  git switch main
    git branch -m old new    ->  git branch -m new
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bashcodeshift import FileInfo, NodePath, TransformAPI
from bashcodeshift.nodes import Command


def modernize(path: NodePath) -> None:
    command = path.value
    if not isinstance(command, Command):
        return
    args = command.arguments
    match args:
        case ['checkout', '-b', *rest] if rest:
            command.arguments = ['switch', '-c', *rest]
        case ['checkout', target, *rest] if not target.startswith('-'):
            command.arguments = ['switch', target, *rest]
        case ['branch', '-m', _, new, *_]:
            command.arguments = ['branch', '-m', new]


def transform(file_info: FileInfo, api: TransformAPI, options: Mapping[str, Any]) -> str:
    session = api.b(file_info.source)
    session.find('Command', {'name': 'git'}).for_each(modernize)
    return session.to_source()
