"""Rewrite npm invocations as their yarn equivalents.

    npm install lodash   ->  yarn lodash
    npm uninstall lodash ->  yarn remove lodash
    npm run build        ->  yarn build
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bashcodeshift import FileInfo, NodePath, TransformAPI
from bashcodeshift.nodes import Command


def transform(file_info: FileInfo, api: TransformAPI, options: Mapping[str, Any]) -> str:
    session = api.b(file_info.source)

    def to_yarn(path: NodePath) -> None:
        command = path.value
        if not isinstance(command, Command):
            return
        command.name = 'yarn'
        match command.arguments:
            case ['install', *rest]:
                command.arguments = rest
            case ['uninstall', *rest]:
                command.arguments = ['remove', *rest]
            case ['run', *rest]:
                command.arguments = rest

    session.find('Command', {'name': 'npm'}).for_each(to_yarn)
    return session.to_source()
