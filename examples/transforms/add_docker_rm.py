"""Add ``--rm`` to every ``docker run`` that lacks it."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bashcodeshift import FileInfo, TransformAPI
from bashcodeshift.nodes import Command


def transform(file_info: FileInfo, api: TransformAPI, options: Mapping[str, Any]) -> str:
    session = api.b(file_info.source)
    for path in session.find('Command', {'name': 'docker'}):
        command = path.value
        if not isinstance(command, Command):
            continue
        if command.arguments[:1] == ['run'] and '--rm' not in command.arguments:
            command.arguments.insert(1, '--rm')
    return session.to_source()
