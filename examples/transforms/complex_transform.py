"""Several independent rewrites in one pass.

- npm commands become yarn commands
- functions and loops start with ``set -e``
- ``git checkout`` becomes ``git switch``
- docker, kubectl, terraform and aws invocations are announced with an echo
- ``echo`` with a format string becomes ``printf``
- secrets-looking variables become readonly
- long conditions get an explanatory comment
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from bashcodeshift import FileInfo, NodePath, Session, TransformAPI
from bashcodeshift.nodes import BaseNode, Command, Conditional, Variable

ANNOUNCED_COMMANDS = ('docker', 'kubectl', 'terraform', 'aws')
SECRET_MARKERS = ('API_KEY', 'SECRET', 'TOKEN', 'PASSWORD')
LONG_CONDITION = 50


def _has_set_e(body: Sequence[BaseNode]) -> bool:
    return any(isinstance(stmt, Command) and stmt.name == 'set' and '-e' in stmt.arguments for stmt in body)


def _npm_to_yarn(path: NodePath) -> None:
    command = path.value
    if not isinstance(command, Command):
        return
    command.name = 'yarn'
    if command.arguments[:1] == ['install']:
        command.arguments = command.arguments[1:]
    elif command.arguments[:1] == ['uninstall']:
        command.arguments = ['remove', *command.arguments[1:]]


def _git_switch(path: NodePath) -> None:
    command = path.value
    if not isinstance(command, Command):
        return
    args = command.arguments
    if len(args) > 2 and args[:2] == ['checkout', '-b']:
        command.arguments = ['switch', '-c', *args[2:]]
    elif len(args) > 1 and args[0] == 'checkout' and not args[1].startswith('-'):
        command.arguments = ['switch', *args[1:]]


def _echo_to_printf(path: NodePath) -> None:
    command = path.value
    if not isinstance(command, Command):
        return
    args = command.arguments
    if not args or '%' not in args[0]:
        return
    command.name = 'printf'
    fmt = args[0]
    quote = fmt[-1] if len(fmt) > 1 and fmt[-1] in '"\'' else ''
    body = fmt[: len(fmt) - len(quote)]
    if not body.endswith('\\n'):
        args[0] = f'{body}\\n{quote}'


def _prepend_set_e(session: Session, kind: str) -> None:
    for path in session.find(kind):
        body = getattr(path.value, 'body')
        if not _has_set_e(body):
            body.insert(0, session.Command(name='set', arguments=['-e']))


def transform(file_info: FileInfo, api: TransformAPI, options: Mapping[str, Any]) -> str:
    session = api.b(file_info.source)

    session.find('Command', {'name': 'npm'}).for_each(_npm_to_yarn)
    _prepend_set_e(session, 'Function')
    session.find('Command', {'name': 'git'}).for_each(_git_switch)

    for name in ANNOUNCED_COMMANDS:
        # Last match first, so earlier paths stay valid as siblings are inserted.
        for path in reversed(session.find('Command', {'name': name})):
            command = path.value
            if not isinstance(command, Command):
                continue
            announcement = ' '.join([name, *command.arguments])
            path.insert_before(session.Command(name='echo', arguments=[f'"[INFO] Running: {announcement}"']))

    session.find('Command', {'name': 'echo'}).for_each(_echo_to_printf)
    _prepend_set_e(session, 'Loop')

    for path in session.find('Variable'):
        variable = path.value
        if not isinstance(variable, Variable):
            continue
        if any(marker in variable.name for marker in SECRET_MARKERS):
            variable.readonly = True

    for path in reversed(session.find('Conditional')):
        conditional = path.value
        if not isinstance(conditional, Conditional):
            continue
        if len(conditional.condition) > LONG_CONDITION:
            path.insert_before(session.Comment(value=f'Complex condition: {conditional.condition}'))

    return session.to_source()
