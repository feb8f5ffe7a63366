"""Tests for path-addressed mutation: replace, insert, remove.

Paths are recorded at query time and resolved against the live tree when a
mutation runs. TestStalePaths pins down what happens when a structural edit
shifts siblings under a path recorded earlier.
"""

from __future__ import annotations

from collections.abc import Callable

from bashcodeshift import builders
from bashcodeshift.nodes import Command, Function
from bashcodeshift.transformer import Session


def _names(session: Session) -> list[str]:
    return [path.value.name for path in session.find('Command')]  # type: ignore[attr-defined]


class TestReplace:
    """Verify replace swaps exactly the addressed element."""

    def test_replace(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\nrm -rf build\necho b')
        (path,) = session.find('Command', {'name': 'rm'})
        path.replace(builders.command(name='make', arguments=['clean']))
        assert session.to_source() == 'echo a\nmake clean\necho b'

    def test_replace_twice_keeps_second(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\necho b')
        path = session.find('Command')[0]
        path.replace(builders.command(name='first'))
        path.replace(builders.command(name='second'))
        assert _names(session) == ['second', 'echo']

    def test_value_follows_replacement(self, b: Callable[[str], Session]) -> None:
        session = b('ls')
        path = session.find('Command')[0]
        replacement = builders.command(name='dir')
        path.replace(replacement)
        assert path.value is replacement

    def test_replace_nested(self, b: Callable[[str], Session]) -> None:
        session = b('if true; then\n  echo old\nfi')
        session.find('Command', {'name': 'echo'})[0].replace(builders.comment(value='removed'))
        assert session.to_source() == 'if true; then\n  # removed\nfi'


class TestInsert:
    """Verify insert_before and insert_after place siblings around the node."""

    def test_insert_before_shifts_original(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\necho b')
        path = session.find('Command')[1]
        original = path.value
        marker = builders.comment(value='marker')
        path.insert_before(marker)
        assert session.root.body[1] is marker
        assert session.root.body[2] is original

    def test_insert_after(self, b: Callable[[str], Session]) -> None:
        session = b('set -e\necho a')
        session.find('Command', {'name': 'set'})[0].insert_after(builders.command(name='set', arguments=['-u']))
        assert session.to_source() == 'set -e\nset -u\necho a'

    def test_insert_after_last(self, b: Callable[[str], Session]) -> None:
        session = b('echo a')
        session.find('Command')[0].insert_after(builders.command(name='exit', arguments=['0']))
        assert session.to_source() == 'echo a\nexit 0'

    def test_insert_inside_function(self, b: Callable[[str], Session]) -> None:
        session = b('build() {\n  make\n}')
        session.find('Command', {'name': 'make'})[0].insert_before(builders.command(name='set', arguments=['-e']))
        (function,) = session.find('Function').nodes()
        assert isinstance(function, Function)
        assert [node.name for node in function.body] == ['set', 'make']  # type: ignore[union-attr]


class TestRemove:
    """Verify remove and its alias prune."""

    def test_removed_node_is_gone_from_fresh_find(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\nrm x\necho b')
        session.find('Command', {'name': 'rm'})[0].remove()
        assert session.find('Command', {'name': 'rm'}).size() == 0
        assert session.to_source() == 'echo a\necho b'

    def test_prune(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\necho b')
        session.find('Command')[0].prune()
        assert _names(session) == ['echo']
        assert session.size() == 1

    def test_remove_pipeline_stage(self, b: Callable[[str], Session]) -> None:
        session = b('cat log | grep -v debug | sort')
        session.find('Command', {'name': 'grep'})[0].remove()
        assert session.to_source() == 'cat log | sort'

    def test_remove_redirect(self, b: Callable[[str], Session]) -> None:
        session = b('make > build.log')
        session.find('Redirect')[0].remove()
        assert session.find('Command').nodes()[0].redirects == []  # type: ignore[attr-defined]
        assert session.to_source() == 'make'


class TestNoOps:
    """Verify unaddressable mutations are ignored."""

    def test_root_path(self, b: Callable[[str], Session]) -> None:
        session = b('echo a')
        (root,) = session.find('Program')
        root.remove()
        root.insert_before(builders.command(name='x'))
        root.insert_after(builders.command(name='x'))
        root.replace(builders.command(name='x'))
        assert session.to_source() == 'echo a'
        assert root.value is session.root

    def test_out_of_range(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\necho b')
        last = session.find('Command')[1]
        session.find('Command')[0].remove()
        session.find('Command')[0].remove()
        last.remove()
        assert session.size() == 0

    def test_vanished_parent(self, b: Callable[[str], Session]) -> None:
        session = b('f() {\n  echo a\n}')
        inner = session.find('Command')[0]
        session.find('Function')[0].remove()
        inner.remove()
        assert session.root.body == []


class TestStalePaths:
    """Paths are not re-validated after a structural edit to their parent."""

    def test_path_after_sibling_removal_addresses_next_node(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\necho b\necho c')
        paths = session.find('Command')
        paths[0].remove()
        paths[1].remove()  # recorded at index 1, which now holds `echo c`
        assert [node.arguments for node in session.find('Command').nodes()] == [['b']]  # type: ignore[attr-defined]

    def test_value_is_not_updated_by_sibling_edits(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\necho b')
        paths = session.find('Command')
        paths[0].insert_before(builders.command(name='set', arguments=['-e']))
        assert paths[1].value.arguments == ['b']  # type: ignore[attr-defined]
        assert session.root.body[1] is paths[0].value

    def test_last_first_iteration_is_safe(self, b: Callable[[str], Session]) -> None:
        session = b('docker ps\necho x\ndocker run img')
        for path in reversed(session.find('Command', {'name': 'docker'})):
            path.insert_before(builders.command(name='echo', arguments=['next']))
        assert session.to_source() == 'echo next\ndocker ps\necho x\necho next\ndocker run img'

    def test_fresh_find_after_edit(self, b: Callable[[str], Session]) -> None:
        session = b('echo a\necho b\necho c')
        session.find('Command')[0].remove()
        session.find('Command')[1].remove()
        assert [node.arguments for node in session.find('Command').nodes()] == [['b']]  # type: ignore[attr-defined]

    def test_nodes_edited_in_place_need_no_path(self, b: Callable[[str], Session]) -> None:
        session = b('docker run img')
        command = session.find('Command')[0].value
        assert isinstance(command, Command)
        command.arguments.insert(1, '--rm')
        assert session.to_source() == 'docker run --rm img'
