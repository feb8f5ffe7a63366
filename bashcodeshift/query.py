"""Query and path-addressed mutation over a node tree.

``find`` walks the tree in document order and returns a ``Collection`` of
``NodePath`` handles. Each handle records how to reach its node from the
root as a sequence of ``(field, index)`` steps, so it can replace, remove or
insert siblings next to the node it was found at.

Paths are resolved against the live tree at mutation time, not re-validated.
After a structural edit (insert or remove) earlier in the same sequence, a
path collected before the edit may address a different node, or nothing;
re-run ``find`` after structural edits. An unresolvable path is a no-op.
"""

from __future__ import annotations

__all__ = [
    'FIELD_COMPARATORS',
    'Collection',
    'NodePath',
    'Path',
    'PathStep',
    'find',
    'matches',
    'walk',
]

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar, overload

from bashcodeshift.nodes import BaseNode

logger = logging.getLogger(__name__)

_T = TypeVar('_T')

type Comparator = Callable[[Any, Any], bool]
type Filter = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class PathStep:
    """One hop from a parent to a child: ``parent.<field>[index]``."""

    node: BaseNode  # the parent as it was when the path was recorded
    field: str
    index: int


type Path = tuple[PathStep, ...]


def _sequence_equal(actual: Any, expected: Any) -> bool:
    if actual is None or expected is None:
        return actual is expected
    # A string is a Sequence too, but never a list of words.
    if isinstance(expected, str) or not isinstance(expected, Sequence):
        return False
    return list(actual) == list(expected)


# Per-kind overrides of plain equality for filter matching.
FIELD_COMPARATORS: Mapping[str, Mapping[str, Comparator]] = {
    'Command': {'arguments': _sequence_equal},
    'Function': {'parameters': _sequence_equal},
}

_MISSING = object()


def walk(root: BaseNode) -> Iterator[tuple[BaseNode, Path]]:
    """Pre-order traversal along ``child_fields``, yielding each node with its path."""
    stack: list[tuple[BaseNode, Path]] = [(root, ())]
    while stack:
        node, path = stack.pop()
        yield node, path
        children: list[tuple[BaseNode, Path]] = []
        for field in node.child_fields:
            for index, child in enumerate(getattr(node, field, None) or ()):
                if isinstance(child, BaseNode):
                    children.append((child, (*path, PathStep(node, field, index))))
        stack.extend(reversed(children))


def matches(node: BaseNode, filter: Filter | None) -> bool:
    """True if every filter entry equals the node's field of the same name."""
    if not filter:
        return True
    comparators = FIELD_COMPARATORS.get(type(node).__name__, {})
    for name, expected in filter.items():
        actual = getattr(node, name, _MISSING)
        if actual is _MISSING:
            return False
        compare = comparators.get(name)
        if compare is not None:
            if not compare(actual, expected):
                return False
        elif actual != expected:
            return False
    return True


def find(root: BaseNode, kind: str | type[BaseNode], filter: Filter | None = None) -> Collection:
    """All nodes of ``kind`` under ``root`` (root included) matching ``filter``, in document order."""
    kind_name = kind if isinstance(kind, str) else kind.__name__
    return Collection(
        NodePath(node, path, root)
        for node, path in walk(root)
        if getattr(node, 'type', None) == kind_name and matches(node, filter)
    )


class NodePath:
    """A node plus the route to it from the root it was found under.

    ``value`` is the node itself; transforms edit its fields in place or use
    the structural operations below.
    """

    __slots__ = ('path', 'root', 'value')

    def __init__(self, value: BaseNode, path: Path, root: BaseNode) -> None:
        self.value = value
        self.path = path
        self.root = root

    @property
    def node(self) -> BaseNode:
        return self.value

    def __repr__(self) -> str:
        route = '.'.join(f'{step.field}[{step.index}]' for step in self.path) or '<root>'
        return f'NodePath({type(self.value).__name__} at {route})'

    def replace(self, node: BaseNode) -> None:
        """Put ``node`` where this path points. ``value`` follows the replacement."""
        resolved = self._resolve()
        if resolved is None:
            return
        siblings, index = resolved
        siblings[index] = node
        self.value = node

    def insert_before(self, node: BaseNode) -> None:
        resolved = self._resolve()
        if resolved is not None:
            siblings, index = resolved
            siblings.insert(index, node)

    def insert_after(self, node: BaseNode) -> None:
        resolved = self._resolve()
        if resolved is not None:
            siblings, index = resolved
            siblings.insert(index + 1, node)

    def remove(self) -> None:
        resolved = self._resolve()
        if resolved is not None:
            siblings, index = resolved
            del siblings[index]

    prune = remove

    def _resolve(self) -> tuple[list[Any], int] | None:
        """The live sibling list holding this path's target, and the target's index in it."""
        if not self.path:
            logger.debug('[QUERY] %r has no parent, ignoring mutation', self)
            return None

        parent: Any = self.root
        for step in self.path[:-1]:
            children = getattr(parent, step.field, None)
            if not isinstance(children, list) or not 0 <= step.index < len(children):
                logger.debug('[QUERY] %r no longer resolves, ignoring mutation', self)
                return None
            parent = children[step.index]

        last = self.path[-1]
        siblings = getattr(parent, last.field, None)
        if not isinstance(siblings, list) or not 0 <= last.index < len(siblings):
            logger.debug('[QUERY] %r no longer resolves, ignoring mutation', self)
            return None
        return siblings, last.index


class Collection(Sequence[NodePath]):
    """Ordered, chainable result of a query."""

    __slots__ = ('_paths',)

    def __init__(self, paths: Iterator[NodePath] | Sequence[NodePath] = ()) -> None:
        self._paths: tuple[NodePath, ...] = tuple(paths)

    @overload
    def __getitem__(self, index: int) -> NodePath: ...

    @overload
    def __getitem__(self, index: slice) -> Collection: ...

    def __getitem__(self, index: int | slice) -> NodePath | Collection:
        if isinstance(index, slice):
            return Collection(self._paths[index])
        return self._paths[index]

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f'Collection({list(self._paths)!r})'

    def filter(self, predicate: Callable[[NodePath], bool]) -> Collection:
        return Collection(path for path in self._paths if predicate(path))

    def for_each(self, callback: Callable[[NodePath], object]) -> Collection:
        """Call ``callback`` on every path in order; returns this collection for chaining."""
        for path in self._paths:
            callback(path)
        return self

    def map(self, callback: Callable[[NodePath], _T]) -> list[_T]:
        return [callback(path) for path in self._paths]

    def size(self) -> int:
        return len(self._paths)

    def nodes(self) -> list[BaseNode]:
        return [path.value for path in self._paths]
