"""Forest construction from flat records carrying parent pointers.

The same builder serves both hierarchies:

- Designation tree: key = ``title``, parent = ``reports_to`` (a title).
- Staff tree: key = ``id``, parent = ``reports_to`` (a staff id).

Root rule: a record is a root when its parent pointer is absent or does not
resolve to any record in the active list. Records whose manager or parent
role was filtered out upstream therefore become roots instead of vanishing.

Children are found by rescanning the active list for each placed node, in
source order. The walk is iterative and bounded; records that no root can
reach sit on (or hang below) a parent cycle and are reported as an error.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import networkx as nx

from orgtree.domain.titles import title_key

T = TypeVar("T")

DEFAULT_MAX_DEPTH = 256


class HierarchyError(Exception):
    """Base class for malformed hierarchy input."""


class HierarchyCycleError(HierarchyError):
    """Raised when parent pointers form a cycle.

    Attributes:
        unplaced: Keys of every record that no root could reach.
        cycle: One concrete cycle as a key path (first key repeated last).
    """

    def __init__(self, unplaced: list[str | None], cycle: list[str | None]) -> None:
        self.unplaced = unplaced
        self.cycle = cycle
        path = " -> ".join(str(k) for k in cycle) if cycle else "unknown"
        super().__init__(f"Parent cycle detected: {path}")


class HierarchyDepthError(HierarchyError):
    """Raised when a branch is deeper than the configured bound."""

    def __init__(self, max_depth: int, key: str | None) -> None:
        self.max_depth = max_depth
        self.key = key
        super().__init__(f"Hierarchy deeper than {max_depth} levels at {key!r}")


@dataclass
class ForestNode(Generic[T]):
    """One placed record. ``parent`` and ``children`` are arena indices."""

    index: int
    key: str | None
    item: T
    parent: int | None
    depth: int
    children: list[int] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent is None


@dataclass
class Forest(Generic[T]):
    """Arena of placed nodes. Arena order is pre-order, roots in source order."""

    nodes: list[ForestNode[T]] = field(default_factory=list)
    roots: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def _add(self, key: str | None, item: T, parent: int | None, depth: int) -> int:
        index = len(self.nodes)
        self.nodes.append(ForestNode(index=index, key=key, item=item, parent=parent, depth=depth))
        if parent is None:
            self.roots.append(index)
        else:
            self.nodes[parent].children.append(index)
        return index

    def root_nodes(self) -> list[ForestNode[T]]:
        return [self.nodes[i] for i in self.roots]

    def children_of(self, index: int) -> list[ForestNode[T]]:
        """Direct children of the node at *index*, in source order."""
        return [self.nodes[i] for i in self.nodes[index].children]

    def find(self, key: str | None) -> ForestNode[T] | None:
        """First node whose normalized key equals *key*."""
        for node in self.nodes:
            if key is not None and node.key == key:
                return node
        return None

    def walk(self) -> Iterator[ForestNode[T]]:
        """Iterate nodes depth-first, pre-order."""
        return iter(self.nodes)

    def to_dicts(self, render: Callable[[T], dict[str, Any]]) -> list[dict[str, Any]]:
        """Nested ``{..., "children": [...]}`` dicts, one per root."""
        rendered: list[dict[str, Any]] = []
        for node in self.nodes:
            entry = render(node.item)
            entry["depth"] = node.depth
            entry["children"] = []
            rendered.append(entry)
            if node.parent is not None:
                rendered[node.parent]["children"].append(entry)
        return [rendered[i] for i in self.roots]


def build_forest(
    items: Iterable[T],
    *,
    key: Callable[[T], str | None],
    parent: Callable[[T], str | None],
    normalize: Callable[[str | None], str | None] = title_key,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Forest[T]:
    """Build a forest over *items*.

    Args:
        items: The active list. Source order is preserved within each level.
        key: Identity of a record (title or id).
        parent: Parent pointer of a record, matched against other keys.
        normalize: Applied to both keys and parent pointers before matching.
        max_depth: Deepest level allowed below a root.

    Raises:
        HierarchyCycleError: Some records are unreachable from every root.
        HierarchyDepthError: A branch exceeds *max_depth*.
    """
    active: Sequence[T] = list(items)
    keys = [normalize(key(item)) for item in active]
    parents = [normalize(parent(item)) for item in active]
    present = {k for k in keys if k is not None}

    def is_root(pos: int) -> bool:
        ref = parents[pos]
        return ref is None or ref not in present

    def children_of(pos: int) -> list[int]:
        own = keys[pos]
        if own is None:
            return []
        return [j for j, ref in enumerate(parents) if ref == own]

    forest: Forest[T] = Forest()
    placed: dict[int, int] = {}

    for pos in range(len(active)):
        if not is_root(pos):
            continue
        stack: list[tuple[int, int | None, int]] = [(pos, None, 0)]
        while stack:
            current, parent_index, depth = stack.pop()
            # Duplicate titles can offer one record to two parents; first placement wins.
            if current in placed:
                continue
            if depth > max_depth:
                raise HierarchyDepthError(max_depth, keys[current])
            index = forest._add(keys[current], active[current], parent_index, depth)
            placed[current] = index
            for child in reversed(children_of(current)):
                if child not in placed:
                    stack.append((child, index, depth + 1))

    if len(placed) < len(active):
        unplaced = [pos for pos in range(len(active)) if pos not in placed]
        raise HierarchyCycleError(
            unplaced=[keys[pos] for pos in unplaced],
            cycle=_find_cycle(unplaced[0], keys, parents),
        )
    return forest


def _find_cycle(start: int, keys: list[str | None], parents: list[str | None]) -> list[str | None]:
    """Follow parent edges from *start* until a cycle closes."""
    g: nx.DiGraph[int] = nx.DiGraph()
    for pos, ref in enumerate(parents):
        if ref is None:
            continue
        for target, own in enumerate(keys):
            if own == ref:
                g.add_edge(pos, target)
    try:
        edges = nx.find_cycle(g, source=start)
    except nx.NetworkXNoCycle:
        return []
    path = [keys[u] for u, _ in edges]
    path.append(keys[edges[0][0]])
    return path
