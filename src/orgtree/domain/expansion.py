"""Expanded/collapsed bookkeeping for forest nodes.

Pure state: which node ids a viewer has expanded. No layout concerns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from orgtree.domain.forest import Forest


class ExpansionState:
    """Set of expanded node ids. Unknown ids are collapsed."""

    def __init__(self, expanded: Iterable[str] = ()) -> None:
        self._expanded: set[str] = set(expanded)

    @property
    def expanded(self) -> frozenset[str]:
        return frozenset(self._expanded)

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    def expand(self, node_id: str) -> None:
        self._expanded.add(node_id)

    def collapse(self, node_id: str) -> None:
        self._expanded.discard(node_id)

    def toggle(self, node_id: str) -> bool:
        """Flip *node_id* and return its new state."""
        if node_id in self._expanded:
            self._expanded.remove(node_id)
            return False
        self._expanded.add(node_id)
        return True

    def expand_all(self, forest: Forest[Any], *, node_id: Any = None) -> None:
        """Expand every node that has children.

        *node_id* maps a forest item to the id tracked here; defaults to the
        item's ``id`` attribute.
        """
        get_id = node_id or (lambda item: item.id)
        for node in forest.walk():
            if node.children:
                self._expanded.add(get_id(node.item))

    def collapse_all(self) -> None:
        self._expanded.clear()

    def prune(self, forest: Forest[Any], *, node_id: Any = None) -> None:
        """Forget ids that are no longer present in *forest*."""
        get_id = node_id or (lambda item: item.id)
        live = {get_id(node.item) for node in forest.walk()}
        self._expanded &= live
