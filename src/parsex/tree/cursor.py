"""Resumable pre-order traversal over a node stack."""

from typing import TYPE_CHECKING, FrozenSet, Iterable, Iterator, Optional

if TYPE_CHECKING:
    from .stack import NodeStack

ROOT_ID = 0


class TraversalCursor:
    """Iterative pre-order walk over the parent -> children adjacency.

    Each call to ``advance`` produces the next node id: the first child of
    the current position if it has one, otherwise the next sibling of the
    closest ancestor (or of the position itself) that has one. The walk never
    rises above ``scope_root``, and ids listed in ``excludes`` are treated as
    absent, which hides their whole subtree.

    Every query and render creates its own cursor, so two traversals over the
    same stack never share a position.
    """

    def __init__(
        self,
        stack: "NodeStack",
        scope_root: int = ROOT_ID,
        excludes: Iterable[int] = ()
    ) -> None:
        self.stack = stack
        self.scope_root = scope_root
        self.excludes: FrozenSet[int] = frozenset(excludes)
        self.reset()

    def reset(self) -> None:
        """Restart the walk from before the first node."""
        self.position = ROOT_ID
        self._exhausted = (
            not self.stack.exists(self.scope_root)
            or self.scope_root in self.excludes
        )

    def advance(self) -> Optional[int]:
        """Move to the next node in pre-order.

        Returns:
            The new position, or None once the scope is exhausted
        """
        if self._exhausted:
            return None

        if self.position == ROOT_ID:
            next_id = self.stack.first_child(self.scope_root, self.excludes)
        else:
            next_id = self._step()

        if next_id is None:
            self._exhausted = True
            return None
        self.position = next_id
        return next_id

    def _step(self) -> Optional[int]:
        # Descend first
        child_id = self.stack.first_child(self.position, self.excludes)
        if child_id is not None:
            return child_id

        # Then climb until an ancestor has a following sibling
        current = self.position
        while current != self.scope_root and current != ROOT_ID:
            sibling_id = self.stack.next_sibling(current, self.excludes)
            if sibling_id is not None:
                return sibling_id
            current = self.stack.parent_of(current)
        return None

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        next_id = self.advance()
        if next_id is None:
            raise StopIteration
        return next_id
