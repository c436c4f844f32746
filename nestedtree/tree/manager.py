"""
Interval Tree Manager for nestedtree
Places, inserts and relocates nodes of a nested-set tree by renumbering intervals
"""

import logging
from typing import Any, List, Optional

from nestedtree.core.config import TreeConfig, get_config
from nestedtree.core.errors import (
    DetachedReferenceError,
    IllegalRelocationError,
    InvalidOperationError,
)
from nestedtree.core.models import RelocationPlan, ShiftStep, TreeStatistics
from nestedtree.tree.integrity import check_integrity
from nestedtree.tree.node import TreeNode, is_descendant_of, width
from nestedtree.tree.storage import RangePredicate, TreeStore


class IntervalTreeManager:
    """
    Sole writer of left/right values for the nodes of one store

    Every mutation is expressed as bulk shifts against the store followed by
    writing the new node's own interval. Preconditions are validated before
    the first shift, so a rejected call leaves the tree untouched.
    """

    GAP_SIZE = 2

    def __init__(self, store: TreeStore, config: Optional[TreeConfig] = None):
        """
        Initialize the tree manager

        Args:
            store: Storage the tree lives in
            config: Manager configuration, the global configuration when omitted
        """
        self.store = store
        self.config = config or get_config()
        self.statistics = TreeStatistics()

        logging.info(
            f"IntervalTreeManager initialized (prefer_minimal_shift={self.config.prefer_minimal_shift})"
        )

    # --- Shift primitives ---

    def _shift(self, offset: int, start: Optional[int] = None, end: Optional[int] = None) -> int:
        """
        Add offset to every left in [start, end), then to every right in [start, end).

        Left and right are separate bulk updates: a node whose interval straddles
        a bound has only one of its endpoints moved.

        Returns:
            Number of endpoints changed
        """
        left = RangePredicate("left", start, end)
        right = RangePredicate("right", start, end)
        touched = self.store.bulk_update(left, offset)
        touched += self.store.bulk_update(right, offset)
        self.statistics.shift_calls += 1
        return touched

    def _apply(self, step: ShiftStep) -> int:
        if step.is_noop:
            logging.debug(f"Skipping empty shift {step}")
            return 0
        return self._shift(step.offset, step.start, step.end)

    def _shift_from_position(self, position: int, gap_size: int) -> int:
        """
        Open a gap of gap_size integers at position.

        Pushes whichever side of position holds fewer endpoints: everything
        below backward, or everything at or above forward.

        Returns:
            The first integer of the opened gap
        """
        if self.config.prefer_minimal_shift:
            below = position - self.store.min_left()
            above = self.store.max_right() - position
            if below <= above:
                self._shift(-gap_size, None, position)
                return position - gap_size

        self._shift(gap_size, position, None)
        return position

    # --- Validation ---

    def _require_attached(self, node: Any, role: str) -> None:
        if node is None or not self.store.is_attached(node):
            self.statistics.rejected_operations += 1
            logging.error(f"Rejected tree operation: {role} node has not been added yet")
            raise DetachedReferenceError(role)

    def _require_new(self, entity: Any) -> None:
        if self.store.is_attached(entity):
            self.statistics.rejected_operations += 1
            logging.error(f"Rejected tree operation: {entity!r} is already in the tree")
            raise InvalidOperationError(f"{entity!r} is already part of the tree.")

    def _require_outside(self, source: Any, other: Any, role: str) -> None:
        if other is source or is_descendant_of(other, source):
            self.statistics.rejected_operations += 1
            logging.error(f"Rejected move: {role} {other!r} lies inside {source!r}")
            raise IllegalRelocationError("Can not move a node under itself or one of its descendants.")

    # --- Mutations ---

    def add_child(self, entity: Any, parent: Optional[Any] = None) -> Any:
        """
        Add an entity as the last child of parent.

        Args:
            entity: New node, not yet known to the store
            parent: Attached node to place entity beneath. None appends
                    entity after the last root.

        Returns:
            The entity, with its interval assigned and staged in the store
        """
        self._require_new(entity)
        if parent is not None:
            self._require_attached(parent, "parent")

        with self.store.transaction():
            if parent is not None:
                position = self._shift_from_position(parent.right, self.GAP_SIZE)
            else:
                position = self.store.max_right() + 1
            entity.left = position
            entity.right = position + 1
            self.store.add(entity)

        self.statistics.nodes_added += 1
        logging.info(f"Added {entity!r} under {parent!r}")
        return entity

    def insert_before(self, entity: Any, sibling: Any) -> Any:
        """
        Insert an entity immediately before sibling, under the same parent.

        Args:
            entity: New node, not yet known to the store
            sibling: Attached node that entity will precede

        Returns:
            The entity, with its interval assigned and staged in the store
        """
        self._require_new(entity)
        self._require_attached(sibling, "sibling")

        with self.store.transaction():
            position = self._shift_from_position(sibling.left, self.GAP_SIZE)
            entity.left = position
            entity.right = position + 1
            self.store.add(entity)

        self.statistics.nodes_added += 1
        logging.info(f"Inserted {entity!r} before {sibling!r}")
        return entity

    def plan_relocation(self, source: TreeNode, boundary: int) -> RelocationPlan:
        """
        Compute the three shifts that move source's subtree to land against boundary.

        Boundary is the endpoint the subtree must end up immediately before:
        target.right to become target's last child, sibling.left to precede
        sibling, max_right + 1 to become the last root.

        The subtree is first parked below the lowest endpoint of the store.
        The nodes between its old place and the boundary then slide by its
        width, towards the hole when the boundary lies after the subtree and
        away from the boundary when it lies before. Finally the parked subtree
        is moved into the gap that opened in front of the boundary.
        """
        span = width(source)
        after = source.right + 1
        low = self.store.min_left()

        if boundary > source.right:
            close = ShiftStep(offset=-span, start=after, end=boundary)
            landing = boundary - span
        elif boundary <= source.left:
            close = ShiftStep(offset=span, start=boundary, end=source.left)
            landing = boundary
        else:
            raise IllegalRelocationError(f"Boundary {boundary} lies inside the subtree being moved.")

        parked = low - span
        return RelocationPlan(
            evacuate=ShiftStep(offset=parked - source.left, start=source.left, end=after),
            close=close,
            reinsert=ShiftStep(offset=landing - parked, start=parked, end=low),
            landing_left=landing,
            width=span
        )

    def _relocate(self, source: Any, boundary: int) -> Any:
        plan = self.plan_relocation(source, boundary)
        with self.store.transaction():
            for step in plan.steps:
                self._apply(step)

        self.statistics.subtrees_moved += 1
        return source

    def move(self, source: Any, target: Optional[Any] = None) -> Any:
        """
        Move the subtree rooted at source to become the last child of target.

        Args:
            source: Attached root of the subtree to move
            target: Attached new parent. None moves the subtree to the end of
                    the root level.

        Returns:
            The source node

        Raises:
            DetachedReferenceError: source or target is not in the store
            IllegalRelocationError: target is source or one of its descendants
        """
        self._require_attached(source, "source")
        if target is not None:
            self._require_attached(target, "target")
            self._require_outside(source, target, "target")
            boundary = target.right
        else:
            boundary = self.store.max_right() + 1

        self._relocate(source, boundary)
        logging.info(f"Moved {source!r} under {target!r}")
        return source

    def move_before(self, source: Any, sibling: Any) -> Any:
        """
        Move the subtree rooted at source to sit immediately before sibling.

        Args:
            source: Attached root of the subtree to move
            sibling: Attached node source will precede, under sibling's parent

        Returns:
            The source node
        """
        self._require_attached(source, "source")
        self._require_attached(sibling, "sibling")
        self._require_outside(source, sibling, "sibling")

        self._relocate(source, sibling.left)
        logging.info(f"Moved {source!r} before {sibling!r}")
        return source

    # --- Queries ---

    def descendants(self, node: TreeNode) -> List[Any]:
        """Every node strictly inside node's interval, ordered by left"""
        inside = RangePredicate("left", node.left + 1, node.right)
        closes_inside = RangePredicate("right", node.left + 1, node.right)
        return self.store.range_query(inside, closes_inside)

    def children(self, node: TreeNode) -> List[Any]:
        """Immediate children of node in sibling order"""
        return self.store.chain_from(node.left + 1, node.right)

    def ancestors(self, node: TreeNode) -> List[Any]:
        """Nodes containing node, outermost first"""
        opens_before = RangePredicate("left", None, node.left)
        closes_after = RangePredicate("right", node.right + 1, None)
        return self.store.range_query(opens_before, closes_after)

    def parent(self, node: TreeNode) -> Optional[Any]:
        ancestors = self.ancestors(node)
        return ancestors[-1] if ancestors else None

    def depth(self, node: TreeNode) -> int:
        return len(self.ancestors(node))

    def roots(self) -> List[Any]:
        """Root-level nodes in order"""
        if not self.store.all_nodes():
            return []
        return self.store.chain_from(self.store.min_left())

    def check_integrity(self) -> None:
        """Raise TreeIntegrityError if the stored intervals break the nested-set rules"""
        check_integrity(self.store.all_nodes())

    def get_statistics(self) -> TreeStatistics:
        return self.statistics.model_copy()

    def reset_statistics(self) -> TreeStatistics:
        """Zero the counters and return the values they held"""
        previous = self.get_statistics()
        self.statistics.reset()
        logging.info(f"Tree statistics reset after {previous.nodes_added} adds and {previous.subtrees_moved} moves")
        return previous
