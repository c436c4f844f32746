"""
Tree Storage for nestedtree
Abstract ordered-range store plus the in-memory implementation
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from nestedtree.core.errors import MalformedShiftRequestError
from nestedtree.tree.node import TreeNode

FIELDS = ("left", "right")


@dataclass(frozen=True)
class RangePredicate:
    """
    Half-open range test `start <= node.<field> < end` on one interval endpoint

    A bound of None leaves that side open. At least one bound is required.
    """
    field: str
    start: Optional[int] = None
    end: Optional[int] = None

    def __post_init__(self) -> None:
        if self.field not in FIELDS:
            raise ValueError(f"field must be one of {FIELDS}, got {self.field!r}")
        if self.start is None and self.end is None:
            raise MalformedShiftRequestError("Both start and end bounds could not be None.")

    def matches(self, node: TreeNode) -> bool:
        value = getattr(node, self.field)
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value >= self.end:
            return False
        return True

    def describe(self) -> str:
        low = "-inf" if self.start is None else str(self.start)
        high = "+inf" if self.end is None else str(self.end)
        return f"{self.field} in [{low}, {high})"


class TreeStore(ABC):
    """
    Abstract base class for nested-set storage backends.

    Implementations keep two tiers in step: durable rows and nodes that were
    added but not committed yet. Every method below sees both tiers.
    """

    @abstractmethod
    def all_nodes(self) -> List[Any]:
        """Every node, durable and staged, in no particular order."""
        pass

    @abstractmethod
    def range_query(self, *predicates: RangePredicate) -> List[Any]:
        """Nodes matching every predicate, ordered by left."""
        pass

    @abstractmethod
    def bulk_update(self, predicate: RangePredicate, delta: int) -> int:
        """Add delta to predicate.field of every matching node. Returns the match count."""
        pass

    @abstractmethod
    def add(self, node: Any) -> None:
        """Stage a new node for persistence."""
        pass

    @abstractmethod
    def is_attached(self, node: Any) -> bool:
        """True when the store already tracks the node, staged or durable."""
        pass

    @abstractmethod
    def min_left(self) -> int:
        """Lowest left value, 0 for an empty store."""
        pass

    @abstractmethod
    def max_right(self) -> int:
        """Highest right value, 0 for an empty store."""
        pass

    @abstractmethod
    def find_by_left(self, left: int) -> Optional[Any]:
        """The node whose left equals the given value, if any."""
        pass

    @abstractmethod
    def transaction(self):
        """Context manager grouping the shifts of one logical mutation."""
        pass

    @abstractmethod
    def commit(self) -> None:
        """Make every staged node durable."""
        pass

    def chain_from(self, left: int, upper: Optional[int] = None) -> List[Any]:
        """
        Walk a contiguous sibling chain.

        Starts at the node whose left equals `left` and follows `right + 1`
        until no node starts there or the chain reaches `upper`.
        """
        chain = []
        node = self.find_by_left(left)
        while node is not None and (upper is None or node.right < upper):
            chain.append(node)
            node = self.find_by_left(node.right + 1)
        return chain


class MemoryTreeStore(TreeStore):
    """
    In-memory tree store

    Nodes passed to the constructor are treated as already durable.
    """

    def __init__(self, nodes: Optional[Iterable[Any]] = None):
        self._durable: List[Any] = list(nodes or [])
        self._staged: List[Any] = []

        # Statistics
        self.statistics = {
            "total_nodes_committed": 0,
            "total_bulk_updates": 0,
            "total_rows_shifted": 0,
            "rolled_back_transactions": 0
        }

        logging.info(f"MemoryTreeStore initialized with {len(self._durable)} nodes")

    @property
    def staged(self) -> List[Any]:
        return list(self._staged)

    def _tiers(self) -> Iterator[Any]:
        yield from self._durable
        yield from self._staged

    def all_nodes(self) -> List[Any]:
        return list(self._tiers())

    def range_query(self, *predicates: RangePredicate) -> List[Any]:
        matches = [n for n in self._tiers() if all(p.matches(n) for p in predicates)]
        return sorted(matches, key=lambda n: n.left)

    def bulk_update(self, predicate: RangePredicate, delta: int) -> int:
        # Select before writing so a node is never matched twice
        matched = [n for n in self._tiers() if predicate.matches(n)]
        for node in matched:
            setattr(node, predicate.field, getattr(node, predicate.field) + delta)

        self.statistics["total_bulk_updates"] += 1
        self.statistics["total_rows_shifted"] += len(matched)
        logging.debug(f"Shifted {len(matched)} nodes where {predicate.describe()} by {delta}")
        return len(matched)

    def add(self, node: Any) -> None:
        self._staged.append(node)

    def is_attached(self, node: Any) -> bool:
        return any(n is node for n in self._tiers())

    def min_left(self) -> int:
        return min((n.left for n in self._tiers()), default=0)

    def max_right(self) -> int:
        return max((n.right for n in self._tiers()), default=0)

    def find_by_left(self, left: int) -> Optional[Any]:
        for node in self._tiers():
            if node.left == left:
                return node
        return None

    def _snapshot(self) -> Tuple[Dict[int, Tuple[Any, int, int]], int]:
        return {id(n): (n, n.left, n.right) for n in self._tiers()}, len(self._staged)

    def _restore(self, snapshot: Tuple[Dict[int, Tuple[Any, int, int]], int]) -> None:
        intervals, staged_count = snapshot
        for node, left, right in intervals.values():
            node.left = left
            node.right = right
        del self._staged[staged_count:]

    @contextmanager
    def transaction(self):
        snapshot = self._snapshot()
        try:
            yield self
        except Exception:
            self._restore(snapshot)
            self.statistics["rolled_back_transactions"] += 1
            logging.warning("Tree transaction rolled back, intervals restored")
            raise

    def commit(self) -> None:
        committed = len(self._staged)
        self._durable.extend(self._staged)
        self._staged.clear()
        self.statistics["total_nodes_committed"] += committed
        logging.info(f"Committed {committed} staged nodes")
