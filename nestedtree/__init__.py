"""
nestedtree Package

Nested-set (left/right interval) trees kept in flat, ordered storage.

Main modules:
- tree: interval tree manager, node contract, in-memory and SQLAlchemy stores
- core: configuration, errors and data models
- logging_config: shared logging setup

Usage:
    from nestedtree import IntervalTreeManager, MemoryTreeStore, TreeItem

    manager = IntervalTreeManager(MemoryTreeStore())
    electronics = manager.add_child(TreeItem("Electronics"))
    manager.add_child(TreeItem("Laptops"), electronics)
"""

from nestedtree.core import (
    get_config,
    TreeConfig,
    StoreConfig,
    TreeError,
    InvalidOperationError,
    DetachedReferenceError,
    IllegalRelocationError,
    MalformedShiftRequestError,
    TreeIntegrityError,
)
from nestedtree.tree import (
    IntervalTreeManager,
    MemoryTreeStore,
    SqlAlchemyTreeStore,
    NestedSetMixin,
    TreeItem,
    TreeNode,
)
from nestedtree.logging_config import setup_logging

__version__ = "0.1.0"
