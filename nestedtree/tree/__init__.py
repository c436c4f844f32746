"""
nestedtree Tree Module
Provides the interval tree manager, the node contract and storage backends
"""

from .node import TreeNode, TreeItem, has_children, is_child_of, is_descendant_of, width, descendant_count
from .storage import RangePredicate, TreeStore, MemoryTreeStore
from .sql_storage import NestedSetMixin, SqlAlchemyTreeStore, create_session_factory
from .integrity import check_integrity, collect_violations
from .manager import IntervalTreeManager

__all__ = [
    'TreeNode',
    'TreeItem',
    'has_children',
    'is_child_of',
    'is_descendant_of',
    'width',
    'descendant_count',
    'RangePredicate',
    'TreeStore',
    'MemoryTreeStore',
    'NestedSetMixin',
    'SqlAlchemyTreeStore',
    'create_session_factory',
    'check_integrity',
    'collect_violations',
    'IntervalTreeManager',
]
