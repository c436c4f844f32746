"""
Node contract for nested-set trees

Any object exposing integer `left` and `right` attributes can live in a tree.
Relationships are derived from the interval pair alone.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class TreeNode(Protocol):
    """Structural type every tree entity satisfies"""
    left: int
    right: int


@dataclass(eq=False)
class TreeItem:
    """
    Plain in-memory tree entity

    Compared by identity so that two items with the same name are still
    distinct nodes.
    """
    name: str
    left: int = 0
    right: int = 0
    data: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"TreeItem({self.name!r}, {self.left}, {self.right})"


def width(node: TreeNode) -> int:
    """Number of integers the node's subtree occupies"""
    return node.right - node.left + 1


def descendant_count(node: TreeNode) -> int:
    """Number of nodes strictly below the node"""
    return (node.right - node.left - 1) // 2


def has_children(node: TreeNode) -> bool:
    return node.right - node.left > 1


def is_child_of(node: TreeNode, parent: TreeNode) -> bool:
    """
    True when the node's interval lies strictly inside the parent's.

    Holds for every descendant, not only the immediate children.
    """
    return parent.left < node.left and node.right < parent.right


def is_descendant_of(node: TreeNode, ancestor: Optional[TreeNode]) -> bool:
    if ancestor is None:
        return False
    return is_child_of(node, ancestor)
