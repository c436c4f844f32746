"""
Integrity checks for nested-set numbering
"""

from collections import Counter
from typing import Iterable, List

from nestedtree.core.errors import TreeIntegrityError
from nestedtree.tree.node import TreeNode


def collect_violations(nodes: Iterable[TreeNode]) -> List[str]:
    """
    Describe every way a node set breaks the nested-set rules.

    Checks that each interval is well formed, that no endpoint is used twice,
    that intervals nest without partial overlap and that the endpoints form
    one gap-free run of integers. Together these imply that children and roots
    are packed contiguously and that leaves are exactly one wide.
    """
    nodes = list(nodes)
    violations = []

    endpoints = []
    for node in nodes:
        if node.right <= node.left:
            violations.append(f"{node!r}: right must be greater than left")
        endpoints.extend((node.left, node.right))

    counts = Counter(endpoints)
    duplicates = sorted(value for value, count in counts.items() if count > 1)
    if duplicates:
        violations.append(f"endpoints used more than once: {duplicates}")
    elif endpoints:
        low = min(endpoints)
        missing = sorted(set(range(low, low + len(endpoints))) - set(counts))
        if missing:
            violations.append(f"numbering has gaps at {missing[:10]}")

    open_nodes = []
    for node in sorted(nodes, key=lambda n: n.left):
        while open_nodes and open_nodes[-1].right < node.left:
            open_nodes.pop()
        if open_nodes and node.right > open_nodes[-1].right:
            violations.append(f"{node!r} partially overlaps {open_nodes[-1]!r}")
            continue
        open_nodes.append(node)

    return violations


def check_integrity(nodes: Iterable[TreeNode]) -> None:
    """Crashes if any nested-set rule is violated."""
    violations = collect_violations(nodes)
    if violations:
        raise TreeIntegrityError("; ".join(violations))
