"""
Rollup calculations for tree nodes.

Total points:
- Sub-issue: no rollup
- Issue: own points + sum(sub-issue points)
- Epic: sum(issue totals)
- Project: sum(epic totals)

Progress:
- (done + canceled points) / total points * 100
- If total points is 0: 100% when every descendant is done/canceled, else 0%
- Sub-issues have no progress
"""

import dataclasses
from typing import List, Optional

from .counts import round_percentage
from .models import (
    NODE_EPIC,
    NODE_ISSUE,
    NODE_PROJECT,
    NODE_SUB_ISSUE,
    TERMINAL_STATUSES,
    Issue,
    Progress,
    TreeNode,
)
from .tree import TreeIndex, get_descendant_issues


def _points(node: TreeNode) -> int:
    data = node.data
    if isinstance(data, Issue) and data.story_points is not None:
        return data.story_points
    return 0


def _is_terminal_node(node: TreeNode) -> bool:
    return isinstance(node.data, Issue) and node.data.status in TERMINAL_STATUSES


def calculate_total_points(
    node: TreeNode, all_nodes: List[TreeNode], index: Optional[TreeIndex] = None
) -> Optional[int]:
    """
    Calculate total story points for a node.

    Args:
        node: Tree node to calculate for
        all_nodes: All tree nodes (needed to find children)
        index: Prebuilt index over ``all_nodes`` (built on demand if omitted)

    Returns:
        Total story points, or None for sub-issues
    """
    if node.type == NODE_SUB_ISSUE:
        return None

    if index is None:
        index = TreeIndex(all_nodes)

    children = index.get_children(node.id)

    if node.type == NODE_ISSUE:
        sub_issue_points = sum(_points(c) for c in children if c.type == NODE_SUB_ISSUE)
        return _points(node) + sub_issue_points

    if node.type == NODE_EPIC:
        child_type = NODE_ISSUE
    elif node.type == NODE_PROJECT:
        child_type = NODE_EPIC
    else:
        return None

    return sum(
        calculate_total_points(child, all_nodes, index) or 0
        for child in children
        if child.type == child_type
    )


def calculate_progress(
    node: TreeNode, all_nodes: List[TreeNode], index: Optional[TreeIndex] = None
) -> Optional[Progress]:
    """
    Calculate story point progress for a node.

    Args:
        node: Tree node to calculate for
        all_nodes: All tree nodes (needed to find descendants)
        index: Prebuilt index over ``all_nodes`` (built on demand if omitted)

    Returns:
        Progress over all descendant issues, or None for sub-issues
    """
    if node.type == NODE_SUB_ISSUE:
        return None

    descendant_issues = get_descendant_issues(node, all_nodes, index)

    if not descendant_issues:
        return Progress(completed=0, total=0, percentage=0)

    total_points = sum(_points(n) for n in descendant_issues)
    completed_points = sum(_points(n) for n in descendant_issues if _is_terminal_node(n))

    if total_points > 0:
        percentage = round_percentage(completed_points, total_points)
    else:
        all_done = all(_is_terminal_node(n) for n in descendant_issues)
        percentage = 100 if all_done else 0

    return Progress(completed=completed_points, total=total_points, percentage=percentage)


def with_rollups(
    node: TreeNode, total_points: Optional[int], progress: Optional[Progress]
) -> TreeNode:
    """Return a copy of the node carrying the given rollup values."""
    return dataclasses.replace(node, total_points=total_points, progress=progress)


def update_node_rollups(
    node: TreeNode, all_nodes: List[TreeNode], index: Optional[TreeIndex] = None
) -> TreeNode:
    """
    Compute rollups for one node.

    Args:
        node: Tree node to update
        all_nodes: The complete node list
        index: Prebuilt index over ``all_nodes`` (built on demand if omitted)

    Returns:
        New node with ``total_points`` and ``progress`` set
    """
    if index is None:
        index = TreeIndex(all_nodes)
    return with_rollups(
        node,
        calculate_total_points(node, all_nodes, index),
        calculate_progress(node, all_nodes, index),
    )


def update_all_node_rollups(nodes: List[TreeNode]) -> List[TreeNode]:
    """
    Compute rollups for every node.

    Must be given the complete list from ``flatten_tree``; a partial list
    under-counts.

    Args:
        nodes: All tree nodes

    Returns:
        New list of nodes with rollups, in the same order
    """
    index = TreeIndex(nodes)
    return [update_node_rollups(node, nodes, index) for node in nodes]
