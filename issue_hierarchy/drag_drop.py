"""
Drag-and-drop validation for the tree.

Enforces hierarchy rules for reparenting (Epic→Project, Issue→Epic,
Sub-issue→Issue), prevents drops into a node's own subtree, and computes
the ownership and sort order updates a move implies.
"""

import logging
from typing import List, Optional, Set

from .models import (
    NODE_EPIC,
    NODE_ISSUE,
    NODE_PROJECT,
    NODE_SUB_ISSUE,
    Epic,
    Issue,
    ReparentUpdate,
    TreeNode,
)
from .reorder import get_next_sort_order


logger = logging.getLogger(__name__)

# source type → allowed parent type
REPARENT_RULES = {
    NODE_EPIC: NODE_PROJECT,
    NODE_ISSUE: NODE_EPIC,
    NODE_SUB_ISSUE: NODE_ISSUE,
}


def _is_descendant(target: TreeNode, source: TreeNode, all_nodes: List[TreeNode]) -> bool:
    """Walk the target's ancestor chain looking for the source."""
    by_id = {node.id: node for node in all_nodes}
    seen: Set[str] = set()
    current: Optional[TreeNode] = target

    while current is not None and current.parent_id is not None:
        if current.parent_id == source.id:
            return True
        if current.parent_id in seen:
            break
        seen.add(current.parent_id)
        current = by_id.get(current.parent_id)

    return False


def can_reparent(source: TreeNode, target: TreeNode, all_nodes: List[TreeNode]) -> bool:
    """
    Determine if dropping source onto target is a valid reparent.

    Rules:
    - Projects cannot be moved
    - A node cannot be dropped on itself
    - A node cannot be dropped on its own descendant
    - Only Epic→Project, Issue→Epic and Sub-issue→Issue are allowed

    Args:
        source: Node being dragged
        target: Node being dropped on
        all_nodes: All tree nodes (for the descendant check)

    Returns:
        True if the move is allowed
    """
    if source.type == NODE_PROJECT:
        return False

    if source.id == target.id:
        return False

    if _is_descendant(target, source, all_nodes):
        return False

    return REPARENT_RULES.get(source.type) == target.type


def get_valid_drop_targets(dragging: TreeNode, all_nodes: List[TreeNode]) -> Set[str]:
    """
    Get IDs of every node the dragged node may be dropped on.

    Includes valid reparent targets and siblings (for reordering within
    the same parent).

    Args:
        dragging: Node being dragged
        all_nodes: All tree nodes

    Returns:
        Set of valid target node IDs
    """
    valid_ids: Set[str] = set()

    for node in all_nodes:
        if can_reparent(dragging, node, all_nodes):
            valid_ids.add(node.id)

        if node.parent_id == dragging.parent_id and node.id != dragging.id:
            valid_ids.add(node.id)

    return valid_ids


def is_reparent_drop(source: TreeNode, target: TreeNode) -> bool:
    """
    Classify a drop as reparent (new parent) or reorder (same parent).

    Only the target's own parent link is consulted for the descendant
    check; gate the actual move with ``can_reparent``.
    """
    if source.parent_id == target.parent_id:
        return False

    return can_reparent(source, target, [])


def calculate_reparent_updates(
    source: TreeNode, new_parent: TreeNode, all_nodes: List[TreeNode]
) -> ReparentUpdate:
    """
    Compute the updates for moving source under new_parent.

    The moved node is appended after the new parent's current children.
    Ownership follows the new parent:
    - Epic: new project
    - Issue: new epic and that epic's project; sub-issues cascade
    - Sub-issue: new parent issue plus its epic and project

    Args:
        source: Node being moved
        new_parent: Node it is dropped on
        all_nodes: All tree nodes

    Returns:
        Update descriptor for the moved node
    """
    siblings = [
        node.data
        for node in all_nodes
        if node.parent_id == new_parent.id and node.id != source.id
    ]
    update = ReparentUpdate(id=source.id, new_sort_order=get_next_sort_order(siblings))

    parent_data = new_parent.data

    if source.type == NODE_EPIC and new_parent.type == NODE_PROJECT:
        update.new_project_id = new_parent.id

    elif source.type == NODE_ISSUE and isinstance(parent_data, Epic):
        update.new_epic_id = parent_data.id
        update.new_project_id = parent_data.project_id
        update.cascade = calculate_cascade_updates(
            source, parent_data.id, parent_data.project_id, all_nodes
        )

    elif source.type == NODE_SUB_ISSUE and isinstance(parent_data, Issue):
        update.new_parent_issue_id = parent_data.id
        update.new_epic_id = parent_data.epic_id
        update.new_project_id = parent_data.project_id

    else:
        logger.debug(
            f"No ownership update for {source.type} '{source.id}' "
            f"dropped on {new_parent.type} '{new_parent.id}'"
        )

    return update


def calculate_cascade_updates(
    issue_node: TreeNode,
    new_epic_id: str,
    new_project_id: str,
    all_nodes: List[TreeNode],
) -> List[ReparentUpdate]:
    """
    Keep sub-issues on their parent issue's epic and project.

    Args:
        issue_node: Issue whose epic or project is changing
        new_epic_id: The issue's new epic
        new_project_id: The issue's new project
        all_nodes: All tree nodes

    Returns:
        One update per sub-issue that is not already in sync
    """
    updates: List[ReparentUpdate] = []

    for node in all_nodes:
        if node.type != NODE_SUB_ISSUE or node.parent_id != issue_node.id:
            continue
        sub_issue = node.data
        if not isinstance(sub_issue, Issue):
            continue
        if sub_issue.epic_id == new_epic_id and sub_issue.project_id == new_project_id:
            continue
        updates.append(
            ReparentUpdate(
                id=node.id,
                new_epic_id=new_epic_id,
                new_project_id=new_project_id,
            )
        )

    return updates
