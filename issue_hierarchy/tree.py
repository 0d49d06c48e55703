"""
Tree operations for the project hierarchy.

Flattens Projects → Epics → Issues → Sub-issues into a flat list of
TreeNodes, and provides parent→children lookups, visibility filtering
and breadcrumbs over that list.
"""

from typing import Dict, Iterable, List, Optional, Set

from .counts import compute_issue_counts
from .metrics import compute_project_metrics
from .models import (
    NODE_EPIC,
    NODE_ISSUE,
    NODE_LEVELS,
    NODE_PROJECT,
    NODE_SUB_ISSUE,
    Epic,
    Issue,
    Project,
    TreeNode,
)
from .utils import format_entity_number


INDENT_PX_PER_LEVEL = 16


class TreeIndex:
    """
    Parent→children index over a flat node list.

    Built once per node list so child lookups do not rescan the list.
    """

    def __init__(self, nodes: Iterable[TreeNode]):
        """
        Initialize the index from a node list.

        Args:
            nodes: Flattened tree nodes
        """
        self.nodes: Dict[str, TreeNode] = {}
        self.children_map: Dict[Optional[str], List[TreeNode]] = {}
        self._build_adjacency_list(nodes)

    def _build_adjacency_list(self, nodes: Iterable[TreeNode]) -> None:
        """Build parent→children mapping, keeping list order."""
        for node in nodes:
            self.nodes[node.id] = node
            self.children_map.setdefault(node.parent_id, []).append(node)

    def get(self, node_id: Optional[str]) -> Optional[TreeNode]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def get_children(self, node_id: Optional[str]) -> List[TreeNode]:
        """
        Get direct children of a node.

        Args:
            node_id: ID of the node (None for root projects)

        Returns:
            Child nodes in list order
        """
        return self.children_map.get(node_id, [])

    def get_roots(self) -> List[TreeNode]:
        return self.children_map.get(None, [])

    def get_depth(self, node_id: str) -> int:
        """
        Calculate the depth of a node by walking its parent links.

        Roots have depth 0; a parent missing from the index ends the walk.

        Args:
            node_id: ID of the node

        Returns:
            Number of ancestors found in the index
        """
        return len(self.get_ancestors(node_id))

    def get_ancestors(self, node_id: str) -> List[TreeNode]:
        """
        Get ancestors from the direct parent up to the root.

        Stops at a missing parent or at a repeated id, so malformed
        parent links cannot loop forever.

        Args:
            node_id: ID of the node

        Returns:
            Ancestor nodes, nearest first
        """
        ancestors: List[TreeNode] = []
        seen: Set[str] = {node_id}
        node = self.nodes.get(node_id)

        while node is not None and node.parent_id is not None:
            if node.parent_id in seen:
                break
            parent = self.nodes.get(node.parent_id)
            if parent is None:
                break
            ancestors.append(parent)
            seen.add(parent.id)
            node = parent

        return ancestors

    def get_all_descendants(self, node_id: str) -> List[TreeNode]:
        """
        Get all descendants of a node (children, grandchildren, etc.).

        Args:
            node_id: ID of the node

        Returns:
            Descendants in depth-first pre-order
        """
        descendants: List[TreeNode] = []
        seen: Set[str] = {node_id}

        def collect_descendants(current_id: str) -> None:
            for child in self.get_children(current_id):
                if child.id in seen:
                    continue
                seen.add(child.id)
                descendants.append(child)
                collect_descendants(child.id)

        collect_descendants(node_id)
        return descendants


def flatten_tree(projects: Iterable[Project]) -> List[TreeNode]:
    """
    Flatten hierarchical project data into a flat list of TreeNodes.

    Epics are emitted in the order supplied. Issues are matched to epics
    by ``epic_id`` and to parent issues by ``parent_issue_id`` from the
    project's full issue list. Rollup fields are left unset; apply
    ``rollups.update_all_node_rollups`` to the complete result.

    Args:
        projects: Projects with ``epics`` and ``issues`` populated

    Returns:
        Flat list of TreeNodes, each parent directly followed by its subtree
    """
    nodes: List[TreeNode] = []

    for project in projects:
        project_issues = project.issues or []

        nodes.append(_create_project_node(project, project_issues))

        for epic in project.epics or []:
            epic_issues = [
                issue
                for issue in project_issues
                if issue.epic_id == epic.id and issue.parent_issue_id is None
            ]

            nodes.append(_create_epic_node(epic, project.id, epic_issues))

            for issue in epic_issues:
                sub_issues = [i for i in project_issues if i.parent_issue_id == issue.id]

                nodes.append(_create_issue_node(issue, epic.id, sub_issues))

                for sub_issue in sub_issues:
                    nodes.append(_create_sub_issue_node(sub_issue, issue.id))

    return nodes


def _create_project_node(project: Project, project_issues: List[Issue]) -> TreeNode:
    return TreeNode(
        id=project.id,
        type=NODE_PROJECT,
        level=NODE_LEVELS[NODE_PROJECT],
        parent_id=None,
        has_children=len(project.epics or []) > 0,
        data=project,
        counts=compute_issue_counts(project_issues),
        metrics=compute_project_metrics(project_issues),
    )


def _create_epic_node(epic: Epic, project_id: str, epic_issues: List[Issue]) -> TreeNode:
    return TreeNode(
        id=epic.id,
        type=NODE_EPIC,
        level=NODE_LEVELS[NODE_EPIC],
        parent_id=project_id,
        has_children=len(epic_issues) > 0,
        data=epic,
        counts=compute_issue_counts(epic_issues),
        metrics=compute_project_metrics(epic_issues),
    )


def _create_issue_node(issue: Issue, epic_id: str, sub_issues: List[Issue]) -> TreeNode:
    subtree = [issue] + sub_issues
    return TreeNode(
        id=issue.id,
        type=NODE_ISSUE,
        level=NODE_LEVELS[NODE_ISSUE],
        parent_id=epic_id,
        has_children=len(sub_issues) > 0,
        data=issue,
        counts=compute_issue_counts(subtree),
        metrics=compute_project_metrics(subtree),
    )


def _create_sub_issue_node(sub_issue: Issue, parent_issue_id: str) -> TreeNode:
    # Sub-issues cannot have children and never carry rollups
    return TreeNode(
        id=sub_issue.id,
        type=NODE_SUB_ISSUE,
        level=NODE_LEVELS[NODE_SUB_ISSUE],
        parent_id=parent_issue_id,
        has_children=False,
        data=sub_issue,
        counts=compute_issue_counts([sub_issue]),
        metrics=compute_project_metrics([sub_issue]),
    )


def get_visible_nodes(all_nodes: List[TreeNode], expanded_ids: Set[str]) -> List[TreeNode]:
    """
    Filter nodes down to those visible under the current expansion state.

    Projects are always visible; any other node is visible when its
    parent is expanded.

    Args:
        all_nodes: All flattened tree nodes
        expanded_ids: IDs of expanded nodes

    Returns:
        Visible nodes in list order
    """
    return [
        node
        for node in all_nodes
        if node.level == 0
        or (node.parent_id is not None and node.parent_id in expanded_ids)
    ]


def calculate_indentation(level: int) -> str:
    """Project=0px, Epic=16px, Issue=32px, Sub-issue=48px."""
    return f"{level * INDENT_PX_PER_LEVEL}px"


def get_descendant_nodes(
    node: TreeNode, all_nodes: List[TreeNode], index: Optional[TreeIndex] = None
) -> List[TreeNode]:
    """
    Get all descendant nodes of a node by following parent links.

    Args:
        node: Parent node
        all_nodes: All tree nodes
        index: Prebuilt index over ``all_nodes`` (built on demand if omitted)

    Returns:
        Descendants in depth-first pre-order
    """
    if index is None:
        index = TreeIndex(all_nodes)
    return index.get_all_descendants(node.id)


def get_descendant_issues(
    node: TreeNode, all_nodes: List[TreeNode], index: Optional[TreeIndex] = None
) -> List[TreeNode]:
    """Descendant issue and sub-issue nodes, as used by progress rollups."""
    return [n for n in get_descendant_nodes(node, all_nodes, index) if n.is_issue_like]


def is_last_child(node: TreeNode, visible_nodes: List[TreeNode]) -> bool:
    """
    Determine if a node is the last of its siblings in the given list.

    Pass the visible list to draw tree lines correctly when some siblings
    are hidden.

    Args:
        node: Node to check
        visible_nodes: Node list to look for siblings in

    Returns:
        False for root nodes, otherwise True if no later sibling follows
    """
    if node.parent_id is None:
        return False

    siblings = [n for n in visible_nodes if n.parent_id == node.parent_id]
    if not siblings:
        return False
    return siblings[-1].id == node.id


def build_breadcrumb(expanded_id: Optional[str], all_nodes: List[TreeNode]) -> str:
    """
    Build a breadcrumb from the root project to the expanded node.

    Format: "P-1 Personal Tasks / E-3 Backend / I-2 Issue Title"

    Args:
        expanded_id: ID of the expanded node (None if none)
        all_nodes: All tree nodes

    Returns:
        Breadcrumb string, or empty string if the node is unknown
    """
    if not expanded_id:
        return ""

    index = TreeIndex(all_nodes)
    node = index.get(expanded_id)
    if node is None:
        return ""

    path = list(reversed(index.get_ancestors(node.id))) + [node]
    return " / ".join(_format_node_for_breadcrumb(n) for n in path)


def _format_node_for_breadcrumb(node: TreeNode) -> str:
    data = node.data
    if isinstance(data, Issue):
        return f"{format_entity_number(NODE_ISSUE, data.number)} {data.title}"
    return f"{format_entity_number(node.type, data.number)} {data.name}"
