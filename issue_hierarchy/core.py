"""
Snapshot loading and analysis.

Joins a validated snapshot into linked entities (the work a database
query layer would do) and exposes the hierarchy computations over it.
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional, List, Union

from .counts import compute_issue_counts, compute_progress
from .drag_drop import (
    calculate_reparent_updates,
    can_reparent,
    is_reparent_drop,
)
from .graph import DependencyGraph
from .metrics import compute_project_metrics
from .models import (
    Dependency,
    Epic,
    Issue,
    IssueCounts,
    Milestone,
    Progress,
    Project,
    ProjectMetrics,
    ReparentUpdate,
    TreeNode,
)
from .rollups import update_all_node_rollups
from .tree import flatten_tree
from .validator import DEFAULT_SCHEMA_PATH, validate_snapshot_file


logger = logging.getLogger(__name__)


def _sort_key(entity: Union[Epic, Issue]):
    # Manual sort order first, unordered entities last, then by number
    return (entity.sort_order is None, entity.sort_order or 0, entity.number)


class Snapshot:
    """
    In-memory snapshot of projects, epics, issues and dependencies.

    The constructor populates the relation fields (``Project.epics``,
    ``Project.issues``, ``Issue.dependencies``) of the entities it is
    given. After that, computations return new values and do not modify
    the entities.
    """

    def __init__(
        self,
        projects: List[Project],
        epics: List[Epic],
        issues: List[Issue],
        dependencies: List[Dependency],
        milestones: Optional[List[Milestone]] = None,
    ):
        """
        Initialize the snapshot and resolve relations.

        Args:
            projects: Projects (epics/issues populated here)
            epics: All epics
            issues: All issues, sub-issues included
            dependencies: Dependency edges
            milestones: Milestones (optional)
        """
        self.projects = projects
        self.epics = epics
        self.issues = issues
        self.dependencies = dependencies
        self.milestones = milestones or []

        self.issues_by_id: Dict[str, Issue] = {issue.id: issue for issue in issues}
        self.graph = DependencyGraph(dependencies)

        self._join()
        self._nodes: Optional[List[TreeNode]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        """
        Build a snapshot from parsed JSON data.

        Args:
            data: Snapshot dictionary (see the snapshot schema)

        Returns:
            Snapshot with relations resolved
        """
        return cls(
            projects=[Project.from_dict(p) for p in data.get("projects", [])],
            epics=[Epic.from_dict(e) for e in data.get("epics", [])],
            issues=[Issue.from_dict(i) for i in data.get("issues", [])],
            dependencies=[Dependency.from_dict(d) for d in data.get("dependencies", [])],
            milestones=[Milestone.from_dict(m) for m in data.get("milestones", [])],
        )

    def _join(self) -> None:
        """Attach epics/issues to projects and resolve dependency targets."""
        projects_by_id = {project.id: project for project in self.projects}

        for project in self.projects:
            project.epics = []
            project.issues = []

        for epic in sorted(self.epics, key=_sort_key):
            project = projects_by_id.get(epic.project_id)
            if project is not None:
                project.epics.append(epic)

        for issue in sorted(self.issues, key=_sort_key):
            issue.dependencies = []
            project = projects_by_id.get(issue.project_id)
            if project is not None:
                project.issues.append(issue)

        unresolved = 0
        for dep in self.dependencies:
            dep.depends_on_issue = self.issues_by_id.get(dep.depends_on_issue_id)
            if dep.depends_on_issue is None:
                unresolved += 1

            issue = self.issues_by_id.get(dep.issue_id)
            if issue is not None:
                issue.dependencies.append(dep)

        if unresolved:
            logger.debug(f"{unresolved} dependency targets could not be resolved")

    def get_project(self, project_id: str) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def get_issue(self, issue_id: str) -> Optional[Issue]:
        return self.issues_by_id.get(issue_id)

    def scoped_issues(self, project_id: Optional[str] = None) -> List[Issue]:
        """All issues, or only those of one project."""
        if project_id is None:
            return list(self.issues)
        return [issue for issue in self.issues if issue.project_id == project_id]

    @property
    def nodes(self) -> List[TreeNode]:
        """Flattened tree with rollups, built on first access."""
        if self._nodes is None:
            self._nodes = update_all_node_rollups(flatten_tree(self.projects))
            logger.debug(f"Built {len(self._nodes)} tree nodes")
        return self._nodes

    def get_node(self, node_id: str) -> Optional[TreeNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def counts(self, project_id: Optional[str] = None) -> IssueCounts:
        return compute_issue_counts(self.scoped_issues(project_id))

    def progress(self, project_id: Optional[str] = None) -> Progress:
        return compute_progress(self.counts(project_id))

    def metrics(self, project_id: Optional[str] = None) -> ProjectMetrics:
        return compute_project_metrics(self.scoped_issues(project_id))

    def dependency_order(self, project_id: Optional[str] = None) -> Optional[List[Issue]]:
        """
        Order issues so that dependencies come first.

        Returns:
            Ordered issues, or None if the dependencies contain a cycle
        """
        return self.graph.topological_sort(self.scoped_issues(project_id))

    def plan_move(self, source_id: str, target_id: str) -> Dict[str, Any]:
        """
        Classify a drag-and-drop of one node onto another.

        Args:
            source_id: ID of the dragged node
            target_id: ID of the node dropped on

        Returns:
            Dictionary with 'action' ('reorder', 'reparent' or 'invalid'),
            a 'reason' for invalid moves and the 'update' for reparents
        """
        source = self.get_node(source_id)
        target = self.get_node(target_id)

        if source is None or target is None:
            missing = source_id if source is None else target_id
            return {"action": "invalid", "reason": f"Unknown node '{missing}'"}

        if source.id != target.id and source.parent_id == target.parent_id:
            return {"action": "reorder", "source": source.id, "target": target.id}

        if not is_reparent_drop(source, target) or not can_reparent(
            source, target, self.nodes
        ):
            logger.debug(
                f"Rejected move of {source.type} '{source.id}' "
                f"onto {target.type} '{target.id}'"
            )
            return {
                "action": "invalid",
                "reason": f"Cannot move {source.type} onto {target.type}",
            }

        update: ReparentUpdate = calculate_reparent_updates(source, target, self.nodes)
        return {"action": "reparent", "update": update.to_dict()}


def load_snapshot(input_path: Path, schema_path: Optional[Path] = None) -> Snapshot:
    """
    Validate and load a snapshot file.

    Args:
        input_path: Path to the snapshot JSON file
        schema_path: Path to the JSON schema (packaged schema if omitted)

    Returns:
        Loaded snapshot

    Raises:
        ValidationError: If the file is missing or invalid
    """
    data = validate_snapshot_file(input_path, schema_path or DEFAULT_SCHEMA_PATH)
    snapshot = Snapshot.from_dict(data)

    logger.info(
        f"Loaded {len(snapshot.projects)} projects, {len(snapshot.epics)} epics, "
        f"{len(snapshot.issues)} issues, {len(snapshot.dependencies)} dependencies"
    )

    return snapshot
