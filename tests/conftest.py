"""Shared factories for hierarchy tests."""

import json
from typing import Optional

import pytest

from issue_hierarchy.counts import compute_issue_counts
from issue_hierarchy.metrics import compute_project_metrics
from issue_hierarchy.models import (
    NODE_LEVELS,
    Dependency,
    Epic,
    Issue,
    Project,
    TreeNode,
)


def make_issue(
    issue_id: str,
    status: str = "todo",
    story_points: Optional[int] = None,
    epic_id: str = "e1",
    project_id: str = "p1",
    parent_issue_id: Optional[str] = None,
    sort_order: Optional[int] = None,
    priority: int = 2,
    number: int = 1,
) -> Issue:
    return Issue(
        id=issue_id,
        project_id=project_id,
        epic_id=epic_id,
        number=number,
        title=f"Issue {issue_id}",
        status=status,
        priority=priority,
        story_points=story_points,
        sort_order=sort_order,
        parent_issue_id=parent_issue_id,
    )


def depends_on(issue: Issue, *targets: Issue) -> Issue:
    """Attach resolved dependency edges to an issue."""
    for target in targets:
        issue.dependencies.append(
            Dependency(issue_id=issue.id, depends_on_issue_id=target.id, depends_on_issue=target)
        )
    return issue


def edge(issue_id: str, target_id: str) -> Dependency:
    return Dependency(issue_id=issue_id, depends_on_issue_id=target_id)


def make_node(node_id: str, node_type: str, parent_id: Optional[str] = None, data=None) -> TreeNode:
    if data is None:
        if node_type == "project":
            data = Project(id=node_id, number=1, name=f"Project {node_id}")
        elif node_type == "epic":
            data = Epic(id=node_id, project_id=parent_id or "p1", number=1, name=f"Epic {node_id}")
        else:
            data = make_issue(node_id)
    issues = [data] if isinstance(data, Issue) else []
    return TreeNode(
        id=node_id,
        type=node_type,
        level=NODE_LEVELS[node_type],
        parent_id=parent_id,
        has_children=False,
        data=data,
        counts=compute_issue_counts(issues),
        metrics=compute_project_metrics(issues),
    )


@pytest.fixture
def sample_snapshot_data():
    """Two projects; p1 has two epics, sub-issues and a dependency chain."""
    return {
        "projects": [
            {"id": "p1", "number": 1, "name": "Personal Tasks", "status": "active"},
            {"id": "p2", "number": 2, "name": "Side Project", "status": "active"},
        ],
        "epics": [
            {"id": "e2", "project_id": "p1", "number": 2, "name": "Frontend", "sort_order": 1},
            {"id": "e1", "project_id": "p1", "number": 1, "name": "Backend", "sort_order": 0,
             "is_default": True},
            {"id": "e3", "project_id": "p2", "number": 3, "name": "Default", "is_default": True},
        ],
        "issues": [
            {"id": "i1", "project_id": "p1", "epic_id": "e1", "number": 1,
             "title": "Schema", "status": "done", "story_points": 3},
            {"id": "i2", "project_id": "p1", "epic_id": "e1", "number": 2,
             "title": "API", "status": "doing", "story_points": 5},
            {"id": "i3", "project_id": "p1", "epic_id": "e1", "number": 3,
             "title": "API docs", "status": "todo", "story_points": 2,
             "parent_issue_id": "i2"},
            {"id": "i4", "project_id": "p1", "epic_id": "e2", "number": 4,
             "title": "Login page", "status": "todo", "story_points": 8},
            {"id": "i5", "project_id": "p2", "epic_id": "e3", "number": 5,
             "title": "Idea", "status": "todo"},
        ],
        "dependencies": [
            {"issue_id": "i2", "depends_on_issue_id": "i1"},
            {"issue_id": "i4", "depends_on_issue_id": "i2"},
        ],
        "milestones": [
            {"id": "m1", "name": "v1.0", "due_date": "2026-12-01"},
        ],
    }


@pytest.fixture
def snapshot_file(tmp_path, sample_snapshot_data):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(sample_snapshot_data))
    return path
