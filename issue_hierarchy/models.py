"""
Entity and derived value types.

Projects own epics, epics own issues, and issues may own sub-issues.
Relation fields (``epics``, ``issues``, ``dependencies``) are populated by
the snapshot loader the same way a database join would populate them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


# Issue statuses
STATUS_TODO = "todo"
STATUS_DOING = "doing"
STATUS_IN_REVIEW = "in_review"
STATUS_DONE = "done"
STATUS_CANCELED = "canceled"

ISSUE_STATUSES = (
    STATUS_TODO,
    STATUS_DOING,
    STATUS_IN_REVIEW,
    STATUS_DONE,
    STATUS_CANCELED,
)
TERMINAL_STATUSES = frozenset({STATUS_DONE, STATUS_CANCELED})

# Project and epic lifecycle
LIFECYCLE_STATUSES = ("active", "done", "canceled")

ALLOWED_STORY_POINTS = (1, 2, 3, 5, 8, 13, 21)
PRIORITIES = (0, 1, 2, 3)

# Tree node types, indexed by hierarchy level
NODE_PROJECT = "project"
NODE_EPIC = "epic"
NODE_ISSUE = "issue"
NODE_SUB_ISSUE = "sub-issue"

NODE_LEVELS = {
    NODE_PROJECT: 0,
    NODE_EPIC: 1,
    NODE_ISSUE: 2,
    NODE_SUB_ISSUE: 3,
}


@dataclass
class Milestone:
    """Global (cross-project) label with an optional due date."""

    id: str
    name: str
    due_date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Milestone":
        return cls(id=data["id"], name=data["name"], due_date=data.get("due_date"))


@dataclass
class Issue:
    """
    Primary unit of work.

    An issue with ``parent_issue_id`` set is a sub-issue. ``dependencies``
    holds the edges this issue depends on, each resolved to its target
    when the target was loaded.
    """

    id: str
    project_id: str
    epic_id: str
    number: int
    title: str
    status: str = STATUS_TODO
    priority: int = 2
    story_points: Optional[int] = None
    sort_order: Optional[int] = None
    parent_issue_id: Optional[str] = None
    milestone_id: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = None
    dependencies: List["Dependency"] = field(
        default_factory=list, repr=False, compare=False
    )

    @property
    def is_sub_issue(self) -> bool:
        return self.parent_issue_id is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        return cls(
            id=data["id"],
            project_id=data["project_id"],
            epic_id=data["epic_id"],
            number=data["number"],
            title=data["title"],
            status=data.get("status", STATUS_TODO),
            priority=data.get("priority", 2),
            story_points=data.get("story_points"),
            sort_order=data.get("sort_order"),
            parent_issue_id=data.get("parent_issue_id"),
            milestone_id=data.get("milestone_id"),
            description=data.get("description"),
            created_at=data.get("created_at"),
        )


@dataclass
class Dependency:
    """Directed edge: ``issue_id`` depends on ``depends_on_issue_id``."""

    issue_id: str
    depends_on_issue_id: str
    depends_on_issue: Optional[Issue] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependency":
        return cls(
            issue_id=data["issue_id"],
            depends_on_issue_id=data["depends_on_issue_id"],
        )


@dataclass
class Epic:
    """Project-scoped grouping of issues."""

    id: str
    project_id: str
    number: int
    name: str
    status: str = "active"
    is_default: bool = False
    sort_order: Optional[int] = None
    milestone_id: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Epic":
        return cls(
            id=data["id"],
            project_id=data["project_id"],
            number=data["number"],
            name=data["name"],
            status=data.get("status", "active"),
            is_default=data.get("is_default", False),
            sort_order=data.get("sort_order"),
            milestone_id=data.get("milestone_id"),
            description=data.get("description"),
        )


@dataclass
class Project:
    """
    Top-level container.

    ``epics`` and ``issues`` are populated by the loader; ``issues`` holds
    every issue of the project, sub-issues included.
    """

    id: str
    number: int
    name: str
    status: str = "active"
    description: Optional[str] = None
    created_at: Optional[str] = None
    archived_at: Optional[str] = None
    epics: List[Epic] = field(default_factory=list, repr=False)
    issues: List[Issue] = field(default_factory=list, repr=False)

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=data["id"],
            number=data["number"],
            name=data["name"],
            status=data.get("status", "active"),
            description=data.get("description"),
            created_at=data.get("created_at"),
            archived_at=data.get("archived_at"),
        )


@dataclass(frozen=True)
class IssueCounts:
    """Issue counts by mutually exclusive state."""

    ready: int = 0
    blocked: int = 0
    doing: int = 0
    in_review: int = 0
    done: int = 0
    canceled: int = 0

    @property
    def total(self) -> int:
        return (
            self.ready
            + self.blocked
            + self.doing
            + self.in_review
            + self.done
            + self.canceled
        )


@dataclass(frozen=True)
class Progress:
    completed: int = 0
    total: int = 0
    percentage: int = 0


@dataclass(frozen=True)
class ProjectMetrics:
    total_issues: int = 0
    active_story_points: int = 0
    total_story_points: int = 0


Entity = Union[Project, Epic, Issue]


@dataclass(frozen=True)
class TreeNode:
    """
    Uniform row for any level of the hierarchy.

    ``total_points`` and ``progress`` stay ``None`` until rollups are
    applied, and always stay ``None`` for sub-issues.
    """

    id: str
    type: str
    level: int
    parent_id: Optional[str]
    has_children: bool
    data: Entity
    counts: IssueCounts
    metrics: ProjectMetrics
    total_points: Optional[int] = None
    progress: Optional[Progress] = None

    @property
    def is_issue_like(self) -> bool:
        return self.type in (NODE_ISSUE, NODE_SUB_ISSUE)


@dataclass
class ReparentUpdate:
    """
    Update descriptor produced for a drag-and-drop move.

    Ownership fields left as ``None`` are unchanged. ``cascade`` carries
    follow-up updates for sub-issues of a moved issue.
    """

    id: str
    new_sort_order: Optional[int] = None
    new_project_id: Optional[str] = None
    new_epic_id: Optional[str] = None
    new_parent_issue_id: Optional[str] = None
    cascade: List["ReparentUpdate"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"id": self.id}
        if self.new_sort_order is not None:
            result["new_sort_order"] = self.new_sort_order
        if self.new_project_id is not None:
            result["new_project_id"] = self.new_project_id
        if self.new_epic_id is not None:
            result["new_epic_id"] = self.new_epic_id
        if self.new_parent_issue_id is not None:
            result["new_parent_issue_id"] = self.new_parent_issue_id
        if self.cascade:
            result["cascade"] = [update.to_dict() for update in self.cascade]
        return result
