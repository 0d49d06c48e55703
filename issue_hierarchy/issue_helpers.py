"""
Issue state helpers.

Blocked: the issue has at least one dependency whose target is not done
or canceled. Ready: status is todo and the issue is not blocked.
An in_review dependency still blocks.
"""

from typing import Dict, List, Optional

from .models import (
    ALLOWED_STORY_POINTS,
    ISSUE_STATUSES,
    PRIORITIES,
    STATUS_CANCELED,
    STATUS_DOING,
    STATUS_DONE,
    STATUS_IN_REVIEW,
    STATUS_TODO,
    TERMINAL_STATUSES,
    Issue,
)


STATUS_TRANSITIONS: Dict[str, List[str]] = {
    STATUS_TODO: [STATUS_DOING, STATUS_CANCELED],
    STATUS_DOING: [STATUS_IN_REVIEW, STATUS_TODO, STATUS_CANCELED],
    STATUS_IN_REVIEW: [STATUS_DONE, STATUS_DOING, STATUS_CANCELED],
    STATUS_DONE: [],
    STATUS_CANCELED: [STATUS_TODO],
}

MAX_MILESTONE_NAME_LENGTH = 100


def _resolved_targets(issue: Issue) -> List[Issue]:
    """Dependency targets that were loaded, in edge order."""
    return [
        dep.depends_on_issue
        for dep in issue.dependencies or []
        if dep.depends_on_issue is not None
    ]


def is_blocked(issue: Issue) -> bool:
    """
    Check if an issue is blocked by any of its dependencies.

    Unresolved dependency targets never block.

    Args:
        issue: Issue with its dependencies resolved

    Returns:
        True if at least one resolved target is not done or canceled
    """
    return any(
        target.status not in TERMINAL_STATUSES for target in _resolved_targets(issue)
    )


def is_ready(issue: Issue) -> bool:
    """Ready = status is todo AND not blocked."""
    return issue.status == STATUS_TODO and not is_blocked(issue)


def get_blocking_dependencies(issue: Issue) -> List[Issue]:
    """
    Get dependency targets that are still blocking the issue.

    Args:
        issue: Issue with its dependencies resolved

    Returns:
        Targets whose status is not done or canceled, in edge order
    """
    return [
        target
        for target in _resolved_targets(issue)
        if target.status not in TERMINAL_STATUSES
    ]


def get_satisfied_dependencies(issue: Issue) -> List[Issue]:
    """Get dependency targets that are done or canceled."""
    return [
        target
        for target in _resolved_targets(issue)
        if target.status in TERMINAL_STATUSES
    ]


def is_terminal(issue: Issue) -> bool:
    return issue.status in TERMINAL_STATUSES


def get_allowed_status_transitions(status: str) -> List[str]:
    """
    Get statuses reachable from the current status.

    done is terminal and canceled can be reopened to todo.

    Args:
        status: Current status

    Returns:
        Allowed next statuses (empty for unknown statuses)
    """
    return list(STATUS_TRANSITIONS.get(status, []))


def is_valid_status(status: Optional[str]) -> bool:
    return status in ISSUE_STATUSES


def is_valid_priority(priority: Optional[int]) -> bool:
    # bool is an int subclass and is not a priority
    return (
        isinstance(priority, int)
        and not isinstance(priority, bool)
        and priority in PRIORITIES
    )


def is_valid_story_points(points: Optional[int]) -> bool:
    """
    Validate story points.

    Story points must be null or one of 1, 2, 3, 5, 8, 13, 21.

    Args:
        points: Story point value

    Returns:
        True if the value is allowed
    """
    if points is None:
        return True
    if isinstance(points, bool) or not isinstance(points, int):
        return False
    return points in ALLOWED_STORY_POINTS


def get_priority_label(priority: int) -> str:
    return f"P{priority}"


def validate_milestone_name(name: Optional[str]) -> bool:
    """
    Validate a milestone name.

    Requirements:
    - Non-empty after trimming
    - At most 100 characters after trimming

    Args:
        name: Milestone name

    Returns:
        True if valid
    """
    if not name or not isinstance(name, str):
        return False

    trimmed = name.strip()
    return 0 < len(trimmed) <= MAX_MILESTONE_NAME_LENGTH


def filter_ready_issues(issues: List[Issue]) -> List[Issue]:
    return [issue for issue in issues if is_ready(issue)]


def filter_blocked_issues(issues: List[Issue]) -> List[Issue]:
    return [issue for issue in issues if is_blocked(issue)]


def filter_by_status(issues: List[Issue], status: str) -> List[Issue]:
    """Issues with the given status, blocked ones included."""
    return [issue for issue in issues if issue.status == status]


def group_by_priority(issues: List[Issue]) -> Dict[int, List[Issue]]:
    """
    Group issues by priority.

    Args:
        issues: Issues to group

    Returns:
        Mapping of priority to issues, P0 first; input order is kept
        within each group
    """
    groups: Dict[int, List[Issue]] = {}

    for issue in issues:
        groups.setdefault(issue.priority, []).append(issue)

    return dict(sorted(groups.items()))
