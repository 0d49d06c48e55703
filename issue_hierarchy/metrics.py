"""
Story point metrics.

Independent of blocking state: active points are summed by status alone.
"""

from typing import Iterable

from .models import STATUS_DOING, STATUS_TODO, Issue, ProjectMetrics


ACTIVE_STATUSES = frozenset({STATUS_TODO, STATUS_DOING})


def compute_project_metrics(issues: Iterable[Issue]) -> ProjectMetrics:
    """
    Compute issue count and story point sums.

    Args:
        issues: Issues to aggregate

    Returns:
        ProjectMetrics where active points cover todo and doing issues and
        total points cover every issue with story points
    """
    total_issues = 0
    active_story_points = 0
    total_story_points = 0

    for issue in issues:
        total_issues += 1

        if issue.story_points is None:
            continue

        total_story_points += issue.story_points
        if issue.status in ACTIVE_STATUSES:
            active_story_points += issue.story_points

    return ProjectMetrics(
        total_issues=total_issues,
        active_story_points=active_story_points,
        total_story_points=total_story_points,
    )
