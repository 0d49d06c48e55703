"""
Issue counts by state.

Blocked is EXCLUSIVE: a blocked issue counts only in the blocked bucket,
never in its status bucket.
"""

import math
from typing import Iterable

from .issue_helpers import is_blocked
from .models import (
    STATUS_CANCELED,
    STATUS_DOING,
    STATUS_DONE,
    STATUS_IN_REVIEW,
    STATUS_TODO,
    Issue,
    IssueCounts,
    Progress,
)


_STATUS_BUCKETS = {
    STATUS_TODO: "ready",
    STATUS_DOING: "doing",
    STATUS_IN_REVIEW: "in_review",
    STATUS_DONE: "done",
    STATUS_CANCELED: "canceled",
}


def round_percentage(completed: float, total: float) -> int:
    """
    Percentage of completed over total, rounded half up.

    Args:
        completed: Completed amount
        total: Total amount

    Returns:
        Integer percentage, 0 when total is 0
    """
    if total <= 0:
        return 0
    return int(math.floor(completed * 100 / total + 0.5))


def compute_issue_counts(issues: Iterable[Issue]) -> IssueCounts:
    """
    Compute issue counts by state.

    Args:
        issues: Issues with their dependencies resolved

    Returns:
        Counts for the six exclusive states; issues with an unknown
        status count nowhere
    """
    buckets = {
        "ready": 0,
        "blocked": 0,
        "doing": 0,
        "in_review": 0,
        "done": 0,
        "canceled": 0,
    }

    for issue in issues:
        if is_blocked(issue):
            buckets["blocked"] += 1
            continue

        bucket = _STATUS_BUCKETS.get(issue.status)
        if bucket is not None:
            buckets[bucket] += 1

    return IssueCounts(**buckets)


def compute_progress(counts: IssueCounts) -> Progress:
    """Completion by issue count: done and canceled over all buckets."""
    completed = counts.done + counts.canceled
    total = counts.total
    return Progress(
        completed=completed,
        total=total,
        percentage=round_percentage(completed, total),
    )
