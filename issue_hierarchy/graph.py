"""
Dependency graph operations for issues.

Handles topological ordering, reverse lookups, transitive closure and
cycle checks over the issue → depends-on relation. Cycles should be
rejected when edges are written, but every traversal here still
terminates if one slips through.
"""

import logging
from collections import deque
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .models import Dependency, Issue


logger = logging.getLogger(__name__)


class DependencyGraph:
    """
    Manages the dependency graph of issues.

    Builds issue→dependencies and dependency→dependents adjacency lists
    and provides ordering and reachability queries on top of them.
    """

    def __init__(self, dependencies: Iterable[Dependency]):
        """
        Initialize the graph from a list of dependency edges.

        Args:
            dependencies: Edges with 'issue_id' and 'depends_on_issue_id'
        """
        self.dependencies: List[Dependency] = list(dependencies)
        self.depends_on: Dict[str, List[str]] = {}
        self.dependents: Dict[str, List[str]] = {}
        self._build_adjacency_list()

    def _build_adjacency_list(self) -> None:
        """Build forward and reverse edge mappings."""
        self.depends_on = {}
        self.dependents = {}

        for dep in self.dependencies:
            self.depends_on.setdefault(dep.issue_id, []).append(dep.depends_on_issue_id)
            self.dependents.setdefault(dep.depends_on_issue_id, []).append(dep.issue_id)

    def get_dependencies(self, issue_id: str) -> List[str]:
        """Direct dependency targets of an issue, in edge order."""
        return self.depends_on.get(issue_id, [])

    def get_blocked_issues(self, issue_id: str) -> List[str]:
        """
        Get issues that depend on the given issue.

        These are the issues affected while the given issue is unresolved.

        Args:
            issue_id: ID of the depended-upon issue

        Returns:
            Dependent issue IDs in edge order
        """
        return list(self.dependents.get(issue_id, []))

    def topological_sort(self, issues: List[Issue]) -> Optional[List[Issue]]:
        """
        Sort issues so dependencies come before their dependents.

        Kahn's algorithm: an issue's in-degree is the number of its
        outstanding dependencies, and the frontier is processed FIFO so
        ties keep input order. Edges touching issues outside ``issues``
        are ignored.

        Args:
            issues: Issues to order

        Returns:
            Ordered issues, or None if the dependencies contain a cycle
        """
        issue_map: Dict[str, Issue] = {}
        in_degree: Dict[str, int] = {}

        for issue in issues:
            issue_map[issue.id] = issue
            in_degree[issue.id] = 0

        for dep in self.dependencies:
            if dep.issue_id in in_degree and dep.depends_on_issue_id in in_degree:
                in_degree[dep.issue_id] += 1

        queue: Deque[str] = deque(
            issue_id for issue_id, degree in in_degree.items() if degree == 0
        )
        sorted_issues: List[Issue] = []

        while queue:
            issue_id = queue.popleft()
            sorted_issues.append(issue_map[issue_id])

            for dependent_id in self.dependents.get(issue_id, []):
                if dependent_id not in in_degree:
                    continue
                in_degree[dependent_id] -= 1
                if in_degree[dependent_id] == 0:
                    queue.append(dependent_id)

        if len(sorted_issues) < len(issue_map):
            unordered = len(issue_map) - len(sorted_issues)
            logger.debug(
                f"Dependency cycle detected: {unordered} of {len(issue_map)} "
                f"issues could not be ordered"
            )
            return None

        return sorted_issues

    def get_transitive_dependencies(self, issue_id: str) -> Set[str]:
        """
        Get every issue reachable by following dependency edges.

        The start issue is only included when a cycle leads back to it.

        Args:
            issue_id: ID of the starting issue

        Returns:
            Set of reachable issue IDs
        """
        result: Set[str] = set()
        stack: List[str] = [issue_id]

        # Depth-first; visited nodes are never re-entered
        while stack:
            current_id = stack.pop()
            for neighbor_id in self.get_dependencies(current_id):
                if neighbor_id not in result:
                    result.add(neighbor_id)
                    stack.append(neighbor_id)

        return result

    def would_create_cycle(self, issue_id: str, depends_on_id: str) -> bool:
        """
        Check if adding an edge would create a cycle.

        Args:
            issue_id: Issue that would gain the dependency
            depends_on_id: Issue that would be depended upon

        Returns:
            True for a self-dependency or when the new edge closes a loop
        """
        if issue_id == depends_on_id:
            return True

        def neighbors(node_id: str) -> List[str]:
            if node_id == issue_id:
                return self.get_dependencies(node_id) + [depends_on_id]
            return self.get_dependencies(node_id)

        visited: Set[str] = {issue_id}
        in_progress: Set[str] = {issue_id}
        stack: List[Tuple[str, Iterator[str]]] = [(issue_id, iter(neighbors(issue_id)))]

        while stack:
            node_id, remaining = stack[-1]
            neighbor_id = next(remaining, None)

            if neighbor_id is None:
                in_progress.remove(node_id)
                stack.pop()
                continue

            if neighbor_id in in_progress:
                return True
            if neighbor_id in visited:
                continue

            visited.add(neighbor_id)
            in_progress.add(neighbor_id)
            stack.append((neighbor_id, iter(neighbors(neighbor_id))))

        return False

    def find_dependency_path(self, from_id: str, to_id: str) -> Optional[List[str]]:
        """
        Find a chain of dependency edges between two issues.

        Useful for explaining why a proposed dependency would create a cycle.

        Args:
            from_id: Starting issue ID
            to_id: Target issue ID

        Returns:
            Issue IDs from ``from_id`` to ``to_id``, or None if unreachable
        """
        if from_id == to_id:
            return [from_id]

        visited: Set[str] = {from_id}
        path: List[str] = [from_id]
        stack: List[Iterator[str]] = [iter(self.get_dependencies(from_id))]

        # path[i] is the node whose neighbors stack[i] walks
        while stack:
            neighbor_id = next(stack[-1], None)

            if neighbor_id is None:
                stack.pop()
                path.pop()
                continue

            if neighbor_id == to_id:
                path.append(neighbor_id)
                return path
            if neighbor_id in visited:
                continue

            visited.add(neighbor_id)
            path.append(neighbor_id)
            stack.append(iter(self.get_dependencies(neighbor_id)))

        return None


def topological_sort(
    issues: List[Issue], dependencies: Iterable[Dependency]
) -> Optional[List[Issue]]:
    return DependencyGraph(dependencies).topological_sort(issues)


def get_blocked_issues(issue_id: str, dependencies: Iterable[Dependency]) -> List[str]:
    return DependencyGraph(dependencies).get_blocked_issues(issue_id)


def get_transitive_dependencies(
    issue_id: str, dependencies: Iterable[Dependency]
) -> Set[str]:
    return DependencyGraph(dependencies).get_transitive_dependencies(issue_id)


def would_create_cycle(
    issue_id: str, depends_on_id: str, dependencies: Iterable[Dependency]
) -> bool:
    return DependencyGraph(dependencies).would_create_cycle(issue_id, depends_on_id)


def find_dependency_path(
    from_id: str, to_id: str, dependencies: Iterable[Dependency]
) -> Optional[List[str]]:
    return DependencyGraph(dependencies).find_dependency_path(from_id, to_id)
