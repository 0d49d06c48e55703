"""
Rich rendering of the hierarchy.

Tables for the tree and dependency order, panels for counts and
dependency details.
"""

from typing import List, Optional, Set

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .issue_helpers import (
    get_blocking_dependencies,
    get_priority_label,
    get_satisfied_dependencies,
    is_blocked,
)
from .models import Issue, IssueCounts, Progress, ProjectMetrics, TreeNode
from .tree import get_visible_nodes, is_last_child
from .utils import format_entity_number, format_issue_number


console = Console()

STATUS_STYLES = {
    "todo": "white",
    "doing": "cyan",
    "in_review": "magenta",
    "done": "green",
    "canceled": "red",
}


def _node_label(node: TreeNode, visible: List[TreeNode]) -> str:
    data = node.data
    name = data.title if isinstance(data, Issue) else data.name
    number = format_entity_number(node.type, data.number)

    if node.level == 0:
        return f"[bold]{number}[/bold] {name}"

    branch = "└─ " if is_last_child(node, visible) else "├─ "
    return f"{'   ' * (node.level - 1)}{branch}[cyan]{number}[/cyan] {name}"


def _status_cell(node: TreeNode) -> str:
    data = node.data
    if not isinstance(data, Issue):
        return data.status
    style = STATUS_STYLES.get(data.status, "white")
    label = f"[{style}]{data.status}[/{style}]"
    if is_blocked(data):
        label += " [red](blocked)[/red]"
    return label


def display_tree(nodes: List[TreeNode], expanded_ids: Optional[Set[str]] = None) -> None:
    """
    Display the visible part of the tree in a table.

    Args:
        nodes: All tree nodes (with rollups)
        expanded_ids: Expanded node IDs; None expands everything
    """
    if expanded_ids is None:
        expanded_ids = {node.id for node in nodes if node.has_children}

    visible = get_visible_nodes(nodes, expanded_ids)

    table = Table(title="Hierarchy")
    table.add_column("Item")
    table.add_column("Status")
    table.add_column("Priority", justify="center")
    table.add_column("Points", justify="right", style="green")
    table.add_column("Progress", justify="right", style="yellow")
    table.add_column("Ready/Blocked", justify="right")

    for node in visible:
        data = node.data
        priority = get_priority_label(data.priority) if isinstance(data, Issue) else ""

        if node.total_points is not None:
            points = str(node.total_points)
        elif isinstance(data, Issue) and data.story_points is not None:
            points = str(data.story_points)
        else:
            points = "-"

        progress = f"{node.progress.percentage}%" if node.progress is not None else ""

        table.add_row(
            _node_label(node, visible),
            _status_cell(node),
            priority,
            points,
            progress,
            f"{node.counts.ready}/{node.counts.blocked}",
        )

    console.print(table)


def display_counts_panel(
    counts: IssueCounts,
    progress: Progress,
    metrics: ProjectMetrics,
    title: str = "Summary",
) -> None:
    """
    Display a summary panel with issue counts and story points.

    Args:
        counts: Issue counts by state
        progress: Completion by issue count
        metrics: Story point metrics
        title: Panel title
    """
    content = [
        f"[green]●[/green] Ready: {counts.ready}",
        f"[red]●[/red] Blocked: {counts.blocked}",
        f"[cyan]●[/cyan] Doing: {counts.doing}",
        f"[magenta]●[/magenta] In review: {counts.in_review}",
        f"[green]✓[/green] Done: {counts.done}",
        f"[red]✗[/red] Canceled: {counts.canceled}",
        "",
        f"Progress: {progress.completed}/{progress.total} ({progress.percentage}%)",
        f"Issues: {metrics.total_issues}",
        f"Story points: {metrics.active_story_points} active / "
        f"{metrics.total_story_points} total",
    ]

    panel = Panel(
        "\n".join(content),
        title=title,
        border_style="bright_blue",
    )

    console.print(panel)


def display_dependency_order(issues: List[Issue]) -> None:
    """Display issues in dependency order."""
    table = Table(title="Dependency order")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Issue", style="green")
    table.add_column("Title")
    table.add_column("Status")

    for position, issue in enumerate(issues, 1):
        style = STATUS_STYLES.get(issue.status, "white")
        table.add_row(
            str(position),
            format_issue_number(issue.number),
            issue.title[:60],
            f"[{style}]{issue.status}[/{style}]",
        )

    console.print(table)


def display_issue_dependencies(
    issue: Issue,
    dependents: List[Issue],
    transitive: List[Issue],
) -> None:
    """
    Display the dependency picture for one issue.

    Args:
        issue: Issue with its dependencies resolved
        dependents: Issues that depend on this issue
        transitive: Every issue this issue transitively depends on
    """
    def describe(items: List[Issue]) -> str:
        if not items:
            return "  [dim]none[/dim]"
        return "\n".join(
            f"  {format_issue_number(i.number)} {i.title} [dim]({i.status})[/dim]" for i in items
        )

    content = [
        "[bold]Blocking:[/bold]",
        describe(get_blocking_dependencies(issue)),
        "[bold]Satisfied:[/bold]",
        describe(get_satisfied_dependencies(issue)),
        "[bold]Blocks:[/bold]",
        describe(dependents),
        "[bold]All upstream:[/bold]",
        describe(transitive),
    ]

    panel = Panel(
        "\n".join(content),
        title=f"{format_issue_number(issue.number)}: {issue.title}",
        border_style="bright_blue",
    )

    console.print(panel)
