"""
Command-line interface using Click.

Provides commands for validating snapshots and inspecting the hierarchy,
dependency order and drag-and-drop moves.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from rich.console import Console

from .core import Snapshot, load_snapshot
from .display import (
    display_counts_panel,
    display_dependency_order,
    display_issue_dependencies,
    display_tree,
)
from .validator import ValidationError
from .utils import format_project_number, load_config, setup_logging


logger = logging.getLogger(__name__)
console = Console()


def input_option(func):
    return click.option(
        "--input",
        "-i",
        "input_file",
        type=click.Path(exists=True, path_type=Path),
        required=True,
        help="Path to snapshot JSON file",
    )(func)


def config_option(func):
    return click.option(
        "--config",
        "-c",
        "config_file",
        type=click.Path(path_type=Path),
        default="config.json",
        help="Path to configuration file (default: config.json)",
    )(func)


def log_level_option(func):
    return click.option(
        "--log-level",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
        default=None,
        help="Logging level (overrides config)",
    )(func)


def _prepare(config_file: Path, log_level: Optional[str]) -> Dict[str, Any]:
    """Load configuration and set up logging."""
    config = load_config(config_file)

    if log_level:
        config["log_level"] = log_level

    log_dir = Path(config["log_directory"])
    log_dir.mkdir(parents=True, exist_ok=True)

    setup_logging(
        log_level=config["log_level"],
        log_file=log_dir / "issue-hierarchy.log",
        enable_color=config["enable_color"],
    )

    return config


def _load(input_file: Path, config: Dict[str, Any]) -> Snapshot:
    """Load a snapshot, exiting with status 1 on validation errors."""
    schema_path = config.get("schema_path")

    try:
        return load_snapshot(input_file, Path(schema_path) if schema_path else None)
    except ValidationError as e:
        console.print(f"[red]✗[/red] Validation failed: {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]✗ Unexpected Error:[/red] {e}")
        logger.exception("Unexpected error while loading snapshot")
        sys.exit(1)


@click.group()
@click.version_option(version="1.0.0")
def main() -> None:
    """
    Issue Hierarchy Tool.

    Inspect Project → Epic → Issue → Sub-issue snapshots: blocked/ready
    state, rollups, dependency order and drag-and-drop moves.
    """
    pass


@main.command()
@input_option
@config_option
@log_level_option
def validate(input_file: Path, config_file: Path, log_level: Optional[str]) -> None:
    """
    Validate a snapshot file against the schema and hierarchy rules.

    Examples:
        issue-hierarchy validate --input snapshot.json
    """
    config = _prepare(config_file, log_level)
    snapshot = _load(input_file, config)

    console.print("[green]✓[/green] Validation passed")
    console.print(f"\nProjects: {len(snapshot.projects)}")
    console.print(f"Epics: {len(snapshot.epics)}")
    console.print(f"Issues: {len(snapshot.issues)}")

    sub_issue_count = sum(1 for issue in snapshot.issues if issue.is_sub_issue)
    console.print(f"Sub-issues: {sub_issue_count}")
    console.print(f"Dependencies: {len(snapshot.dependencies)}")


@main.command()
@input_option
@click.option(
    "--expand",
    "-e",
    "expand_ids",
    multiple=True,
    help="Node ID to expand (repeatable)",
)
@click.option("--all", "expand_all", is_flag=True, help="Expand every node")
@config_option
@log_level_option
def tree(
    input_file: Path,
    expand_ids: Tuple[str, ...],
    expand_all: bool,
    config_file: Path,
    log_level: Optional[str],
) -> None:
    """
    Show the hierarchy with counts, story point totals and progress.

    Examples:
        issue-hierarchy tree --input snapshot.json --all
        issue-hierarchy tree --input snapshot.json --expand p1 --expand e1
    """
    config = _prepare(config_file, log_level)
    snapshot = _load(input_file, config)

    nodes = snapshot.nodes
    if not config.get("show_sub_issues", True):
        nodes = [node for node in nodes if node.level < 3]

    if expand_all or config.get("expand_all"):
        display_tree(nodes)
    else:
        display_tree(nodes, set(expand_ids))


@main.command()
@input_option
@click.option("--project", "-p", "project_id", type=str, help="Limit to one project")
@config_option
@log_level_option
def counts(
    input_file: Path, project_id: Optional[str], config_file: Path, log_level: Optional[str]
) -> None:
    """
    Show issue counts, progress and story point metrics.

    Examples:
        issue-hierarchy counts --input snapshot.json
        issue-hierarchy counts --input snapshot.json --project p1
    """
    config = _prepare(config_file, log_level)
    snapshot = _load(input_file, config)

    title = "All projects"
    if project_id:
        project = snapshot.get_project(project_id)
        if project is None:
            console.print(f"[red]✗[/red] Project '{project_id}' not found")
            sys.exit(1)
        title = f"{format_project_number(project.number)} {project.name}"

    display_counts_panel(
        snapshot.counts(project_id),
        snapshot.progress(project_id),
        snapshot.metrics(project_id),
        title=title,
    )


@main.command()
@input_option
@click.option("--project", "-p", "project_id", type=str, help="Limit to one project")
@config_option
@log_level_option
def order(
    input_file: Path, project_id: Optional[str], config_file: Path, log_level: Optional[str]
) -> None:
    """
    List issues in dependency order (dependencies first).

    Examples:
        issue-hierarchy order --input snapshot.json
    """
    config = _prepare(config_file, log_level)
    snapshot = _load(input_file, config)

    ordered = snapshot.dependency_order(project_id)
    if ordered is None:
        console.print("[red]✗[/red] Dependencies contain a cycle; no order exists")
        sys.exit(1)

    display_dependency_order(ordered)


@main.command()
@input_option
@click.option("--issue", "issue_id", type=str, required=True, help="Issue ID")
@config_option
@log_level_option
def deps(
    input_file: Path, issue_id: str, config_file: Path, log_level: Optional[str]
) -> None:
    """
    Show what blocks an issue and what it blocks.

    Examples:
        issue-hierarchy deps --input snapshot.json --issue i3
    """
    config = _prepare(config_file, log_level)
    snapshot = _load(input_file, config)

    issue = snapshot.get_issue(issue_id)
    if issue is None:
        console.print(f"[red]✗[/red] Issue '{issue_id}' not found")
        sys.exit(1)

    dependents = [
        snapshot.issues_by_id[i]
        for i in snapshot.graph.get_blocked_issues(issue_id)
        if i in snapshot.issues_by_id
    ]
    upstream_ids = snapshot.graph.get_transitive_dependencies(issue_id)
    transitive = [i for i in snapshot.issues if i.id in upstream_ids]

    display_issue_dependencies(issue, dependents, transitive)


@main.command()
@input_option
@click.option("--source", "source_id", type=str, required=True, help="Dragged node ID")
@click.option("--target", "target_id", type=str, required=True, help="Drop target node ID")
@config_option
@log_level_option
def move(
    input_file: Path,
    source_id: str,
    target_id: str,
    config_file: Path,
    log_level: Optional[str],
) -> None:
    """
    Check a drag-and-drop move and print the resulting update as JSON.

    Exits with status 1 when the move is not allowed.

    Examples:
        issue-hierarchy move --input snapshot.json --source i4 --target e2
    """
    config = _prepare(config_file, log_level)
    snapshot = _load(input_file, config)

    plan = snapshot.plan_move(source_id, target_id)
    click.echo(json.dumps(plan, indent=2))

    if plan["action"] == "invalid":
        sys.exit(1)


if __name__ == "__main__":
    main()
