"""
Snapshot input validation.

Validates snapshot files against the JSON schema and performs structural
validation (duplicates, orphaned references, cross-project parenting,
dependency cycles).
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, List, Set

import jsonschema

from .graph import DependencyGraph
from .issue_helpers import validate_milestone_name
from .models import Dependency, Issue


logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).parent / "schemas" / "snapshot-schema.json"


class ValidationError(Exception):
    """Custom exception for validation errors."""

    pass


def _load_json(path: Path, kind: str) -> Dict[str, Any]:
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        raise ValidationError(f"{kind} file not found: {path}")
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {kind.lower()} file: {e}")


def load_schema(schema_path: Path = DEFAULT_SCHEMA_PATH) -> Dict[str, Any]:
    """
    Load JSON schema from file.

    Args:
        schema_path: Path to the JSON schema file

    Returns:
        Parsed JSON schema

    Raises:
        ValidationError: If schema file cannot be loaded
    """
    return _load_json(schema_path, "Schema")


def load_snapshot_file(input_path: Path) -> Dict[str, Any]:
    """
    Load a snapshot JSON file.

    Args:
        input_path: Path to the snapshot file

    Returns:
        Parsed snapshot data

    Raises:
        ValidationError: If the file cannot be loaded
    """
    return _load_json(input_path, "Snapshot")


def validate_against_schema(data: Dict[str, Any], schema: Dict[str, Any]) -> None:
    """
    Validate data against JSON schema.

    Args:
        data: Snapshot data to validate
        schema: JSON schema

    Raises:
        ValidationError: If validation fails with detailed error message
    """
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ' → '.join(str(p) for p in e.absolute_path) if e.absolute_path else 'root'
        raise ValidationError(
            f"Schema validation failed at '{path}': {e.message}"
        )
    except jsonschema.SchemaError as e:
        raise ValidationError(f"Invalid schema: {e.message}")


def validate_unique_ids(records: List[Dict[str, Any]], kind: str = "issue") -> None:
    """
    Validate that all record IDs are unique.

    Args:
        records: List of entity dictionaries
        kind: Entity kind used in the error message

    Raises:
        ValidationError: If duplicate IDs are found
    """
    seen_ids: Set[str] = set()
    duplicates: List[str] = []

    for record in records:
        record_id = record['id']
        if record_id in seen_ids:
            duplicates.append(record_id)
        seen_ids.add(record_id)

    if duplicates:
        raise ValidationError(
            f"Duplicate {kind} IDs found: {', '.join(duplicates)}"
        )


def validate_ownership(
    projects: List[Dict[str, Any]],
    epics: List[Dict[str, Any]],
    issues: List[Dict[str, Any]],
) -> None:
    """
    Validate that epics and issues point at existing owners.

    Every epic needs an existing project; every issue needs an existing
    project and an epic of that same project.

    Raises:
        ValidationError: If orphaned or mismatched owners are found
    """
    project_ids = {project['id'] for project in projects}
    epic_projects = {epic['id']: epic['project_id'] for epic in epics}
    problems: List[str] = []

    for epic in epics:
        if epic['project_id'] not in project_ids:
            problems.append(f"epic {epic['id']} → missing project {epic['project_id']}")

    for issue in issues:
        if issue['project_id'] not in project_ids:
            problems.append(f"issue {issue['id']} → missing project {issue['project_id']}")
        epic_project = epic_projects.get(issue['epic_id'])
        if epic_project is None:
            problems.append(f"issue {issue['id']} → missing epic {issue['epic_id']}")
        elif epic_project != issue['project_id']:
            problems.append(
                f"issue {issue['id']} → epic {issue['epic_id']} belongs to project {epic_project}"
            )

    if problems:
        raise ValidationError(
            "Invalid ownership references found:\n  " + "\n  ".join(problems)
        )


def validate_parent_references(issues: List[Dict[str, Any]]) -> None:
    """
    Validate that all parent_issue_id references point to valid parents.

    A parent must exist, must itself be a top-level issue, and must belong
    to the same project as the sub-issue.

    Args:
        issues: List of issue dictionaries

    Raises:
        ValidationError: If invalid parent references are found
    """
    by_id = {issue['id']: issue for issue in issues}
    problems: List[str] = []

    for issue in issues:
        parent_id = issue.get('parent_issue_id')
        if parent_id is None:
            continue

        parent = by_id.get(parent_id)
        if parent is None:
            problems.append(f"{issue['id']} → {parent_id} (not found)")
        elif parent.get('parent_issue_id') is not None:
            problems.append(f"{issue['id']} → {parent_id} (parent is itself a sub-issue)")
        elif parent['project_id'] != issue['project_id']:
            problems.append(f"{issue['id']} → {parent_id} (parent is in another project)")

    if problems:
        raise ValidationError(
            "Invalid parent references found:\n  " + "\n  ".join(problems)
        )


def validate_dependency_references(
    issues: List[Dict[str, Any]], dependencies: List[Dict[str, Any]]
) -> None:
    """
    Validate that dependency edges join existing, distinct issues.

    Raises:
        ValidationError: If dangling or self-referencing edges are found
    """
    issue_ids = {issue['id'] for issue in issues}
    problems: List[str] = []

    for dep in dependencies:
        issue_id = dep['issue_id']
        target_id = dep['depends_on_issue_id']
        if issue_id == target_id:
            problems.append(f"{issue_id} → {target_id} (self-dependency)")
        elif issue_id not in issue_ids or target_id not in issue_ids:
            problems.append(f"{issue_id} → {target_id} (unknown issue)")

    if problems:
        raise ValidationError(
            "Invalid dependencies found:\n  " + "\n  ".join(problems)
        )


def validate_no_circular_dependencies(
    issues: List[Dict[str, Any]], dependencies: List[Dict[str, Any]]
) -> None:
    """
    Validate that there are no circular dependencies between issues.

    Args:
        issues: List of issue dictionaries
        dependencies: List of dependency dictionaries

    Raises:
        ValidationError: If circular dependencies are detected
    """
    graph = DependencyGraph(Dependency.from_dict(dep) for dep in dependencies)
    ordered = graph.topological_sort([Issue.from_dict(issue) for issue in issues])

    if ordered is None:
        raise ValidationError("Circular dependency detected between issues")


def validate_milestones(milestones: List[Dict[str, Any]]) -> None:
    invalid = [m['id'] for m in milestones if not validate_milestone_name(m.get('name'))]
    if invalid:
        raise ValidationError(f"Invalid milestone names: {', '.join(invalid)}")


def find_stale_sub_issues(issues: List[Dict[str, Any]]) -> List[str]:
    """
    Find sub-issues whose epic no longer matches their parent's epic.

    Args:
        issues: List of issue dictionaries

    Returns:
        IDs of sub-issues that need their epic cascaded from the parent
    """
    by_id = {issue['id']: issue for issue in issues}
    stale: List[str] = []

    for issue in issues:
        parent = by_id.get(issue.get('parent_issue_id'))
        if parent is not None and parent['epic_id'] != issue['epic_id']:
            stale.append(issue['id'])

    return stale


def validate_snapshot(data: Dict[str, Any], schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate already-parsed snapshot data.

    Args:
        data: Snapshot data
        schema: JSON schema

    Returns:
        The validated data

    Raises:
        ValidationError: If any validation fails
    """
    validate_against_schema(data, schema)

    projects = data.get('projects', [])
    epics = data.get('epics', [])
    issues = data.get('issues', [])
    dependencies = data.get('dependencies', [])
    milestones = data.get('milestones', [])

    validate_unique_ids(projects, "project")
    validate_unique_ids(epics, "epic")
    validate_unique_ids(issues, "issue")
    validate_unique_ids(milestones, "milestone")
    validate_ownership(projects, epics, issues)
    validate_parent_references(issues)
    validate_dependency_references(issues, dependencies)
    validate_no_circular_dependencies(issues, dependencies)
    validate_milestones(milestones)

    stale = find_stale_sub_issues(issues)
    if stale:
        logger.warning(
            f"Sub-issues with an epic different from their parent: {', '.join(stale)}"
        )

    return data


def validate_snapshot_file(
    input_path: Path, schema_path: Path = DEFAULT_SCHEMA_PATH
) -> Dict[str, Any]:
    """
    Validate a snapshot file comprehensively.

    Performs:
    1. JSON schema validation
    2. Unique ID validation
    3. Ownership and parent reference validation
    4. Dependency reference and cycle validation

    Args:
        input_path: Path to the snapshot file
        schema_path: Path to the JSON schema file

    Returns:
        Validated snapshot data

    Raises:
        ValidationError: If any validation fails
    """
    schema = load_schema(schema_path)
    data = load_snapshot_file(input_path)

    return validate_snapshot(data, schema)
