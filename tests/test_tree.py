"""Tests for flattening, visibility and tree navigation."""

import pytest

from issue_hierarchy.models import Epic, Project
from issue_hierarchy.tree import (
    TreeIndex,
    build_breadcrumb,
    calculate_indentation,
    flatten_tree,
    get_descendant_issues,
    get_descendant_nodes,
    get_visible_nodes,
    is_last_child,
)

from conftest import depends_on, make_issue, make_node


@pytest.fixture
def project():
    project = Project(id="p1", number=1, name="Personal Tasks")
    project.epics = [
        Epic(id="e1", project_id="p1", number=3, name="Backend"),
        Epic(id="e2", project_id="p1", number=4, name="Empty"),
    ]
    blocker = make_issue("i9", status="doing", epic_id="other")
    project.issues = [
        make_issue("i1", status="done", story_points=3, number=1),
        make_issue("i2", status="todo", story_points=5, number=2),
        make_issue("i3", status="todo", story_points=2, parent_issue_id="i1", number=3),
        depends_on(
            make_issue("i4", status="doing", parent_issue_id="i1", number=4), blocker
        ),
    ]
    return project


class TestFlattenTree:
    def test_order_and_levels(self, project):
        nodes = flatten_tree([project])

        assert [(n.id, n.type, n.level, n.parent_id) for n in nodes] == [
            ("p1", "project", 0, None),
            ("e1", "epic", 1, "p1"),
            ("i1", "issue", 2, "e1"),
            ("i3", "sub-issue", 3, "i1"),
            ("i4", "sub-issue", 3, "i1"),
            ("i2", "issue", 2, "e1"),
            ("e2", "epic", 1, "p1"),
        ]

    def test_has_children(self, project):
        nodes = {n.id: n for n in flatten_tree([project])}

        assert nodes["p1"].has_children
        assert nodes["e1"].has_children
        assert not nodes["e2"].has_children
        assert nodes["i1"].has_children
        assert not nodes["i2"].has_children
        assert not nodes["i3"].has_children

    def test_epic_counts_cover_top_level_issues_only(self, project):
        epic = {n.id: n for n in flatten_tree([project])}["e1"]

        assert epic.counts.total == 2
        assert epic.counts.done == 1
        assert epic.counts.ready == 1
        assert epic.metrics.total_issues == 2
        assert epic.metrics.total_story_points == 8

    def test_issue_counts_include_sub_issues(self, project):
        issue = {n.id: n for n in flatten_tree([project])}["i1"]

        assert issue.counts.done == 1
        assert issue.counts.ready == 1
        assert issue.counts.blocked == 1
        assert issue.metrics.total_story_points == 5

    def test_project_counts_cover_all_issues(self, project):
        root = flatten_tree([project])[0]
        assert root.counts.total == 4
        assert root.metrics.total_issues == 4

    def test_sub_issue_has_single_issue_counts_and_no_rollups(self, project):
        sub = {n.id: n for n in flatten_tree([project])}["i4"]

        assert sub.counts.blocked == 1
        assert sub.counts.total == 1
        assert sub.total_points is None
        assert sub.progress is None

    def test_empty_project(self):
        nodes = flatten_tree([Project(id="p", number=1, name="Empty")])
        assert len(nodes) == 1
        assert nodes[0].has_children is False

    def test_no_projects(self):
        assert flatten_tree([]) == []


class TestVisibility:
    def test_only_projects_when_nothing_expanded(self, project):
        nodes = flatten_tree([project])
        assert [n.id for n in get_visible_nodes(nodes, set())] == ["p1"]

    def test_children_of_expanded_nodes(self, project):
        nodes = flatten_tree([project])
        visible = get_visible_nodes(nodes, {"p1", "e1"})
        assert [n.id for n in visible] == ["p1", "e1", "i1", "i2", "e2"]

    def test_child_of_collapsed_parent_hidden_even_if_expanded(self, project):
        nodes = flatten_tree([project])
        visible = get_visible_nodes(nodes, {"e1"})
        assert [n.id for n in visible] == ["p1", "i1", "i2"]


class TestDescendants:
    def test_descendant_nodes_pre_order(self, project):
        nodes = flatten_tree([project])
        root = nodes[0]
        assert [n.id for n in get_descendant_nodes(root, nodes)] == [
            "e1", "i1", "i3", "i4", "i2", "e2",
        ]

    def test_descendant_issues(self, project):
        nodes = flatten_tree([project])
        root = nodes[0]
        assert [n.id for n in get_descendant_issues(root, nodes)] == ["i1", "i3", "i4", "i2"]

    def test_leaf_has_no_descendants(self, project):
        nodes = flatten_tree([project])
        leaf = {n.id: n for n in nodes}["i3"]
        assert get_descendant_nodes(leaf, nodes) == []


class TestIsLastChild:
    def test_root_is_never_last(self, project):
        nodes = flatten_tree([project])
        assert is_last_child(nodes[0], nodes) is False

    def test_last_among_siblings(self, project):
        nodes = {n.id: n for n in flatten_tree([project])}
        all_nodes = list(nodes.values())

        assert is_last_child(nodes["i2"], all_nodes) is True
        assert is_last_child(nodes["i1"], all_nodes) is False
        assert is_last_child(nodes["i4"], all_nodes) is True

    def test_depends_on_list_passed(self):
        a = make_node("a", "issue", parent_id="e1")
        b = make_node("b", "issue", parent_id="e1")

        assert is_last_child(a, [a, b]) is False
        assert is_last_child(a, [a]) is True


class TestTreeIndex:
    def test_children_depth_and_ancestors(self, project):
        index = TreeIndex(flatten_tree([project]))

        assert [n.id for n in index.get_roots()] == ["p1"]
        assert [n.id for n in index.get_children("i1")] == ["i3", "i4"]
        assert index.get_depth("i3") == 3
        assert [n.id for n in index.get_ancestors("i3")] == ["i1", "e1", "p1"]

    def test_malformed_parent_loop_terminates(self):
        a = make_node("a", "issue", parent_id="b")
        b = make_node("b", "issue", parent_id="a")
        index = TreeIndex([a, b])

        assert [n.id for n in index.get_ancestors("a")] == ["b"]
        assert [n.id for n in index.get_all_descendants("a")] == ["b"]


class TestBreadcrumb:
    def test_full_path(self, project):
        nodes = flatten_tree([project])
        assert build_breadcrumb("i3", nodes) == (
            "P-1 Personal Tasks / E-3 Backend / I-1 Issue i1 / I-3 Issue i3"
        )

    def test_project_only(self, project):
        assert build_breadcrumb("p1", flatten_tree([project])) == "P-1 Personal Tasks"

    def test_unknown_or_none(self, project):
        nodes = flatten_tree([project])
        assert build_breadcrumb(None, nodes) == ""
        assert build_breadcrumb("nope", nodes) == ""


def test_indentation():
    assert calculate_indentation(0) == "0px"
    assert calculate_indentation(3) == "48px"
