"""Tests for snapshot loading, joining and the computations built on it."""

import logging

import pytest

from issue_hierarchy.core import Snapshot, load_snapshot
from issue_hierarchy.issue_helpers import is_blocked, is_ready
from issue_hierarchy.models import IssueCounts, Progress, ProjectMetrics
from issue_hierarchy.validator import ValidationError


@pytest.fixture
def snapshot(sample_snapshot_data):
    return Snapshot.from_dict(sample_snapshot_data)


class TestJoin:
    def test_epics_follow_sort_order(self, snapshot):
        project = snapshot.get_project("p1")
        assert [epic.id for epic in project.epics] == ["e1", "e2"]

    def test_issues_attached_to_projects(self, snapshot):
        assert [i.id for i in snapshot.get_project("p1").issues] == ["i1", "i2", "i3", "i4"]
        assert [i.id for i in snapshot.get_project("p2").issues] == ["i5"]

    def test_dependency_targets_resolved(self, snapshot):
        i2 = snapshot.get_issue("i2")
        assert [dep.depends_on_issue.id for dep in i2.dependencies] == ["i1"]
        assert not is_blocked(i2)
        assert is_blocked(snapshot.get_issue("i4"))
        assert is_ready(snapshot.get_issue("i3"))

    def test_issues_follow_sort_order(self, sample_snapshot_data):
        issues = sample_snapshot_data["issues"]
        issues[0]["sort_order"] = 1
        issues[1]["sort_order"] = 0
        issues.append(
            {"id": "i6", "project_id": "p1", "epic_id": "e1", "number": 6,
             "title": "Migrations", "sort_order": 2}
        )
        snapshot = Snapshot.from_dict(sample_snapshot_data)

        assert [n.id for n in snapshot.nodes if n.parent_id == "e1"] == ["i2", "i1", "i6"]

    def test_unordered_issues_sort_by_number(self, sample_snapshot_data):
        issues = sample_snapshot_data["issues"]
        issues[0], issues[1] = issues[1], issues[0]
        snapshot = Snapshot.from_dict(sample_snapshot_data)

        assert [i.id for i in snapshot.get_project("p1").issues] == ["i1", "i2", "i3", "i4"]

    def test_unknown_lookups(self, snapshot):
        assert snapshot.get_project("nope") is None
        assert snapshot.get_issue("nope") is None
        assert snapshot.get_node("nope") is None

    def test_unresolved_target_does_not_block(self, sample_snapshot_data):
        sample_snapshot_data["dependencies"].append(
            {"issue_id": "i5", "depends_on_issue_id": "gone"}
        )
        snapshot = Snapshot.from_dict(sample_snapshot_data)
        assert is_ready(snapshot.get_issue("i5"))


class TestAggregates:
    def test_counts_across_projects(self, snapshot):
        assert snapshot.counts() == IssueCounts(
            ready=2, blocked=1, doing=1, in_review=0, done=1, canceled=0
        )
        assert snapshot.progress() == Progress(completed=1, total=5, percentage=20)

    def test_counts_for_project(self, snapshot):
        assert snapshot.counts("p2") == IssueCounts(ready=1)
        assert snapshot.progress("p1").percentage == 25

    def test_metrics(self, snapshot):
        assert snapshot.metrics() == ProjectMetrics(
            total_issues=5, active_story_points=15, total_story_points=18
        )
        assert snapshot.metrics("p2") == ProjectMetrics(total_issues=1)


class TestNodes:
    def test_tree_order(self, snapshot):
        assert [n.id for n in snapshot.nodes] == [
            "p1", "e1", "i1", "i2", "i3", "e2", "i4", "p2", "e3", "i5",
        ]

    def test_rollups_applied(self, snapshot):
        assert snapshot.get_node("p1").total_points == 18
        assert snapshot.get_node("p1").progress == Progress(3, 18, 17)
        assert snapshot.get_node("e1").total_points == 10
        assert snapshot.get_node("e1").progress.percentage == 30
        assert snapshot.get_node("i2").total_points == 7
        assert snapshot.get_node("i3").progress is None

    def test_nodes_are_cached(self, snapshot):
        assert snapshot.nodes is snapshot.nodes


class TestDependencyOrder:
    def test_dependencies_first(self, snapshot):
        order = [issue.id for issue in snapshot.dependency_order()]
        assert order == ["i1", "i3", "i5", "i2", "i4"]

    def test_scoped_to_project(self, snapshot):
        assert [issue.id for issue in snapshot.dependency_order("p2")] == ["i5"]

    def test_cycle(self, sample_snapshot_data):
        sample_snapshot_data["dependencies"].append(
            {"issue_id": "i1", "depends_on_issue_id": "i4"}
        )
        assert Snapshot.from_dict(sample_snapshot_data).dependency_order() is None


class TestPlanMove:
    def test_siblings_reorder(self, snapshot):
        assert snapshot.plan_move("i1", "i2") == {
            "action": "reorder",
            "source": "i1",
            "target": "i2",
        }

    def test_issue_to_other_epic(self, snapshot):
        assert snapshot.plan_move("i4", "e1") == {
            "action": "reparent",
            "update": {
                "id": "i4",
                "new_sort_order": 1,
                "new_project_id": "p1",
                "new_epic_id": "e1",
            },
        }

    def test_issue_move_carries_sub_issue(self, snapshot):
        plan = snapshot.plan_move("i2", "e2")
        assert plan["update"]["cascade"] == [
            {"id": "i3", "new_project_id": "p1", "new_epic_id": "e2"}
        ]

    def test_sub_issue_to_other_issue(self, snapshot):
        update = snapshot.plan_move("i3", "i4")["update"]
        assert update["new_parent_issue_id"] == "i4"
        assert update["new_epic_id"] == "e2"
        assert update["new_sort_order"] == 0

    def test_epic_onto_own_issue(self, snapshot):
        assert snapshot.plan_move("e1", "i1") == {
            "action": "invalid",
            "reason": "Cannot move epic onto issue",
        }

    def test_unknown_node(self, snapshot):
        assert snapshot.plan_move("i1", "zz") == {
            "action": "invalid",
            "reason": "Unknown node 'zz'",
        }


class TestLoadSnapshot:
    def test_loads_and_logs_summary(self, snapshot_file, caplog):
        with caplog.at_level(logging.INFO, logger="issue_hierarchy.core"):
            snapshot = load_snapshot(snapshot_file)

        assert len(snapshot.issues) == 5
        assert "Loaded 2 projects, 3 epics, 5 issues, 2 dependencies" in caplog.text

    def test_invalid_file_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"projects": "nope"}')
        with pytest.raises(ValidationError):
            load_snapshot(path)
