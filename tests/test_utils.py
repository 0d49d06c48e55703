"""Tests for formatting helpers and configuration loading."""

import json

import pytest

from issue_hierarchy.utils import (
    format_date,
    format_entity_number,
    format_entity_title,
    format_epic_number,
    format_file_size,
    format_issue_number,
    format_project_number,
    load_config,
)


class TestFormatting:
    def test_numbers(self):
        assert format_project_number(1) == "P-1"
        assert format_epic_number(3) == "E-3"
        assert format_issue_number(42) == "I-42"

    @pytest.mark.parametrize(
        "entity_type,expected",
        [("project", "P-7"), ("epic", "E-7"), ("issue", "I-7"), ("sub-issue", "I-7")],
    )
    def test_entity_number(self, entity_type, expected):
        assert format_entity_number(entity_type, 7) == expected

    def test_entity_title(self):
        assert format_entity_title("issue", 123, "Fix login bug") == "I-123: Fix login bug"

    def test_file_size(self):
        assert format_file_size(512) == "512 B"
        assert format_file_size(1536) == "1.5 KB"
        assert format_file_size(5 * 1024 ** 2) == "5.0 MB"
        assert format_file_size(2 * 1024 ** 3) == "2.0 GB"

    def test_date(self):
        assert format_date("2026-10-19") == "Oct 19, 2026"
        assert format_date("2026-01-05T08:30:00Z") == "Jan 5, 2026"

    def test_date_fallbacks(self):
        assert format_date(None) == ""
        assert format_date("next week") == "next week"


class TestLoadConfig:
    def test_defaults_when_missing(self, tmp_path):
        config = load_config(tmp_path / "config.json")

        assert config["log_level"] == "INFO"
        assert config["log_directory"] == "logs/"
        assert config["enable_color"] is True
        assert config["schema_path"] is None

    def test_user_values_override_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"log_level": "DEBUG", "expand_all": True}))

        config = load_config(path)

        assert config["log_level"] == "DEBUG"
        assert config["expand_all"] is True
        assert config["show_sub_issues"] is True

    def test_invalid_json_falls_back(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{oops")
        assert load_config(path)["log_level"] == "INFO"

    def test_non_object_falls_back(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        assert load_config(path)["enable_color"] is True
