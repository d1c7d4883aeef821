"""Tests for loading and validating runbook definition files."""

import pytest

from conftest import make_runbook, make_step
from opsbook.core.exceptions import RunbookError, ValidationError
from opsbook.runbooks.loader import RunbookLoader, RunbookStepSchema, parse_runbook
from opsbook.runbooks.schema import RunbookCategory, RunbookSeverity


@pytest.fixture
def loader() -> RunbookLoader:
    return RunbookLoader()


class TestRunbookStepSchema:
    """Tests for RunbookStepSchema validation."""

    def test_minimal_step(self):
        step = RunbookStepSchema(id="a", title="A")
        assert step.automated is True
        assert step.critical is True
        assert step.prerequisite == []
        assert step.estimated_minutes == 0

    def test_camel_case_alias(self):
        step = RunbookStepSchema(**{"id": "a", "title": "A", "estimatedMinutes": 4})
        assert step.estimated_minutes == 4

    def test_single_prerequisite_string(self):
        step = RunbookStepSchema(id="b", title="B", prerequisite="a")
        assert step.prerequisite == ["a"]

    def test_negative_estimate_rejected(self):
        with pytest.raises(ValueError):
            RunbookStepSchema(id="a", title="A", estimated_minutes=-1)


class TestParseRunbook:
    """Tests for parse_runbook."""

    def test_valid_dict(self):
        runbook = parse_runbook({
            "id": "rb",
            "title": "RB",
            "category": "failover",
            "severity": "medium",
            "steps": [{"id": "a", "title": "A", "estimatedMinutes": 2}],
        })
        assert runbook.category == RunbookCategory.FAILOVER
        assert runbook.severity == RunbookSeverity.MEDIUM
        assert runbook.total_estimated_time == 2
        assert runbook.execution_count == 0

    def test_invalid_category(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_runbook({"id": "rb", "title": "RB", "category": "magic", "severity": "low"})
        assert any(issue.startswith("category") for issue in exc_info.value.issues)

    def test_missing_step_title(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_runbook({
                "id": "rb",
                "title": "RB",
                "category": "backup",
                "severity": "low",
                "steps": [{"id": "a"}],
            })
        assert any("steps.0.title" in issue for issue in exc_info.value.issues)


class TestRunbookLoader:
    """Tests for RunbookLoader file handling."""

    def test_load_yaml(self, loader, runbook_file):
        runbook = loader.load(runbook_file)

        assert runbook.id == "cache-failover"
        assert runbook.step_ids == ["check-standby", "promote-standby", "notify-team"]
        assert runbook.total_estimated_time == 4
        promote = runbook.get_step("promote-standby")
        assert promote.prerequisite == ["check-standby"]
        assert promote.command == "redis-cli failover"
        notify = runbook.get_step("notify-team")
        assert notify.automated is False
        assert notify.critical is False

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(RunbookError, match="not found"):
            loader.load(tmp_path / "missing.yaml")

    def test_unsupported_suffix(self, loader, tmp_path):
        path = tmp_path / "runbook.json"
        path.write_text("{}")
        with pytest.raises(RunbookError, match="Unsupported"):
            loader.load(path)

    def test_empty_file(self, loader, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(RunbookError, match="Empty"):
            loader.load(path)

    def test_invalid_yaml(self, loader, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("id: [unclosed\n")
        with pytest.raises(RunbookError, match="Invalid YAML"):
            loader.load(path)

    def test_load_directory_sorted(self, loader, tmp_path, runbook_file):
        (tmp_path / "a-first.yml").write_text(
            "id: first\ntitle: First\ncategory: backup\nseverity: low\n"
        )
        (tmp_path / "notes.txt").write_text("ignored")

        runbooks = loader.load_directory(tmp_path)

        assert [rb.id for rb in runbooks] == ["first", "cache-failover"]

    def test_load_path_accepts_file_or_directory(self, loader, runbook_file):
        assert [rb.id for rb in loader.load_path(runbook_file)] == ["cache-failover"]
        assert [rb.id for rb in loader.load_path(runbook_file.parent)] == ["cache-failover"]


class TestRunbookValidation:
    """Tests for RunbookLoader.validate."""

    def test_valid_runbook(self, loader, runbook_file):
        assert loader.validate(loader.load(runbook_file)) == []

    def test_no_steps(self, loader):
        issues = loader.validate(make_runbook())
        assert "Runbook must have at least one step" in issues

    def test_duplicate_step_ids(self, loader):
        issues = loader.validate(make_runbook(steps=[make_step("a"), make_step("a")]))
        assert "Duplicate step ID: a" in issues

    def test_unknown_prerequisite(self, loader):
        issues = loader.validate(make_runbook(steps=[make_step("a", prerequisite=["ghost"])]))
        assert "Step a requires unknown step: ghost" in issues

    def test_prerequisite_on_later_step(self, loader):
        issues = loader.validate(make_runbook(steps=[
            make_step("a", prerequisite=["b"]),
            make_step("b"),
        ]))
        assert "Step a requires later step: b" in issues
