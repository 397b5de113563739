from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from commit_coach.cli import CONFIG_FILENAME
from commit_coach.cli import cli
from commit_coach.cli import parse_github_remote
from commit_coach.insights.loader import SAMPLE_CONFIG


@pytest.mark.parametrize(
    ("remote", "expected"),
    [
        ("git@github.com:org/repo.git", ("org", "repo")),
        ("https://github.com/org/repo", ("org", "repo")),
        ("https://github.com/org/repo.git/", ("org", "repo")),
        ("https://gitlab.com/org/repo.git", None),
    ],
)
def test_parse_github_remote(remote: str, expected: tuple[str, str] | None) -> None:
    assert parse_github_remote(remote) == expected


def test_init_writes_sample_config_once() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert Path(CONFIG_FILENAME).read_text(encoding="utf-8") == SAMPLE_CONFIG

        Path(CONFIG_FILENAME).write_text("output:\n  maxInsights: 1\n", encoding="utf-8")
        result = runner.invoke(cli, ["init"])
        assert "already exists" in result.output
        assert "maxInsights: 1" in Path(CONFIG_FILENAME).read_text(encoding="utf-8")

        assert runner.invoke(cli, ["init", "--force"]).exit_code == 0
        assert Path(CONFIG_FILENAME).read_text(encoding="utf-8") == SAMPLE_CONFIG


def test_rules_lists_registry_with_overrides() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path(CONFIG_FILENAME).write_text("rules:\n  - id: large-commit\n    enabled: false\n", encoding="utf-8")
        result = runner.invoke(cli, ["rules"])
        assert result.exit_code == 0
        assert "large-commit" in result.output
        assert "sql-injection-risk" in result.output


def test_rules_reports_unknown_rule_id() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path(CONFIG_FILENAME).write_text("rules:\n  - id: nope\n", encoding="utf-8")
        result = runner.invoke(cli, ["rules"])
        assert result.exit_code == 1
        assert "Analysis failed" in result.output
        assert "nope" in result.output


def test_analyze_outside_repository(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["analyze", "--repo", str(tmp_path)])
    assert result.exit_code == 1
    assert "Not a git repository" in result.output
