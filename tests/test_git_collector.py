from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from commit_coach.git.collector import GitCommandError
from commit_coach.git.collector import GitCommitCollector
from commit_coach.git.collector import parse_file_status
from commit_coach.git.collector import parse_name_status
from commit_coach.git.collector import parse_numstat

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def test_parse_file_status() -> None:
    assert parse_file_status("A") == "added"
    assert parse_file_status("D") == "deleted"
    assert parse_file_status("R087") == "renamed"
    assert parse_file_status("M") == "modified"
    assert parse_file_status("T") == "modified"


def test_parse_name_status_with_rename() -> None:
    output = "M\x00src/a.py\x00R100\x00old.py\x00new.py\x00A\x00b.py\x00"
    assert parse_name_status(output) == [("src/a.py", "modified"), ("new.py", "renamed"), ("b.py", "added")]


def test_parse_numstat_binary_and_rename() -> None:
    output = "3\t1\tsrc/a.py\x00-\t-\tlogo.png\x005\t0\t\x00old.py\x00new.py\x00"
    assert parse_numstat(output) == {"src/a.py": (3, 1), "logo.png": (0, 0), "new.py": (5, 0)}


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True)


@requires_git
def test_collect_commit_from_repository(tmp_path: Path) -> None:
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.email", "dev@example.com")
    _git(tmp_path, "config", "user.name", "Dev")
    (tmp_path / "helper.js").write_text("export function helper() {}\n", encoding="utf-8")
    _git(tmp_path, "add", ".")
    _git(tmp_path, "-c", "commit.gpgsign=false", "commit", "-q", "-m", "Add helper\n\nLonger body.")

    collector = GitCommitCollector(repo_path=str(tmp_path))
    assert collector.is_repository()
    commit = collector.get_commit("HEAD")
    assert commit.author == "Dev"
    assert commit.message == "Add helper\n\nLonger body."
    assert len(commit.hash) == 40
    assert [(f.path, f.status, f.additions, f.deletions) for f in commit.files] == [("helper.js", "added", 1, 0)]
    assert "+export function helper() {}" in commit.files[0].diff
    assert commit.date.tzinfo is not None


@requires_git
def test_unknown_revision_raises(tmp_path: Path) -> None:
    _git(tmp_path, "init", "-q")
    with pytest.raises(GitCommandError):
        GitCommitCollector(repo_path=str(tmp_path)).get_commit("does-not-exist")


def test_missing_directory_is_not_a_repository(tmp_path: Path) -> None:
    assert not GitCommitCollector(repo_path=str(tmp_path / "missing")).is_repository()


def _init_repo(repo: Path) -> None:
    _git(repo, "init", "-q")
    _git(repo, "config", "user.email", "dev@example.com")
    _git(repo, "config", "user.name", "Dev")


def _commit_all(repo: Path, message: str) -> None:
    _git(repo, "add", ".")
    _git(repo, "-c", "commit.gpgsign=false", "commit", "-q", "-m", message)


@requires_git
def test_latin1_file_is_decoded_with_replacement(tmp_path: Path) -> None:
    _init_repo(tmp_path)
    (tmp_path / "legacy.py").write_bytes("x = 'caf\xe9'\n".encode("latin-1"))
    _commit_all(tmp_path, "Add legacy module")

    commit = GitCommitCollector(repo_path=str(tmp_path)).get_commit("HEAD")
    assert [(f.path, f.additions) for f in commit.files] == [("legacy.py", 1)]
    assert "+x = 'caf�'" in commit.files[0].diff


@requires_git
def test_non_ascii_path_keeps_its_diff(tmp_path: Path) -> None:
    _init_repo(tmp_path)
    (tmp_path / "naïve.js").write_text("export function naive() {}\n", encoding="utf-8")
    _commit_all(tmp_path, "Add naive module")

    commit = GitCommitCollector(repo_path=str(tmp_path)).get_commit("HEAD")
    assert [f.path for f in commit.files] == ["naïve.js"]
    assert "+export function naive() {}" in commit.files[0].diff
