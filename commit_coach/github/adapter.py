"""
GitHub -> analysis domain adapter。

职责：
- 将 GitHub commit API 返回（files/patch）转为平台无关的 `CommitData`
"""

from __future__ import annotations

from commit_coach.analysis.models import ChangedFile
from commit_coach.analysis.models import CommitData
from commit_coach.analysis.models import FileStatus
from commit_coach.github.schemas import GitHubCommitDetail
from commit_coach.github.schemas import GitHubCommitFile

_STATUS_MAP: dict[str, FileStatus] = {
    "added": "added",
    "removed": "deleted",
    "renamed": "renamed",
    "modified": "modified",
    "changed": "modified",
    "copied": "modified",
    "unchanged": "modified",
}


def _file_diff(f: GitHubCommitFile) -> str:
    # GitHub 的 patch 只有 hunk，补一个 git 风格的文件头，和本地 `git show` 的输出保持一致
    if not f.patch:
        return ""
    header = f"diff --git a/{f.filename} b/{f.filename}\n--- a/{f.filename}\n+++ b/{f.filename}"
    return f"{header}\n{f.patch}"


def build_commit_data_from_github_commit(detail: GitHubCommitDetail) -> CommitData:
    files: list[ChangedFile] = []
    diffs: list[str] = []
    for f in detail.files:
        diff = _file_diff(f)
        if diff:
            diffs.append(diff)
        files.append(
            ChangedFile(
                path=f.filename,
                status=_STATUS_MAP[f.status],
                additions=f.additions,
                deletions=f.deletions,
                diff=diff,
            )
        )
    return CommitData(
        hash=detail.sha,
        message=detail.commit.message.strip(),
        author=detail.commit.author.name,
        date=detail.commit.author.date,
        diff="\n".join(diffs),
        files=tuple(files),
    )
