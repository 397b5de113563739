"""
GitHub Webhook / API response schemas（Pydantic）。

说明：
- 字段只覆盖当前需要的子集（PR webhook + get commit + commit 关联的 PR）。
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class GitHubOwner(BaseModel):
    login: str


class GitHubRepository(BaseModel):
    name: str
    owner: GitHubOwner
    full_name: str


class GitHubPullRequestHead(BaseModel):
    sha: str
    ref: str


class GitHubPullRequest(BaseModel):
    number: int
    head: GitHubPullRequestHead
    draft: bool = False


class GitHubPullRequestWebhookEvent(BaseModel):
    """
    GitHub `pull_request` webhook event（最小结构）。

    action 保留为字符串：GitHub 会不断新增 action，未知 action 只是不分析，不应该 400
    """

    action: str
    pull_request: GitHubPullRequest
    repository: GitHubRepository


class GitHubPullRequestSummary(BaseModel):
    """GET /commits/{sha}/pulls 的 item（只取 number/state）。"""

    number: int
    state: str = "open"


class GitHubCommitAuthor(BaseModel):
    name: str
    date: datetime


class GitHubCommitBody(BaseModel):
    message: str
    author: GitHubCommitAuthor


class GitHubCommitFile(BaseModel):
    """
    commit 文件列表 item。

    patch 可能缺失（例如大文件/二进制/被截断），这种情况在 adapter 里按空 diff 处理。
    """

    filename: str
    status: Literal["added", "modified", "removed", "renamed", "changed", "copied", "unchanged"]
    additions: int = 0
    deletions: int = 0
    patch: str | None = None


class GitHubCommitDetail(BaseModel):
    """GET /repos/{owner}/{repo}/commits/{ref} 的返回结构（子集）。"""

    sha: str
    commit: GitHubCommitBody
    files: list[GitHubCommitFile] = Field(default_factory=list)
