"""
GitHub API 客户端（外部系统连接器）。

约定：
- 这里只做 HTTP 调用 + 错误处理 + schema 校验
- 出错直接抛错（不要吞），便于定位与告警
"""

from __future__ import annotations

from typing import Literal

import httpx

from commit_coach.github.schemas import GitHubCommitDetail
from commit_coach.github.schemas import GitHubPullRequestSummary

CommitStatusState = Literal["error", "failure", "pending", "success"]


class GitHubClient:
    """最小 GitHub API client（get commit + 找 PR + PR 评论 + commit status）。"""

    def __init__(self, api_base_url: str, token: str, http_client: httpx.AsyncClient) -> None:
        self._api_base_url = api_base_url.rstrip("/")
        self._token = token
        self._http_client = http_client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code >= 400:
            raise RuntimeError(f"GitHub API error {response.status_code}: {response.text}")

    async def get_commit(self, owner: str, repo: str, ref: str) -> GitHubCommitDetail:
        """
        拉取单个 commit（包含每个文件的 patch / additions / deletions）。

        注意：GitHub 对文件很多的 commit 会分页；这里会拉取全部文件。
        """
        per_page = 100
        page = 1
        detail: GitHubCommitDetail | None = None
        while True:
            url = f"{self._api_base_url}/repos/{owner}/{repo}/commits/{ref}"
            response = await self._http_client.get(
                url,
                headers=self._headers(),
                params={"per_page": per_page, "page": page},
            )
            self._raise_for_status(response)
            page_detail = GitHubCommitDetail.model_validate(response.json())
            if detail is None:
                detail = page_detail
            else:
                detail.files.extend(page_detail.files)
            if len(page_detail.files) < per_page:
                break
            page += 1
        return detail

    async def list_pull_requests_for_commit(self, owner: str, repo: str, sha: str) -> list[GitHubPullRequestSummary]:
        url = f"{self._api_base_url}/repos/{owner}/{repo}/commits/{sha}/pulls"
        response = await self._http_client.get(url, headers=self._headers())
        self._raise_for_status(response)
        data = response.json()
        if not isinstance(data, list):
            raise RuntimeError(f"Unexpected GitHub response shape for commit pulls: {data}")
        return [GitHubPullRequestSummary.model_validate(x) for x in data]

    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        """PR 评论（PR 在 GitHub API 里也是 issue）。"""
        url = f"{self._api_base_url}/repos/{owner}/{repo}/issues/{issue_number}/comments"
        response = await self._http_client.post(url, headers=self._headers(), json={"body": body})
        self._raise_for_status(response)

    async def create_commit_status(
        self,
        owner: str,
        repo: str,
        sha: str,
        state: CommitStatusState,
        description: str,
        context: str,
        target_url: str | None = None,
    ) -> None:
        url = f"{self._api_base_url}/repos/{owner}/{repo}/statuses/{sha}"
        # GitHub 限制 description 最长 140 字符
        payload: dict[str, str] = {"state": state, "description": description[:140], "context": context}
        if target_url:
            payload["target_url"] = target_url
        response = await self._http_client.post(url, headers=self._headers(), json=payload)
        self._raise_for_status(response)
