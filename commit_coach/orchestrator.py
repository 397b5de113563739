"""
GitHub 分析流程编排。

关键思想：
- **流程由工程代码控制**：fetch commit -> analyze -> (可选) PR 评论 -> (可选) commit status
- 分析本身是纯函数（`InsightEngine.analyze`），这里只负责 I/O 与装配

最小闭环：
Webhook / CLI -> get commit -> CommitData -> AnalysisResult -> PR comment + commit status
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from commit_coach.analysis.models import AnalysisResult
from commit_coach.config import AppConfig
from commit_coach.github.adapter import build_commit_data_from_github_commit
from commit_coach.github.client import CommitStatusState
from commit_coach.github.client import GitHubClient
from commit_coach.insights.engine import InsightEngine
from commit_coach.output.formatters import CommentFormatter
from commit_coach.output.formatters import count_by_type

logger = logging.getLogger(__name__)

STATUS_CONTEXT = "commit-coach/analysis"


@dataclass(frozen=True)
class GitHubTarget:
    """一次分析要回写的目标（repo + commit + 可选 PR）。"""

    owner: str
    repo: str
    sha: str
    pr_number: int | None = None


def commit_status_for(result: AnalysisResult) -> tuple[CommitStatusState, str]:
    """GitHub commit status 只有 success/failure/...：有 error 即 failure，warning 不阻塞。"""
    errors = count_by_type(result, "error")
    warnings = count_by_type(result, "warning")
    if errors > 0:
        return "failure", f"{errors} error(s) found"
    if warnings > 0:
        return "success", f"{warnings} warning(s) found"
    return "success", "No issues found"


async def find_pull_request_number(client: GitHubClient, owner: str, repo: str, sha: str) -> int | None:
    """commit 关联的 PR：优先 open 的，其次任意一个；找不到返回 None。"""
    pulls = await client.list_pull_requests_for_commit(owner=owner, repo=repo, sha=sha)
    for pull in pulls:
        if pull.state == "open":
            return pull.number
    return pulls[0].number if pulls else None


async def run_github_analysis(
    engine: InsightEngine,
    client: GitHubClient,
    target: GitHubTarget,
    comment: bool,
    status_check: bool,
) -> AnalysisResult:
    """
    跑一次完整分析并按需回写 GitHub。

    - comment：需要 target.pr_number，没有 PR 时跳过（只记日志）
    - status_check：在 target.sha 上创建 `commit-coach/analysis` status
    """
    detail = await client.get_commit(owner=target.owner, repo=target.repo, ref=target.sha)
    result = engine.analyze(build_commit_data_from_github_commit(detail))
    await publish_result(engine=engine, client=client, target=target, result=result, comment=comment, status_check=status_check)
    return result


async def publish_result(
    engine: InsightEngine,
    client: GitHubClient,
    target: GitHubTarget,
    result: AnalysisResult,
    comment: bool,
    status_check: bool,
) -> None:
    if comment:
        if target.pr_number is None:
            logger.info(f"No pull request associated with {target.sha[:8]}, skipping comment")
        else:
            body = CommentFormatter(engine.config.output).format(result)
            await client.create_issue_comment(
                owner=target.owner, repo=target.repo, issue_number=target.pr_number, body=body
            )
            logger.info(f"Posted comment to {target.owner}/{target.repo}#{target.pr_number}")

    if status_check:
        state, description = commit_status_for(result)
        await client.create_commit_status(
            owner=target.owner,
            repo=target.repo,
            sha=target.sha,
            state=state,
            description=f"Commit Coach: {description}",
            context=STATUS_CONTEXT,
            target_url=f"https://github.com/{target.owner}/{target.repo}/commit/{target.sha}",
        )
        logger.info(f"Created status check on {target.sha[:8]}: {state} - {description}")


def build_github_webhook_handler(
    config: AppConfig,
    http_client: httpx.AsyncClient,
    engine: InsightEngine,
) -> Callable[[GitHubTarget], Awaitable[None]]:
    """
    装配 webhook handler：
    - 把外部依赖（GitHubClient）和分析 engine 绑定起来
    - 返回一个 `async def handle(target)`，由 webhook 路由放进 background task
    """
    client = GitHubClient(
        api_base_url=str(config.github_api_base_url),
        token=config.github_token,
        http_client=http_client,
    )

    async def handle(target: GitHubTarget) -> None:
        """分析 PR head commit，并把结果写回 GitHub。"""
        result = await run_github_analysis(
            engine=engine,
            client=client,
            target=target,
            comment=config.comment_on_pr,
            status_check=config.create_status_check,
        )
        logger.info(f"Analyzed {target.owner}/{target.repo}@{target.sha[:8]}: {len(result.insights)} insight(s)")

    return handle
