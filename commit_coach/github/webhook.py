"""
GitHub Webhook 接入层。

一次请求的流程：
1. 先校验签名（`X-Hub-Signature-256`，HMAC SHA256），签名不对的请求一律 401，不看 event 类型
2. `ping`（配置 webhook 时 GitHub 发的第一条）直接回 pong
3. `pull_request`：把 payload 归一化成 `GitHubTarget`（repo + head sha + PR 号）
4. 分析放到 BackgroundTasks 里跑，先给 GitHub 回 202（GitHub 对 webhook 响应有 10s 超时）

draft PR 不分析；`ready_for_review` 时再分析。
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Awaitable, Callable

from fastapi import APIRouter
from fastapi import BackgroundTasks
from fastapi import Header
from fastapi import HTTPException
from fastapi import Request
from fastapi import Response
from pydantic import ValidationError

from commit_coach.config import AppConfig
from commit_coach.github.schemas import GitHubPullRequestWebhookEvent
from commit_coach.orchestrator import GitHubTarget

logger = logging.getLogger(__name__)

AnalysisHandler = Callable[[GitHubTarget], Awaitable[None]]

ANALYZED_ACTIONS: frozenset[str] = frozenset({"opened", "reopened", "synchronize", "ready_for_review"})


def signature_matches(body: bytes, signature_header: str | None, secret: str) -> bool:
    """`sha256=<hexdigest>` 与 body 的 HMAC 一致才算通过（常量时间比较）。"""
    if not signature_header or not signature_header.startswith("sha256="):
        return False
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={digest}", signature_header)


def target_from_event(event: GitHubPullRequestWebhookEvent) -> GitHubTarget | None:
    """需要分析的 PR 事件 -> GitHubTarget；其余（closed / labeled / draft ...）返回 None。"""
    if event.action not in ANALYZED_ACTIONS or event.pull_request.draft:
        return None
    return GitHubTarget(
        owner=event.repository.owner.login,
        repo=event.repository.name,
        sha=event.pull_request.head.sha,
        pr_number=event.pull_request.number,
    )


def build_github_webhook_router(config: AppConfig, handler: AnalysisHandler) -> APIRouter:
    router = APIRouter()

    @router.post("/github/webhook", status_code=202)
    async def github_webhook(
        request: Request,
        response: Response,
        background_tasks: BackgroundTasks,
        x_github_event: str | None = Header(default=None, alias="X-GitHub-Event"),
        x_hub_signature_256: str | None = Header(default=None, alias="X-Hub-Signature-256"),
    ) -> dict[str, str]:
        body = await request.body()
        if not signature_matches(body, x_hub_signature_256, config.github_webhook_secret):
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

        if x_github_event == "ping":
            response.status_code = 200
            return {"status": "pong"}
        if x_github_event != "pull_request":
            response.status_code = 200
            return {"status": "ignored", "reason": f"event {x_github_event}"}

        try:
            event = GitHubPullRequestWebhookEvent.model_validate_json(body)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail="Invalid pull_request payload") from exc

        target = target_from_event(event)
        if target is None:
            response.status_code = 200
            return {"status": "ignored", "reason": f"action {event.action}"}

        logger.info(f"Queued analysis of {target.owner}/{target.repo}#{target.pr_number} @ {target.sha[:8]}")
        background_tasks.add_task(handler, target)
        return {"status": "accepted", "sha": target.sha}

    return router
