"""
FastAPI 服务入口。

这里做三件事：
- 加载配置（严格校验环境变量 + 仓库里的 commit-coach 规则配置）
- 组装外部依赖（HTTP Client / GitHub Webhook handler / InsightEngine）
- 装配路由（health + github webhook）

注意：
- 业务流程不写在这里（由 `orchestrator.py` 负责）
- `httpx.AsyncClient` 会被复用（避免每个请求新建连接）
"""

from __future__ import annotations

import os
from collections.abc import Mapping

import httpx
from fastapi import FastAPI

from commit_coach.config import load_config_from_env
from commit_coach.github.webhook import build_github_webhook_router
from commit_coach.insights.engine import build_insight_engine
from commit_coach.insights.loader import load_config
from commit_coach.orchestrator import build_github_webhook_handler


def build_app(environ: Mapping[str, str] | None = None, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    """创建并返回 FastAPI app（便于测试/复用）。"""

    # 1) 配置：缺失会直接抛错，启动失败（这是期望行为）
    config = load_config_from_env(os.environ if environ is None else environ)

    # 2) 规则配置：未知 rule id / 越界阈值也在启动时暴露
    engine = build_insight_engine(config=load_config(config.coach_config_dir))

    # 3) 可复用的 HTTP client：供 GitHub API 调用使用
    http_client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(30.0))

    app = FastAPI(title="Commit Coach", version="0.1.0")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """健康检查：用于 k8s / LB 探活。"""
        return {"status": "ok"}

    handler = build_github_webhook_handler(config=config, http_client=http_client, engine=engine)
    app.include_router(build_github_webhook_router(config=config, handler=handler))
    return app


def create_app() -> FastAPI:
    """uvicorn factory 入口：`uvicorn commit_coach.main:create_app --factory`。"""
    return build_app()
