"""
Webhook 服务配置加载。

设计目标：
- **严格**：缺少必要环境变量就直接报错（避免“看起来跑了其实没配置好”）
- **类型安全**：使用 Pydantic 校验 URL/布尔值等，减少运行时踩坑
- **可测试**：核心加载函数接收 `environ` 显式输入，便于单元测试

规则相关的配置（rules/thresholds/output）不在这里，见 `commit_coach.insights.loader`。
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, HttpUrl

_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class AppConfig(BaseModel):
    """webhook 服务运行所需的配置集合。"""

    github_api_base_url: HttpUrl
    github_token: str
    github_webhook_secret: str
    coach_config_dir: str = "."
    comment_on_pr: bool = True
    create_status_check: bool = True


def _env_flag(environ: Mapping[str, str], key: str, default: bool) -> bool:
    value = environ.get(key)
    if value is None or value == "":
        return default
    return value.strip().lower() not in _FALSE_VALUES


def load_config_from_env(environ: Mapping[str, str]) -> AppConfig:
    """
    从环境变量加载并校验配置。

    - **输入**：`environ`（例如 `os.environ`）
    - **输出**：`AppConfig`
    - **失败**：必填项缺失/为空则抛 `ValueError`
    """

    required_keys: tuple[str, ...] = ("GITHUB_TOKEN", "GITHUB_WEBHOOK_SECRET")

    missing: list[str] = [key for key in required_keys if key not in environ or not environ[key]]
    if missing:
        raise ValueError(f"Missing required env vars: {', '.join(missing)}")

    # 交给 Pydantic 做类型校验（例如 URL 合法性）
    return AppConfig(
        github_api_base_url=environ.get("GITHUB_API_BASE_URL") or "https://api.github.com",
        github_token=environ["GITHUB_TOKEN"],
        github_webhook_secret=environ["GITHUB_WEBHOOK_SECRET"],
        coach_config_dir=environ.get("COMMIT_COACH_CONFIG_DIR") or ".",
        comment_on_pr=_env_flag(environ, "COMMIT_COACH_COMMENT", default=True),
        create_status_check=_env_flag(environ, "COMMIT_COACH_STATUS_CHECK", default=True),
    )
