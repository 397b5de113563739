"""
配置文件加载（commit-coach.yml / .commit-coach.json ...）。

约定：
- 在 project root 按固定顺序找第一个存在的配置文件；都没有就用默认配置
- 用户配置 merge 到默认值上：rules 整体替换，其余 section 按 key 浅合并
- 文件读不了 / 解析失败 / 顶层不是 mapping：抛 ConfigError（不默默回退默认值）
- 字段越界等校验错误由 Pydantic 抛出
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from commit_coach.insights.config import CoachConfig
from commit_coach.insights.config import default_coach_config

logger = logging.getLogger(__name__)

CONFIG_FILES: tuple[str, ...] = (
    "commit-coach.yml",
    "commit-coach.yaml",
    ".commit-coach.yml",
    ".commit-coach.yaml",
    "commit-coach.json",
    ".commit-coach.json",
)

_MERGED_SECTIONS: tuple[str, ...] = ("output", "integrations", "thresholds")


class ConfigError(ValueError):
    """配置文件不可读或格式错误。"""

    pass


def find_config_file(project_root: str | Path) -> Path | None:
    root = Path(project_root)
    for name in CONFIG_FILES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_config(project_root: str | Path = ".") -> CoachConfig:
    """
    加载配置：project_root 可以是目录（按 CONFIG_FILES 查找），也可以直接是配置文件路径。
    """
    path = Path(project_root)
    config_path = path if path.is_file() else find_config_file(path)
    if config_path is None:
        logger.debug(f"No commit-coach config found under {path}, using defaults")
        return default_coach_config()
    logger.info(f"Loading commit-coach config from {config_path}")
    return load_config_file(config_path)


def load_config_file(config_path: str | Path) -> CoachConfig:
    path = Path(config_path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        if path.suffix in (".yml", ".yaml"):
            raw = yaml.safe_load(content)
        else:
            raw = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return merge_with_defaults(raw)


def merge_with_defaults(user_config: Mapping[str, Any]) -> CoachConfig:
    defaults = default_coach_config().model_dump(by_alias=True)
    merged: dict[str, Any] = dict(defaults)

    if user_config.get("rules") is not None:
        merged["rules"] = user_config["rules"]
    for section in _MERGED_SECTIONS:
        override = user_config.get(section)
        if override is None:
            continue
        if not isinstance(override, Mapping):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        merged[section] = {**(defaults.get(section) or {}), **override}

    _expand_github_token(merged)
    return CoachConfig.model_validate(merged)


def _expand_github_token(merged: dict[str, Any]) -> None:
    # token: "${GITHUB_TOKEN}" -> 环境变量的值
    github = (merged.get("integrations") or {}).get("github")
    if isinstance(github, Mapping) and isinstance(github.get("token"), str):
        merged["integrations"]["github"] = {**github, "token": os.path.expandvars(github["token"])}


SAMPLE_CONFIG = """\
# Commit Coach Configuration
# This file configures the commit analysis and insight generation

rules:
  - id: missing-tests
    enabled: true
    severity: warning
    conditions: ["sourceFilesWithoutTests.length > 0"]
    message: "Consider adding tests for new/modified source files"

  - id: public-api-removed
    enabled: true
    severity: warning
    conditions: ["removedApis.length > 0"]
    message: "Public API removed - check for downstream dependencies"

  - id: large-commit
    enabled: true
    severity: info
    conditions: ["totalLines > 200"]
    message: "Large commit - consider breaking into smaller changes"

output:
  format: console  # console, comment, status-check, report
  includeSummary: true
  maxInsights: 10

integrations:
  github:
    token: "${GITHUB_TOKEN}"
    owner: "your-org"
    repo: "your-repo"
    commentOnPR: true
    createStatusCheck: true

  console:
    colorize: true
    verbose: false

thresholds:
  minConfidence: 0.5
  maxInsightsPerType:
    error: 5
    warning: 8
    suggestion: 10
    info: 15
  skipOnSmallChanges: false
  smallChangeThreshold: 10
"""
