from __future__ import annotations

import pytest
from pydantic import ValidationError

from commit_coach.config import load_config_from_env


def test_load_config_requires_github_credentials() -> None:
    with pytest.raises(ValueError, match="GITHUB_TOKEN, GITHUB_WEBHOOK_SECRET"):
        load_config_from_env(environ={})


def test_load_config_rejects_empty_secret() -> None:
    with pytest.raises(ValueError, match="GITHUB_WEBHOOK_SECRET"):
        load_config_from_env(environ={"GITHUB_TOKEN": "t", "GITHUB_WEBHOOK_SECRET": ""})


def test_load_config_defaults() -> None:
    cfg = load_config_from_env(environ={"GITHUB_TOKEN": "t", "GITHUB_WEBHOOK_SECRET": "s"})
    assert str(cfg.github_api_base_url).startswith("https://api.github.com")
    assert cfg.coach_config_dir == "."
    assert cfg.comment_on_pr is True
    assert cfg.create_status_check is True


def test_load_config_overrides() -> None:
    environ = {
        "GITHUB_API_BASE_URL": "https://github.example.com/api/v3",
        "GITHUB_TOKEN": "t",
        "GITHUB_WEBHOOK_SECRET": "s",
        "COMMIT_COACH_CONFIG_DIR": "/etc/commit-coach",
        "COMMIT_COACH_COMMENT": "false",
        "COMMIT_COACH_STATUS_CHECK": "0",
    }
    cfg = load_config_from_env(environ=environ)
    assert str(cfg.github_api_base_url) == "https://github.example.com/api/v3"
    assert cfg.coach_config_dir == "/etc/commit-coach"
    assert cfg.comment_on_pr is False
    assert cfg.create_status_check is False


def test_load_config_rejects_bad_url() -> None:
    environ = {"GITHUB_API_BASE_URL": "not a url", "GITHUB_TOKEN": "t", "GITHUB_WEBHOOK_SECRET": "s"}
    with pytest.raises(ValidationError):
        load_config_from_env(environ=environ)
