"""
`commit-coach` 命令行入口。

子命令：
- analyze：分析本地仓库里的一个 commit，按指定格式输出
- init：在当前目录生成示例配置 `.commit-coach.yml`
- github：分析 commit 并回写 GitHub（PR 评论 + commit status）
- rules：列出内置规则及其生效的 enabled/severity
- serve：启动 webhook 服务（uvicorn）
"""

from __future__ import annotations

import functools
import logging
import re
import sys
from collections.abc import Callable
from pathlib import Path
from typing import ParamSpec, TypeVar

import anyio
import click
import httpx
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from commit_coach.analysis.models import AnalysisResult
from commit_coach.git.collector import GitCommandError
from commit_coach.git.collector import GitCommitCollector
from commit_coach.github.client import GitHubClient
from commit_coach.insights.config import CoachConfig
from commit_coach.insights.engine import InsightEngine
from commit_coach.insights.engine import build_insight_engine
from commit_coach.insights.loader import SAMPLE_CONFIG
from commit_coach.insights.loader import ConfigError
from commit_coach.insights.loader import load_config
from commit_coach.insights.rules import RuleConfigError
from commit_coach.orchestrator import GitHubTarget
from commit_coach.orchestrator import find_pull_request_number
from commit_coach.orchestrator import publish_result
from commit_coach.output.formatters import ConsoleFormatter
from commit_coach.output.formatters import create_formatter

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

CONFIG_FILENAME = ".commit-coach.yml"
_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$")

console = Console()
err_console = Console(stderr=True)


def handle_errors(func: Callable[P, R]) -> Callable[P, R]:
    """已知的配置/git/GitHub 错误转成一行错误信息 + exit code 1；其余异常照常抛出。"""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except (ConfigError, RuleConfigError, ValidationError, GitCommandError, RuntimeError) as exc:
            logger.debug("command failed", exc_info=True)
            raise click.ClickException(f"❌ Analysis failed: {exc}") from exc

    return wrapper


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[commit-coach] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_engine(config_path: str | None, repo_path: str) -> InsightEngine:
    coach_config = load_config(config_path or repo_path)
    return build_insight_engine(config=coach_config)


def _open_repository(repo_path: str) -> GitCommitCollector:
    collector = GitCommitCollector(repo_path=repo_path)
    if not collector.is_repository():
        raise click.ClickException("Not a git repository. Please run from a git repository root.")
    return collector


def parse_github_remote(remote_url: str) -> tuple[str, str] | None:
    """`git@github.com:org/repo.git` / `https://github.com/org/repo` -> (org, repo)。"""
    match = _GITHUB_REMOTE_RE.search(remote_url.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


def _print_result(result: AnalysisResult, output: str, config: CoachConfig, colorize: bool) -> None:
    formatter = create_formatter(output, config=config.output, colorize=colorize)
    if isinstance(formatter, ConsoleFormatter):
        console.print(formatter.render(result), highlight=False)
    else:
        click.echo(formatter.format(result))


@click.group()
@click.version_option(package_name="commit-coach")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """An intelligent commit analysis tool that provides insights and coaching."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)


@cli.command()
@click.option("-c", "--commit", "rev", default="HEAD", show_default=True, help="Commit to analyze.")
@click.option("-r", "--repo", "repo_path", default=".", show_default=True, help="Repository path.")
@click.option(
    "-o",
    "--output",
    type=click.Choice(["console", "comment", "status-check", "report"]),
    default=None,
    help="Output format (defaults to output.format from the config).",
)
@click.option("--config", "config_path", default=None, help="Config file or directory containing one.")
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@handle_errors
def analyze(rev: str, repo_path: str, output: str | None, config_path: str | None, no_color: bool) -> None:
    """Analyze a commit and generate insights."""
    engine = _load_engine(config_path, repo_path)
    collector = _open_repository(repo_path)

    err_console.print(f"🔍 Analyzing commit: {rev}", highlight=False)
    result = engine.analyze(collector.get_commit(rev))

    console_config = engine.config.integrations.console
    colorize = not no_color and (console_config.colorize if console_config else True)
    _print_result(result, output or engine.config.output.format, engine.config, colorize)


@cli.command()
@click.option("-f", "--force", is_flag=True, help="Overwrite existing configuration.")
def init(force: bool) -> None:
    """Initialize commit-coach configuration in the current directory."""
    path = Path(CONFIG_FILENAME)
    if path.exists() and not force:
        console.print("⚠️  Configuration file already exists. Use --force to overwrite.")
        return
    path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    console.print(f"✅ Created commit-coach configuration file: {CONFIG_FILENAME}")
    console.print("📝 Edit the file to customize rules and settings.")


@cli.command()
@click.option("-c", "--commit", "rev", default="HEAD", show_default=True, help="Commit to analyze.")
@click.option("-r", "--repo", "repo_path", default=".", show_default=True, help="Repository path.")
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub token (or set GITHUB_TOKEN).")
@click.option("--owner", default=None, help="GitHub repository owner.")
@click.option("--repo-name", default=None, help="GitHub repository name.")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number (auto-detected if omitted).")
@click.option("--comment/--no-comment", default=None, help="Post a comment on the pull request.")
@click.option("--status-check/--no-status-check", default=None, help="Create a commit status.")
@click.option("--api-url", envvar="GITHUB_API_URL", default="https://api.github.com", show_default=True)
@handle_errors
def github(
    rev: str,
    repo_path: str,
    token: str | None,
    owner: str | None,
    repo_name: str | None,
    pr_number: int | None,
    comment: bool | None,
    status_check: bool | None,
    api_url: str,
) -> None:
    """Analyze a commit and post results to GitHub."""
    engine = _load_engine(None, repo_path)
    collector = _open_repository(repo_path)
    github_config = engine.config.integrations.github

    token = token or (github_config.token if github_config else None)
    if not token:
        raise click.ClickException("GitHub token is required. Set GITHUB_TOKEN env var or use --token option.")

    if owner is None or repo_name is None:
        detected = parse_github_remote(collector.get_remote_url())
        owner = owner or (github_config.owner if github_config else None) or (detected[0] if detected else None)
        repo_name = repo_name or (github_config.repo if github_config else None) or (detected[1] if detected else None)
    if not owner or not repo_name:
        raise click.ClickException("Could not determine the GitHub repository. Use --owner and --repo-name.")

    if comment is None:
        comment = github_config.comment_on_pr if github_config else True
    if status_check is None:
        status_check = github_config.create_status_check if github_config else True

    commit = collector.get_commit(rev)
    err_console.print(f"🔍 Analyzing commit for GitHub: {commit.hash[:8]}", highlight=False)
    result = engine.analyze(commit)

    async def _publish() -> None:
        async with httpx.AsyncClient(timeout=httpx.Timeout(30.0)) as http_client:
            client = GitHubClient(api_base_url=api_url, token=token, http_client=http_client)
            number = pr_number
            if comment and number is None:
                number = await find_pull_request_number(client, owner=owner, repo=repo_name, sha=commit.hash)
            target = GitHubTarget(owner=owner, repo=repo_name, sha=commit.hash, pr_number=number)
            await publish_result(
                engine=engine, client=client, target=target, result=result, comment=comment, status_check=status_check
            )

    anyio.run(_publish)
    _print_result(result, "console", engine.config, colorize=True)


@cli.command()
@click.option("--config", "config_path", default=".", show_default=True, help="Config file or directory.")
@handle_errors
def rules(config_path: str) -> None:
    """List the built-in rules and their effective settings."""
    engine = _load_engine(config_path, ".")
    table = Table(title="Commit Coach Rules")
    table.add_column("Rule", no_wrap=True)
    table.add_column("Enabled")
    table.add_column("Severity")
    table.add_column("Description")
    for rule in engine.registry:
        override = engine.rule_overrides.get(rule.id)
        enabled = override.enabled if override else True
        severity = (override.severity if override else None) or rule.default_type
        description = (override.message if override else "") or rule.description
        table.add_row(rule.id, "yes" if enabled else "no", severity, description)
    console.print(table)


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Run the GitHub webhook service."""
    uvicorn.run("commit_coach.main:create_app", factory=True, host=host, port=port)


def main() -> None:
    cli(obj={}, auto_envvar_prefix="COMMIT_COACH")


if __name__ == "__main__":
    main()
