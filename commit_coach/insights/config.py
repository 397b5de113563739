"""
Rule engine 配置模型（Pydantic）。

设计目标：
- **严格**：minConfidence / maxInsights 越界直接 ValidationError，不做静默 clamp
- **兼容配置文件写法**：字段接受 camelCase（maxInsights）也接受 snake_case（max_insights）
- 默认值集中在 `default_coach_config()`，由 loader 在其上 merge 用户配置
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from commit_coach.analysis.models import InsightType

OutputFormat = Literal["console", "comment", "status-check", "report"]


class _ConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RuleConfig(_ConfigModel):
    """
    单条规则的配置。

    - severity：覆盖该规则产出 Insight 的 type（None 表示用规则默认值）
    - conditions / message：描述性字段（`commit-coach rules` 会展示），触发逻辑始终是注册表里的具名 predicate
    """

    id: str
    enabled: bool = True
    severity: InsightType | None = None
    conditions: tuple[str, ...] = ()
    message: str = ""


class OutputConfig(_ConfigModel):
    format: OutputFormat = "console"
    include_summary: bool = Field(default=True, alias="includeSummary")
    max_insights: int = Field(default=10, ge=0, alias="maxInsights")


class ThresholdConfig(_ConfigModel):
    min_confidence: float = Field(default=0.5, ge=0.0, le=1.0, alias="minConfidence")
    max_insights_per_type: dict[InsightType, Annotated[int, Field(ge=0)]] = Field(
        default_factory=dict, alias="maxInsightsPerType"
    )
    skip_on_small_changes: bool = Field(default=False, alias="skipOnSmallChanges")
    small_change_threshold: int = Field(default=10, ge=0, alias="smallChangeThreshold")


class GitHubIntegrationConfig(_ConfigModel):
    token: str | None = None
    owner: str | None = None
    repo: str | None = None
    comment_on_pr: bool = Field(default=True, alias="commentOnPR")
    create_status_check: bool = Field(default=True, alias="createStatusCheck")


class ConsoleIntegrationConfig(_ConfigModel):
    colorize: bool = True
    verbose: bool = False


class IntegrationConfig(_ConfigModel):
    github: GitHubIntegrationConfig | None = None
    console: ConsoleIntegrationConfig | None = Field(default_factory=ConsoleIntegrationConfig)


class CoachConfig(_ConfigModel):
    """一次运行的完整配置（默认值 + 用户覆盖 merge 之后）。"""

    rules: tuple[RuleConfig, ...] = ()
    output: OutputConfig = Field(default_factory=OutputConfig)
    integrations: IntegrationConfig = Field(default_factory=IntegrationConfig)
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)


def default_rules() -> tuple[RuleConfig, ...]:
    return (
        RuleConfig(
            id="missing-tests",
            severity="warning",
            conditions=("sourceFilesWithoutTests.length > 0",),
            message="Consider adding tests for new/modified source files",
        ),
        RuleConfig(
            id="public-api-removed",
            severity="warning",
            conditions=("removedApis.length > 0",),
            message="Public API removed - check for downstream dependencies",
        ),
        RuleConfig(
            id="large-commit",
            severity="info",
            conditions=("totalLines > 200",),
            message="Large commit - consider breaking into smaller changes",
        ),
        RuleConfig(
            id="missing-documentation",
            severity="suggestion",
            conditions=("hasNewFeatures && !hasDocUpdates",),
            message="Consider updating documentation for new features",
        ),
        RuleConfig(
            id="feature-flags-added",
            severity="suggestion",
            conditions=("featureFlags.length > 0",),
            message="Document new feature flags and their purpose",
        ),
        RuleConfig(
            id="breaking-changes",
            severity="error",
            conditions=("breakingChanges.length > 0",),
            message="Breaking changes detected - update version and changelog",
        ),
        RuleConfig(
            id="short-commit-message",
            severity="suggestion",
            conditions=("messageLength < 10",),
            message="Consider adding more context to commit message",
        ),
    )


def default_coach_config() -> CoachConfig:
    return CoachConfig(rules=default_rules())
