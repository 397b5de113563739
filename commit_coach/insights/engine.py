"""
Insight Engine（核心流程编排）。

CommitData -> SemanticAnalyzer -> SemanticAnalysis -> rules -> raw Insight[] -> rank/filter -> AnalysisResult

约定：
- 纯同步、无 I/O、无共享可变状态：同样的 (commit, config) 永远得到同样的结果
- 配置错误（未知/重复 rule id）在构建 engine 时立刻抛错，而不是分析到一半才发现
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from commit_coach.analysis.models import AnalysisResult
from commit_coach.analysis.models import CommitData
from commit_coach.analysis.models import Insight
from commit_coach.analysis.semantic import SemanticAnalyzer
from commit_coach.insights.config import CoachConfig
from commit_coach.insights.config import RuleConfig
from commit_coach.insights.ranking import rank_insights
from commit_coach.insights.rules import RuleConfigError
from commit_coach.insights.rules import RuleContext
from commit_coach.insights.rules import RuleRegistry
from commit_coach.insights.rules import build_default_registry
from commit_coach.insights.summary import build_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsightEngine:
    """engine 运行时依赖集合（配置 + 规则表 + 语义分析器）。"""

    config: CoachConfig
    registry: RuleRegistry
    analyzer: SemanticAnalyzer
    rule_overrides: dict[str, RuleConfig]

    def generate(self, commit: CommitData) -> list[Insight]:
        """跑全部启用的规则，返回未排序的原始 Insight（按注册顺序）。"""
        if not commit.files:
            return []

        context = RuleContext.build(commit=commit, analysis=self.analyzer.analyze(commit))
        insights: list[Insight] = []
        for rule in self.registry:
            override = self.rule_overrides.get(rule.id)
            if override is not None and not override.enabled:
                logger.debug(f"Rule {rule.id} disabled by configuration")
                continue
            insight = rule.evaluate(context)
            if insight is None:
                continue
            if override is not None and override.severity is not None and override.severity != insight.type:
                insight = insight.model_copy(update={"type": override.severity})
            insights.append(insight)
        return insights

    def analyze(self, commit: CommitData) -> AnalysisResult:
        thresholds = self.config.thresholds
        summary = build_summary(commit)
        raw = self.generate(commit)

        if thresholds.skip_on_small_changes and summary.totalLines < thresholds.small_change_threshold:
            logger.info(f"Skipping insights for small commit {commit.hash[:8]} ({summary.totalLines} lines)")
            raw = []

        ranked = rank_insights(
            raw,
            min_confidence=thresholds.min_confidence,
            max_insights=self.config.output.max_insights,
            max_per_type=thresholds.max_insights_per_type,
        )
        logger.debug(f"Commit {commit.hash[:8]}: {len(raw)} raw insight(s), {len(ranked)} reported")
        return AnalysisResult(commit=commit, insights=tuple(ranked), summary=summary)


def build_insight_engine(config: CoachConfig, registry: RuleRegistry | None = None) -> InsightEngine:
    """
    创建 engine，并校验 rules 配置。

    - 未知 rule id / 重复 rule id：抛 RuleConfigError
    - 没出现在配置里的规则：按默认 type 启用
    """
    registry = registry or build_default_registry()
    overrides: dict[str, RuleConfig] = {}
    for rule_config in config.rules:
        if rule_config.id not in registry:
            known = ", ".join(registry.ids())
            raise RuleConfigError(f"Unknown rule id in configuration: {rule_config.id} (known: {known})")
        if rule_config.id in overrides:
            raise RuleConfigError(f"Rule configured more than once: {rule_config.id}")
        overrides[rule_config.id] = rule_config
    return InsightEngine(config=config, registry=registry, analyzer=SemanticAnalyzer(), rule_overrides=overrides)


def analyze(commit: CommitData, config: CoachConfig, registry: RuleRegistry | None = None) -> AnalysisResult:
    """一次性入口：analyze(commit, config) -> AnalysisResult。"""
    return build_insight_engine(config=config, registry=registry).analyze(commit)
