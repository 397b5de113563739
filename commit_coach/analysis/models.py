"""
Commit 分析领域模型（Pydantic）。

用途：
- 明确 pipeline 各阶段输入/输出的数据结构（CommitData -> SemanticAnalysis -> Insight -> AnalysisResult）
- 所有记录都是 frozen：一次分析产出后不可变，formatter/integration 只读
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

FileStatus = Literal["added", "modified", "deleted", "renamed"]
ChangeAction = Literal["added", "removed"]
InsightType = Literal["error", "warning", "suggestion", "info"]


class ChangedFile(BaseModel):
    """单个文件的变更（由 git / GitHub 采集后归一化而来）。"""

    model_config = ConfigDict(frozen=True)

    path: str
    status: FileStatus
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    diff: str = ""


class CommitData(BaseModel):
    """一次 commit 的完整输入。files 保持采集时的顺序，不去重。"""

    model_config = ConfigDict(frozen=True)

    hash: str
    message: str
    author: str
    date: datetime
    diff: str = ""
    files: tuple[ChangedFile, ...] = ()


class PublicApiChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["function", "class", "interface"]
    name: str
    file: str
    action: ChangeAction
    isExported: bool = True


class TestCoverageInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    testFilesAdded: tuple[str, ...] = ()
    testFilesModified: tuple[str, ...] = ()
    sourceFilesWithoutTests: tuple[str, ...] = ()
    testCoverageRatio: float = Field(default=1.0, ge=0.0, le=1.0)


class DocumentationChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["readme", "api-docs", "comments", "changelog"]
    file: str
    action: FileStatus
    hasNewFeatures: bool


class FeatureFlag(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    file: str
    action: ChangeAction
    valueKind: Literal["boolean"] = "boolean"


class BreakingChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["removal"] = "removal"
    description: str
    file: str
    severity: Literal["major", "minor", "patch"] = "major"


class SemanticAnalysis(BaseModel):
    """五个互相独立的语义类别（全部只依赖 CommitData）。"""

    model_config = ConfigDict(frozen=True)

    publicApiChanges: tuple[PublicApiChange, ...] = ()
    testCoverage: TestCoverageInfo = Field(default_factory=TestCoverageInfo)
    documentationChanges: tuple[DocumentationChange, ...] = ()
    featureFlags: tuple[FeatureFlag, ...] = ()
    breakingChanges: tuple[BreakingChange, ...] = ()


class Insight(BaseModel):
    """
    一条可展示的发现。

    - id：规则种类的稳定 key（不是每次出现唯一），同一结果里同一个 id 最多一条
    - message：已完全渲染的文本
    - metadata：给下游 formatter 的结构化附加信息（只放可 JSON 序列化的值）
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: InsightType
    title: str
    message: str
    confidence: float = Field(ge=0.0, le=1.0)
    metadata: dict[str, Any] | None = None


class AnalysisSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    totalLines: int = 0
    filesChanged: int = 0
    testFilesChanged: int = 0
    documentationFilesChanged: int = 0


class AnalysisResult(BaseModel):
    """一次分析调用的唯一产物（formatter / GitHub integration 只读这个结构）。"""

    model_config = ConfigDict(frozen=True)

    commit: CommitData
    insights: tuple[Insight, ...] = ()
    summary: AnalysisSummary = Field(default_factory=AnalysisSummary)
