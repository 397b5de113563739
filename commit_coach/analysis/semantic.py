"""
Semantic Analyzer（非 AI）。

职责：
- 对 commit 里的每个文件跑 diff 模式匹配，汇总成五个语义类别
- 五个类别互相独立，没有先后依赖

失败语义：
- 单个文件的模式匹配抛错时，只记一条 warning，该文件对该类别的贡献为空；
  其余文件照常分析（一个坏 diff 不应该让整次分析失败）
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from commit_coach.analysis.diff_parser import iter_changed_lines
from commit_coach.analysis.models import BreakingChange
from commit_coach.analysis.models import ChangedFile
from commit_coach.analysis.models import CommitData
from commit_coach.analysis.models import DocumentationChange
from commit_coach.analysis.models import FeatureFlag
from commit_coach.analysis.models import PublicApiChange
from commit_coach.analysis.models import SemanticAnalysis
from commit_coach.analysis.models import TestCoverageInfo
from commit_coach.analysis.paths import documentation_kind
from commit_coach.analysis.paths import is_documentation_file
from commit_coach.analysis.paths import is_source_file
from commit_coach.analysis.paths import is_test_file
from commit_coach.analysis.paths import strip_language_extension
from commit_coach.analysis.patterns import DiffPattern
from commit_coach.analysis.patterns import ExportedSymbolPattern
from commit_coach.analysis.patterns import FeatureFlagPattern
from commit_coach.analysis.patterns import PatternMatch
from commit_coach.analysis.patterns import RemovedExportPattern

logger = logging.getLogger(__name__)

T = TypeVar("T")

FEATURE_KEYWORDS: tuple[str, ...] = ("feature", "new", "add", "implement", "support")


class SemanticAnalyzer:
    """把 CommitData 转成 SemanticAnalysis。模式族可以注入（便于替换/测试）。"""

    def __init__(
        self,
        export_pattern: DiffPattern | None = None,
        flag_pattern: DiffPattern | None = None,
        breaking_pattern: DiffPattern | None = None,
    ) -> None:
        self._export_pattern = export_pattern or ExportedSymbolPattern()
        self._flag_pattern = flag_pattern or FeatureFlagPattern()
        self._breaking_pattern = breaking_pattern or RemovedExportPattern()

    def analyze(self, commit: CommitData) -> SemanticAnalysis:
        return SemanticAnalysis(
            publicApiChanges=tuple(self._analyze_public_api_changes(commit)),
            testCoverage=analyze_test_coverage(commit),
            documentationChanges=tuple(analyze_documentation_changes(commit)),
            featureFlags=tuple(self._analyze_feature_flags(commit)),
            breakingChanges=tuple(self._analyze_breaking_changes(commit)),
        )

    def _analyze_public_api_changes(self, commit: CommitData) -> list[PublicApiChange]:
        def to_record(file: ChangedFile, m: PatternMatch) -> PublicApiChange:
            return PublicApiChange(kind=m.kind, name=m.name, file=file.path, action=m.action, isExported=True)

        return _collect(commit.files, self._export_pattern, to_record, category="publicApiChanges")

    def _analyze_feature_flags(self, commit: CommitData) -> list[FeatureFlag]:
        def to_record(file: ChangedFile, m: PatternMatch) -> FeatureFlag:
            return FeatureFlag(name=m.name, file=file.path, action=m.action)

        return _collect(commit.files, self._flag_pattern, to_record, category="featureFlags")

    def _analyze_breaking_changes(self, commit: CommitData) -> list[BreakingChange]:
        def to_record(file: ChangedFile, m: PatternMatch) -> BreakingChange:
            return BreakingChange(kind="removal", description=m.text, file=file.path, severity="major")

        return _collect(commit.files, self._breaking_pattern, to_record, category="breakingChanges")


def _collect(
    files: Iterable[ChangedFile],
    pattern: DiffPattern,
    to_record: Callable[[ChangedFile, PatternMatch], T],
    category: str,
) -> list[T]:
    """逐个 source 文件跑一个模式族；单文件失败只丢弃该文件的结果。"""
    records: list[T] = []
    for file in files:
        if not is_source_file(file.path):
            continue
        try:
            file_records = [to_record(file, m) for line in iter_changed_lines(file.diff) for m in pattern.matches(line)]
        except Exception as exc:
            logger.warning(f"Skipping {file.path} for {category}: classifier failed ({exc!r})")
            continue
        records.extend(file_records)
    return records


def has_corresponding_test_file(source_path: str, files: Iterable[ChangedFile]) -> bool:
    """同一个 commit 里存在一个 test 文件，其路径包含该 source 文件去掉扩展名后的路径。"""
    stem = strip_language_extension(source_path)
    return any(is_test_file(f.path) and stem in f.path for f in files)


def analyze_test_coverage(commit: CommitData) -> TestCoverageInfo:
    """
    测试覆盖（按文件粗略估计）。

    - source 文件：语言扩展名命中且未被删除（test 文件本身也计入 source 总数）
    - 缺测试的只统计非 test 的 source 文件
    - ratio = (source 总数 - 缺测试数) / source 总数；没有 source 时定义为 1
    """
    tests_added: list[str] = []
    tests_modified: list[str] = []
    without_tests: list[str] = []
    source_count = 0

    for file in commit.files:
        if is_source_file(file.path) and file.status != "deleted":
            source_count += 1
        if is_test_file(file.path):
            if file.status == "added":
                tests_added.append(file.path)
            elif file.status == "modified":
                tests_modified.append(file.path)
            continue
        if not is_source_file(file.path) or file.status == "deleted":
            continue
        if not has_corresponding_test_file(file.path, commit.files):
            without_tests.append(file.path)

    ratio = (source_count - len(without_tests)) / source_count if source_count > 0 else 1.0
    return TestCoverageInfo(
        testFilesAdded=tuple(tests_added),
        testFilesModified=tuple(tests_modified),
        sourceFilesWithoutTests=tuple(without_tests),
        testCoverageRatio=ratio,
    )


def analyze_documentation_changes(commit: CommitData) -> list[DocumentationChange]:
    changes: list[DocumentationChange] = []
    for file in commit.files:
        if not is_documentation_file(file.path):
            continue
        changes.append(
            DocumentationChange(
                kind=documentation_kind(file.path),
                file=file.path,
                action=file.status,
                hasNewFeatures=mentions_new_features(file.diff),
            )
        )
    return changes


def mentions_new_features(diff: str) -> bool:
    """粗糙的关键字启发式：diff 里出现 feature/new/add/implement/support（不区分大小写）。"""
    lowered = diff.lower()
    return any(keyword in lowered for keyword in FEATURE_KEYWORDS)
