"""
Insight 规则注册表。

为什么需要 registry：
- 把“配置里的 rule id”映射到具体的确定性 predicate（不引入表达式求值）
- 统一做未知 rule id 的错误处理

约定：
- 每条规则只读 `RuleContext`，最多产出一条 Insight（命中多个文件时聚合到一条 message）
- 规则之间互不依赖，也不读彼此的输出
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from commit_coach.analysis import heuristics
from commit_coach.analysis.models import CommitData
from commit_coach.analysis.models import Insight
from commit_coach.analysis.models import InsightType
from commit_coach.analysis.models import SemanticAnalysis
from commit_coach.analysis.paths import is_source_file

LARGE_COMMIT_LINES = 200
LARGE_FILE_ADDITIONS = 1000
UNDOCUMENTED_ADDITIONS = 50
SHORT_MESSAGE_LENGTH = 10


class RuleConfigError(ValueError):
    """配置里引用了不存在/重复的 rule id。"""

    pass


@dataclass(frozen=True)
class RuleContext:
    """规则的只读输入：commit 原始数据 + 语义分析结果 + 预先算好的统计量。"""

    commit: CommitData
    analysis: SemanticAnalysis
    total_lines: int
    total_additions: int
    source_additions: int

    @classmethod
    def build(cls, commit: CommitData, analysis: SemanticAnalysis) -> RuleContext:
        return cls(
            commit=commit,
            analysis=analysis,
            total_lines=sum(f.additions + f.deletions for f in commit.files),
            total_additions=sum(f.additions for f in commit.files),
            source_additions=sum(f.additions for f in commit.files if is_source_file(f.path)),
        )


RulePredicate = Callable[[RuleContext], "Insight | None"]


@dataclass(frozen=True)
class Rule:
    id: str
    default_type: InsightType
    evaluate: RulePredicate
    description: str = ""


class RuleRegistry:
    """不可变、有序的 rule id -> Rule 映射。启动时构建一次，显式传给 engine。"""

    def __init__(self, rules: Iterable[Rule]) -> None:
        by_id: dict[str, Rule] = {}
        for rule in rules:
            if rule.id in by_id:
                raise RuleConfigError(f"Duplicate rule id in registry: {rule.id}")
            by_id[rule.id] = rule
        self._rules: Mapping[str, Rule] = MappingProxyType(by_id)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def get(self, rule_id: str) -> Rule:
        if rule_id not in self._rules:
            raise RuleConfigError(f"Unknown rule: {rule_id}")
        return self._rules[rule_id]

    def ids(self) -> tuple[str, ...]:
        return tuple(self._rules)


def _list_with_more(items: Sequence[str], limit: int = 3) -> str:
    shown = ", ".join(items[:limit])
    more = len(items) - limit
    if more > 0:
        return f"{shown} and {more} more files"
    return shown


def missing_tests(ctx: RuleContext) -> Insight | None:
    coverage = ctx.analysis.testCoverage
    if not coverage.sourceFilesWithoutTests:
        return None
    files = _list_with_more(coverage.sourceFilesWithoutTests)
    return Insight(
        id="missing-tests",
        type="warning",
        title="Missing Test Coverage",
        message=(
            f"You added/modified {files} but didn't add corresponding tests. "
            "Consider adding tests to maintain code quality."
        ),
        confidence=0.8,
        metadata={
            "filesWithoutTests": list(coverage.sourceFilesWithoutTests),
            "testCoverageRatio": coverage.testCoverageRatio,
        },
    )


def tests_added(ctx: RuleContext) -> Insight | None:
    added = ctx.analysis.testCoverage.testFilesAdded
    if not added:
        return None
    return Insight(
        id="tests-added",
        type="info",
        title="Tests Added",
        message=f"Great! You added tests for {len(added)} file(s). This helps maintain code quality.",
        confidence=1.0,
        metadata={"testFilesAdded": list(added)},
    )


def public_api_removed(ctx: RuleContext) -> Insight | None:
    removed = [c for c in ctx.analysis.publicApiChanges if c.action == "removed" and c.isExported]
    if not removed:
        return None
    names = ", ".join(c.name for c in removed)
    return Insight(
        id="public-api-removed",
        type="warning",
        title="Public API Removed",
        message=(
            f"You removed {len(removed)} public API(s): {names}. "
            "Make sure no downstream consumers depend on these APIs."
        ),
        confidence=0.9,
        metadata={"removedApis": [c.model_dump() for c in removed]},
    )


def public_api_added(ctx: RuleContext) -> Insight | None:
    added = [c for c in ctx.analysis.publicApiChanges if c.action == "added" and c.isExported]
    if not added:
        return None
    names = ", ".join(c.name for c in added)
    return Insight(
        id="public-api-added",
        type="info",
        title="New Public APIs",
        message=(
            f"You added {len(added)} new public API(s): {names}. "
            "Consider documenting these in your API documentation."
        ),
        confidence=0.8,
        metadata={"addedApis": [c.model_dump() for c in added]},
    )


def documentation_updated(ctx: RuleContext) -> Insight | None:
    updated = [c for c in ctx.analysis.documentationChanges if c.hasNewFeatures]
    if not updated:
        return None
    return Insight(
        id="documentation-updated",
        type="info",
        title="Documentation Updated",
        message="You updated documentation for new features. This is great for maintainability!",
        confidence=0.9,
        metadata={"documentationChanges": [c.model_dump() for c in updated]},
    )


def missing_documentation(ctx: RuleContext) -> Insight | None:
    if ctx.source_additions <= UNDOCUMENTED_ADDITIONS or ctx.analysis.documentationChanges:
        return None
    return Insight(
        id="missing-documentation",
        type="suggestion",
        title="Consider Updating Documentation",
        message=(
            f"You added significant new code ({ctx.source_additions} lines). "
            "Consider updating README or API documentation to reflect the changes."
        ),
        confidence=0.6,
        metadata={"sourceAdditions": ctx.source_additions, "totalAdditions": ctx.total_additions},
    )


def feature_flags_added(ctx: RuleContext) -> Insight | None:
    added = [f for f in ctx.analysis.featureFlags if f.action == "added"]
    if not added:
        return None
    names = ", ".join(f.name for f in added)
    return Insight(
        id="feature-flags-added",
        type="suggestion",
        title="New Feature Flags Added",
        message=(
            f"You added {len(added)} new feature flag(s): {names}. "
            "Consider documenting these flags and their purpose in your configuration documentation."
        ),
        confidence=0.7,
        metadata={"featureFlags": [f.model_dump() for f in added]},
    )


def breaking_changes(ctx: RuleContext) -> Insight | None:
    major = [c for c in ctx.analysis.breakingChanges if c.severity == "major"]
    if not major:
        return None
    return Insight(
        id="breaking-changes",
        type="error",
        title="Breaking Changes Detected",
        message=(
            f"This commit contains {len(major)} breaking change(s). "
            "Consider updating the version number and changelog accordingly."
        ),
        confidence=0.9,
        metadata={"breakingChanges": [c.model_dump() for c in major]},
    )


def large_commit(ctx: RuleContext) -> Insight | None:
    if ctx.total_lines <= LARGE_COMMIT_LINES:
        return None
    file_count = len(ctx.commit.files)
    return Insight(
        id="large-commit",
        type="info",
        title="Large Commit",
        message=(
            f"This is a large commit with {ctx.total_lines} lines changed across {file_count} files. "
            "Consider breaking this into smaller, more focused commits for better code review."
        ),
        confidence=0.7,
        metadata={"totalLines": ctx.total_lines, "fileCount": file_count},
    )


def short_commit_message(ctx: RuleContext) -> Insight | None:
    length = len(ctx.commit.message)
    if length >= SHORT_MESSAGE_LENGTH:
        return None
    return Insight(
        id="short-commit-message",
        type="suggestion",
        title="Short Commit Message",
        message=(
            f"Your commit message is quite short ({length} characters). "
            "Consider adding more context about what changed and why."
        ),
        confidence=0.6,
        metadata={"messageLength": length},
    )


def todo_comments(ctx: RuleContext) -> Insight | None:
    if not heuristics.has_todo_comments(ctx.commit.diff):
        return None
    return Insight(
        id="todo-comments",
        type="info",
        title="TODO/FIXME Comments",
        message=(
            "This commit contains TODO or FIXME comments. "
            "Make sure to track these items and address them in future commits."
        ),
        confidence=0.8,
        metadata={"hasTodos": True},
    )


def xss_risk(ctx: RuleContext) -> Insight | None:
    if not heuristics.has_xss_risk(ctx.commit.diff):
        return None
    return Insight(
        id="xss-risk",
        type="error",
        title="Potential XSS Risk",
        message=(
            "This commit assigns to innerHTML. Rendering untrusted content this way can lead to "
            "cross-site scripting; prefer textContent or sanitize the HTML first."
        ),
        confidence=0.6,
    )


def debug_code(ctx: RuleContext) -> Insight | None:
    markers = heuristics.find_debug_statements(ctx.commit.diff)
    if not markers:
        return None
    return Insight(
        id="debug-code",
        type="warning",
        title="Debug Code Detected",
        message="This commit contains debug statements (console.log, debugger or alert). Remove them before merging.",
        confidence=0.9,
        metadata={"markers": markers},
    )


def large_file_addition(ctx: RuleContext) -> Insight | None:
    large = [f for f in ctx.commit.files if f.status == "added" and f.additions > LARGE_FILE_ADDITIONS]
    if not large:
        return None
    files = _list_with_more([f.path for f in large])
    return Insight(
        id="large-file-addition",
        type="warning",
        title="Large File Added",
        message=(
            f"You added {files} with more than {LARGE_FILE_ADDITIONS} lines. "
            "Consider splitting it into smaller modules or checking whether it is generated code."
        ),
        confidence=0.8,
        metadata={"files": [{"path": f.path, "additions": f.additions} for f in large]},
    )


def missing_error_handling(ctx: RuleContext) -> Insight | None:
    if not heuristics.lacks_error_handling(ctx.commit.diff):
        return None
    return Insight(
        id="missing-error-handling",
        type="warning",
        title="Missing Error Handling",
        message="This commit adds async code without any try/catch. Make sure rejected promises and exceptions are handled.",
        confidence=0.6,
    )


def typescript_any_type(ctx: RuleContext) -> Insight | None:
    if not heuristics.has_typescript_any(ctx.commit.diff, ctx.commit.files):
        return None
    return Insight(
        id="typescript-any-type",
        type="warning",
        title="TypeScript any Type",
        message="This commit introduces `: any` annotations in TypeScript code. Prefer precise types or `unknown`.",
        confidence=0.7,
    )


def hardcoded_secrets(ctx: RuleContext) -> Insight | None:
    tokens = heuristics.find_secret_tokens(ctx.commit.diff)
    if not tokens:
        return None
    return Insight(
        id="hardcoded-secrets",
        type="error",
        title="Possible Hardcoded Secret",
        message=(
            "This commit appears to contain an API key or access token. "
            "Move secrets to environment variables or a secret manager and rotate the exposed credential."
        ),
        confidence=0.9,
        # 不回显 token 本身
        metadata={"matchCount": len(tokens)},
    )


def merge_conflict_markers(ctx: RuleContext) -> Insight | None:
    if not heuristics.has_conflict_markers(ctx.commit.diff):
        return None
    return Insight(
        id="merge-conflict-markers",
        type="error",
        title="Merge Conflict Markers",
        message="This commit contains unresolved merge conflict markers (<<<<<<<, =======, >>>>>>>).",
        confidence=1.0,
    )


def sql_injection_risk(ctx: RuleContext) -> Insight | None:
    lines = heuristics.find_sql_injection_lines(ctx.commit.diff)
    if not lines:
        return None
    return Insight(
        id="sql-injection-risk",
        type="error",
        title="Possible SQL Injection",
        message=(
            f"{len(lines)} added line(s) build a SQL query with string interpolation. "
            "Use parameterized queries instead."
        ),
        confidence=0.7,
        metadata={"lines": lines},
    )


def build_default_registry() -> RuleRegistry:
    """内置规则表（顺序即生成顺序，ranking 时同分保持该顺序）。"""
    return RuleRegistry(
        [
            Rule("missing-tests", "warning", missing_tests, "Source files changed without matching tests"),
            Rule("tests-added", "info", tests_added, "New test files were added"),
            Rule("public-api-removed", "warning", public_api_removed, "Exported function/class/interface removed"),
            Rule("public-api-added", "info", public_api_added, "Exported function/class/interface added"),
            Rule("documentation-updated", "info", documentation_updated, "Docs mention new features"),
            Rule("missing-documentation", "suggestion", missing_documentation, "Much new source code, no doc changes"),
            Rule("feature-flags-added", "suggestion", feature_flags_added, "New feature flags referenced"),
            Rule("breaking-changes", "error", breaking_changes, "Major breaking changes detected"),
            Rule("large-commit", "info", large_commit, "More than 200 lines changed"),
            Rule("short-commit-message", "suggestion", short_commit_message, "Commit message under 10 characters"),
            Rule("todo-comments", "info", todo_comments, "TODO/FIXME in the diff"),
            Rule("xss-risk", "error", xss_risk, "innerHTML without textContent"),
            Rule("debug-code", "warning", debug_code, "console.log/debugger/alert in the diff"),
            Rule("large-file-addition", "warning", large_file_addition, "Added file with more than 1000 lines"),
            Rule("missing-error-handling", "warning", missing_error_handling, "async code without try/catch"),
            Rule("typescript-any-type", "warning", typescript_any_type, "`: any` in a commit touching .ts files"),
            Rule("hardcoded-secrets", "error", hardcoded_secrets, "Secret-like tokens in the diff"),
            Rule("merge-conflict-markers", "error", merge_conflict_markers, "Unresolved conflict markers"),
            Rule("sql-injection-risk", "error", sql_injection_risk, "Interpolated SQL passed to a query"),
        ]
    )
