"""
整段 commit diff 上的关键字/安全启发式（极简版）。

特点：
- 确定性：只做字符串包含 / 正则匹配
- 可测试：输入 diff 文本，输出 bool 或命中列表
- 对空串/奇怪输入返回“未命中”，不抛错
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from commit_coach.analysis.diff_parser import iter_added_lines
from commit_coach.analysis.models import ChangedFile

_SECRET_RE = re.compile(
    r"(?<![A-Za-z0-9_])("
    r"sk-[A-Za-z0-9_\-]{16,}"
    r"|sk_(?:live|test)_[A-Za-z0-9]{10,}"
    r"|pk_(?:live|test)_[A-Za-z0-9]{10,}"
    r"|gh[pousr]_[A-Za-z0-9]{20,}"
    r"|github_pat_[A-Za-z0-9_]{20,}"
    r"|xox[abprs]-[A-Za-z0-9\-]{10,}"
    r"|AKIA[0-9A-Z]{16}"
    r"|AIza[0-9A-Za-z_\-]{35}"
    r")"
)

_SQL_VERB_RE = re.compile(r"\b(select|insert|update|delete)\b", re.IGNORECASE)
_SQL_INTERPOLATION_RE = re.compile(
    r"\$\{"  # JS template literal
    r"|[\"']\s*\+"  # "..." + x
    r"|\+\s*[\"']"  # x + "..."
    r"|\bf[\"']"  # python f-string
    r"|\.format\("
    r"|[\"']\s*%\s*[\w(]"  # "..." % x
)

_DEBUG_MARKERS: tuple[str, ...] = ("console.log", "debugger", "alert(")
_CONFLICT_MARKER_RE = re.compile(r"^[+\- ]?(?:(?:<{7}|>{7})(?: |$)|={7}$)", re.MULTILINE)
_TRY_RE = re.compile(r"\btry\b")
_CATCH_RE = re.compile(r"\bcatch\b")


def find_secret_tokens(diff: str) -> list[str]:
    """返回看起来像密钥的 token（保持出现顺序，已去重）。"""
    seen: dict[str, None] = {}
    for match in _SECRET_RE.finditer(diff):
        seen.setdefault(match.group(1), None)
    return list(seen)


def find_sql_injection_lines(diff: str) -> list[str]:
    """新增行里：提到 query + SQL 动词 + 字符串拼接/插值。"""
    hits: list[str] = []
    for line in iter_added_lines(diff):
        if "query" not in line.lower():
            continue
        if _SQL_VERB_RE.search(line) and _SQL_INTERPOLATION_RE.search(line):
            hits.append(line.strip())
    return hits


def has_todo_comments(diff: str) -> bool:
    return "TODO" in diff or "FIXME" in diff


def has_xss_risk(diff: str) -> bool:
    """innerHTML 赋值，且整段 diff 里没有任何 textContent。"""
    return "innerHTML" in diff and "textContent" not in diff


def find_debug_statements(diff: str) -> list[str]:
    return [marker for marker in _DEBUG_MARKERS if marker in diff]


def has_conflict_markers(diff: str) -> bool:
    return _CONFLICT_MARKER_RE.search(diff) is not None


def lacks_error_handling(diff: str) -> bool:
    """出现 async 定义，但 try / catch 两个 token 都没有。"""
    if "async " not in diff:
        return False
    return _TRY_RE.search(diff) is None and _CATCH_RE.search(diff) is None


def has_typescript_any(diff: str, files: Sequence[ChangedFile]) -> bool:
    """
    commit 里有 .ts 文件，且整段 diff 含 `: any`。

    注意：并不确认 `: any` 就在那个 .ts 文件自己的 diff 段里（整段文本搜索）。
    """
    if not any(f.path.endswith(".ts") for f in files):
        return False
    return ": any" in diff
