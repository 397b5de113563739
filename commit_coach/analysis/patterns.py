"""
diff 行级模式匹配（词法/正则，不做语法解析）。

特点：
- 确定性：同一行永远得到同样的匹配
- 可替换：每个模式族都实现 `DiffPattern` 协议，将来可以换成真正的按语言 parser，
  而不需要改 semantic analyzer / rule engine

已知限制：
- 只看单行文本，跨行的声明、注释/字符串里的同名文本都会被误判或漏判
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from commit_coach.analysis.diff_parser import DiffLine
from commit_coach.analysis.models import ChangeAction


@dataclass(frozen=True)
class PatternMatch:
    """一次命中：kind 由模式族决定（function/class/flag/removal ...）。"""

    kind: str
    name: str
    action: ChangeAction
    text: str


class DiffPattern(Protocol):
    """模式族接口：输入一行变更，输出零到多个命中。"""

    def matches(self, line: DiffLine) -> list[PatternMatch]: ...


class ExportedSymbolPattern:
    """
    导出符号：`export [async] function NAME` / `export class NAME` / `export interface NAME`。

    一行最多命中一次，按 function -> class -> interface 的优先级取第一个。
    """

    _PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
        ("function", re.compile(r"export\s+(?:async\s+)?function\s+(\w+)")),
        ("class", re.compile(r"export\s+class\s+(\w+)")),
        ("interface", re.compile(r"export\s+interface\s+(\w+)")),
    )

    def matches(self, line: DiffLine) -> list[PatternMatch]:
        for kind, pattern in self._PATTERNS:
            match = pattern.search(line.content)
            if match:
                return [PatternMatch(kind=kind, name=match.group(1), action=line.action, text=line.content)]
        return []


class FeatureFlagPattern:
    """
    feature flag 命名约定。

    每个约定独立匹配：一行同时命中多个约定就产出多条记录。
    """

    DEFAULT_CONVENTIONS: tuple[str, ...] = (
        r"FEATURE_(\w+)",
        r"ENABLE_(\w+)",
        r"USE_(\w+)",
        r"featureFlags\.(\w+)",
        r"flags\.(\w+)",
    )

    def __init__(self, conventions: Sequence[str] = DEFAULT_CONVENTIONS) -> None:
        self._patterns = [re.compile(c) for c in conventions]

    def matches(self, line: DiffLine) -> list[PatternMatch]:
        found: list[PatternMatch] = []
        for pattern in self._patterns:
            match = pattern.search(line.content)
            if match:
                found.append(PatternMatch(kind="flag", name=match.group(1), action=line.action, text=line.content))
        return found


class RemovedExportPattern:
    """被删除的行同时包含 `export` 和 `function`：视为移除了一个导出函数（breaking）。"""

    def matches(self, line: DiffLine) -> list[PatternMatch]:
        if line.action != "removed":
            return []
        if "export" in line.content and "function" in line.content:
            text = line.content.strip()
            return [PatternMatch(kind="removal", name=text, action="removed", text=text)]
        return []
