from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from commit_coach.analysis.models import ChangeAction


@dataclass(frozen=True)
class DiffLine:
    """unified diff 中的一行 `+`/`-` 变更（已去掉前缀符号）。"""

    action: ChangeAction
    content: str


def iter_changed_lines(diff: str) -> Iterator[DiffLine]:
    # +++/--- 是文件头，不是内容行
    for line in diff.splitlines():
        if line.startswith("+++") or line.startswith("---"):
            continue
        if line.startswith("+"):
            yield DiffLine(action="added", content=line[1:])
        elif line.startswith("-"):
            yield DiffLine(action="removed", content=line[1:])


def iter_added_lines(diff: str) -> Iterator[str]:
    for changed in iter_changed_lines(diff):
        if changed.action == "added":
            yield changed.content


def split_commit_diff(diff: str) -> dict[str, str]:
    """
    把整段 commit diff 按 `diff --git a/x b/y` 切成 {path: 该文件的 diff}。

    - path 取 b/ 一侧（重命名后的新路径）
    - 不认识的前导内容（例如 `git show` 的 commit 头）直接丢弃
    """
    by_path: dict[str, str] = {}
    current_path: str | None = None
    current: list[str] = []
    for line in diff.splitlines():
        if line.startswith("diff --git "):
            if current_path is not None:
                by_path[current_path] = "\n".join(current)
            current_path = _parse_diff_git_header(header=line)
            current = [line]
            continue
        if current_path is not None:
            current.append(line)
    if current_path is not None:
        by_path[current_path] = "\n".join(current)
    return by_path


def _parse_diff_git_header(header: str) -> str:
    # diff --git a/src/x.py b/src/x.py
    # diff --git "a/na\303\257ve.js" "b/na\303\257ve.js"（含特殊字符时 git 用 C 风格引号）
    rest = header[len("diff --git ") :].strip()
    if rest.endswith('"'):
        marker = rest.rfind(' "b/')
        if marker != -1:
            return unquote_git_path(rest[marker + 1 :])[len("b/") :]
    marker = rest.rfind(" b/")
    if marker == -1:
        return rest
    return rest[marker + len(" b/") :]


_C_ESCAPES: dict[str, int] = {
    "a": 7,
    "b": 8,
    "t": 9,
    "n": 10,
    "v": 11,
    "f": 12,
    "r": 13,
    '"': 34,
    "\\": 92,
}


def unquote_git_path(quoted: str) -> str:
    """`"b/na\\303\\257ve.js"` -> `b/naïve.js`；没有引号的原样返回。"""
    if len(quoted) < 2 or not (quoted.startswith('"') and quoted.endswith('"')):
        return quoted
    body = quoted[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\" or i + 1 >= len(body):
            out.extend(ch.encode("utf-8"))
            i += 1
            continue
        nxt = body[i + 1]
        octal = body[i + 1 : i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            out.append(int(octal, 8) & 0xFF)
            i += 4
        elif nxt in _C_ESCAPES:
            out.append(_C_ESCAPES[nxt])
            i += 2
        else:
            out.extend(("\\" + nxt).encode("utf-8"))
            i += 2
    return out.decode("utf-8", errors="replace")
