"""
基于 git CLI 的 commit 采集器。

职责：
- 把一个 revision 的元信息、文件列表（status/numstat）、完整 patch 读出来
- 归一化为 `CommitData`（每个 ChangedFile 带上自己那一段 diff）

约定：git 命令失败直接抛 GitCommandError（stderr 先写日志），不吞错。
"""

from __future__ import annotations

import logging
import os
import subprocess
from datetime import datetime

from commit_coach.analysis.diff_parser import split_commit_diff
from commit_coach.analysis.models import ChangedFile
from commit_coach.analysis.models import CommitData
from commit_coach.analysis.models import FileStatus

logger = logging.getLogger(__name__)

_METADATA_FORMAT = "%H%x00%an%x00%aI%x00%B"


class GitCommandError(RuntimeError):
    """git 子进程返回非 0。"""

    pass


class GitCommitCollector:
    """读取本地仓库里的 commit。"""

    def __init__(self, repo_path: str = ".", git_bin: str = "git") -> None:
        self._repo_path = repo_path
        self._git_bin = git_bin

    def is_repository(self) -> bool:
        if not os.path.isdir(self._repo_path):
            return False
        try:
            result = subprocess.run(
                [self._git_bin, "rev-parse", "--is-inside-work-tree"],
                cwd=self._repo_path,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError:
            logger.warning(f"git executable not found: {self._git_bin}")
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def get_commit(self, rev: str = "HEAD") -> CommitData:
        metadata = self._git(["show", "-s", f"--format={_METADATA_FORMAT}", rev])
        commit_hash, author, date_str, message = metadata.split("\x00", 3)

        statuses = parse_name_status(self._git(["show", "--name-status", "-z", "-M", "--format=", rev]))
        counts = parse_numstat(self._git(["show", "--numstat", "-z", "-M", "--format=", rev]))
        full_diff = self._git(["show", "-M", "--format=", rev])
        diff_by_path = split_commit_diff(full_diff)

        files: list[ChangedFile] = []
        for path, status in statuses:
            additions, deletions = counts.get(path, (0, 0))
            files.append(
                ChangedFile(
                    path=path,
                    status=status,
                    additions=additions,
                    deletions=deletions,
                    diff=diff_by_path.get(path, ""),
                )
            )

        return CommitData(
            hash=commit_hash.strip(),
            message=message.strip(),
            author=author.strip(),
            date=datetime.fromisoformat(date_str.strip()),
            diff=full_diff,
            files=tuple(files),
        )

    def get_commit_range(self, from_rev: str, to_rev: str) -> list[CommitData]:
        """from_rev..to_rev 之间的 commit（旧 -> 新）。"""
        output = self._git(["rev-list", "--reverse", f"{from_rev}..{to_rev}"])
        return [self.get_commit(sha) for sha in output.split()]

    def get_remote_url(self, remote: str = "origin") -> str:
        return self._git(["remote", "get-url", remote]).strip()

    def _git(self, args: list[str]) -> str:
        # 输出按 UTF-8 解码，非法字节替换；路径不转义，和 `-z` 输出里的路径一致
        cmd = [self._git_bin, "-c", "core.quotepath=off"] + args
        result = subprocess.run(
            cmd, cwd=self._repo_path, capture_output=True, encoding="utf-8", errors="replace"
        )
        if result.returncode != 0:
            logger.error(f"git failed: {' '.join(cmd)}\nstdout={result.stdout}\nstderr={result.stderr}")
            raise GitCommandError(f"git command failed: {' '.join(cmd)}")
        return result.stdout


def parse_file_status(code: str) -> FileStatus:
    if code.startswith("A"):
        return "added"
    if code.startswith("D"):
        return "deleted"
    if code.startswith("R"):
        return "renamed"
    return "modified"


def parse_name_status(output: str) -> list[tuple[str, FileStatus]]:
    """
    解析 `--name-status -z`：
    - `M\\0path\\0`
    - `R100\\0old\\0new\\0`（重命名/复制带两个路径，取新路径）
    """
    tokens = [t for t in output.strip("\n").split("\x00")]
    entries: list[tuple[str, FileStatus]] = []
    i = 0
    while i < len(tokens):
        code = tokens[i].strip()
        if not code:
            i += 1
            continue
        if code[0] in ("R", "C"):
            path = tokens[i + 2]
            i += 3
        else:
            path = tokens[i + 1]
            i += 2
        entries.append((path, parse_file_status(code)))
    return entries


def parse_numstat(output: str) -> dict[str, tuple[int, int]]:
    """
    解析 `--numstat -z`：
    - `12\\t3\\tpath\\0`
    - 重命名：`12\\t3\\t\\0old\\0new\\0`
    - 二进制文件的计数是 `-`，按 0 处理
    """
    tokens = output.strip("\n").split("\x00")
    counts: dict[str, tuple[int, int]] = {}
    i = 0
    while i < len(tokens):
        token = tokens[i].lstrip("\n")
        if not token:
            i += 1
            continue
        added, deleted, path = token.split("\t", 2)
        if path:
            i += 1
        else:
            path = tokens[i + 2]
            i += 3
        counts[path] = (_count(added), _count(deleted))
    return counts


def _count(value: str) -> int:
    return int(value) if value.isdigit() else 0
