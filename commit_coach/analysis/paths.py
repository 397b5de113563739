"""
文件路径分类（非 AI，纯确定性）。

通过扩展名 / 目录名判断一个路径是 source、test 还是 documentation。
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Literal

SOURCE_EXTENSIONS: tuple[str, ...] = ("js", "ts", "jsx", "tsx", "py", "java", "cpp", "c", "go", "rs", "php", "rb")

_EXT_GROUP = "|".join(SOURCE_EXTENSIONS)
_SOURCE_RE = re.compile(rf"\.({_EXT_GROUP})$")
_TEST_SUFFIX_RE = re.compile(rf"\.(test|spec)\.({_EXT_GROUP})$")
_TEST_DIRS = frozenset({"test", "tests", "__tests__"})
_DOC_NAME_RE = re.compile(r"README|CHANGELOG|CONTRIBUTING", re.IGNORECASE)
_DOC_DIRS = frozenset({"docs", "documentation"})

DocumentationKind = Literal["readme", "api-docs", "comments", "changelog"]


def _parent_dirs(path: str) -> tuple[str, ...]:
    return PurePosixPath(path).parts[:-1]


def is_source_file(path: str) -> bool:
    return _SOURCE_RE.search(path) is not None


def is_test_file(path: str) -> bool:
    if _TEST_SUFFIX_RE.search(path):
        return True
    return any(part in _TEST_DIRS for part in _parent_dirs(path))


def is_documentation_file(path: str) -> bool:
    if _DOC_NAME_RE.search(path):
        return True
    return any(part.lower() in _DOC_DIRS for part in _parent_dirs(path))


def documentation_kind(path: str) -> DocumentationKind:
    """README > CHANGELOG > docs/ 目录；其余（例如 CONTRIBUTING）归为 comments。"""
    if re.search("README", path, re.IGNORECASE):
        return "readme"
    if re.search("CHANGELOG", path, re.IGNORECASE):
        return "changelog"
    if any(part.lower() in _DOC_DIRS for part in _parent_dirs(path)):
        return "api-docs"
    return "comments"


def strip_language_extension(path: str) -> str:
    """`src/utils/helper.js` -> `src/utils/helper`（非 source 扩展名原样返回）。"""
    return _SOURCE_RE.sub("", path)
