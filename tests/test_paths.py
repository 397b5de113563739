from __future__ import annotations

import pytest

from commit_coach.analysis.paths import documentation_kind
from commit_coach.analysis.paths import is_documentation_file
from commit_coach.analysis.paths import is_source_file
from commit_coach.analysis.paths import is_test_file
from commit_coach.analysis.paths import strip_language_extension


@pytest.mark.parametrize("path", ["src/a.js", "lib/b.tsx", "app/c.py", "cmd/main.go", "x/y.rs", "z.rb", "k.c"])
def test_source_files(path: str) -> None:
    assert is_source_file(path)


@pytest.mark.parametrize("path", ["README.md", "package.json", "styles.css", "src/a.jsonc"])
def test_non_source_files(path: str) -> None:
    assert not is_source_file(path)


@pytest.mark.parametrize(
    "path",
    ["src/utils/helper.test.js", "src/a.spec.ts", "src/__tests__/a.js", "tests/test_app.py", "test/unit/x.go"],
)
def test_test_files(path: str) -> None:
    assert is_test_file(path)


@pytest.mark.parametrize("path", ["src/latest/a.js", "src/contest.js", "src/testing/a.py"])
def test_test_directory_must_be_literal(path: str) -> None:
    assert not is_test_file(path)


def test_documentation_files() -> None:
    assert is_documentation_file("README.md")
    assert is_documentation_file("packages/core/readme.rst")
    assert is_documentation_file("CHANGELOG.md")
    assert is_documentation_file("CONTRIBUTING.md")
    assert is_documentation_file("docs/guide.md")
    assert is_documentation_file("documentation/api.md")
    assert not is_documentation_file("src/docstring.py")


def test_documentation_kind() -> None:
    assert documentation_kind("README.md") == "readme"
    assert documentation_kind("CHANGELOG.md") == "changelog"
    assert documentation_kind("docs/api.md") == "api-docs"
    assert documentation_kind("CONTRIBUTING.md") == "comments"


def test_strip_language_extension() -> None:
    assert strip_language_extension("src/utils/helper.js") == "src/utils/helper"
    assert strip_language_extension("app/main.py") == "app/main"
    assert strip_language_extension("README.md") == "README.md"
