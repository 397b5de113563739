from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from commit_coach.analysis.models import ChangedFile
from commit_coach.analysis.models import CommitData

CommitFactory = Callable[..., CommitData]


@pytest.fixture
def make_commit() -> CommitFactory:
    """构造 CommitData：diff 默认为各文件 diff 的拼接。"""

    def factory(
        files: list[ChangedFile] | None = None,
        message: str = "Add helper utilities for parsing",
        diff: str | None = None,
    ) -> CommitData:
        files = files or []
        return CommitData(
            hash="0123456789abcdef0123456789abcdef01234567",
            message=message,
            author="Dev",
            date=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
            diff="\n".join(f.diff for f in files) if diff is None else diff,
            files=tuple(files),
        )

    return factory
