from __future__ import annotations

from commit_coach.analysis.models import AnalysisSummary
from commit_coach.analysis.models import CommitData
from commit_coach.analysis.paths import is_documentation_file
from commit_coach.analysis.paths import is_test_file


def build_summary(commit: CommitData) -> AnalysisSummary:
    """只依赖 CommitData 的汇总计数（与 insights 无关，不看文件 status）。"""
    return AnalysisSummary(
        totalLines=sum(f.additions + f.deletions for f in commit.files),
        filesChanged=len(commit.files),
        testFilesChanged=sum(1 for f in commit.files if is_test_file(f.path)),
        documentationFilesChanged=sum(1 for f in commit.files if is_documentation_file(f.path)),
    )
