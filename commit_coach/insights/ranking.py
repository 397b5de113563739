from __future__ import annotations

from collections.abc import Iterable, Mapping

from commit_coach.analysis.models import Insight
from commit_coach.analysis.models import InsightType

SEVERITY_WEIGHT: Mapping[InsightType, int] = {"error": 4, "warning": 3, "suggestion": 2, "info": 1}


def rank_insights(
    insights: Iterable[Insight],
    min_confidence: float,
    max_insights: int,
    max_per_type: Mapping[InsightType, int] | None = None,
) -> list[Insight]:
    """
    过滤 + 排序 + 截断。

    1. 丢弃 confidence < min_confidence 的
    2. 稳定排序：severity 权重降序，再按 confidence 降序（完全相同的保持生成顺序）
    3. （可选）每种 type 最多保留 max_per_type[type] 条
    4. 截断到前 max_insights 条
    """
    if not 0.0 <= min_confidence <= 1.0:
        raise ValueError(f"min_confidence must be within [0, 1], got {min_confidence}")
    if max_insights < 0:
        raise ValueError(f"max_insights must be >= 0, got {max_insights}")

    kept = [i for i in insights if i.confidence >= min_confidence]
    ranked = sorted(kept, key=lambda i: (-SEVERITY_WEIGHT[i.type], -i.confidence))

    if max_per_type:
        per_type: dict[str, int] = {}
        capped: list[Insight] = []
        for insight in ranked:
            seen = per_type.get(insight.type, 0)
            cap = max_per_type.get(insight.type)
            if cap is not None and seen >= cap:
                continue
            per_type[insight.type] = seen + 1
            capped.append(insight)
        ranked = capped

    return ranked[:max_insights]
