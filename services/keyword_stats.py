# services/keyword_stats.py

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

from models.keyword_models import DistributionItem, GenerationStats, KeywordEntry, SummaryCards

NOT_AVAILABLE = "N/A"


def _to_distribution(counts: Dict[str, int]) -> List[DistributionItem]:
    # dict は挿入順を保つので、初出順のまま並ぶ
    return [DistributionItem(name=name, count=count) for name, count in counts.items()]


def aggregate(entries: Sequence[KeywordEntry]) -> Optional[GenerationStats]:
    """
    キーワード一覧から集計値を計算する。

    - 空リストの場合は None（0 埋めの集計は返さない）
    - intent / keyword_type は文字列そのままで数える（大文字小文字の正規化はしない）
    - 分布は初出順。件数順に並べたい場合は top_category() などで別途ソートする
    - avg_priority は平均を四捨五入（0.5 は切り上げ）
    """
    if not entries:
        return None

    intent_counts: Dict[str, int] = {}
    type_counts: Dict[str, int] = {}
    total_score = 0

    for entry in entries:
        intent_counts[entry.search_intent] = intent_counts.get(entry.search_intent, 0) + 1
        type_counts[entry.keyword_type] = type_counts.get(entry.keyword_type, 0) + 1
        total_score += entry.priority_score

    return GenerationStats(
        total_keywords=len(entries),
        avg_priority=math.floor(total_score / len(entries) + 0.5),
        intent_distribution=_to_distribution(intent_counts),
        type_distribution=_to_distribution(type_counts),
    )


def top_category(distribution: Sequence[DistributionItem]) -> Optional[str]:
    """件数が最大のカテゴリ名を返す。同数の場合は初出順で先のものを採用する。"""
    if not distribution:
        return None
    # sorted は安定ソートなので、同数なら元の（初出）順が保たれる
    ranked = sorted(distribution, key=lambda item: item.count, reverse=True)
    return ranked[0].name


def summary_cards(stats: GenerationStats) -> SummaryCards:
    return SummaryCards(
        total_keywords=stats.total_keywords,
        avg_priority=stats.avg_priority,
        top_intent=top_category(stats.intent_distribution) or NOT_AVAILABLE,
        dominant_type=top_category(stats.type_distribution) or NOT_AVAILABLE,
    )
