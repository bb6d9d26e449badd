# services/keyword_table.py

from __future__ import annotations

import csv
import logging
from typing import List, Optional, Sequence

import pandas as pd

from models.keyword_models import (
    ALL_INTENTS,
    SORT_FIELDS,
    KeywordEntry,
    TableRow,
    TableState,
    TableView,
)

logger = logging.getLogger(__name__)

CSV_FILENAME = "keywords.csv"
CSV_HEADERS = ["Keyword", "Type", "Intent", "Score", "Importance"]
EMPTY_MESSAGE = "No keywords found matching your filters."

# スコアの色分けの閾値
HIGH_SCORE = 80
MEDIUM_SCORE = 50


def score_tier(score: int) -> str:
    if score >= HIGH_SCORE:
        return "high"
    if score >= MEDIUM_SCORE:
        return "medium"
    return "low"


def _sort_key(value: object) -> object:
    # 数値はそのまま数値比較、それ以外は小文字の文字列として比較
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return str(value).lower()


def filter_entries(
    entries: Sequence[KeywordEntry],
    search_term: str = "",
    intent_filter: str = ALL_INTENTS,
) -> List[KeywordEntry]:
    """keyword の部分一致（大文字小文字無視）と intent の完全一致で絞り込む。"""
    term = search_term.lower()
    return [
        entry
        for entry in entries
        if term in entry.keyword.lower()
        and (intent_filter == ALL_INTENTS or entry.search_intent == intent_filter)
    ]


def sort_entries(
    entries: Sequence[KeywordEntry],
    sort_field: str = "priorityScore",
    sort_direction: str = "desc",
) -> List[KeywordEntry]:
    """
    指定フィールドで並べ替える。

    Python の sorted は安定ソートなので、同じキーの行は
    asc / desc どちらでも入力順のまま並ぶ。
    """
    if sort_field not in SORT_FIELDS:
        raise ValueError(f"unknown sort field: {sort_field}")
    return sorted(
        entries,
        key=lambda entry: _sort_key(entry.field_value(sort_field)),
        reverse=(sort_direction == "desc"),
    )


def entries_to_csv(rows: Sequence[KeywordEntry]) -> str:
    """
    固定の列順で CSV 文字列を作る。

    - ヘッダは引用符なし
    - 文字列は必ずダブルクォートで囲み、中の " は "" にエスケープ
    - スコアは数値のまま（引用符なし）
    """
    df = pd.DataFrame(
        {
            "keyword": pd.Series([r.keyword for r in rows], dtype="object"),
            "keyword_type": pd.Series([r.keyword_type for r in rows], dtype="object"),
            "search_intent": pd.Series([r.search_intent for r in rows], dtype="object"),
            "priority_score": pd.Series([r.priority_score for r in rows], dtype="int64"),
            "importance": pd.Series([r.importance for r in rows], dtype="object"),
        }
    )
    body = df.to_csv(
        index=False,
        header=False,
        quoting=csv.QUOTE_NONNUMERIC,
        lineterminator="\n",
    )
    return ",".join(CSV_HEADERS) + "\n" + body


class KeywordTable:
    """
    結果テーブル。

    元データ（entries）は変更せず、TableState（検索語・ソート・intent フィルタ）から
    表示用の行を毎回作り直す。
    """

    def __init__(self, entries: Sequence[KeywordEntry], state: Optional[TableState] = None) -> None:
        self._entries = list(entries)
        self.state = state if state is not None else TableState()

    # ------------------------------
    # UI 操作
    # ------------------------------
    def set_search_term(self, search_term: str) -> None:
        self.state.search_term = search_term

    def set_intent_filter(self, intent_filter: str) -> None:
        self.state.intent_filter = intent_filter or ALL_INTENTS

    def click_header(self, field: str) -> None:
        """同じ列なら昇順/降順を反転、別の列なら切り替えて降順から始める。"""
        if field not in SORT_FIELDS:
            raise ValueError(f"unknown sort field: {field}")
        if field == self.state.sort_field:
            self.state.sort_direction = "asc" if self.state.sort_direction == "desc" else "desc"
        else:
            self.state.sort_field = field
            self.state.sort_direction = "desc"
        logger.debug(
            "[keyword_table] sort field=%s direction=%s",
            self.state.sort_field,
            self.state.sort_direction,
        )

    # ------------------------------
    # 表示用データ
    # ------------------------------
    def rows(self) -> List[KeywordEntry]:
        filtered = filter_entries(self._entries, self.state.search_term, self.state.intent_filter)
        return sort_entries(filtered, self.state.sort_field, self.state.sort_direction)

    def row_count(self) -> int:
        return len(self.rows())

    def is_empty(self) -> bool:
        return self.row_count() == 0

    def view(self) -> TableView:
        rows = self.rows()
        return TableView(
            state=self.state.model_copy(),
            rows=[
                TableRow(
                    keyword=r.keyword,
                    keyword_type=r.keyword_type,
                    search_intent=r.search_intent,
                    priority_score=r.priority_score,
                    importance=r.importance,
                    score_tier=score_tier(r.priority_score),
                )
                for r in rows
            ],
            row_count=len(rows),
            empty_message=None if rows else EMPTY_MESSAGE,
        )

    def export_csv(self) -> str:
        """今見えている（絞り込み・並べ替え後の）行だけを CSV にする。"""
        rows = self.rows()
        logger.info("[keyword_table] export csv rows=%d", len(rows))
        return entries_to_csv(rows)
