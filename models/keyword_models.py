# models/keyword_models.py

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# -----------------------------------------
# Intent（検索意図）
# -----------------------------------------
class SearchIntent(str, Enum):
    INFORMATIONAL = "Informational"
    COMMERCIAL = "Commercial"
    TRANSACTIONAL = "Transactional"
    NAVIGATIONAL = "Navigational"
    # LLM が想定外の値を返した場合の受け皿（スキーマには含めない）
    OTHER = "Other"


# -----------------------------------------
# キーワードの種類（長さ・形）
# -----------------------------------------
class KeywordType(str, Enum):
    SHORT_TAIL = "Short Tail"
    LONG_TAIL = "Long Tail"
    QUESTION = "Question"
    COMMERCIAL = "Commercial"
    OTHER = "Other"


# LLM に提示する（スキーマで宣言する）値。OTHER は含めない。
DECLARED_INTENTS: List[str] = [i.value for i in SearchIntent if i is not SearchIntent.OTHER]
DECLARED_KEYWORD_TYPES: List[str] = [t.value for t in KeywordType if t is not KeywordType.OTHER]

# テーブルの intent フィルタで「絞り込まない」を表す値
ALL_INTENTS = "All"

SortField = Literal["keyword", "keywordType", "searchIntent", "priorityScore", "importance"]
SortDirection = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = ("keyword", "keywordType", "searchIntent", "priorityScore", "importance")


# -----------------------------------------
# LLM が生成する1行分のキーワード
# -----------------------------------------
class KeywordEntry(BaseModel):
    """LLM が生成したキーワード1件。

    keyword_type / search_intent は str のまま持つ。
    生成境界（KeywordGenerator）で宣言済みの値か "Other" に寄せるが、
    直接組み立てたデータもそのまま集計・表示できるようにしている。

    Attributes:
        keyword (str): キーワード文字列。
        keyword_type (str): キーワード種別（Short Tail / Long Tail / Question / Commercial）。
        search_intent (str): 検索意図。
        priority_score (int): 優先度スコア（0〜100）。
        importance (str): なぜ重要かを1行で説明したもの。
    """

    model_config = ConfigDict(populate_by_name=True)

    keyword: str
    keyword_type: str = Field(..., alias="keywordType")
    search_intent: str = Field(..., alias="searchIntent")
    priority_score: int = Field(..., alias="priorityScore", ge=0, le=100)
    importance: str = ""

    def field_value(self, field: str) -> object:
        """ワイヤ上のフィールド名（keywordType など）で値を取り出す。"""
        for name, info in type(self).model_fields.items():
            if field == name or field == info.alias:
                return getattr(self, name)
        raise ValueError(f"unknown keyword field: {field}")


# -----------------------------------------
# 集計結果
# -----------------------------------------
class DistributionItem(BaseModel):
    name: str
    count: int


class GenerationStats(BaseModel):
    """キーワード一覧から毎回計算し直す集計値（単体では保持・更新しない）。"""

    model_config = ConfigDict(populate_by_name=True)

    total_keywords: int = Field(..., alias="totalKeywords")
    avg_priority: int = Field(..., alias="avgPriority")
    intent_distribution: List[DistributionItem] = Field(default_factory=list, alias="intentDistribution")
    type_distribution: List[DistributionItem] = Field(default_factory=list, alias="typeDistribution")


class SummaryCards(BaseModel):
    """結果画面上部のサマリカード4枚分。"""

    model_config = ConfigDict(populate_by_name=True)

    total_keywords: int = Field(..., alias="totalKeywords")
    avg_priority: int = Field(..., alias="avgPriority")
    top_intent: str = Field("N/A", alias="topIntent")
    dominant_type: str = Field("N/A", alias="dominantType")


# -----------------------------------------
# 結果テーブルの UI 状態
# -----------------------------------------
class TableState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_term: str = Field("", alias="searchTerm")
    sort_field: SortField = Field("priorityScore", alias="sortField")
    sort_direction: SortDirection = Field("desc", alias="sortDirection")
    intent_filter: str = Field(ALL_INTENTS, alias="intentFilter")


class TableRow(BaseModel):
    """API で返すテーブル1行（スコアの色分け用 tier 付き）。"""

    model_config = ConfigDict(populate_by_name=True)

    keyword: str
    keyword_type: str = Field(..., alias="keywordType")
    search_intent: str = Field(..., alias="searchIntent")
    priority_score: int = Field(..., alias="priorityScore")
    importance: str
    score_tier: Literal["high", "medium", "low"] = Field(..., alias="scoreTier")


class TableView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    state: TableState
    rows: List[TableRow] = Field(default_factory=list)
    row_count: int = Field(0, alias="rowCount")
    empty_message: Optional[str] = Field(None, alias="emptyMessage")
