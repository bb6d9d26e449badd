# app/shell.py
from __future__ import annotations

import logging
import threading
from typing import List, Literal, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from models.keyword_models import GenerationStats, KeywordEntry, SummaryCards, TableState
from services.keyword_stats import aggregate, summary_cards
from services.keyword_table import KeywordTable

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Failed to generate keywords. Please try again."

# 初回画面の「Try:」候補
SUGGESTED_SEEDS = ("digital marketing", "vegan recipes", "home workout")

Status = Literal["idle", "loading", "success", "error"]


class KeywordSource(Protocol):
    def generate(self, seed: str) -> List[KeywordEntry]: ...


class SessionSnapshot(BaseModel):
    """画面に渡す現在の状態（読み取り専用のコピー）。"""

    model_config = ConfigDict(populate_by_name=True)

    status: Status
    seed_keyword: Optional[str] = Field(None, alias="seedKeyword")
    has_searched: bool = Field(False, alias="hasSearched")
    error: Optional[str] = None
    keywords: List[KeywordEntry] = Field(default_factory=list)
    stats: Optional[GenerationStats] = None
    summary: Optional[SummaryCards] = None


class ResearchSession:
    """
    seed 入力 → 生成 → 状態更新 をまとめるアプリシェル。

    状態遷移:
        idle / success / error --submit--> loading --> success | error

    FastAPI の sync ルートはスレッドプールで動くため、submit が重なることがある。
    submit ごとに連番を振り、完了時により新しい submit が始まっていれば結果を捨てる
    （最後に送信したものだけが表示される）。
    """

    def __init__(self, generator: KeywordSource) -> None:
        self._generator = generator
        self._lock = threading.Lock()
        self._sequence = 0
        self._status: Status = "idle"
        self._seed: Optional[str] = None
        self._has_searched = False
        self._error: Optional[str] = None
        self._keywords: List[KeywordEntry] = []
        self._table_state = TableState()

    @property
    def status(self) -> Status:
        return self._status

    # ------------------------------
    # submit
    # ------------------------------
    def submit(self, seed: str) -> SessionSnapshot:
        seed = (seed or "").strip()
        if not seed:
            raise ValueError("seed keyword must not be empty")

        with self._lock:
            self._sequence += 1
            ticket = self._sequence
            self._status = "loading"
            self._seed = seed
            self._has_searched = True
            self._error = None
            self._keywords = []
            self._table_state = TableState()

        logger.info("[shell] submit seed_keyword=%s ticket=%d", seed, ticket)

        keywords: List[KeywordEntry] = []
        error: Optional[str] = None
        try:
            keywords = list(self._generator.generate(seed))
        except Exception as e:  # noqa: BLE001
            # 種類を問わず1つのメッセージにまとめて画面に出す
            logger.warning("[shell] generation failed seed_keyword=%s error=%s", seed, e)
            error = str(e) or GENERIC_ERROR_MESSAGE

        with self._lock:
            if ticket != self._sequence:
                logger.info(
                    "[shell] discard stale result ticket=%d latest=%d",
                    ticket,
                    self._sequence,
                )
            elif error is not None:
                self._status = "error"
                self._error = error
            else:
                self._status = "success"
                self._keywords = keywords
                logger.info("[shell] success seed_keyword=%s item_count=%d", seed, len(keywords))

        return self.snapshot()

    # ------------------------------
    # 表示用
    # ------------------------------
    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            keywords = list(self._keywords)
            stats = aggregate(keywords)
            return SessionSnapshot(
                status=self._status,
                seed_keyword=self._seed,
                has_searched=self._has_searched,
                error=self._error,
                keywords=keywords,
                stats=stats,
                summary=summary_cards(stats) if stats else None,
            )

    def stats(self) -> Optional[GenerationStats]:
        with self._lock:
            return aggregate(self._keywords)

    def table(self) -> KeywordTable:
        """現在のキーワードに、セッションが持つテーブル状態を紐付けた KeywordTable を返す。"""
        with self._lock:
            return KeywordTable(self._keywords, self._table_state)
