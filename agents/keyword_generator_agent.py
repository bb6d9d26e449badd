# agents/keyword_generator_agent.py

from __future__ import annotations

import json
import logging
import math
from typing import Any, List, Optional

from openai import OpenAI, OpenAIError

from models.keyword_models import (
    DECLARED_INTENTS,
    DECLARED_KEYWORD_TYPES,
    KeywordEntry,
    KeywordType,
    SearchIntent,
)

logger = logging.getLogger(__name__)

# ============================================================
# 生成パラメータ
# ============================================================

DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TARGET_COUNT = 100

# パース失敗時にログへ出す本文の最大文字数
MAX_LOGGED_PAYLOAD = 2000


# ============================================================
# 例外
# ============================================================

class GenerationError(RuntimeError):
    """キーワード生成の失敗。アプリシェルでまとめて1つのメッセージに変換する。"""


class EmptyResponse(GenerationError):
    """LLM がテキストを返さなかった。"""


class MalformedResponse(GenerationError):
    """返ってきたテキストが想定した JSON 配列の形になっていない。"""


class UpstreamError(GenerationError):
    """通信エラー・API エラーなど、LLM サービス側の失敗。"""


# ============================================================
# プロンプト / レスポンススキーマ
# ============================================================

PROMPT_TEMPLATE = """
Act as a world-class SEO strategist.
Generate a comprehensive keyword research table based on the seed keyword: "{seed}".

Requirements:
1. Generate EXACTLY {count} unique keyword entries. Do not stop early.
2. Include a diverse mix:
   - Short tail (broad terms)
   - Long tail (specific, low volume but high intent)
   - Questions (People Also Ask style, starting with Who, What, Where, When, Why, How)
   - Buyer/Commercial keywords (including words like "best", "price", "buy", "review", "vs", "near me")
   - Synonyms and related semantic terms.
3. Assign a realistic Priority Score (0-100) based on estimated value and intent.
4. Determine the Search Intent accurately.
5. Provide a brief, punchy reason for Importance.

Return the data strictly as JSON: an object whose "keywords" field is the array of entries.
""".strip()


def build_prompt(seed: str, count: int = DEFAULT_TARGET_COUNT) -> str:
    """seed だけをパラメータにした固定プロンプトを組み立てる。"""
    return PROMPT_TEMPLATE.format(seed=seed, count=count)


# OpenAI の structured output はルートが object である必要があるため、
# キーワード配列は "keywords" に包んで宣言する。
KEYWORD_ENTRY_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "keyword": {
            "type": "string",
            "description": "The generated keyword or phrase.",
        },
        "keywordType": {
            "type": "string",
            "enum": DECLARED_KEYWORD_TYPES,
            "description": "The categorization of the keyword length and nature.",
        },
        "searchIntent": {
            "type": "string",
            "enum": DECLARED_INTENTS,
            "description": "The user intent behind the search.",
        },
        "priorityScore": {
            "type": "number",
            "description": "A score from 0 to 100 indicating ranking potential and value.",
        },
        "importance": {
            "type": "string",
            "description": "A short, one-line explanation of why this keyword is valuable.",
        },
    },
    "required": ["keyword", "keywordType", "searchIntent", "priorityScore", "importance"],
    "additionalProperties": False,
}

RESPONSE_FORMAT: dict = {
    "type": "json_schema",
    "json_schema": {
        "name": "keyword_research",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "keywords": {"type": "array", "items": KEYWORD_ENTRY_SCHEMA},
            },
            "required": ["keywords"],
            "additionalProperties": False,
        },
    },
}


# ============================================================
# 正規化ユーティリティ
# ============================================================

def _normalize_category(value: Any, declared: List[str], other: str) -> str:
    """宣言済みカテゴリに寄せる（前後空白・大文字小文字は無視）。該当なしは other。"""
    if not isinstance(value, str):
        return other
    folded = value.strip().casefold()
    for candidate in declared:
        if candidate.casefold() == folded:
            return candidate
    return other


def normalize_intent(value: Any) -> str:
    return _normalize_category(value, DECLARED_INTENTS, SearchIntent.OTHER.value)


def normalize_keyword_type(value: Any) -> str:
    return _normalize_category(value, DECLARED_KEYWORD_TYPES, KeywordType.OTHER.value)


def clamp_score(value: Any) -> int:
    """priorityScore を四捨五入（0.5 は切り上げ）して 0〜100 に丸める。

    数値として解釈できない値は ValueError / TypeError を送出する。
    """
    if isinstance(value, bool):
        raise TypeError("priorityScore must be a number")
    v = float(value)
    if math.isnan(v) or math.isinf(v):
        raise ValueError("priorityScore must be finite")
    return max(0, min(100, math.floor(v + 0.5)))


def _extract_items(data: Any) -> list:
    """JSON 配列そのもの、または {"keywords": [...]} のどちらも受け付ける。"""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("keywords"), list):
        return data["keywords"]
    raise MalformedResponse("LLM からの JSON の形式が不正です（キーワード配列がありません）")


def parse_keywords(text: Optional[str]) -> List[KeywordEntry]:
    """LLM の生テキストを KeywordEntry のリストに変換する。"""
    if not text or not text.strip():
        raise EmptyResponse("No data returned from the keyword generation service.")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(
            "[keyword_generator] JSON parse error error=%s content=%r",
            e,
            text[:MAX_LOGGED_PAYLOAD],
        )
        raise MalformedResponse(f"Could not parse keyword data: {e}") from e

    entries: List[KeywordEntry] = []
    coerced = 0
    for index, raw in enumerate(_extract_items(data)):
        if not isinstance(raw, dict):
            raise MalformedResponse(f"Keyword item #{index} is not an object")

        keyword = raw.get("keyword")
        if isinstance(keyword, str) and not keyword.strip():
            logger.info("[keyword_generator] skip blank keyword index=%d", index)
            continue

        intent = normalize_intent(raw.get("searchIntent"))
        keyword_type = normalize_keyword_type(raw.get("keywordType"))
        if intent != raw.get("searchIntent") or keyword_type != raw.get("keywordType"):
            coerced += 1

        try:
            score = clamp_score(raw.get("priorityScore"))
            entry = KeywordEntry(
                keyword=keyword,
                keywordType=keyword_type,
                searchIntent=intent,
                priorityScore=score,
                importance=raw.get("importance") or "",
            )
        except (TypeError, ValueError, OverflowError) as e:
            # pydantic の ValidationError も ValueError のサブクラス
            raise MalformedResponse(f"Keyword item #{index} is invalid: {e}") from e

        entries.append(entry)

    if coerced:
        logger.warning("[keyword_generator] coerced categories item_count=%d", coerced)

    return entries


# ============================================================
# 生成クライアント
# ============================================================

class KeywordGenerator:
    """
    seed キーワードから LLM にキーワード一覧を生成させるクライアント。

    OpenAI クライアントは起動時に1つだけ作って外から渡す（create_app 参照）。
    リトライ・ストリーミングはしない。失敗は GenerationError のいずれかで送出する。
    """

    def __init__(
        self,
        client: OpenAI,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        target_count: int = DEFAULT_TARGET_COUNT,
    ) -> None:
        self._client = client
        self.model = model
        self.temperature = temperature
        self.target_count = target_count

    def generate(self, seed: str) -> List[KeywordEntry]:
        seed = seed.strip()
        if not seed:
            raise ValueError("seed keyword must not be empty")

        logger.info(
            "[keyword_generator] generate start seed_keyword=%s model=%s target_count=%d",
            seed,
            self.model,
            self.target_count,
        )

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_prompt(seed, self.target_count)}],
                response_format=RESPONSE_FORMAT,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error("[keyword_generator] API error seed_keyword=%s error=%s", seed, e)
            raise UpstreamError(f"Keyword generation request failed: {e}") from e

        usage = getattr(response, "usage", None)
        logger.info(
            "[keyword_generator] response received seed_keyword=%s total_tokens=%s",
            seed,
            getattr(usage, "total_tokens", None) if usage else None,
        )

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        entries = parse_keywords(content)

        logger.info(
            "[keyword_generator] generate success seed_keyword=%s item_count=%d",
            seed,
            len(entries),
        )
        return entries
