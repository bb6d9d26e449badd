from __future__ import annotations

import json
import types

import pytest

from models.keyword_models import KeywordEntry


class FakeCompletions:
    """chat.completions.create の代わり。呼び出し引数を記録して決まった応答を返す。"""

    def __init__(self, content=None, error: Exception | None = None, choices: bool = True):
        self._content = content
        self._error = error
        self._choices = choices
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        message = types.SimpleNamespace(content=self._content)
        choices = [types.SimpleNamespace(message=message)] if self._choices else []
        return types.SimpleNamespace(choices=choices, usage=types.SimpleNamespace(total_tokens=42))


def make_fake_client(content=None, error: Exception | None = None, choices: bool = True):
    completions = FakeCompletions(content=content, error=error, choices=choices)
    return types.SimpleNamespace(chat=types.SimpleNamespace(completions=completions))


class FakeGenerator:
    """ResearchSession / API テスト用の KeywordSource。"""

    def __init__(self, entries=None, error: Exception | None = None):
        self.entries = list(entries or [])
        self.error = error
        self.seeds: list[str] = []

    def generate(self, seed: str):
        self.seeds.append(seed)
        if self.error is not None:
            raise self.error
        return list(self.entries)


def entry(keyword: str, keyword_type: str, intent: str, score: int, importance: str = "") -> KeywordEntry:
    return KeywordEntry(
        keyword=keyword,
        keyword_type=keyword_type,
        search_intent=intent,
        priority_score=score,
        importance=importance,
    )


@pytest.fixture
def coffee_entries() -> list[KeywordEntry]:
    return [
        entry("buy coffee", "Commercial", "Transactional", 90, "high intent"),
        entry("what is coffee", "Question", "Informational", 40, "awareness"),
    ]


@pytest.fixture
def mixed_entries() -> list[KeywordEntry]:
    return [
        entry("Coffee Beans", "Short Tail", "Commercial", 70, "broad buyer term"),
        entry("best coffee grinder", "Commercial", "Commercial", 85, "comparison"),
        entry("how to brew coffee", "Question", "Informational", 55, "tutorial"),
        entry("coffee shop near me", "Long Tail", "Navigational", 60, "local"),
        entry("buy espresso machine", "Commercial", "Transactional", 95, "ready to buy"),
        entry("tea", "Short Tail", "Informational", 20, "unrelated"),
    ]


@pytest.fixture
def coffee_payload() -> str:
    return json.dumps(
        {
            "keywords": [
                {
                    "keyword": "buy coffee",
                    "keywordType": "Commercial",
                    "searchIntent": "Transactional",
                    "priorityScore": 90,
                    "importance": "high intent",
                },
                {
                    "keyword": "what is coffee",
                    "keywordType": "Question",
                    "searchIntent": "Informational",
                    "priorityScore": 40,
                    "importance": "awareness",
                },
            ]
        }
    )
