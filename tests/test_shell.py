from __future__ import annotations

import threading

import pytest

from agents.keyword_generator_agent import EmptyResponse, KeywordGenerator
from app.shell import GENERIC_ERROR_MESSAGE, ResearchSession
from conftest import FakeGenerator, entry, make_fake_client


def test_initial_state_is_idle():
    snap = ResearchSession(FakeGenerator()).snapshot()
    assert snap.status == "idle"
    assert snap.has_searched is False
    assert snap.keywords == []
    assert snap.stats is None
    assert snap.summary is None


def test_successful_submit_stores_entries_and_stats(coffee_entries):
    generator = FakeGenerator(coffee_entries)
    session = ResearchSession(generator)

    snap = session.submit("  coffee  ")

    assert generator.seeds == ["coffee"]
    assert snap.status == "success"
    assert snap.seed_keyword == "coffee"
    assert snap.has_searched is True
    assert [k.keyword for k in snap.keywords] == ["buy coffee", "what is coffee"]
    assert snap.stats.avg_priority == 65
    assert snap.summary.top_intent == "Transactional"


def test_blank_seed_is_rejected_without_state_change():
    generator = FakeGenerator()
    session = ResearchSession(generator)
    with pytest.raises(ValueError):
        session.submit("   ")
    assert session.status == "idle"
    assert generator.seeds == []


def test_empty_service_payload_surfaces_as_error_state():
    session = ResearchSession(KeywordGenerator(make_fake_client(content="")))

    snap = session.submit("coffee")

    assert snap.status == "error"
    assert snap.error
    assert snap.keywords == []
    assert snap.stats is None


def test_error_without_message_falls_back_to_generic():
    session = ResearchSession(FakeGenerator(error=EmptyResponse()))
    assert session.submit("coffee").error == GENERIC_ERROR_MESSAGE


def test_resubmit_clears_previous_results(coffee_entries):
    generator = FakeGenerator(coffee_entries)
    session = ResearchSession(generator)
    session.submit("coffee")

    generator.error = RuntimeError("quota exceeded")
    snap = session.submit("tea")

    assert snap.status == "error"
    assert snap.error == "quota exceeded"
    assert snap.keywords == []

    generator.error = None
    snap = session.submit("coffee")
    assert snap.status == "success"
    assert snap.error is None


def test_resubmit_resets_table_state(coffee_entries):
    session = ResearchSession(FakeGenerator(coffee_entries))
    session.submit("coffee")
    table = session.table()
    table.set_search_term("buy")
    table.click_header("keyword")
    assert session.table().row_count() == 1

    session.submit("coffee")
    assert session.table().state.search_term == ""
    assert session.table().state.sort_field == "priorityScore"


class BlockingGenerator:
    """最初の呼び出しだけ release されるまで止まる。"""

    def __init__(self, slow_entries, fast_entries):
        self.slow_entries = slow_entries
        self.fast_entries = fast_entries
        self.started = threading.Event()
        self.release = threading.Event()
        self._calls = 0

    def generate(self, seed):
        self._calls += 1
        if self._calls == 1:
            self.started.set()
            self.release.wait(timeout=5)
            return self.slow_entries
        return self.fast_entries


def test_only_latest_submission_is_kept():
    slow = [entry("old result", "Question", "Informational", 10)]
    fast = [entry("new result", "Question", "Informational", 90)]
    generator = BlockingGenerator(slow, fast)
    session = ResearchSession(generator)

    worker = threading.Thread(target=session.submit, args=("first",))
    worker.start()
    assert generator.started.wait(timeout=5)

    snap = session.submit("second")
    assert [k.keyword for k in snap.keywords] == ["new result"]

    generator.release.set()
    worker.join(timeout=5)

    final = session.snapshot()
    assert final.status == "success"
    assert final.seed_keyword == "second"
    assert [k.keyword for k in final.keywords] == ["new result"]
