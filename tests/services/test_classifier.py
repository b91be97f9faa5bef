"""
Tests for conversation summary classification.
"""

from datetime import date

import pytest

from pmgraph.models.document import DocType, UpdateMode
from pmgraph.services.classifier import RULES, classify_updates

TODAY = date(2024, 5, 17)


@pytest.mark.unit
class TestClassifyUpdates:
    """Tests for rule routing."""

    def test_todo(self):
        updates = classify_updates("We need to add rate limiting", TODAY)

        todo = next(u for u in updates if u.doc_type == DocType.TODO)
        assert todo.mode == UpdateMode.APPEND
        assert todo.content == "## 2024-05-17\n- [ ] We need to add rate limiting"

    def test_progress_upserts_current_sprint(self):
        updates = classify_updates("Implemented the login flow", TODAY)

        assert [u.doc_type for u in updates] == [DocType.PROGRESS]
        assert updates[0].mode == UpdateMode.UPSERT
        assert updates[0].content.startswith("## Current Sprint\n**Status:** In progress\n")
        assert "**Last update:** 2024-05-17" in updates[0].content
        assert updates[0].content.endswith("Implemented the login flow")

    def test_memory(self):
        updates = classify_updates("We decided on Postgres", TODAY)

        assert [u.doc_type for u in updates] == [DocType.MEMORY]
        assert updates[0].content == "## 2024-05-17 - Session Notes\nWe decided on Postgres"

    def test_delays(self):
        updates = classify_updates("Deploy blocked by vendor", TODAY)

        assert [u.doc_type for u in updates] == [DocType.DELAYS]
        assert updates[0].content == (
            "## 2024-05-17\n**Reason:** Deploy blocked by vendor\n"
            "**Impact:** TBD\n**Mitigation:** TBD"
        )

    def test_question_goes_to_notes(self):
        updates = classify_updates("Which database wins?", TODAY)

        assert [u.doc_type for u in updates] == [DocType.NOTES]

    def test_fallback_to_notes(self):
        updates = classify_updates("Lunch was great", TODAY)

        assert len(updates) == 1
        assert updates[0].doc_type == DocType.NOTES
        assert updates[0].mode == UpdateMode.APPEND
        assert updates[0].content == "## 2024-05-17\nLunch was great"

    def test_multiple_rules_fire_in_order(self):
        """Test one summary can update several documents."""
        updates = classify_updates(
            "Fixed the cache issue; we learned a lot and still need to write docs", TODAY
        )

        assert [u.doc_type for u in updates] == [
            DocType.TODO,
            DocType.PROGRESS,
            DocType.MEMORY,
            DocType.DELAYS,
        ]

    def test_case_insensitive(self):
        assert classify_updates("COMPLETED", TODAY)[0].doc_type == DocType.PROGRESS

    def test_excerpt_lengths(self):
        summary = "todo " + "x" * 400

        todo = classify_updates(summary, TODAY)[0]

        assert todo.content == "## 2024-05-17\n- [ ] " + summary[:200]

    def test_braces_kept_literal(self):
        updates = classify_updates("Lunch {date} {summary}", TODAY)

        assert updates[0].content == "## 2024-05-17\nLunch {date} {summary}"

    def test_rule_order(self):
        assert [r.doc_type for r in RULES] == [
            DocType.TODO,
            DocType.PROGRESS,
            DocType.MEMORY,
            DocType.DELAYS,
            DocType.NOTES,
        ]
