"""Unit tests for ChunkingEngine."""
import sys
import json
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from models.chunk import ChunkType
from services.chunking_engine import ChunkingEngine

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
def engine():
    return ChunkingEngine()


class TestStructuredText:
    """Chunking of plain and markdown text."""

    def test_question_answer_pairs(self, engine):
        content = (
            "# Dates\n"
            "Q: When is the reunion?\n"
            "A: The reunion is May 21-24, 2026.\n"
            "\n"
            "Q: Where is it held?\n"
            "\n"
            "A: On the Princeton campus.\n"
        )

        chunks = engine.chunk("doc", content, "General", "text/plain")

        assert len(chunks) == 2
        first, second = chunks
        assert first.chunk_type == ChunkType.QA
        assert first.question == "When is the reunion?"
        assert first.answer == "The reunion is May 21-24, 2026."
        assert first.context == "Dates"
        assert first.source_location == "line 2"
        assert first.chunk_id == "doc_0"
        assert second.question == "Where is it held?"
        assert second.answer == "On the Princeton campus."
        assert second.chunk_id == "doc_1"
        assert second.chunk_index == 1

    def test_keywords_tagged_with_category(self, engine):
        content = "Q: When is the reunion?\nA: The reunion is May 21-24, 2026."

        chunk = engine.chunk("doc", content, "General", "text/plain")[0]

        assert "reunion" in chunk.keywords
        assert "2026" in chunk.keywords
        assert chunk.keywords[-1] == "general"
        assert chunk.category == "General"

    def test_question_mark_line_starts_question(self, engine):
        content = "What should I wear?\nBusiness casual attire is fine for every event."

        chunks = engine.chunk("doc", content, "General", "text/markdown")

        assert len(chunks) == 1
        assert chunks[0].question == "What should I wear?"
        assert chunks[0].answer == "Business casual attire is fine for every event."

    def test_unanswered_question_is_dropped(self, engine):
        content = "Q: Anyone?\nQ: Is there parking?\nA: Yes, free parking in Lot 21."

        chunks = engine.chunk("doc", content, "General", "text/plain")

        assert len(chunks) == 1
        assert chunks[0].question == "Is there parking?"
        assert chunks[0].chunk_index == 0

    def test_paragraph_sections(self, engine):
        content = (
            "Welcome to the reunion weekend everyone.\n"
            "\n"
            "short\n"
            "\n"
            "Another paragraph about the golf outing."
        )

        chunks = engine.chunk("doc", content, "Events", "text/plain")

        assert [chunk.chunk_type for chunk in chunks] == [ChunkType.SECTION, ChunkType.SECTION]
        assert chunks[0].question is None
        assert chunks[0].answer == "Welcome to the reunion weekend everyone."
        assert chunks[1].answer == "Another paragraph about the golf outing."
        assert [chunk.chunk_id for chunk in chunks] == ["doc_0", "doc_1"]

    def test_fallback_to_whole_content(self, engine):
        chunks = engine.chunk("doc", "  Tiny note  ", "General", "text/plain")

        assert len(chunks) == 1
        assert chunks[0].chunk_type == ChunkType.SECTION
        assert chunks[0].answer == "Tiny note"
        assert chunks[0].chunk_id == "doc_0"

    def test_fallback_is_truncated(self):
        engine = ChunkingEngine(min_section_length=5000, fallback_chars=10)

        chunks = engine.chunk("doc", "x" * 50, "General", "text/plain")

        assert chunks[0].answer == "x" * 10

    def test_empty_content(self, engine):
        assert engine.chunk("doc", "", "General", "text/plain") == []
        assert engine.chunk("doc", "   \n  ", "General", "text/plain") == []

    def test_deterministic(self, engine):
        content = "Q: When is check-in?\nA: Check-in opens Thursday at noon at the Marriott."

        first = engine.chunk("doc", content, "General", "text/plain")
        second = engine.chunk("doc", content, "General", "text/plain")

        assert first == second


class TestStructuredData:
    """Chunking of JSON FAQ records."""

    def test_record_array(self, engine):
        content = json.dumps([
            {"question": "When?", "answer": "May 21-24, 2026", "category": "Schedule", "keywords": ["Dates", "weekend"]},
            {"question": "", "answer": "Missing question"},
            {"question": "Where?", "answer": "Princeton campus"},
        ])

        chunks = engine.chunk("faq", content, "General", "application/json")

        assert len(chunks) == 2
        first, second = chunks
        assert first.question == "When?"
        assert first.category == "Schedule"
        assert first.keywords[:2] == ["dates", "weekend"]
        assert "schedule" not in first.keywords
        assert first.source_location == "record 1"
        assert second.category == "General"
        assert second.keywords[-1] == "general"
        assert second.source_location == "record 3"
        assert second.chunk_id == "faq_1"

    def test_faqs_object(self, engine):
        content = json.dumps({"faqs": [{"question": "Is there golf?", "answer": "Yes, Friday morning."}]})

        chunks = engine.chunk("faq", content, "Activities", "application/json")

        assert len(chunks) == 1
        assert chunks[0].chunk_type == ChunkType.QA
        assert chunks[0].category == "Activities"

    def test_malformed_json_yields_no_chunks(self, engine):
        assert engine.chunk("faq", "{not json", "General", "application/json") == []

    def test_json_without_records_yields_no_chunks(self, engine):
        assert engine.chunk("faq", json.dumps({"title": "FAQ"}), "General", "application/json") == []


class TestTabular:
    """Chunking of spreadsheet and delimited rows."""

    def test_question_answer_columns(self, engine):
        content = (
            "Question\tAnswer\tCategory\n"
            "When is it?\tMay 21-24, 2026\tDates\n"
            "No answer here\t\t\n"
        )

        chunks = engine.chunk("sheet", content, "General", "text/tab-separated-values")

        assert len(chunks) == 1
        assert chunks[0].question == "When is it?"
        assert chunks[0].answer == "May 21-24, 2026"
        assert chunks[0].category == "Dates"
        assert chunks[0].source_location == "row 2"

    def test_table_rows_with_sheet_context(self, engine):
        content = (
            "Sheet: Schedule\n"
            "Day\tEvent\n"
            "Thursday\tWelcome reception at the Hall\n"
            "Fri\tGolf\n"
        )

        chunks = engine.chunk("sheet", content, "Events", XLSX)

        assert len(chunks) == 1
        assert chunks[0].chunk_type == ChunkType.TABLE
        assert chunks[0].answer == "Thursday | Welcome reception at the Hall"
        assert chunks[0].context == "Schedule"
        assert chunks[0].source_location == "row 3"

    def test_header_detection_resets_per_sheet(self, engine):
        content = (
            "Sheet: Notes\n"
            "Dinner is served at the tent on Saturday\n"
            "Sheet: FAQ\n"
            "Question\tAnswer\n"
            "Is there a dress code?\tCasual, except for the Saturday dinner.\n"
        )

        chunks = engine.chunk("sheet", content, "General", XLSX)

        assert [chunk.chunk_type for chunk in chunks] == [ChunkType.TABLE, ChunkType.QA]
        assert chunks[1].context == "FAQ"
        assert chunks[1].question == "Is there a dress code?"

    def test_legacy_spreadsheet_uses_table_rows(self, engine):
        content = "Sheet: Schedule\nDay\tEvent\nThursday\tWelcome reception at the Hall\n"

        chunks = engine.chunk("sheet", content, "Events", "application/vnd.ms-excel")

        assert [chunk.chunk_type for chunk in chunks] == [ChunkType.TABLE]
        assert chunks[0].context == "Schedule"

    def test_tabular_fallback(self, engine):
        chunks = engine.chunk("sheet", "a\tb", "General", "text/csv")

        assert len(chunks) == 1
        assert chunks[0].chunk_type == ChunkType.SECTION
        assert chunks[0].answer == "a\tb"
