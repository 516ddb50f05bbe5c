"""Chunking engine that turns ingested documents into keyword-tagged chunks."""
import json
import logging
import re
from typing import Dict, List, Optional

from models.chunk import Chunk, ChunkType
from services.keyword_extractor import extract_keywords, merge_keywords, normalize_keywords
from config import MIN_SECTION_LENGTH, MIN_TABLE_ROW_LENGTH, FALLBACK_CHUNK_CHARS, MAX_KEYWORDS

logger = logging.getLogger(__name__)

QUESTION_MARKER = re.compile(r"^Q\d*\s*:\s*", re.IGNORECASE)
ANSWER_MARKER = re.compile(r"^A\d*\s*:\s*", re.IGNORECASE)
SHEET_MARKER = "Sheet: "


class ChunkingEngine:
    """Segments document text into Q/A, section and table chunks."""

    JSON_MEDIA_TYPES = {"application/json"}
    TABULAR_MEDIA_TYPES = {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
        "text/tab-separated-values",
        "text/csv",
    }

    def __init__(
        self,
        min_section_length: int = MIN_SECTION_LENGTH,
        min_table_row_length: int = MIN_TABLE_ROW_LENGTH,
        fallback_chars: int = FALLBACK_CHUNK_CHARS,
        max_keywords: int = MAX_KEYWORDS
    ):
        """
        Initialize ChunkingEngine.

        Args:
            min_section_length: Paragraph sections shorter than this are discarded
            min_table_row_length: Table rows shorter than this are discarded
            fallback_chars: Length of the content prefix used as the fallback chunk
            max_keywords: Maximum extracted keywords per chunk
        """
        self.min_section_length = min_section_length
        self.min_table_row_length = min_table_row_length
        self.fallback_chars = fallback_chars
        self.max_keywords = max_keywords

    def chunk(self, document_id: str, content: str, category: str, media_type: str) -> List[Chunk]:
        """
        Split a document's text into retrievable chunks.

        Dispatches on media type: JSON is read as FAQ records, spreadsheets and
        delimited text as rows, everything else as structured text.

        Args:
            document_id: Parent document id
            content: Extracted document text
            category: Default category for produced chunks
            media_type: Media type of the source document

        Returns:
            List of chunks; empty when the content is empty or cannot be parsed
        """
        if not content or not content.strip():
            return []

        try:
            if media_type in self.JSON_MEDIA_TYPES:
                chunks = self._chunk_structured_data(document_id, content, category)
            elif media_type in self.TABULAR_MEDIA_TYPES:
                chunks = self._chunk_tabular(document_id, content, category)
            else:
                chunks = self._chunk_structured_text(document_id, content, category)
        except Exception as e:
            logger.warning(f"Could not chunk document {document_id} ({media_type}): {str(e)}")
            return []

        logger.info(f"Created {len(chunks)} chunks for document {document_id}")
        return chunks

    def _chunk_structured_text(self, document_id: str, content: str, category: str) -> List[Chunk]:
        """Scan text line by line, pairing question lines with the answer lines that follow."""
        chunks: List[Chunk] = []
        heading: Optional[str] = None
        question: Optional[str] = None
        buffer: List[str] = []
        start_line = 0

        def flush() -> None:
            nonlocal question, buffer
            body = "\n".join(buffer).strip()
            if question and body:
                chunks.append(self._build_chunk(
                    document_id, len(chunks), ChunkType.QA, body, category,
                    question=question, context=heading, source_location=f"line {start_line}"
                ))
            elif question:
                logger.debug(f"Dropping unanswered question in {document_id}: {question[:50]}")
            elif len(body) >= self.min_section_length:
                chunks.append(self._build_chunk(
                    document_id, len(chunks), ChunkType.SECTION, body, category,
                    context=heading, source_location=f"line {start_line}"
                ))
            question = None
            buffer = []

        for line_number, raw_line in enumerate(content.splitlines(), start=1):
            line = raw_line.strip()

            if not line:
                # A blank line between a question and its answer does not close it
                if question and not buffer:
                    continue
                flush()
                continue

            if line.startswith("#"):
                flush()
                heading = line.lstrip("#").strip() or heading
                continue

            answer_match = ANSWER_MARKER.match(line)
            if answer_match:
                if not buffer and question is None:
                    start_line = line_number
                buffer.append(line[answer_match.end():])
                continue

            question_match = QUESTION_MARKER.match(line)
            if question_match or line.endswith("?"):
                flush()
                question = line[question_match.end():].strip() if question_match else line
                start_line = line_number
                continue

            if not buffer and question is None:
                start_line = line_number
            buffer.append(line)

        flush()

        if not chunks:
            chunks.append(self._fallback_chunk(document_id, content, category))
        return chunks

    def _chunk_structured_data(self, document_id: str, content: str, category: str) -> List[Chunk]:
        """Read an array of FAQ records, or an object holding them under "faqs"."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Malformed JSON in document {document_id}: {str(e)}")
            return []

        records = data.get("faqs") if isinstance(data, dict) else data
        if not isinstance(records, list):
            logger.warning(f"JSON document {document_id} has no FAQ record array")
            return []

        chunks: List[Chunk] = []
        for record_number, record in enumerate(records, start=1):
            if not isinstance(record, dict):
                continue

            question = str(record.get("question") or "").strip()
            answer = str(record.get("answer") or "").strip()
            if not question or not answer:
                continue

            chunks.append(self._build_chunk(
                document_id, len(chunks), ChunkType.QA, answer,
                str(record.get("category") or category),
                question=question,
                source_location=f"record {record_number}",
                tagged_keywords=normalize_keywords(record.get("keywords"))
            ))

        return chunks

    def _chunk_tabular(self, document_id: str, content: str, category: str) -> List[Chunk]:
        """Turn tab-delimited rows into Q/A chunks when a Q/A header exists, else table chunks."""
        chunks: List[Chunk] = []
        sheet: Optional[str] = None
        columns: Optional[Dict[str, int]] = None
        header_checked = False

        for row_number, raw_line in enumerate(content.splitlines(), start=1):
            if not raw_line.strip():
                continue

            if raw_line.startswith(SHEET_MARKER):
                sheet = raw_line[len(SHEET_MARKER):].strip() or None
                columns = None
                header_checked = False
                continue

            cells = [cell.strip() for cell in raw_line.split("\t")]

            if not header_checked:
                header_checked = True
                columns = self._find_qa_columns(cells)
                if columns:
                    continue

            if columns:
                question = self._cell(cells, columns.get("question"))
                answer = self._cell(cells, columns.get("answer"))
                if question and answer:
                    chunks.append(self._build_chunk(
                        document_id, len(chunks), ChunkType.QA, answer,
                        self._cell(cells, columns.get("category")) or category,
                        question=question, context=sheet, source_location=f"row {row_number}"
                    ))
                continue

            row_text = " | ".join(cell for cell in cells if cell)
            if len(row_text) < self.min_table_row_length:
                continue
            chunks.append(self._build_chunk(
                document_id, len(chunks), ChunkType.TABLE, row_text, category,
                context=sheet, source_location=f"row {row_number}"
            ))

        if not chunks:
            chunks.append(self._fallback_chunk(document_id, content, category))
        return chunks

    def _find_qa_columns(self, cells: List[str]) -> Optional[Dict[str, int]]:
        """Locate question/answer (and optional category) columns in a header row."""
        columns: Dict[str, int] = {}
        for index, cell in enumerate(cells):
            name = cell.lower()
            if "question" in name and "question" not in columns:
                columns["question"] = index
            elif "answer" in name and "answer" not in columns:
                columns["answer"] = index
            elif name == "category" and "category" not in columns:
                columns["category"] = index

        if "question" in columns and "answer" in columns:
            return columns
        return None

    @staticmethod
    def _cell(cells: List[str], index: Optional[int]) -> str:
        if index is None or index >= len(cells):
            return ""
        return cells[index]

    def _fallback_chunk(self, document_id: str, content: str, category: str) -> Chunk:
        """Whole-content section used when no other chunk could be produced."""
        logger.info(f"No chunks found in document {document_id}, using whole content")
        return self._build_chunk(
            document_id, 0, ChunkType.SECTION, content.strip()[:self.fallback_chars], category
        )

    def _build_chunk(
        self,
        document_id: str,
        index: int,
        chunk_type: str,
        answer: str,
        category: str,
        question: Optional[str] = None,
        context: Optional[str] = None,
        source_location: Optional[str] = None,
        tagged_keywords: Optional[List[str]] = None
    ) -> Chunk:
        """Create a chunk and tag it with keywords."""
        text = f"{question} {answer}" if question else answer
        extracted = extract_keywords(text, self.max_keywords)

        if tagged_keywords:
            keywords = merge_keywords(tagged_keywords, extracted)
        else:
            keywords = merge_keywords(extracted, [category.lower()])

        return Chunk(
            chunk_id=f"{document_id}_{index}",
            document_id=document_id,
            chunk_index=index,
            chunk_type=chunk_type,
            question=question,
            answer=answer,
            category=category,
            keywords=keywords,
            context=context,
            source_location=source_location
        )
