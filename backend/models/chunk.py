"""Chunk data models."""
from dataclasses import dataclass, field
from typing import Optional, List


class ChunkType:
    """Kinds of retrievable units produced by the chunking engine."""
    QA = "qa"
    SECTION = "section"
    TABLE = "table"


@dataclass
class Chunk:
    """Represents a knowledge-base chunk for retrieval."""
    chunk_id: str  # Format: "{document_id}_{chunk_index}"
    document_id: str
    chunk_index: int
    chunk_type: str
    answer: str
    category: str
    keywords: List[str] = field(default_factory=list)
    question: Optional[str] = None
    context: Optional[str] = None
    source_location: Optional[str] = None
    is_active: bool = True
    embedding: Optional[List[float]] = None

    @property
    def text(self) -> str:
        """Question and answer joined, as used for keyword tagging and embedding."""
        if self.question:
            return f"{self.question}\n{self.answer}"
        return self.answer


@dataclass
class ScoredChunk:
    """Chunk with lexical relevance score from the scorer."""
    chunk: Chunk
    relevance_score: int
