"""Data models for the Reunion FAQ Assistant."""
from .document import Document
from .chunk import Chunk, ChunkType, ScoredChunk
from .settings import Settings
from .conversation import Message, ChatResponse
from .api import ChatRequest, ChatReply, HistoryMessage, DocumentUpdate, DocumentSummary, RegenerateSummary

__all__ = [
    "Document",
    "Chunk",
    "ChunkType",
    "ScoredChunk",
    "Settings",
    "Message",
    "ChatResponse",
    "ChatRequest",
    "ChatReply",
    "HistoryMessage",
    "DocumentUpdate",
    "DocumentSummary",
    "RegenerateSummary",
]
