"""API request and response schemas."""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class HistoryMessage(BaseModel):
    """One prior message of the conversation."""
    role: str
    content: str


class ChatRequest(BaseModel):
    """Body of POST /chat."""
    message: str
    history: List[HistoryMessage] = Field(default_factory=list)


class ChatReply(BaseModel):
    """Body returned by POST /chat."""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    include_map: bool = Field(default=False, alias="includeMap")
    map_link: Optional[str] = Field(default=None, alias="mapLink")
    sources: List[str] = Field(default_factory=list)


class DocumentUpdate(BaseModel):
    """Body of PATCH /documents/{document_id}."""
    description: Optional[str] = None
    category: Optional[str] = None
    keywords: Optional[Union[List[str], str]] = None
    is_active: Optional[bool] = None


class DocumentSummary(BaseModel):
    """Document metadata returned by the document endpoints."""
    id: str
    name: str
    media_type: str
    size: int
    description: Optional[str] = None
    category: str
    keywords: List[str] = Field(default_factory=list)
    is_active: bool = True
    uploaded_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    chunk_count: Optional[int] = None


class RegenerateSummary(BaseModel):
    """Body returned by POST /documents/regenerate."""
    processed: int
    failed: int
    chunks: int
