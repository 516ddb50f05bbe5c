"""Document data models."""
from dataclasses import dataclass, field
from typing import List, Optional

@dataclass
class Document:
    """Represents an uploaded knowledge-base document and its metadata."""
    document_id: str
    name: str
    content: str
    media_type: str
    size: int
    category: str
    description: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    is_active: bool = True
    uploaded_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
