"""Conversation data models."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

@dataclass
class Message:
    """A single message of chat history supplied by the caller."""
    role: str  # "user" or "assistant"
    content: str

@dataclass
class ChatResponse:
    """Reply produced for one user utterance."""
    message: str
    include_map: bool = False
    map_link: Optional[str] = None
    sources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Public reply shape: message, includeMap and mapLink when a map is attached."""
        result: Dict[str, Any] = {
            "message": self.message,
            "includeMap": self.include_map,
        }
        if self.include_map and self.map_link:
            result["mapLink"] = self.map_link
        return result
