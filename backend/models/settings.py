"""Application settings model."""
from dataclasses import dataclass
from typing import Optional

from config import DEFAULT_CONTACT_EMAIL

@dataclass
class Settings:
    """The single customization record read at query time."""
    app_name: str = "Reunion Assistant"
    welcome_message: str = "Welcome! Ask me anything about the reunion."
    map_link: str = ""
    contact_email: str = DEFAULT_CONTACT_EMAIL
    icon_url: str = ""
    updated_at: Optional[str] = None
