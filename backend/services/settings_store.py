"""Read-only access to the application settings record in Supabase."""
import logging
from typing import Optional
from supabase import create_client, Client

from models.settings import Settings
from services.knowledge_store import StoreUnavailableError
from config import SUPABASE_URL, SUPABASE_KEY, SETTINGS_TABLE, DEFAULT_CONTACT_EMAIL

logger = logging.getLogger(__name__)


class SettingsStore:
    """Reads the single customization record (contact email, map link, branding)."""

    def __init__(
        self,
        supabase_url: str = SUPABASE_URL,
        supabase_key: str = SUPABASE_KEY,
        table_name: str = SETTINGS_TABLE,
        client: Optional[Client] = None
    ):
        """
        Initialize the settings store.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Table holding the settings record
            client: Existing Supabase client to share (created if None)

        Raises:
            ValueError: If Supabase credentials are missing and no client is given
        """
        if client is None:
            if not supabase_url or not supabase_key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables are required")
            client = create_client(supabase_url, supabase_key)

        self.client: Client = client
        self.table_name = table_name
        logger.info(f"Initialized SettingsStore with table: {table_name}")

    def get_settings(self) -> Settings:
        """
        Read the current settings, falling back to defaults when no record exists.

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        try:
            response = self.client.table(self.table_name).select("*").limit(1).execute()
        except Exception as e:
            error_msg = f"Failed to read settings: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

        if not response.data:
            logger.debug("No settings record found, using defaults")
            return Settings()

        row = response.data[0]
        defaults = Settings()
        return Settings(
            app_name=row.get("app_name") or defaults.app_name,
            welcome_message=row.get("welcome_message") or defaults.welcome_message,
            map_link=row.get("google_maps_link") or "",
            contact_email=row.get("primary_contact_email") or DEFAULT_CONTACT_EMAIL,
            icon_url=row.get("app_icon_url") or "",
            updated_at=row.get("updated_at"),
        )
