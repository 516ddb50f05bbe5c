"""Configuration management for the Reunion FAQ Assistant."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173"
).split(",")

# Storage Configuration
DOCUMENTS_TABLE = "knowledge_base_files"
CHUNKS_TABLE = "knowledge_chunks"
SETTINGS_TABLE = "app_customization"

# Embedding Configuration (optional enrichment)
EMBEDDING_MODEL = "sentence-transformers/all-mpnet-base-v2"

# Keyword Configuration
MAX_KEYWORDS = 10

# Chunking Configuration
MIN_SECTION_LENGTH = 20  # characters
MIN_TABLE_ROW_LENGTH = 20  # characters
FALLBACK_CHUNK_CHARS = 1000

# Scoring Configuration
FULL_QUESTION_MATCH_BONUS = 100
QUESTION_OVERLAP_BONUS = 20  # per overlapping token
WELL_FORMED_ANSWER_BONUS = 5
WELL_FORMED_ANSWER_MIN = 100  # characters
WELL_FORMED_ANSWER_MAX = 500  # characters
TOKEN_IN_QUESTION_BONUS = 3
TOKEN_IN_ANSWER_BONUS = 1
TOKEN_IN_CATEGORY_BONUS = 5
EXACT_KEYWORD_BONUS = 10
PARTIAL_KEYWORD_BONUS = 4
CATEGORY_BOOST = 50
DEFAULT_TOP_K = 1
MAX_TOP_K = 3

# Response Configuration
DEFAULT_CONTACT_EMAIL = os.getenv("DEFAULT_CONTACT_EMAIL", "contact@reunion.com")
AID_PROGRAM_NAME = "Tigers Helping Tigers"
SOLO_TRAVELER_EMAIL = os.getenv("SOLO_TRAVELER_EMAIL", "81s40th+45thWARG@gmail.com")

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
