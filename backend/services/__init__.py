"""Services for the Reunion FAQ Assistant."""
from .keyword_extractor import extract_keywords, normalize_keywords
from .chunking_engine import ChunkingEngine
from .document_loader import DocumentLoader, UnsupportedMediaTypeError, DocumentParseError
from .embedding_model import EmbeddingModel
from .knowledge_store import KnowledgeStore, StoreUnavailableError, DocumentNotFoundError
from .settings_store import SettingsStore
from .query_classifier import QueryClassifier
from .relevance_scorer import RelevanceScorer
from .response_composer import ResponseComposer
from .chat_orchestrator import ChatOrchestrator
from .ingestion_service import IngestionService

__all__ = ['extract_keywords', 'normalize_keywords', 'ChunkingEngine', 'DocumentLoader', 'UnsupportedMediaTypeError', 'DocumentParseError', 'EmbeddingModel', 'KnowledgeStore', 'StoreUnavailableError', 'DocumentNotFoundError', 'SettingsStore', 'QueryClassifier', 'RelevanceScorer', 'ResponseComposer', 'ChatOrchestrator', 'IngestionService']
