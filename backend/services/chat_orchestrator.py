"""Conversational entry point for the Reunion FAQ Assistant."""
import logging
from typing import Any, Dict, List, Optional

from models.conversation import ChatResponse, Message
from services.knowledge_store import KnowledgeStore
from services.settings_store import SettingsStore
from services.query_classifier import QueryClassifier
from services.relevance_scorer import RelevanceScorer
from services.response_composer import ResponseComposer
from config import DEFAULT_TOP_K

logger = logging.getLogger(__name__)


class ChatOrchestrator:
    """Answer one utterance at a time against the current knowledge-base snapshot."""

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        settings_store: SettingsStore,
        scorer: Optional[RelevanceScorer] = None,
        composer: Optional[ResponseComposer] = None,
        top_k: int = DEFAULT_TOP_K
    ):
        """
        Initialize the orchestrator.

        Args:
            knowledge_store: Source of active chunks
            settings_store: Source of the settings record
            scorer: Relevance scorer (created with a shared classifier if None)
            composer: Response composer (created with a shared classifier if None)
            top_k: Number of chunks the reply is built from
        """
        classifier = QueryClassifier()
        self.knowledge_store = knowledge_store
        self.settings_store = settings_store
        self.scorer = scorer or RelevanceScorer(classifier)
        self.composer = composer or ResponseComposer(classifier)
        self.top_k = top_k
        logger.info(f"Initialized ChatOrchestrator (top_k={top_k})")

    def handle(self, utterance: str, history: Optional[List[Message]] = None) -> ChatResponse:
        """
        Produce the reply for an utterance.

        Greetings and thanks short-circuit before any store access. Otherwise the
        active chunks and settings are read, scored and composed. History is
        accepted but does not influence the answer.

        Args:
            utterance: User message
            history: Prior messages of the conversation (unused)

        Returns:
            ChatResponse for the utterance

        Raises:
            StoreUnavailableError: If the knowledge base or settings cannot be read
        """
        if not utterance or not utterance.strip():
            logger.warning("Empty utterance received")
            return ChatResponse(message=self.composer.EMPTY_QUERY_REPLY)

        logger.info(f"Processing utterance: {utterance[:100]}")

        canned = self.composer.greeting_reply(utterance)
        if canned is not None:
            logger.info("Greeting/thanks short-circuit")
            return canned

        settings = self.settings_store.get_settings()
        chunks = self.knowledge_store.list_active_chunks()

        scored_chunks = self.scorer.score(utterance, chunks, top_k=self.top_k)
        return self.composer.compose(utterance, scored_chunks, settings)

    def answer(self, utterance: str, history: Optional[List[Message]] = None) -> Dict[str, Any]:
        """Public reply shape: {message, includeMap, mapLink?}."""
        return self.handle(utterance, history).to_dict()
