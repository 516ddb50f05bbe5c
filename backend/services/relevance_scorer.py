"""Lexical relevance scoring of knowledge-base chunks against a user utterance."""
import logging
import string
from typing import List, Optional

from models.chunk import Chunk, ChunkType, ScoredChunk
from services.query_classifier import QueryClassifier
from config import (
    FULL_QUESTION_MATCH_BONUS,
    QUESTION_OVERLAP_BONUS,
    WELL_FORMED_ANSWER_BONUS,
    WELL_FORMED_ANSWER_MIN,
    WELL_FORMED_ANSWER_MAX,
    TOKEN_IN_QUESTION_BONUS,
    TOKEN_IN_ANSWER_BONUS,
    TOKEN_IN_CATEGORY_BONUS,
    EXACT_KEYWORD_BONUS,
    PARTIAL_KEYWORD_BONUS,
    CATEGORY_BOOST,
    DEFAULT_TOP_K,
    MAX_TOP_K,
)

logger = logging.getLogger(__name__)


def tokenize(text: str) -> List[str]:
    """Lower-case, split on whitespace, trim edge punctuation and drop tokens of two characters or fewer."""
    tokens = []
    for raw in (text or "").lower().split():
        token = raw.strip(string.punctuation)
        if len(token) > 2:
            tokens.append(token)
    return tokens


class RelevanceScorer:
    """Rank active chunks for an utterance using term overlap, keyword matches and category boosts."""

    def __init__(self, classifier: Optional[QueryClassifier] = None):
        """
        Initialize the scorer.

        Args:
            classifier: Query classifier shared with the response composer
        """
        self.classifier = classifier or QueryClassifier()

    def score(self, utterance: str, chunks: List[Chunk], top_k: int = DEFAULT_TOP_K) -> List[ScoredChunk]:
        """
        Score chunks against an utterance and return the best ones.

        Scoring is deterministic: chunks scoring zero or less are discarded and
        the rest are sorted by score with ties kept in input order.

        Args:
            utterance: User message
            chunks: Active chunks to rank
            top_k: Number of results to return (clamped to 1..MAX_TOP_K)

        Returns:
            Scored chunks in descending order, empty if nothing matched
        """
        tokens = tokenize(utterance)
        if not tokens or not chunks:
            logger.info(f"Nothing to score (tokens: {len(tokens)}, chunks: {len(chunks)})")
            return []

        category = self.classifier.classify(utterance)
        top_k = max(1, min(top_k, MAX_TOP_K))

        scored: List[ScoredChunk] = []
        for chunk in chunks:
            if not chunk.is_active:
                continue
            relevance = self.score_chunk(tokens, chunk, category)
            logger.debug(f"Chunk {chunk.chunk_id} scored {relevance}")
            if relevance > 0:
                scored.append(ScoredChunk(chunk=chunk, relevance_score=relevance))

        # sorted() is stable, so equal scores keep knowledge-base order
        ranked = sorted(scored, key=lambda item: item.relevance_score, reverse=True)

        if ranked:
            logger.info(
                f"Scored {len(chunks)} chunks, {len(ranked)} matched "
                f"(top: {ranked[0].chunk.chunk_id} = {ranked[0].relevance_score}, category: {category})"
            )
        else:
            logger.info(f"Scored {len(chunks)} chunks, none matched (category: {category})")

        return ranked[:top_k]

    def score_chunk(self, tokens: List[str], chunk: Chunk, category: Optional[str]) -> int:
        """
        Compute the relevance score of one chunk.

        Args:
            tokens: Tokenized utterance
            chunk: Chunk to score
            category: Classified query category, or None

        Returns:
            Non-negative integer score
        """
        question = (chunk.question or "").lower()
        answer = (chunk.answer or "").lower()
        chunk_category = (chunk.category or "").lower()
        keywords = [keyword.lower() for keyword in chunk.keywords]

        relevance = 0

        if chunk.chunk_type == ChunkType.QA and question:
            question_tokens = set(tokenize(question))
            overlap = sum(1 for token in tokens if token in question_tokens)
            # Tokens equal to a tagged keyword count towards a full match
            covered = all(token in question_tokens or token in keywords for token in tokens)
            if overlap and covered:
                relevance += max(FULL_QUESTION_MATCH_BONUS, overlap * QUESTION_OVERLAP_BONUS)
            else:
                relevance += overlap * QUESTION_OVERLAP_BONUS

        for token in tokens:
            if question and token in question:
                relevance += TOKEN_IN_QUESTION_BONUS
            if token in answer:
                relevance += TOKEN_IN_ANSWER_BONUS
            if token in chunk_category:
                relevance += TOKEN_IN_CATEGORY_BONUS
            if token in keywords:
                relevance += EXACT_KEYWORD_BONUS
            elif any(token in keyword for keyword in keywords):
                relevance += PARTIAL_KEYWORD_BONUS

        if category and self.classifier.corroborates(category, f"{question}\n{answer}\n{chunk_category}", keywords):
            relevance += CATEGORY_BOOST

        # Length bonus only refines chunks that already matched
        if relevance > 0 and WELL_FORMED_ANSWER_MIN <= len(chunk.answer or "") <= WELL_FORMED_ANSWER_MAX:
            relevance += WELL_FORMED_ANSWER_BONUS

        return relevance
