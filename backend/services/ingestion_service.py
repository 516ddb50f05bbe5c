"""Ingestion of uploaded documents into the knowledge base."""
import logging
import uuid
from typing import Dict, Iterable, List, Optional, Tuple, Union

from models.chunk import Chunk
from models.document import Document
from services.chunking_engine import ChunkingEngine
from services.document_loader import DocumentLoader
from services.embedding_model import EmbeddingModel
from services.keyword_extractor import normalize_keywords
from services.knowledge_store import KnowledgeStore, DocumentNotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)


class IngestionService:
    """Turns uploads and metadata edits into document and chunk writes."""

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        chunking_engine: Optional[ChunkingEngine] = None,
        document_loader: Optional[DocumentLoader] = None,
        embedding_model: Optional[EmbeddingModel] = None
    ):
        """
        Initialize the ingestion service.

        Args:
            knowledge_store: Store receiving documents and chunks
            chunking_engine: Chunker (default configuration if None)
            document_loader: Text extractor for uploads (default if None)
            embedding_model: Optional enrichment; chunks are stored without embeddings if None
        """
        self.knowledge_store = knowledge_store
        self.chunking_engine = chunking_engine or ChunkingEngine()
        self.document_loader = document_loader or DocumentLoader()
        self.embedding_model = embedding_model
        logger.info(f"Initialized IngestionService (enrichment={'on' if embedding_model else 'off'})")

    def ingest_upload(
        self,
        file_name: str,
        media_type: Optional[str],
        data: bytes,
        description: Optional[str] = None,
        category: str = "General",
        keywords: Optional[Union[str, Iterable[str]]] = None,
        uploaded_by: Optional[str] = None
    ) -> Tuple[Document, int]:
        """
        Store an uploaded file and its chunks.

        Text is extracted and the chunk set is built completely before anything
        is written, so an extraction failure persists nothing. If the chunk write
        fails the saved document is removed again.

        Returns:
            The stored document and the number of chunks written

        Raises:
            UnsupportedMediaTypeError: If no text can be extracted from the media type
            DocumentParseError: If the file cannot be read
            StoreUnavailableError: If a write fails
        """
        media_type = self.document_loader.resolve_media_type(file_name, media_type)
        content = self.document_loader.extract_text(data, file_name, media_type)

        document = Document(
            document_id=f"file-{uuid.uuid4().hex[:12]}",
            name=file_name,
            content=content,
            media_type=media_type,
            size=len(data),
            description=description,
            category=category or "General",
            keywords=normalize_keywords(keywords),
            uploaded_by=uploaded_by,
        )

        chunks = self._build_chunks(document)

        self.knowledge_store.save_document(document)
        try:
            self.knowledge_store.replace_chunks_for_document(document.document_id, chunks)
        except StoreUnavailableError:
            self._discard_document(document.document_id)
            raise

        logger.info(f"Ingested {file_name} as {document.document_id} with {len(chunks)} chunks")
        return document, len(chunks)

    def update_document(
        self,
        document_id: str,
        description: Optional[str] = None,
        category: Optional[str] = None,
        keywords: Optional[Union[str, Iterable[str]]] = None,
        is_active: Optional[bool] = None
    ) -> Document:
        """
        Apply a metadata edit, re-chunking when the category changes.

        Only arguments that are not None are applied.

        Raises:
            DocumentNotFoundError: If the document does not exist
            StoreUnavailableError: If a read or write fails
        """
        document = self._require_document(document_id)

        category_changed = category is not None and category != document.category
        active_changed = is_active is not None and is_active != document.is_active

        if description is not None:
            document.description = description
        if category is not None:
            document.category = category
        if keywords is not None:
            document.keywords = normalize_keywords(keywords)
        if is_active is not None:
            document.is_active = is_active

        self.knowledge_store.update_document(document)

        if category_changed:
            logger.info(f"Category of {document_id} changed, re-chunking")
            self._rechunk(document)
        elif active_changed:
            self.knowledge_store.set_chunks_active(document_id, document.is_active)

        return document

    def rechunk_document(self, document_id: str) -> int:
        """
        Rebuild the chunk set of a document from its stored content.

        Returns:
            Number of chunks written

        Raises:
            DocumentNotFoundError: If the document does not exist
            StoreUnavailableError: If a read or write fails
        """
        return self._rechunk(self._require_document(document_id))

    def delete_document(self, document_id: str) -> None:
        """
        Delete a document and its chunks.

        Raises:
            DocumentNotFoundError: If the document does not exist
            StoreUnavailableError: If a write fails
        """
        self._require_document(document_id)
        self.knowledge_store.delete_document(document_id)

    def regenerate_all(self) -> Dict[str, int]:
        """
        Re-chunk every active document one at a time.

        A failure on one document is logged and counted; its previous chunks stay
        in place and the batch continues.

        Returns:
            Counts of processed and failed documents and chunks written

        Raises:
            StoreUnavailableError: If the document list cannot be read
        """
        documents = [doc for doc in self.knowledge_store.list_documents() if doc.is_active]
        summary = {"processed": 0, "failed": 0, "chunks": 0}

        for document in documents:
            try:
                summary["chunks"] += self._rechunk(document)
                summary["processed"] += 1
            except Exception as e:
                summary["failed"] += 1
                logger.error(f"Failed to regenerate chunks for {document.document_id}: {str(e)}")

        logger.info(
            f"Regenerated chunks for {summary['processed']} documents "
            f"({summary['failed']} failed, {summary['chunks']} chunks)"
        )
        return summary

    def _discard_document(self, document_id: str) -> None:
        try:
            self.knowledge_store.delete_document(document_id)
        except StoreUnavailableError as e:
            logger.warning(f"Could not remove {document_id} after its chunk write failed: {str(e)}")

    def _rechunk(self, document: Document) -> int:
        chunks = self._build_chunks(document)
        self.knowledge_store.replace_chunks_for_document(document.document_id, chunks)
        return len(chunks)

    def _build_chunks(self, document: Document) -> List[Chunk]:
        """Chunk a document in memory and attach embeddings when available."""
        chunks = self.chunking_engine.chunk(
            document.document_id, document.content, document.category, document.media_type
        )
        for chunk in chunks:
            chunk.is_active = document.is_active

        self._enrich(chunks)
        return chunks

    def _enrich(self, chunks: List[Chunk]) -> None:
        if not self.embedding_model or not chunks:
            return

        try:
            embeddings = self.embedding_model.embed_batch([chunk.text for chunk in chunks])
        except Exception as e:
            logger.warning(f"Embedding enrichment failed, storing chunks without embeddings: {str(e)}")
            return

        for chunk, embedding in zip(chunks, embeddings):
            chunk.embedding = embedding

    def _require_document(self, document_id: str) -> Document:
        document = self.knowledge_store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document not found: {document_id}")
        return document
