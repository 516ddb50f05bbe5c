"""Knowledge store for documents and chunks, backed by Supabase."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from supabase import create_client, Client
from models.chunk import Chunk
from models.document import Document
from services.keyword_extractor import normalize_keywords
from config import SUPABASE_URL, SUPABASE_KEY, DOCUMENTS_TABLE, CHUNKS_TABLE

logger = logging.getLogger(__name__)


class StoreUnavailableError(RuntimeError):
    """Raised when a read or write against the backing store fails."""


class DocumentNotFoundError(LookupError):
    """Raised when an operation targets a document id that does not exist."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class KnowledgeStore:
    """Persist knowledge-base documents and their chunks in Supabase tables."""

    def __init__(
        self,
        supabase_url: str = SUPABASE_URL,
        supabase_key: str = SUPABASE_KEY,
        documents_table: str = DOCUMENTS_TABLE,
        chunks_table: str = CHUNKS_TABLE,
        client: Optional[Client] = None
    ):
        """
        Initialize the knowledge store with a Supabase client.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            documents_table: Table holding uploaded documents
            chunks_table: Table holding chunks
            client: Existing Supabase client to share (created if None)

        Raises:
            ValueError: If Supabase credentials are missing and no client is given
        """
        if client is None:
            if not supabase_url or not supabase_key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables are required")
            client = create_client(supabase_url, supabase_key)

        self.client: Client = client
        self.documents_table = documents_table
        self.chunks_table = chunks_table

        logger.info(f"Initialized KnowledgeStore with tables: {documents_table}, {chunks_table}")

    # Documents

    def list_documents(self) -> List[Document]:
        """
        List all documents, newest first.

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        try:
            response = self.client.table(self.documents_table).select("*").order("created_at", desc=True).execute()
            return [self._document_from_record(row) for row in response.data or []]
        except Exception as e:
            error_msg = f"Failed to list documents: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

    def get_document(self, document_id: str) -> Optional[Document]:
        """
        Fetch one document by id.

        Returns:
            The document, or None if it does not exist

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        try:
            response = self.client.table(self.documents_table).select("*").eq("id", document_id).execute()
        except Exception as e:
            error_msg = f"Failed to fetch document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

        if not response.data:
            return None
        return self._document_from_record(response.data[0])

    def save_document(self, document: Document) -> None:
        """
        Insert or overwrite a document.

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        document.created_at = document.created_at or _now()
        document.updated_at = _now()

        try:
            self.client.table(self.documents_table).upsert(self._document_to_record(document)).execute()
            logger.info(f"Saved document {document.document_id} ({document.name})")
        except Exception as e:
            error_msg = f"Failed to save document {document.document_id}: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

    def update_document(self, document: Document) -> None:
        """
        Persist metadata edits of an existing document.

        Raises:
            DocumentNotFoundError: If no document has this id
            StoreUnavailableError: If the database operation fails
        """
        document.updated_at = _now()
        record = self._document_to_record(document)
        record.pop("id")

        try:
            response = self.client.table(self.documents_table).update(record).eq("id", document.document_id).execute()
        except Exception as e:
            error_msg = f"Failed to update document {document.document_id}: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

        if not response.data:
            raise DocumentNotFoundError(f"Document not found: {document.document_id}")
        logger.info(f"Updated document {document.document_id}")

    def delete_document(self, document_id: str) -> None:
        """
        Delete a document together with all of its chunks.

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        self.delete_chunks_for_document(document_id)

        try:
            self.client.table(self.documents_table).delete().eq("id", document_id).execute()
            logger.info(f"Deleted document {document_id}")
        except Exception as e:
            error_msg = f"Failed to delete document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

    # Chunks

    def list_active_chunks(self) -> List[Chunk]:
        """
        List every active chunk in insertion order.

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        try:
            response = (
                self.client.table(self.chunks_table)
                .select("*")
                .eq("is_active", True)
                .order("created_at")
                .order("chunk_index")
                .execute()
            )
            chunks = [self._chunk_from_record(row) for row in response.data or []]
            logger.debug(f"Loaded {len(chunks)} active chunks")
            return chunks
        except Exception as e:
            error_msg = f"Failed to list active chunks: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

    def list_chunks_for_document(self, document_id: str) -> List[Chunk]:
        """
        List all chunks (active or not) of one document.

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        try:
            response = (
                self.client.table(self.chunks_table)
                .select("*")
                .eq("document_id", document_id)
                .order("chunk_index")
                .execute()
            )
            return [self._chunk_from_record(row) for row in response.data or []]
        except Exception as e:
            error_msg = f"Failed to list chunks for document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

    def replace_chunks_for_document(self, document_id: str, chunks: List[Chunk]) -> None:
        """
        Make `chunks` the complete chunk set of a document.

        The new set is upserted in a single statement first, so a failed write
        leaves the previous set untouched. Chunks of the document that are not
        part of the new set are deleted afterwards; if that cleanup fails the
        document keeps stale extra chunks rather than none.

        Args:
            document_id: Parent document id
            chunks: New chunk set, all belonging to document_id

        Raises:
            ValueError: If a chunk belongs to another document
            StoreUnavailableError: If either step fails
        """
        for chunk in chunks:
            if chunk.document_id != document_id:
                raise ValueError(f"Chunk {chunk.chunk_id} does not belong to document {document_id}")

        if chunks:
            created_at = _now()
            records = [self._chunk_to_record(chunk, created_at) for chunk in chunks]
            try:
                self.client.table(self.chunks_table).upsert(records).execute()
            except Exception as e:
                error_msg = f"Failed to write chunks for document {document_id}: {str(e)}"
                logger.error(error_msg)
                raise StoreUnavailableError(error_msg) from e

        new_ids = [chunk.chunk_id for chunk in chunks]
        try:
            query = self.client.table(self.chunks_table).delete().eq("document_id", document_id)
            if new_ids:
                query = query.not_.in_("chunk_id", new_ids)
            query.execute()
        except Exception as e:
            logger.warning(
                f"Consistency warning: document {document_id} may keep stale chunks "
                f"after re-chunking: {str(e)}"
            )
            raise StoreUnavailableError(
                f"Failed to remove stale chunks for document {document_id}: {str(e)}"
            ) from e

        logger.info(f"Replaced chunk set of document {document_id} ({len(chunks)} chunks)")

    def delete_chunks_for_document(self, document_id: str) -> None:
        """
        Delete every chunk of a document.

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        try:
            self.client.table(self.chunks_table).delete().eq("document_id", document_id).execute()
            logger.info(f"Deleted chunks for document {document_id}")
        except Exception as e:
            error_msg = f"Failed to delete chunks for document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

    def set_chunks_active(self, document_id: str, is_active: bool) -> None:
        """
        Activate or deactivate every chunk of a document.

        Raises:
            StoreUnavailableError: If the database operation fails
        """
        try:
            self.client.table(self.chunks_table).update({"is_active": is_active}).eq("document_id", document_id).execute()
            logger.info(f"Set chunks of document {document_id} active={is_active}")
        except Exception as e:
            error_msg = f"Failed to update chunks for document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise StoreUnavailableError(error_msg) from e

    # Record mapping

    @staticmethod
    def _document_to_record(document: Document) -> Dict[str, Any]:
        return {
            "id": document.document_id,
            "file_name": document.name,
            "file_type": document.media_type,
            "file_size": document.size,
            "file_content": document.content,
            "description": document.description,
            "category": document.category,
            "keywords": document.keywords,
            "is_active": document.is_active,
            "uploaded_by": document.uploaded_by,
            "created_at": document.created_at,
            "updated_at": document.updated_at,
        }

    @staticmethod
    def _document_from_record(row: Dict[str, Any]) -> Document:
        return Document(
            document_id=row["id"],
            name=row.get("file_name", ""),
            content=row.get("file_content") or "",
            media_type=row.get("file_type") or "text/plain",
            size=row.get("file_size") or 0,
            description=row.get("description"),
            category=row.get("category") or "General",
            keywords=normalize_keywords(row.get("keywords")),
            is_active=row.get("is_active", True),
            uploaded_by=row.get("uploaded_by"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @staticmethod
    def _chunk_to_record(chunk: Chunk, created_at: str) -> Dict[str, Any]:
        return {
            "chunk_id": chunk.chunk_id,
            "document_id": chunk.document_id,
            "chunk_index": chunk.chunk_index,
            "chunk_type": chunk.chunk_type,
            "question": chunk.question,
            "answer": chunk.answer,
            "context": chunk.context,
            "category": chunk.category,
            "keywords": chunk.keywords,
            "source_location": chunk.source_location,
            "is_active": chunk.is_active,
            "embedding": chunk.embedding,
            "created_at": created_at,
        }

    @staticmethod
    def _chunk_from_record(row: Dict[str, Any]) -> Chunk:
        return Chunk(
            chunk_id=row["chunk_id"],
            document_id=row["document_id"],
            chunk_index=row.get("chunk_index", 0),
            chunk_type=row.get("chunk_type") or "section",
            question=row.get("question"),
            answer=row.get("answer") or "",
            context=row.get("context"),
            category=row.get("category") or "",
            keywords=normalize_keywords(row.get("keywords")),
            source_location=row.get("source_location"),
            is_active=row.get("is_active", True),
            embedding=row.get("embedding"),
        )
