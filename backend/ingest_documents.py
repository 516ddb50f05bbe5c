"""
Document ingestion script for the Reunion FAQ Assistant.

This script:
1. Loads every supported file from a documents directory
2. Extracts text and chunks each file into keyword-tagged Q/A and section chunks
3. Stores documents and chunks in Supabase

Usage:
    python ingest_documents.py --docs-dir reunion_docs [--category Events] [--uploaded-by admin]
"""
import sys
import argparse
import logging
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from services.document_loader import DocumentLoader, UnsupportedMediaTypeError, DocumentParseError
from services.embedding_model import EmbeddingModel
from services.ingestion_service import IngestionService
from services.knowledge_store import KnowledgeStore, StoreUnavailableError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest reunion documents into the knowledge base")
    parser.add_argument(
        "--docs-dir",
        default=str(Path(__file__).parent.parent / "reunion_docs"),
        help="Directory holding the documents to ingest"
    )
    parser.add_argument("--category", default="General", help="Category assigned to every document")
    parser.add_argument("--uploaded-by", default=None, help="Uploader recorded on every document")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main ingestion process."""
    args = parse_args(argv)

    try:
        logger.info("=" * 60)
        logger.info("Starting Reunion Document Ingestion")
        logger.info("=" * 60)

        knowledge_store = KnowledgeStore()
        try:
            embedding_model = EmbeddingModel()
        except ValueError as e:
            logger.info(f"Embedding enrichment disabled: {e}")
            embedding_model = None

        document_loader = DocumentLoader(docs_directory=args.docs_dir)
        ingestion_service = IngestionService(
            knowledge_store,
            document_loader=document_loader,
            embedding_model=embedding_model
        )

        files = document_loader.load_directory()
        if not files:
            logger.error(f"No documents found! Check that {args.docs_dir} exists and contains supported files")
            return 1

        ingested = 0
        skipped = 0
        total_chunks = 0

        for file_name, media_type, data in files:
            try:
                document, chunk_count = ingestion_service.ingest_upload(
                    file_name=file_name,
                    media_type=media_type,
                    data=data,
                    category=args.category,
                    uploaded_by=args.uploaded_by
                )
            except (UnsupportedMediaTypeError, DocumentParseError) as e:
                skipped += 1
                logger.warning(f"  - Skipped {file_name}: {e}")
                continue

            ingested += 1
            total_chunks += chunk_count
            logger.info(f"  ✓ {file_name} -> {document.document_id} ({chunk_count} chunks)")

        logger.info("=" * 60)
        logger.info("INGESTION COMPLETE!")
        logger.info(f"Documents ingested: {ingested}")
        logger.info(f"Documents skipped: {skipped}")
        logger.info(f"Total chunks stored: {total_chunks}")
        logger.info("=" * 60)
        return 0

    except StoreUnavailableError as e:
        logger.error(f"Ingestion failed, knowledge base unavailable: {str(e)}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Ingestion interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
