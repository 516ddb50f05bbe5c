"""Tests for the ingestion command-line script."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from unittest.mock import patch
import ingest_documents
from models.document import Document
from services.knowledge_store import StoreUnavailableError


def test_parse_args():
    args = ingest_documents.parse_args(["--docs-dir", "docs", "--category", "Events", "--uploaded-by", "admin"])

    assert args.docs_dir == "docs"
    assert args.category == "Events"
    assert args.uploaded_by == "admin"


@patch('ingest_documents.EmbeddingModel', side_effect=ValueError("HUGGINGFACE_API_KEY environment variable is required"))
@patch('ingest_documents.KnowledgeStore')
@patch('ingest_documents.IngestionService')
def test_ingests_every_supported_file(mock_service_class, mock_store_class, mock_embedding, tmp_path):
    (tmp_path / "faq.txt").write_text("Q: When is the reunion?\nA: May 21-24, 2026.")
    (tmp_path / "notes.md").write_text("# Notes\nBring a jacket for the P-rade.")
    service = mock_service_class.return_value
    service.ingest_upload.return_value = (
        Document(document_id="file-1", name="faq.txt", content="", media_type="text/plain", size=0, category="General"),
        2
    )

    exit_code = ingest_documents.main(["--docs-dir", str(tmp_path), "--category", "Events"])

    assert exit_code == 0
    assert service.ingest_upload.call_count == 2
    assert mock_service_class.call_args.kwargs["embedding_model"] is None
    assert service.ingest_upload.call_args.kwargs["category"] == "Events"


@patch('ingest_documents.EmbeddingModel', side_effect=ValueError("no key"))
@patch('ingest_documents.KnowledgeStore')
@patch('ingest_documents.IngestionService')
def test_store_failure_exits_nonzero(mock_service_class, mock_store_class, mock_embedding, tmp_path):
    (tmp_path / "faq.txt").write_text("Q: When is the reunion?\nA: May 21-24, 2026.")
    mock_service_class.return_value.ingest_upload.side_effect = StoreUnavailableError("Failed to save document")

    assert ingest_documents.main(["--docs-dir", str(tmp_path)]) == 1


@patch('ingest_documents.EmbeddingModel', side_effect=ValueError("no key"))
@patch('ingest_documents.KnowledgeStore')
def test_empty_directory_exits_nonzero(mock_store_class, mock_embedding, tmp_path):
    assert ingest_documents.main(["--docs-dir", str(tmp_path)]) == 1
