"""Integration tests for the HTTP endpoints."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock, patch
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


@pytest.fixture
def client():
    """Create a test client with mocked services."""
    # Import after path is set
    from main import app

    # Mock the startup event to avoid initializing real services
    with patch('main.startup_event'):
        client = TestClient(app)

        # Manually set the global services to mocks
        import main
        main.chat_orchestrator = Mock()
        main.ingestion_service = Mock()
        main.knowledge_store = Mock()

        yield client


@pytest.fixture
def document():
    from models.document import Document
    return Document(
        document_id="file-abc123",
        name="faq.txt",
        content="Q: When is the reunion?\nA: May 21-24, 2026.",
        media_type="text/plain",
        size=44,
        category="Dates",
        keywords=["dates"],
        created_at="2026-01-01T00:00:00+00:00",
        updated_at="2026-01-01T00:00:00+00:00"
    )


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestChatEndpoint:
    """POST /chat."""

    def test_chat_reply_shape(self, client):
        import main
        from models.conversation import ChatResponse
        main.chat_orchestrator.handle.return_value = ChatResponse(
            message="📍 The tent is on Poe Field.",
            include_map=True,
            map_link="https://maps.example.com/princeton",
            sources=["faq_3"]
        )

        response = client.post("/chat", json={
            "message": "Where is the venue?",
            "history": [{"role": "user", "content": "hello"}]
        })

        assert response.status_code == 200
        assert response.json() == {
            "message": "📍 The tent is on Poe Field.",
            "includeMap": True,
            "mapLink": "https://maps.example.com/princeton",
            "sources": ["faq_3"],
        }
        utterance, history = main.chat_orchestrator.handle.call_args[0]
        assert utterance == "Where is the venue?"
        assert history[0].content == "hello"

    def test_chat_without_map_omits_link(self, client):
        import main
        from models.conversation import ChatResponse
        main.chat_orchestrator.handle.return_value = ChatResponse(message="Hey there!")

        data = client.post("/chat", json={"message": "hi"}).json()

        assert data["includeMap"] is False
        assert "mapLink" not in data

    def test_empty_message(self, client):
        import main

        response = client.post("/chat", json={"message": "   "})

        assert response.status_code == 400
        main.chat_orchestrator.handle.assert_not_called()

    def test_missing_message(self, client):
        response = client.post("/chat", json={})

        assert response.status_code == 422

    def test_store_unavailable(self, client):
        import main
        from services.knowledge_store import StoreUnavailableError
        main.chat_orchestrator.handle.side_effect = StoreUnavailableError("Failed to list active chunks")

        response = client.post("/chat", json={"message": "When is the reunion?"})

        assert response.status_code == 503
        assert "temporarily unable" in response.json()["detail"]

    def test_end_to_end_with_mocked_stores(self, client):
        """Real orchestrator over mocked stores."""
        import main
        from models.chunk import Chunk, ChunkType
        from models.settings import Settings
        from services.chat_orchestrator import ChatOrchestrator

        knowledge_store = Mock()
        knowledge_store.list_active_chunks.return_value = [Chunk(
            chunk_id="faq_0", document_id="faq", chunk_index=0, chunk_type=ChunkType.QA,
            question="When is the reunion?", answer="The reunion is May 21-24, 2026.",
            category="Dates", keywords=["when", "reunion", "2124", "2026", "dates"]
        )]
        settings_store = Mock()
        settings_store.get_settings.return_value = Settings()
        main.chat_orchestrator = ChatOrchestrator(knowledge_store, settings_store)

        data = client.post("/chat", json={"message": "When is the reunion?"}).json()

        assert data["message"] == "🗓️ The reunion is May 21-24, 2026."
        assert data["sources"] == ["faq_0"]


class TestDocumentEndpoints:
    """Document management endpoints."""

    def test_list_documents(self, client, document):
        import main
        main.knowledge_store.list_documents.return_value = [document]

        response = client.get("/documents")

        assert response.status_code == 200
        assert response.json()[0]["id"] == "file-abc123"
        assert response.json()[0]["name"] == "faq.txt"

    def test_upload(self, client, document):
        import main
        main.ingestion_service.ingest_upload.return_value = (document, 1)

        response = client.post(
            "/documents",
            files={"file": ("faq.txt", b"Q: When is the reunion?\nA: May 21-24, 2026.", "text/plain")},
            data={"category": "Dates", "keywords": "dates"}
        )

        assert response.status_code == 201
        assert response.json()["chunk_count"] == 1
        kwargs = main.ingestion_service.ingest_upload.call_args.kwargs
        assert kwargs["file_name"] == "faq.txt"
        assert kwargs["media_type"] == "text/plain"
        assert kwargs["category"] == "Dates"

    def test_upload_unsupported_type(self, client):
        import main
        from services.document_loader import UnsupportedMediaTypeError
        main.ingestion_service.ingest_upload.side_effect = UnsupportedMediaTypeError("Unsupported file type: image/png")

        response = client.post("/documents", files={"file": ("photo.png", b"\x89PNG", "image/png")})

        assert response.status_code == 415

    def test_upload_parse_error(self, client):
        import main
        from services.document_loader import DocumentParseError
        main.ingestion_service.ingest_upload.side_effect = DocumentParseError("Could not read agenda.pdf")

        response = client.post("/documents", files={"file": ("agenda.pdf", b"junk", "application/pdf")})

        assert response.status_code == 422

    def test_update_document(self, client, document):
        import main
        main.ingestion_service.update_document.return_value = document

        response = client.patch("/documents/file-abc123", json={"category": "Dates", "is_active": True})

        assert response.status_code == 200
        main.ingestion_service.update_document.assert_called_once_with(
            "file-abc123", description=None, category="Dates", keywords=None, is_active=True
        )

    def test_update_missing_document(self, client):
        import main
        from services.knowledge_store import DocumentNotFoundError
        main.ingestion_service.update_document.side_effect = DocumentNotFoundError("Document not found: nope")

        response = client.patch("/documents/nope", json={"category": "Dates"})

        assert response.status_code == 404

    def test_delete_document(self, client):
        import main

        response = client.delete("/documents/file-abc123")

        assert response.status_code == 204
        main.ingestion_service.delete_document.assert_called_once_with("file-abc123")

    def test_rechunk_document(self, client):
        import main
        main.ingestion_service.rechunk_document.return_value = 4

        response = client.post("/documents/file-abc123/rechunk")

        assert response.json() == {"document_id": "file-abc123", "chunks": 4}

    def test_regenerate(self, client):
        import main
        main.ingestion_service.regenerate_all.return_value = {"processed": 2, "failed": 1, "chunks": 9}

        response = client.post("/documents/regenerate")

        assert response.status_code == 200
        assert response.json() == {"processed": 2, "failed": 1, "chunks": 9}
