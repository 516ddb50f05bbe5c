"""Main entry point for the Reunion FAQ Assistant API."""
import logging
import time
from typing import List, Optional
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, LOG_LEVEL, LOG_FORMAT, CORS_ORIGINS
from logger import setup_logging
from models.api import ChatRequest, ChatReply, DocumentUpdate, DocumentSummary, RegenerateSummary
from models.conversation import Message
from models.document import Document
from services.chat_orchestrator import ChatOrchestrator
from services.document_loader import UnsupportedMediaTypeError, DocumentParseError
from services.embedding_model import EmbeddingModel
from services.ingestion_service import IngestionService
from services.knowledge_store import KnowledgeStore, StoreUnavailableError, DocumentNotFoundError
from services.settings_store import SettingsStore

# Initialize logging
logger = logging.getLogger(__name__)

UNAVAILABLE_DETAIL = "I'm temporarily unable to answer right now. Please try again in a moment."

# Initialize FastAPI app
app = FastAPI(
    title="Reunion FAQ Assistant",
    description="FAQ chatbot answering questions about the reunion from an uploaded knowledge base",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
chat_orchestrator: ChatOrchestrator = None
ingestion_service: IngestionService = None
knowledge_store: KnowledgeStore = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global chat_orchestrator, ingestion_service, knowledge_store

    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL)

    logger.info("Initializing Reunion FAQ Assistant services...")

    try:
        knowledge_store = KnowledgeStore()
        settings_store = SettingsStore(client=knowledge_store.client)

        try:
            embedding_model = EmbeddingModel()
        except ValueError as e:
            logger.info(f"Embedding enrichment disabled: {e}")
            embedding_model = None

        chat_orchestrator = ChatOrchestrator(knowledge_store, settings_store)
        ingestion_service = IngestionService(knowledge_store, embedding_model=embedding_model)

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Reunion FAQ Assistant API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "reunion-faq-assistant",
        "version": "1.0.0"
    }


@app.post("/chat", response_model=ChatReply, response_model_exclude_none=True)
def chat_endpoint(request: ChatRequest) -> ChatReply:
    """
    Answer one user message from the knowledge base.

    Args:
        request: ChatRequest with the message and optional history

    Returns:
        ChatReply with the message, map flag and source chunk ids

    Raises:
        HTTPException: 400 for an empty message, 503 if the knowledge base cannot be read
    """
    start_time = time.time()

    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message field is required and cannot be empty")

    history = [Message(role=item.role, content=item.content) for item in request.history]

    try:
        response = chat_orchestrator.handle(request.message, history)
    except StoreUnavailableError as e:
        logger.error(f"Knowledge base unavailable: {e}")
        raise HTTPException(status_code=503, detail=UNAVAILABLE_DETAIL)

    latency_ms = int((time.time() - start_time) * 1000)
    logger.info(
        f"Chat message answered in {latency_ms}ms (sources: {response.sources})",
        extra={"latency_ms": latency_ms, "sources": response.sources, "include_map": response.include_map}
    )

    return ChatReply(
        message=response.message,
        include_map=response.include_map,
        map_link=response.map_link,
        sources=response.sources
    )


@app.get("/documents", response_model=List[DocumentSummary])
def list_documents() -> List[DocumentSummary]:
    """List uploaded documents."""
    try:
        documents = knowledge_store.list_documents()
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [_summarize(document) for document in documents]


@app.post("/documents", response_model=DocumentSummary, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    description: Optional[str] = Form(None),
    category: str = Form("General"),
    keywords: Optional[str] = Form(None),
    uploaded_by: Optional[str] = Form(None)
) -> DocumentSummary:
    """
    Upload a document and ingest it into the knowledge base.

    Keywords are given as a comma-separated list.
    """
    data = await file.read()

    try:
        document, chunk_count = ingestion_service.ingest_upload(
            file_name=file.filename or "upload",
            media_type=file.content_type,
            data=data,
            description=description,
            category=category,
            keywords=keywords,
            uploaded_by=uploaded_by
        )
    except UnsupportedMediaTypeError as e:
        raise HTTPException(status_code=415, detail=str(e))
    except DocumentParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return _summarize(document, chunk_count)


@app.patch("/documents/{document_id}", response_model=DocumentSummary)
def update_document(document_id: str, update: DocumentUpdate) -> DocumentSummary:
    """Edit document metadata; a category change re-chunks the document."""
    try:
        document = ingestion_service.update_document(
            document_id,
            description=update.description,
            category=update.category,
            keywords=update.keywords,
            is_active=update.is_active
        )
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _summarize(document)


@app.delete("/documents/{document_id}", status_code=204)
def delete_document(document_id: str) -> None:
    """Delete a document and its chunks."""
    try:
        ingestion_service.delete_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@app.post("/documents/{document_id}/rechunk")
def rechunk_document(document_id: str):
    """Rebuild one document's chunks from its stored content."""
    try:
        chunk_count = ingestion_service.rechunk_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"document_id": document_id, "chunks": chunk_count}


@app.post("/documents/regenerate", response_model=RegenerateSummary)
def regenerate_chunks() -> RegenerateSummary:
    """Rebuild the chunks of every active document."""
    try:
        summary = ingestion_service.regenerate_all()
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return RegenerateSummary(**summary)


def _summarize(document: Document, chunk_count: Optional[int] = None) -> DocumentSummary:
    return DocumentSummary(
        id=document.document_id,
        name=document.name,
        media_type=document.media_type,
        size=document.size,
        description=document.description,
        category=document.category,
        keywords=document.keywords,
        is_active=document.is_active,
        uploaded_by=document.uploaded_by,
        created_at=document.created_at,
        updated_at=document.updated_at,
        chunk_count=chunk_count
    )


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Reunion FAQ Assistant API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
