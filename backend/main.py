"""Main entry point for the PDF Chat RAG API."""
import logging
import os
import secrets
import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import BackgroundTasks, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, LOG_LEVEL, LOG_FORMAT, CORS_ORIGINS, GROQ_API_KEY, UPLOAD_DIR
from logger import setup_logging
from models.api import ChatRequest, ChatResponse, UploadResponse, PdfSummary
from models.document import DocumentRecord
from services.answer_assembler import AnswerAssembler
from services.chat_service import ChatService, ChatRequestError
from services.chunking_engine import ChunkingEngine
from services.document_loader import DocumentLoader, detect_document_type
from services.document_store import DocumentStore, create_document_store
from services.embedding_model import EmbeddingModel
from services.indexing_pipeline import IndexingPipeline
from services.llm_client import LLMClient
from services.retrieval_engine import RetrievalEngine
from services.vector_store import VectorStore

if LOG_FORMAT == "json":
    setup_logging(LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PDF Chat RAG",
    description="Ask questions about an uploaded PDF and get answers with page citations",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
document_store: DocumentStore = None
document_loader: DocumentLoader = None
indexing_pipeline: IndexingPipeline = None
chat_service: ChatService = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global document_store, document_loader, indexing_pipeline, chat_service

    logger.info("Initializing PDF Chat RAG services...")

    try:
        os.makedirs(UPLOAD_DIR, exist_ok=True)

        document_store = create_document_store()
        document_loader = DocumentLoader()

        embedding_model = EmbeddingModel()
        vector_store = VectorStore(embedding_model)
        indexing_pipeline = IndexingPipeline(ChunkingEngine(), vector_store)
        logger.info("Initialized IndexingPipeline")

        llm_client: Optional[LLMClient] = None
        if GROQ_API_KEY:
            llm_client = LLMClient()
        else:
            logger.warning("GROQ_API_KEY not set, answers will use the templated fallback")

        chat_service = ChatService(
            document_store=document_store,
            retrieval_engine=RetrievalEngine(vector_store, embedding_model),
            assembler=AnswerAssembler(llm_client)
        )
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "PDF Chat RAG API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "pdf-chat-rag",
        "version": "1.0.0"
    }


@app.get("/pdfs", response_model=List[PdfSummary])
async def list_pdfs() -> List[PdfSummary]:
    """List uploaded PDFs."""
    return [
        PdfSummary(
            id=record.pdf_id,
            filename=record.filename,
            uploaded_at=record.uploaded_at,
            document_type=record.document_type
        )
        for record in document_store.list_records()
    ]


def _generate_pdf_id() -> str:
    """128-bit random identifier, hex encoded."""
    return secrets.token_hex(16)


def _discard_upload(file_path: Optional[str]) -> None:
    """Remove a stored upload that was rejected or failed to register."""
    if file_path and os.path.exists(file_path):
        try:
            os.remove(file_path)
        except OSError as e:
            logger.warning(f"Could not remove rejected upload {file_path}: {e}")


@app.post("/upload/pdf", response_model=UploadResponse)
async def upload_pdf(
    background_tasks: BackgroundTasks,
    pdf: Optional[UploadFile] = File(None)
) -> UploadResponse:
    """
    Accept a PDF upload and schedule background indexing.

    The file is stored under UPLOAD_DIR, parsed once to detect its document
    type, registered in the document store, then chunked and embedded after
    the response is sent.

    Raises:
        HTTPException: 400 for a missing, non-PDF or unreadable file
    """
    if pdf is None or not pdf.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    if not pdf.filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Only PDF files are supported")

    file_path = None
    try:
        unique_prefix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        file_path = os.path.join(UPLOAD_DIR, f"{unique_prefix}-{os.path.basename(pdf.filename)}")
        with open(file_path, "wb") as out:
            out.write(await pdf.read())

        try:
            document = document_loader.load_pdf(file_path, pdf.filename)
        except Exception as e:
            logger.warning(f"Rejected unreadable PDF {pdf.filename}: {e}")
            raise HTTPException(status_code=400, detail="Uploaded file is not a readable PDF")

        pdf_id = _generate_pdf_id()
        record = DocumentRecord(
            pdf_id=pdf_id,
            filename=pdf.filename,
            uploaded_at=datetime.now(timezone.utc),
            document_type=detect_document_type(document),
            file_path=file_path
        )
        document_store.put(pdf_id, record)

        background_tasks.add_task(indexing_pipeline.run, pdf_id, document)
        logger.info(f"Scheduled indexing for {pdf.filename}", extra={"pdf_id": pdf_id})

        return UploadResponse(
            message="File uploaded successfully",
            pdf_id=pdf_id,
            filename=pdf.filename,
            document_type=record.document_type,
            status="Processing started"
        )

    except HTTPException:
        _discard_upload(file_path)
        raise
    except Exception as e:
        logger.error(f"Upload error: {e}", exc_info=True)
        _discard_upload(file_path)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/chat", response_model=ChatResponse)
async def chat_endpoint(request: ChatRequest) -> ChatResponse:
    """
    Answer a question about an uploaded PDF.

    Args:
        request: ChatRequest with query, pdf_id, and optional depth/document_type

    Returns:
        ChatResponse with answer, page references and matched chunk count

    Raises:
        HTTPException: 400 for a blank query or unknown pdf id, 500 otherwise
    """
    start_time = time.time()

    try:
        result = chat_service.chat(
            query=request.query,
            pdf_id=request.pdf_id,
            depth=request.depth,
            document_type=request.document_type
        )

        total_latency_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Chat processed in {total_latency_ms}ms", extra={"pdf_id": request.pdf_id})

        return ChatResponse(
            query=result.query,
            answer=result.answer,
            page_references=result.page_references,
            matched_chunk_count=result.matched_chunk_count
        )

    except ChatRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Chat error: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Internal server error: {str(e)}"
        )


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting PDF Chat RAG API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
