"""Request and response schemas for the HTTP API."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.depth import DepthLevel


class ChatRequest(BaseModel):
    """Body of POST /chat."""
    query: str = Field(..., min_length=1)
    pdf_id: Optional[str] = None
    depth: DepthLevel = DepthLevel.NORMAL
    document_type: Optional[str] = None


class ChatResponse(BaseModel):
    """Answer with the pages it was drawn from."""
    query: str
    answer: str
    page_references: List[int]
    matched_chunk_count: int


class UploadResponse(BaseModel):
    """Returned once a PDF is accepted and indexing is scheduled."""
    message: str
    pdf_id: str
    filename: str
    document_type: str
    status: str


class PdfSummary(BaseModel):
    """Entry of GET /pdfs."""
    id: str
    filename: str
    uploaded_at: datetime
    document_type: str
