"""Document data models."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

GENERAL_DOCUMENT = "general"
QA_DOCUMENT = "qa"


@dataclass
class Page:
    """Represents a single page from a document."""
    page_number: int
    text: str
    word_count: int


@dataclass
class Document:
    """Represents a loaded PDF document."""
    filename: str
    pages: List[Page]
    total_pages: int


@dataclass(frozen=True)
class DocumentRecord:
    """Metadata minted at upload time and looked up on every chat call."""
    pdf_id: str
    filename: str
    uploaded_at: datetime
    document_type: str = GENERAL_DOCUMENT
    file_path: Optional[str] = None
