"""Data models for the PDF Chat RAG backend."""
from .document import Document, Page, DocumentRecord, GENERAL_DOCUMENT, QA_DOCUMENT
from .chunk import Chunk, ScoredChunk, ScoredSentence
from .depth import DepthLevel, DepthProfile, DEPTH_PROFILES, get_depth_profile
from .api import ChatRequest, ChatResponse, UploadResponse, PdfSummary

__all__ = [
    "Document",
    "Page",
    "DocumentRecord",
    "GENERAL_DOCUMENT",
    "QA_DOCUMENT",
    "Chunk",
    "ScoredChunk",
    "ScoredSentence",
    "DepthLevel",
    "DepthProfile",
    "DEPTH_PROFILES",
    "get_depth_profile",
    "ChatRequest",
    "ChatResponse",
    "UploadResponse",
    "PdfSummary",
]
