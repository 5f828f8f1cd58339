"""Chunk data models."""
from dataclasses import dataclass


@dataclass
class Chunk:
    """Represents a document chunk for retrieval."""
    chunk_id: str  # Format: "{document_id}_{page}_{chunk_index}"
    text: str  # Starts with an inline "[Page N]" marker
    document_id: str
    page_number: int
    token_count: int = 0


@dataclass
class ScoredChunk:
    """Chunk with relevance score from retrieval."""
    chunk: Chunk
    relevance_score: float  # 0.0 to 1.0


@dataclass
class ScoredSentence:
    """Candidate sentence with its lexical relevance score."""
    sentence: str
    score: int
    position: int  # index in the source text, used for "qa" follow-up
