"""Chunking engine that tags every chunk with its source page."""
import logging
from typing import List, Optional
from transformers import AutoTokenizer

from models.document import Document
from models.chunk import Chunk
from config import CHUNK_SIZE, CHUNK_OVERLAP, EMBEDDING_MODEL

logger = logging.getLogger(__name__)


class ChunkingEngine:
    """Segments documents into retrievable chunks prefixed with "[Page N]" markers."""

    def __init__(
        self,
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
        tokenizer=None
    ):
        """
        Initialize ChunkingEngine.

        Args:
            chunk_size: Target chunk size in tokens
            chunk_overlap: Overlap between chunks in tokens
            tokenizer: Object with encode/decode (defaults to the embedding
                model's Hugging Face tokenizer)
        """
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

        if tokenizer is None:
            logger.info("Loading tokenizer for chunking...")
            tokenizer = AutoTokenizer.from_pretrained(EMBEDDING_MODEL)
        self.tokenizer = tokenizer

        # Separators for recursive splitting (in priority order)
        self.separators = ["\n\n", "\n", ". ", " ", ""]

    def chunk_document(self, document: Document, document_id: str) -> List[Chunk]:
        """
        Chunk every page of a document.

        Args:
            document: Loaded document
            document_id: pdf id the chunks are partitioned under

        Returns:
            List of Chunk objects whose text starts with "[Page N] "
        """
        all_chunks = []

        for page in document.pages:
            all_chunks.extend(self._chunk_text(
                text=page.text,
                document_id=document_id,
                page_number=page.page_number
            ))

        logger.info(f"Created {len(all_chunks)} chunks from {document.filename}")
        return all_chunks

    def _chunk_text(self, text: str, document_id: str, page_number: int) -> List[Chunk]:
        """Split one page and wrap the pieces as Chunk objects."""
        if not text.strip():
            return []

        chunks = []
        for idx, chunk_text in enumerate(self._recursive_split(text)):
            full_text = f"[Page {page_number}] {chunk_text}"
            chunks.append(Chunk(
                chunk_id=f"{document_id}_{page_number}_{idx}",
                text=full_text,
                document_id=document_id,
                page_number=page_number,
                token_count=self._count_tokens(full_text)
            ))

        return chunks

    def _count_tokens(self, text: str) -> int:
        return len(self.tokenizer.encode(text))

    def _recursive_split(self, text: str, separators: Optional[List[str]] = None) -> List[str]:
        """
        Recursively split text using separators.

        Pieces are packed greedily up to chunk_size tokens; a new chunk starts
        with the last chunk_overlap tokens of the previous one. Pieces that are
        still too large are split again with the next separator.
        """
        if separators is None:
            separators = self.separators

        if self._count_tokens(text) <= self.chunk_size:
            stripped = text.strip()
            return [stripped] if stripped else []

        # Try each separator in order
        for position, separator in enumerate(separators):
            if separator and separator not in text:
                continue

            if separator:
                parts = [part + separator for part in text.split(separator)]
            else:
                parts = list(text)
            remaining = separators[position + 1:]

            chunks: List[str] = []
            current_chunk = ""

            for part in parts:
                test_chunk = current_chunk + part
                if self._count_tokens(test_chunk) <= self.chunk_size:
                    current_chunk = test_chunk
                    continue

                if current_chunk.strip():
                    chunks.append(current_chunk.strip())

                if self._count_tokens(part) > self.chunk_size and remaining:
                    chunks.extend(self._recursive_split(part, remaining))
                    current_chunk = ""
                else:
                    current_chunk = self._overlap_text(chunks) + part

            if current_chunk.strip():
                chunks.append(current_chunk.strip())

            return chunks

        return [text.strip()]

    def _overlap_text(self, chunks: List[str]) -> str:
        """Last chunk_overlap tokens of the previous chunk, as text."""
        if not chunks or self.chunk_overlap <= 0:
            return ""
        prev_tokens = self.tokenizer.encode(chunks[-1], add_special_tokens=False)
        if len(prev_tokens) <= self.chunk_overlap:
            return ""
        return self.tokenizer.decode(prev_tokens[-self.chunk_overlap:]) + " "
