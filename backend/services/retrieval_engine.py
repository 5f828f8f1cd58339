"""Retrieval engine for orchestrating query embedding and chunk retrieval."""
import logging
from typing import List
from models.chunk import ScoredChunk
from services.vector_store import VectorStore
from services.embedding_model import EmbeddingModel
from config import RETRIEVAL_TOP_K, RELEVANCE_THRESHOLD

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Embed a query and fetch the matching chunks of one document."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_model: EmbeddingModel,
        relevance_threshold: float = RELEVANCE_THRESHOLD
    ):
        """
        Initialize the retrieval engine.

        Args:
            vector_store: VectorStore instance for similarity search
            embedding_model: EmbeddingModel instance for query embedding
            relevance_threshold: Chunks scoring at or below this are dropped
        """
        self.vector_store = vector_store
        self.embedding_model = embedding_model
        self.relevance_threshold = relevance_threshold
        logger.info("Initialized RetrievalEngine")

    def retrieve(self, document_id: str, query: str, top_k: int = RETRIEVAL_TOP_K) -> List[ScoredChunk]:
        """
        Retrieve relevant chunks of a document for a query.

        Args:
            document_id: pdf id whose chunks are searched
            query: User question
            top_k: Maximum number of chunks to retrieve

        Returns:
            Scored chunks above the relevance threshold, most similar first;
            empty for a blank query or when nothing matches

        Raises:
            RuntimeError: If embedding or search operations fail
        """
        if not query or not query.strip():
            logger.warning("Empty query string provided, returning empty results")
            return []

        try:
            query_embedding = self.embedding_model.embed_text(query)
            scored_chunks = self.vector_store.search(
                document_id,
                query_embedding,
                top_k=top_k,
                match_threshold=self.relevance_threshold
            )
        except Exception as e:
            error_msg = f"Failed to retrieve chunks for query: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

        # Also enforced by the RPC; re-checked here for exclusive comparison
        filtered_chunks = [
            chunk for chunk in scored_chunks
            if chunk.relevance_score > self.relevance_threshold
        ]

        logger.info(
            f"Retrieved {len(filtered_chunks)} of {len(scored_chunks)} chunks "
            f"above threshold {self.relevance_threshold}",
            extra={"pdf_id": document_id, "chunks_retrieved": len(filtered_chunks)}
        )
        return filtered_chunks
