"""Vector store implementation using Supabase pgvector, partitioned by document."""
import logging
from typing import List, Optional
from supabase import create_client, Client
from models.chunk import Chunk, ScoredChunk
from services.embedding_model import EmbeddingModel
from config import SUPABASE_URL, SUPABASE_KEY

logger = logging.getLogger(__name__)

# Expected RPC in Supabase:
#
# CREATE OR REPLACE FUNCTION match_document_chunks(
#   query_embedding vector(768),
#   filter_document_id text,
#   match_threshold float,
#   match_count int
# )
# RETURNS TABLE (chunk_id text, text text, document_id text,
#                page_number int, token_count int, similarity float)
# LANGUAGE sql AS $$
#   SELECT chunk_id, text, document_id, page_number, token_count,
#          1 - (embedding <=> query_embedding) AS similarity
#   FROM document_chunks
#   WHERE document_id = filter_document_id
#     AND 1 - (embedding <=> query_embedding) > match_threshold
#   ORDER BY embedding <=> query_embedding
#   LIMIT match_count;
# $$;
MATCH_FUNCTION = "match_document_chunks"


class VectorStore:
    """Store chunk embeddings and run per-document similarity search."""

    def __init__(
        self,
        embedding_model: EmbeddingModel,
        supabase_url: str = SUPABASE_URL,
        supabase_key: str = SUPABASE_KEY,
        table_name: str = "document_chunks"
    ):
        """
        Initialize the vector store with Supabase client.

        Args:
            embedding_model: EmbeddingModel instance for generating embeddings
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Name of the table to store chunks

        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables are required")

        self.embedding_model = embedding_model
        self.table_name = table_name
        self.client: Client = create_client(supabase_url, supabase_key)

        logger.info(f"Initialized VectorStore with table: {table_name}")

    def add_chunks(self, chunks: List[Chunk]) -> None:
        """
        Embed a batch of chunks and upsert them.

        Args:
            chunks: Chunks of a single document

        Raises:
            ValueError: If chunks list is empty
            RuntimeError: If embedding or the database operation fails
        """
        if not chunks:
            raise ValueError("Chunks list cannot be empty")

        try:
            embeddings = self.embedding_model.embed_batch([chunk.text for chunk in chunks])

            records = [
                {
                    "chunk_id": chunk.chunk_id,
                    "text": chunk.text,
                    "document_id": chunk.document_id,
                    "page_number": chunk.page_number,
                    "token_count": chunk.token_count,
                    "embedding": embedding
                }
                for chunk, embedding in zip(chunks, embeddings)
            ]

            # Upsert so a retried batch does not duplicate rows
            self.client.table(self.table_name).upsert(records).execute()

            logger.info(f"Stored {len(chunks)} chunks for document {chunks[0].document_id}")

        except Exception as e:
            error_msg = f"Failed to add chunks to vector store: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

    def search(
        self,
        document_id: str,
        query_embedding: List[float],
        top_k: int = 10,
        match_threshold: float = 0.0
    ) -> List[ScoredChunk]:
        """
        Find the chunks of one document most similar to a query.

        Args:
            document_id: pdf id to search within
            query_embedding: Embedding vector for user query
            top_k: Number of chunks to retrieve
            match_threshold: Minimum similarity applied inside the database

        Returns:
            ScoredChunk list, most similar first, scores clamped to [0, 1]

        Raises:
            ValueError: If query_embedding is empty or top_k is invalid
            RuntimeError: If database operation fails
        """
        if not query_embedding:
            raise ValueError("Query embedding cannot be empty")

        if top_k <= 0:
            raise ValueError("top_k must be positive")

        try:
            response = self.client.rpc(
                MATCH_FUNCTION,
                {
                    "query_embedding": query_embedding,
                    "filter_document_id": document_id,
                    "match_threshold": match_threshold,
                    "match_count": top_k
                }
            ).execute()
        except Exception as e:
            error_msg = f"Failed to search vector store: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

        scored_chunks = []
        for row in response.data or []:
            chunk = Chunk(
                chunk_id=row["chunk_id"],
                text=row["text"],
                document_id=row.get("document_id", document_id),
                page_number=row["page_number"],
                token_count=row.get("token_count", 0)
            )
            scored_chunks.append(ScoredChunk(
                chunk=chunk,
                relevance_score=max(0.0, min(1.0, row["similarity"]))
            ))

        logger.debug(f"Found {len(scored_chunks)} chunks in document {document_id}")
        return scored_chunks

    def delete_document(self, document_id: str) -> None:
        """
        Remove every chunk of one document.

        Raises:
            RuntimeError: If database operation fails
        """
        try:
            self.client.table(self.table_name).delete().eq("document_id", document_id).execute()
            logger.info(f"Deleted chunks for document {document_id}")
        except Exception as e:
            error_msg = f"Failed to delete document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

    def count(self, document_id: Optional[str] = None) -> int:
        """
        Number of stored chunks, optionally for a single document.

        Raises:
            RuntimeError: If database operation fails
        """
        try:
            query = self.client.table(self.table_name).select("chunk_id", count="exact")
            if document_id is not None:
                query = query.eq("document_id", document_id)
            response = query.execute()
            return response.count if response.count is not None else 0
        except Exception as e:
            error_msg = f"Failed to count chunks in vector store: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)
