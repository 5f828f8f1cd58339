"""Unit tests for VectorStore class."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import Mock, patch, MagicMock
from models.chunk import Chunk, ScoredChunk
from services.vector_store import VectorStore, MATCH_FUNCTION
from services.embedding_model import EmbeddingModel


def make_chunk(index, document_id="doc1"):
    return Chunk(
        chunk_id=f"{document_id}_1_{index}",
        text=f"[Page 1] Test chunk {index}",
        document_id=document_id,
        page_number=1,
        token_count=10 + index
    )


def match_row(index, similarity, document_id="doc1"):
    return {
        "chunk_id": f"{document_id}_1_{index}",
        "text": f"[Page 1] Test chunk {index}",
        "document_id": document_id,
        "page_number": 1,
        "token_count": 10,
        "similarity": similarity
    }


class TestVectorStore:
    """Test suite for VectorStore."""

    @pytest.fixture
    def mock_embedding_model(self):
        return Mock(spec=EmbeddingModel)

    @pytest.fixture
    def mock_client(self):
        with patch('services.vector_store.create_client') as mock_create_client:
            client = MagicMock()
            mock_create_client.return_value = client
            yield client

    @pytest.fixture
    def store(self, mock_embedding_model, mock_client):
        return VectorStore(
            embedding_model=mock_embedding_model,
            supabase_url="https://test.supabase.co",
            supabase_key="test_key"
        )

    def test_initialization_success(self, store, mock_embedding_model, mock_client):
        """Test successful initialization with credentials."""
        assert store.embedding_model == mock_embedding_model
        assert store.table_name == "document_chunks"
        assert store.client is mock_client

    def test_initialization_without_credentials(self, mock_embedding_model):
        """Test initialization fails without Supabase credentials."""
        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_KEY"):
            VectorStore(embedding_model=mock_embedding_model, supabase_url=None, supabase_key="test_key")

        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_KEY"):
            VectorStore(embedding_model=mock_embedding_model, supabase_url="https://test.supabase.co", supabase_key=None)

    def test_add_chunks_empty_list(self, store):
        """Test add_chunks raises error for empty list."""
        with pytest.raises(ValueError, match="Chunks list cannot be empty"):
            store.add_chunks([])

    def test_add_chunks_success(self, store, mock_embedding_model, mock_client):
        """Test chunks are embedded and upserted with their document id."""
        mock_embedding_model.embed_batch.return_value = [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]

        store.add_chunks([make_chunk(0), make_chunk(1)])

        mock_embedding_model.embed_batch.assert_called_once_with(
            ["[Page 1] Test chunk 0", "[Page 1] Test chunk 1"]
        )
        mock_client.table.assert_called_with("document_chunks")

        records = mock_client.table.return_value.upsert.call_args[0][0]
        assert len(records) == 2
        assert records[0] == {
            "chunk_id": "doc1_1_0",
            "text": "[Page 1] Test chunk 0",
            "document_id": "doc1",
            "page_number": 1,
            "token_count": 10,
            "embedding": [0.1, 0.2, 0.3]
        }
        assert records[1]["embedding"] == [0.4, 0.5, 0.6]

    def test_add_chunks_embedding_failure(self, store, mock_embedding_model):
        """Test add_chunks handles embedding failure."""
        mock_embedding_model.embed_batch.side_effect = RuntimeError("Embedding API error")

        with pytest.raises(RuntimeError, match="Failed to add chunks"):
            store.add_chunks([make_chunk(0)])

    def test_add_chunks_database_failure(self, store, mock_embedding_model, mock_client):
        """Test add_chunks handles database failure."""
        mock_embedding_model.embed_batch.return_value = [[0.1, 0.2, 0.3]]
        mock_client.table.return_value.upsert.side_effect = Exception("Database error")

        with pytest.raises(RuntimeError, match="Failed to add chunks"):
            store.add_chunks([make_chunk(0)])

    def test_search_empty_embedding(self, store):
        """Test search raises error for empty embedding."""
        with pytest.raises(ValueError, match="Query embedding cannot be empty"):
            store.search("doc1", [])

    @pytest.mark.parametrize("top_k", [0, -1])
    def test_search_invalid_top_k(self, store, top_k):
        """Test search raises error for invalid top_k."""
        with pytest.raises(ValueError, match="top_k must be positive"):
            store.search("doc1", [0.1, 0.2, 0.3], top_k=top_k)

    def test_search_success(self, store, mock_client):
        """Test search is scoped to one document."""
        mock_client.rpc.return_value.execute.return_value = MagicMock(
            data=[match_row(0, 0.85), match_row(1, 0.72)]
        )

        results = store.search("doc1", [0.1, 0.2, 0.3], top_k=5, match_threshold=0.3)

        mock_client.rpc.assert_called_once_with(
            MATCH_FUNCTION,
            {
                "query_embedding": [0.1, 0.2, 0.3],
                "filter_document_id": "doc1",
                "match_threshold": 0.3,
                "match_count": 5
            }
        )
        assert len(results) == 2
        assert isinstance(results[0], ScoredChunk)
        assert results[0].chunk.chunk_id == "doc1_1_0"
        assert results[0].chunk.document_id == "doc1"
        assert results[0].relevance_score == 0.85
        assert results[1].relevance_score == 0.72

    def test_search_empty_results(self, store, mock_client):
        """Test search with no results."""
        mock_client.rpc.return_value.execute.return_value = MagicMock(data=[])

        assert store.search("doc1", [0.1, 0.2, 0.3]) == []

    def test_search_score_normalization(self, store, mock_client):
        """Test that similarity scores are clamped to [0, 1]."""
        mock_client.rpc.return_value.execute.return_value = MagicMock(
            data=[match_row(0, 1.5), match_row(1, -0.2), match_row(2, 0.5)]
        )

        results = store.search("doc1", [0.1, 0.2, 0.3])

        assert [r.relevance_score for r in results] == [1.0, 0.0, 0.5]

    def test_search_database_failure(self, store, mock_client):
        """Test search handles database failure."""
        mock_client.rpc.side_effect = Exception("Database error")

        with pytest.raises(RuntimeError, match="Failed to search vector store"):
            store.search("doc1", [0.1, 0.2, 0.3])

    def test_delete_document(self, store, mock_client):
        store.delete_document("doc1")

        mock_client.table.return_value.delete.return_value.eq.assert_called_once_with("document_id", "doc1")

    def test_delete_document_failure(self, store, mock_client):
        mock_client.table.return_value.delete.side_effect = Exception("Database error")

        with pytest.raises(RuntimeError, match="Failed to delete document doc1"):
            store.delete_document("doc1")

    def test_count_all(self, store, mock_client):
        select = mock_client.table.return_value.select
        select.return_value.execute.return_value = MagicMock(count=42)

        assert store.count() == 42
        select.assert_called_once_with("chunk_id", count="exact")
        select.return_value.eq.assert_not_called()

    def test_count_for_document(self, store, mock_client):
        query = mock_client.table.return_value.select.return_value
        query.eq.return_value.execute.return_value = MagicMock(count=7)

        assert store.count("doc1") == 7
        query.eq.assert_called_once_with("document_id", "doc1")

    def test_count_none_is_zero(self, store, mock_client):
        mock_client.table.return_value.select.return_value.execute.return_value = MagicMock(count=None)

        assert store.count() == 0
