"""Services for the PDF Chat RAG backend."""
from .page_references import extract_page_numbers
from .context_cleaner import clean_context
from .relevance_ranker import RelevanceRanker
from .small_talk import SmallTalkClassifier, SmallTalkResult
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .answer_assembler import AnswerAssembler, AnswerResult
from .document_store import DocumentStore, InMemoryDocumentStore, SupabaseDocumentStore, create_document_store
from .document_loader import DocumentLoader, detect_document_type
from .chunking_engine import ChunkingEngine
from .embedding_model import EmbeddingModel
from .vector_store import VectorStore
from .retrieval_engine import RetrievalEngine
from .indexing_pipeline import IndexingPipeline, IndexingError
from .chat_service import ChatService, ChatResult, ChatRequestError

__all__ = ['extract_page_numbers', 'clean_context', 'RelevanceRanker', 'SmallTalkClassifier', 'SmallTalkResult', 'LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'AnswerAssembler', 'AnswerResult', 'DocumentStore', 'InMemoryDocumentStore', 'SupabaseDocumentStore', 'create_document_store', 'DocumentLoader', 'detect_document_type', 'ChunkingEngine', 'EmbeddingModel', 'VectorStore', 'RetrievalEngine', 'IndexingPipeline', 'IndexingError', 'ChatService', 'ChatResult', 'ChatRequestError']
