"""Unit tests for ChatService."""
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import Mock
from models.chunk import Chunk, ScoredChunk
from models.depth import DepthLevel, DEPTH_PROFILES
from models.document import DocumentRecord
from services.answer_assembler import AnswerAssembler
from services.chat_service import ChatService, ChatRequestError
from services.document_store import InMemoryDocumentStore
from services.llm_client import LLMResponse, LLMError, LLMClientError

PDF_ID = "a" * 32
ANSWER = "Paris is the capital of France, according to the uploaded document."


def scored(text, page, score=0.8):
    chunk = Chunk(chunk_id=f"{PDF_ID}_{page}_0", text=text, document_id=PDF_ID, page_number=page)
    return ScoredChunk(chunk=chunk, relevance_score=score)


FRANCE_CHUNKS = [
    scored("[Page 3] Paris is the capital of France. It sits on the Seine.", 3, 0.82),
    scored("[Page 7] Tourism around the capital of France peaks in summer.", 7, 0.64),
]


@pytest.fixture
def document_store():
    store = InMemoryDocumentStore()
    store.put(PDF_ID, DocumentRecord(
        pdf_id=PDF_ID,
        filename="geography.pdf",
        uploaded_at=datetime(2024, 1, 1, tzinfo=timezone.utc)
    ))
    return store


@pytest.fixture
def retrieval_engine():
    engine = Mock()
    engine.retrieve.return_value = list(FRANCE_CHUNKS)
    return engine


@pytest.fixture
def llm_client():
    client = Mock()
    client.generate.return_value = LLMResponse(
        text=ANSWER, tokens_input=200, tokens_output=20, latency_ms=12, model_used="llama-3.1-8b-instant"
    )
    return client


@pytest.fixture
def service(document_store, retrieval_engine, llm_client):
    return ChatService(document_store, retrieval_engine, AnswerAssembler(llm_client))


class TestChatService:
    """Test suite for the chat flow."""

    def test_answers_with_page_references(self, service, llm_client):
        result = service.chat("What is the capital of France?", PDF_ID)

        assert result.page_references == [3, 7]
        assert result.matched_chunk_count == 2
        assert result.answer == f"{ANSWER} This information can be found on pages 3, 7."
        assert result.small_talk is False

        prompt = llm_client.generate.call_args.kwargs["prompt"]
        assert "Paris is the capital of France." in prompt
        assert "[Page" not in prompt.split("DOCUMENT CONTENT:")[1].split("INSTRUCTIONS:")[0]

    def test_retrieves_for_requested_document(self, service, retrieval_engine):
        service.chat("capital of France", PDF_ID)
        retrieval_engine.retrieve.assert_called_once_with(PDF_ID, "capital of France")

    def test_no_retrieval_results(self, service, retrieval_engine, llm_client):
        retrieval_engine.retrieve.return_value = []

        result = service.chat("quantum tunneling", PDF_ID)

        assert result.matched_chunk_count == 0
        assert result.page_references == []
        assert result.answer == ChatService.not_found_answer("quantum tunneling")
        assert '"quantum tunneling"' in result.answer
        llm_client.generate.assert_not_called()

    def test_small_talk_skips_retrieval(self, service, retrieval_engine, llm_client):
        result = service.chat("Hello!", PDF_ID)

        assert result.small_talk is True
        assert result.page_references == []
        assert result.matched_chunk_count == 0
        assert result.answer
        retrieval_engine.retrieve.assert_not_called()
        llm_client.generate.assert_not_called()

    @pytest.mark.parametrize("query", ["", "   "])
    def test_blank_query_rejected(self, service, query):
        with pytest.raises(ChatRequestError, match="Query parameter is required"):
            service.chat(query, PDF_ID)

    @pytest.mark.parametrize("pdf_id", [None, "", "unknown-id"])
    def test_unknown_pdf_rejected(self, service, retrieval_engine, pdf_id):
        with pytest.raises(ChatRequestError, match="Valid PDF ID is required"):
            service.chat("capital of France", pdf_id)
        retrieval_engine.retrieve.assert_not_called()

    def test_pdf_checked_before_small_talk(self, service):
        with pytest.raises(ChatRequestError):
            service.chat("hello", "unknown-id")

    def test_generation_failure_returns_fallback(self, service, llm_client):
        llm_client.generate.side_effect = LLMClientError(
            LLMError(code="API_ERROR", message="Groq API error: boom", details={})
        )

        result = service.chat("capital of France", PDF_ID)

        assert result.answer == (
            'I found some information about "capital of France" in the document. '
            "This information can be found on pages 3, 7."
        )
        assert result.page_references == [3, 7]

    def test_chunks_without_markers_are_not_cited(self, service, retrieval_engine):
        retrieval_engine.retrieve.return_value = [
            scored("Paris is the capital of France and its largest city.", 1)
        ]

        result = service.chat("capital of France", PDF_ID)

        assert result.page_references == []
        assert result.matched_chunk_count == 1
        assert "This information can be found" not in result.answer

    def test_retrieval_failure_propagates(self, service, retrieval_engine):
        retrieval_engine.retrieve.side_effect = RuntimeError("Failed to retrieve chunks for query: down")
        with pytest.raises(RuntimeError):
            service.chat("capital of France", PDF_ID)

    def test_depth_reaches_generation(self, service, llm_client):
        service.chat("capital of France", PDF_ID, depth=DepthLevel.DEEP)
        assert llm_client.generate.call_args.kwargs["max_tokens"] == DEPTH_PROFILES[DepthLevel.DEEP].max_tokens


class TestDocumentTypeResolution:
    """The request type wins, then the stored type, then general."""

    @pytest.fixture
    def assembler(self):
        assembler = Mock()
        assembler.assemble.return_value = Mock(text=ANSWER, retried=False, fallback=False)
        return assembler

    def _resolved_type(self, store, retrieval_engine, assembler, requested):
        ChatService(store, retrieval_engine, assembler).chat("capital of France", PDF_ID, document_type=requested)
        return assembler.assemble.call_args.kwargs["document_type"]

    def test_stored_type_used_by_default(self, retrieval_engine, assembler):
        store = InMemoryDocumentStore()
        store.put(PDF_ID, DocumentRecord(
            pdf_id=PDF_ID, filename="faq.pdf",
            uploaded_at=datetime.now(timezone.utc), document_type="qa"
        ))
        assert self._resolved_type(store, retrieval_engine, assembler, None) == "qa"

    def test_request_overrides_stored_type(self, document_store, retrieval_engine, assembler):
        assert self._resolved_type(document_store, retrieval_engine, assembler, "qa") == "qa"

    def test_general_default(self, document_store, retrieval_engine, assembler):
        assert self._resolved_type(document_store, retrieval_engine, assembler, None) == "general"


def test_markers_inside_sentences(document_store, retrieval_engine, llm_client):
    retrieval_engine.retrieve.return_value = [
        scored("Paris [Page 3] is the capital of France.", 3),
        scored("[Page 7] It has a population of over 2 million [Page 7].", 7),
    ]
    service = ChatService(document_store, retrieval_engine, AnswerAssembler(llm_client))

    result = service.chat("capital of France", PDF_ID)

    assert result.page_references == [3, 7]
    prompt = llm_client.generate.call_args.kwargs["prompt"]
    context = prompt.split("DOCUMENT CONTENT:")[1].split("INSTRUCTIONS:")[0].strip()
    assert context == "Paris is the capital of France."
