"""
Chat pipeline for questions about an uploaded PDF.

Each request runs to completion on its own:
classify small talk -> retrieve chunks -> extract pages, clean, rank ->
generate (with at most one retry) -> respond.
"""
from dataclasses import dataclass, field
import logging
from typing import List, Optional

from models.depth import DepthLevel
from models.document import GENERAL_DOCUMENT
from services.answer_assembler import AnswerAssembler
from services.context_cleaner import clean_context
from services.document_store import DocumentStore
from services.page_references import extract_page_numbers
from services.relevance_ranker import RelevanceRanker
from services.retrieval_engine import RetrievalEngine
from services.small_talk import SmallTalkClassifier

logger = logging.getLogger(__name__)


class ChatRequestError(Exception):
    """Client-side problem with a chat request (maps to HTTP 400)."""


@dataclass
class ChatResult:
    """Answer returned for one chat request."""
    query: str
    answer: str
    page_references: List[int] = field(default_factory=list)
    matched_chunk_count: int = 0
    small_talk: bool = False


class ChatService:
    """Runs the retrieval-augmented chat flow for one document."""

    def __init__(
        self,
        document_store: DocumentStore,
        retrieval_engine: RetrievalEngine,
        assembler: AnswerAssembler,
        ranker: Optional[RelevanceRanker] = None,
        classifier: Optional[SmallTalkClassifier] = None
    ):
        self.document_store = document_store
        self.retrieval_engine = retrieval_engine
        self.assembler = assembler
        self.ranker = ranker or RelevanceRanker()
        self.classifier = classifier or SmallTalkClassifier()

    @staticmethod
    def not_found_answer(query: str) -> str:
        return (
            f'I couldn\'t find information about "{query}" in this document. '
            "Please try asking about something else or check if you've uploaded the right document."
        )

    def chat(
        self,
        query: str,
        pdf_id: Optional[str],
        depth: DepthLevel = DepthLevel.NORMAL,
        document_type: Optional[str] = None
    ) -> ChatResult:
        """
        Answer a question about an uploaded document.

        Args:
            query: User question
            pdf_id: Identifier returned by the upload endpoint
            depth: Requested answer depth
            document_type: Overrides the type detected at upload

        Returns:
            ChatResult with answer text, cited pages and matched chunk count

        Raises:
            ChatRequestError: If the query is blank or the pdf id is unknown
            RuntimeError: If retrieval fails
        """
        if not query or not query.strip():
            raise ChatRequestError("Query parameter is required")

        record = self.document_store.get(pdf_id) if pdf_id else None
        if record is None:
            raise ChatRequestError("Valid PDF ID is required")

        small_talk = self.classifier.classify(query)
        if small_talk.matched:
            return ChatResult(query=query, answer=small_talk.response, small_talk=True)

        results = self.retrieval_engine.retrieve(pdf_id, query)
        if not results:
            logger.info(f"No chunks retrieved for query: {query[:100]}", extra={"pdf_id": pdf_id})
            return ChatResult(query=query, answer=self.not_found_answer(query))

        relevant_content = " ".join(result.chunk.text for result in results)
        page_references = extract_page_numbers(relevant_content)
        resolved_type = document_type or record.document_type or GENERAL_DOCUMENT
        context = self.ranker.rank(clean_context(relevant_content), query, resolved_type)

        answer = self.assembler.assemble(
            query=query,
            context=context,
            page_references=page_references,
            depth=depth,
            document_type=resolved_type
        )

        logger.info(
            f"Answered query over {len(results)} chunks "
            f"(retried={answer.retried}, fallback={answer.fallback})",
            extra={
                "pdf_id": pdf_id,
                "depth": DepthLevel(depth).value,
                "document_type": resolved_type,
                "chunks_retrieved": len(results),
                "page_references": page_references,
            }
        )

        return ChatResult(
            query=query,
            answer=answer.text,
            page_references=page_references,
            matched_chunk_count=len(results)
        )
