"""Answer assembly around the single generation call of a chat request."""
from dataclasses import dataclass
import logging
from typing import List, Optional

from config import MIN_ANSWER_LENGTH
from models.depth import DepthLevel, DepthProfile, get_depth_profile
from models.document import GENERAL_DOCUMENT, QA_DOCUMENT
from services.llm_client import LLMClient, LLMClientError, LLMError

logger = logging.getLogger(__name__)

NOT_FOUND_ANSWER = (
    "I couldn't find specific information about this in the document. "
    "Please try asking about a different topic or rephrasing your question."
)


@dataclass
class AnswerResult:
    """
    Final answer text plus how it was produced.

    Attributes:
        text: Answer returned to the caller
        retried: Whether the degenerate-answer retry was issued
        fallback: Whether generation failed and a template was used
        model_used: Model that was asked (None when no client is configured)
    """
    text: str
    retried: bool = False
    fallback: bool = False
    model_used: Optional[str] = None


class AnswerAssembler:
    """Builds the generation prompt, repairs weak answers once, and cites pages."""

    # Answers containing this are "not found" replies and get no citation
    NOT_FOUND_PHRASE = "i couldn't find"

    # Phrases that mark an answer as a refusal (matched case-insensitively)
    REFUSAL_PHRASES = [
        NOT_FOUND_PHRASE,
        "the document doesn't contain",
    ]

    def __init__(
        self,
        llm_client: Optional[LLMClient],
        min_answer_length: int = MIN_ANSWER_LENGTH
    ):
        """
        Initialize the assembler.

        Args:
            llm_client: Groq client, or None when no API key is configured
                (every request then gets the templated fallback)
            min_answer_length: Answers shorter than this are retried once
        """
        self.llm_client = llm_client
        self.min_answer_length = min_answer_length

    @staticmethod
    def build_citation(page_references: List[int]) -> str:
        """Sentence naming the cited pages, or "" when there are none."""
        if not page_references:
            return ""
        pages = ", ".join(str(page) for page in page_references)
        return f"This information can be found on pages {pages}."

    @staticmethod
    def build_prompt(
        query: str,
        context: str,
        profile: DepthProfile,
        citation: str,
        document_type: str = GENERAL_DOCUMENT
    ) -> str:
        """
        Build the grounded answer prompt.

        Args:
            query: User question
            context: Ranked context window (may be empty)
            profile: Depth profile providing the depth instruction
            citation: Page citation sentence (may be empty)
            document_type: "qa" adds a hint about question/answer layouts

        Returns:
            Complete prompt string
        """
        qa_hint = ""
        if document_type == QA_DOCUMENT:
            qa_hint = (
                "\n- The document is a list of questions and answers. If one of its "
                "questions matches the user's question, answer from the answer that follows it."
            )

        return f"""You are a helpful assistant that provides accurate answers based on document content.

USER QUESTION: "{query}"

DOCUMENT CONTENT:
{context}

INSTRUCTIONS:
1. Answer the user's question in a natural, conversational tone
2. Use ONLY the information from the provided document content
3. {profile.instruction}
4. If the document doesn't contain the answer, say: "{NOT_FOUND_ANSWER}"
5. Format your response as a clear, well-structured answer
6. Do not mention that you're "based on the document" - just provide the answer directly
7. At the end, mention the page references like this: "{citation}"

IMPORTANT:
- Do not just copy text from the document. Synthesize the information into a coherent answer.
- If the document content doesn't directly answer the question, admit it rather than making up an answer.{qa_hint}

Please provide your answer:"""

    @staticmethod
    def build_retry_prompt(query: str, context: str) -> str:
        """Looser prompt used once when the first answer was degenerate."""
        return f"""The user asked: "{query}"

Here is the relevant content from the document:
{context}

Even if the information is not perfect, try to provide the most helpful answer possible based on what's available.
If you can infer something from the context, do so but clearly say that it is an inference.
If there's truly nothing relevant, say: "I couldn't find specific information about this in the document. The document seems to focus on other topics. Please try asking about something else."
"""

    def is_degenerate(self, text: str) -> bool:
        """Too short to be an answer, or a refusal."""
        if len(text.strip()) < self.min_answer_length:
            return True
        lower_text = text.lower()
        return any(phrase in lower_text for phrase in self.REFUSAL_PHRASES)

    def is_not_found(self, text: str) -> bool:
        return self.NOT_FOUND_PHRASE in text.lower()

    @staticmethod
    def build_fallback(query: str, citation: str) -> str:
        """Templated answer used when generation itself fails."""
        if citation:
            return f'I found some information about "{query}" in the document. {citation}'
        return (
            f'I couldn\'t find specific information about "{query}" in the document. '
            "Please try asking about a different topic."
        )

    def assemble(
        self,
        query: str,
        context: str,
        page_references: List[int],
        depth: DepthLevel = DepthLevel.NORMAL,
        document_type: str = GENERAL_DOCUMENT
    ) -> AnswerResult:
        """
        Produce the answer for one chat request.

        Issues one generation call, and at most one retry when the answer is
        degenerate. Generation failures never propagate: a templated answer is
        returned instead.

        Args:
            query: User question
            context: Ranked context window
            page_references: Sorted unique pages cited by the retrieved chunks
            depth: Requested answer depth
            document_type: Document type from upload or the request

        Returns:
            AnswerResult with the final text
        """
        profile = get_depth_profile(depth)
        citation = self.build_citation(page_references)
        retried = False

        try:
            prompt = self.build_prompt(query, context, profile, citation, document_type)
            text = self._generate(profile, prompt)

            if self.is_degenerate(text):
                logger.info(f"Degenerate answer ({len(text.strip())} chars), retrying once")
                retried = True
                text = self._generate(profile, self.build_retry_prompt(query, context))

        except LLMClientError as e:
            logger.warning(
                f"Generation failed, using fallback answer: {e.error.code}",
                extra={"error_code": e.error.code}
            )
            return AnswerResult(
                text=self.build_fallback(query, citation),
                retried=retried,
                fallback=True,
                model_used=profile.model if self.llm_client else None
            )

        if citation and citation not in text and not self.is_not_found(text):
            text = f"{text} {citation}"

        return AnswerResult(text=text, retried=retried, model_used=profile.model)

    def _generate(self, profile: DepthProfile, prompt: str) -> str:
        if self.llm_client is None:
            raise LLMClientError(LLMError(
                code="NOT_CONFIGURED",
                message="GROQ_API_KEY is not set",
                details={"model": profile.model}
            ))

        # Groq exposes no top-k sampling parameter; profile.top_k is not sent
        response = self.llm_client.generate(
            model=profile.model,
            prompt=prompt,
            max_tokens=profile.max_tokens,
            temperature=profile.temperature,
            top_p=profile.top_p
        )
        return response.text
