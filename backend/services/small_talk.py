"""
Small-talk classifier for the chat endpoint.

Conversational inputs (greetings, thanks, "who are you") are answered from a
declarative pattern table and never reach retrieval or generation.
"""
from dataclasses import dataclass
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

# Trailing punctuation and whitespace tolerated after a small-talk phrase
_END = r"[\s.!?,]*$"


@dataclass
class SmallTalkResult:
    """
    Outcome of small-talk classification.

    Attributes:
        matched: Whether the query is small talk
        intent: Name of the matched pattern ("" when unmatched)
        response: Canned reply to send instead of a document answer
    """
    matched: bool
    intent: str = ""
    response: Optional[str] = None


@dataclass(frozen=True)
class SmallTalkPattern:
    intent: str
    pattern: "re.Pattern[str]"
    template: str


class SmallTalkClassifier:
    """Ordered pattern table; the first matching entry wins."""

    PATTERNS = (
        SmallTalkPattern(
            intent="greeting",
            pattern=re.compile(rf"^(?:hi|hello|hey|greetings){_END}", re.IGNORECASE),
            template="Hello! I'm here to help you understand your PDF documents. "
                     "What would you like to know about your document?",
        ),
        SmallTalkPattern(
            intent="how_are_you",
            pattern=re.compile(rf"^how are you(?: doing)?(?: today)?{_END}", re.IGNORECASE),
            template="I'm doing well, thank you! Ready to help you explore your document. "
                     "What would you like to know?",
        ),
        SmallTalkPattern(
            intent="thanks",
            pattern=re.compile(rf"^(?:thanks|thank you|thx)(?: so much| a lot)?{_END}", re.IGNORECASE),
            template="You're welcome! Is there anything else you'd like to know about your document?",
        ),
        SmallTalkPattern(
            intent="time_of_day",
            pattern=re.compile(rf"^(good (?:morning|afternoon|evening)){_END}", re.IGNORECASE),
            template="{greeting}! How can I help you with your document today?",
        ),
        SmallTalkPattern(
            intent="whats_up",
            pattern=re.compile(rf"^(?:what'?s up|sup){_END}", re.IGNORECASE),
            template="Just ready to help you understand your documents! What would you like to know?",
        ),
        SmallTalkPattern(
            intent="who_are_you",
            pattern=re.compile(rf"^who are you{_END}", re.IGNORECASE),
            template="I'm your PDF assistant, here to help you understand and explore the content "
                     "of your documents. You can ask me questions about anything in your PDF!",
        ),
    )

    def classify(self, query: str) -> SmallTalkResult:
        """
        Match a raw user query against the small-talk table.

        Args:
            query: Raw user query

        Returns:
            SmallTalkResult with the canned response when matched
        """
        if not query or not query.strip():
            return SmallTalkResult(matched=False)

        text = query.strip()
        for entry in self.PATTERNS:
            match = entry.pattern.match(text)
            if match:
                logger.info(f"Small talk detected ({entry.intent}): {text[:50]}")
                return SmallTalkResult(
                    matched=True,
                    intent=entry.intent,
                    response=self._render(entry, match),
                )

        return SmallTalkResult(matched=False)

    @staticmethod
    def _render(entry: SmallTalkPattern, match: "re.Match[str]") -> str:
        if match.groups():
            return entry.template.format(greeting=match.group(1).capitalize())
        return entry.template
