"""
Lexical relevance ranking of retrieved text against a user query.

Sentences are scored by keyword overlap, exact phrase containment and
definitional phrasing, then the best ones are stitched into a bounded
context window for the generation prompt.
"""
import logging
import re
from typing import List

from config import MAX_CONTEXT_SENTENCES, MIN_SENTENCE_LENGTH, MIN_KEYWORD_LENGTH
from models.chunk import ScoredSentence
from models.document import GENERAL_DOCUMENT, QA_DOCUMENT

logger = logging.getLogger(__name__)

SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]")
KEYWORD_PATTERN = re.compile(r"\w+")


class RelevanceRanker:
    """Scores sentences against a query and keeps the top K."""

    KEYWORD_SCORE = 3
    PHRASE_SCORE = 10
    DEFINITION_SCORE = 15

    DEFINITION_MARKERS = ("defined as", "refers to")

    def __init__(
        self,
        max_sentences: int = MAX_CONTEXT_SENTENCES,
        min_sentence_length: int = MIN_SENTENCE_LENGTH,
        min_keyword_length: int = MIN_KEYWORD_LENGTH
    ):
        """
        Initialize the ranker.

        Args:
            max_sentences: Upper bound K on sentences in the context window
            min_sentence_length: Candidates not longer than this are noise
            min_keyword_length: Query words shorter than this are not scored
        """
        if max_sentences <= 0:
            raise ValueError("max_sentences must be positive")

        self.max_sentences = max_sentences
        self.min_sentence_length = min_sentence_length
        self.min_keyword_length = min_keyword_length

    def split_sentences(self, text: str) -> List[str]:
        """Split on terminal punctuation and drop fragments too short to carry content."""
        candidates = (part.strip() for part in SENTENCE_SPLIT_PATTERN.split(text))
        return [c for c in candidates if len(c) > self.min_sentence_length]

    def extract_keywords(self, query: str) -> List[str]:
        """Lowercase, deduplicated query words long enough to be meaningful."""
        keywords = []
        for word in KEYWORD_PATTERN.findall(query.lower()):
            if len(word) >= self.min_keyword_length and word not in keywords:
                keywords.append(word)
        return keywords

    @staticmethod
    def normalize_query(query: str) -> str:
        """Lowercased query without surrounding whitespace or trailing ?!. marks."""
        return query.lower().strip().rstrip("?!.").strip()

    def score_sentence(self, sentence: str, query: str) -> int:
        """
        Score one sentence against the query.

        +3 per keyword contained, +10 for the whole query as a substring,
        +15 if the sentence reads like a definition.
        """
        lower_sentence = sentence.lower()
        phrase = self.normalize_query(query)
        score = 0

        for keyword in self.extract_keywords(query):
            if keyword in lower_sentence:
                score += self.KEYWORD_SCORE

        if phrase and phrase in lower_sentence:
            score += self.PHRASE_SCORE

        if self._is_definition(lower_sentence, phrase):
            score += self.DEFINITION_SCORE

        return score

    def _is_definition(self, lower_sentence: str, phrase: str) -> bool:
        if phrase and (
            lower_sentence.startswith(f"{phrase} is")
            or lower_sentence.startswith(f"{phrase} are")
            or f"is {phrase}" in lower_sentence
            or f"are {phrase}" in lower_sentence
        ):
            return True
        return any(marker in lower_sentence for marker in self.DEFINITION_MARKERS)

    def score_sentences(self, text: str, query: str) -> List[ScoredSentence]:
        """Score every candidate sentence, keeping document order."""
        return [
            ScoredSentence(sentence=sentence, score=self.score_sentence(sentence, query), position=idx)
            for idx, sentence in enumerate(self.split_sentences(text))
        ]

    def rank(self, cleaned_text: str, query: str, document_type: str = GENERAL_DOCUMENT) -> str:
        """
        Build the context window for a query.

        Args:
            cleaned_text: Output of the context cleaner
            query: User question
            document_type: "qa" pulls in the sentence after each match

        Returns:
            Top sentences joined with ". " and a trailing period, or "" when
            no sentence scored above zero
        """
        scored = self.score_sentences(cleaned_text, query)
        relevant = [s for s in scored if s.score > 0]
        # sorted() is stable, so equal scores keep document order
        relevant = sorted(relevant, key=lambda s: -s.score)

        if not relevant:
            logger.info(f"No relevant sentences for query: {query[:50]}")
            return ""

        if document_type == QA_DOCUMENT:
            selected = self._with_followers(relevant, scored)
        else:
            selected = [s.sentence for s in relevant[:self.max_sentences]]

        logger.debug(
            f"Ranked {len(scored)} sentences, kept {len(selected)} "
            f"(top score: {relevant[0].score})"
        )
        return ". ".join(selected) + "."

    def _with_followers(self, relevant: List[ScoredSentence], scored: List[ScoredSentence]) -> List[str]:
        """Interleave each ranked question with the answer sentence after it."""
        taken = set()
        selected = []
        for item in relevant:
            for position in (item.position, item.position + 1):
                if len(selected) >= self.max_sentences:
                    return selected
                if position < len(scored) and position not in taken:
                    taken.add(position)
                    selected.append(scored[position].sentence)
        return selected
