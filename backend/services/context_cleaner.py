"""Noise removal for concatenated chunk text before ranking."""
import re

from services.page_references import PAGE_MARKER_PATTERN

# Ordered (pattern, replacement) passes
CLEANING_RULES = [
    (PAGE_MARKER_PATTERN, ""),               # page markers
    (re.compile(r"\.{10,}"), ""),            # dot leaders from tables of contents
    (re.compile(r"\s+"), " "),               # whitespace runs
    (re.compile(r"\bundefined\b"), ""),      # placeholder left by text extraction
    (re.compile(r"[^\w\s.,!?;:'\"-]"), ""),  # everything outside the safelist
]


def _clean_once(content: str) -> str:
    for pattern, replacement in CLEANING_RULES:
        content = pattern.sub(replacement, content)
    return content.strip()


def clean_context(content: str) -> str:
    """
    Strip markers, filler and unsafe characters from retrieved text.

    A removal can expose new noise (a double space, a dot run joined across a
    stripped symbol), so passes repeat until the text stops changing.

    Args:
        content: Raw concatenated chunk text

    Returns:
        Cleaned single-line text
    """
    cleaned = _clean_once(content)
    while True:
        again = _clean_once(cleaned)
        if again == cleaned:
            return cleaned
        cleaned = again
