"""Unit tests for page marker extraction."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import re

import pytest
from services.page_references import extract_page_numbers


class TestExtractPageNumbers:
    """Test suite for extract_page_numbers."""

    def test_no_markers_returns_empty_list(self):
        assert extract_page_numbers("Plain text without any citation.") == []
        assert extract_page_numbers("") == []

    def test_repeated_markers_are_deduplicated(self):
        content = "[Page 7] It has a population of over 2 million [Page 7]."
        assert extract_page_numbers(content) == [7]

    def test_markers_are_sorted_ascending(self):
        content = "[Page 12] late. [Page 3] early. [Page 7] middle. [Page 3] again."
        assert extract_page_numbers(content) == [3, 7, 12]

    def test_markers_anywhere_in_text(self):
        content = "Paris [Page 3] is the capital of France. [Page 7] It has a population of over 2 million [Page 7]."
        assert extract_page_numbers(content) == [3, 7]

    def test_page_zero_is_not_a_valid_reference(self):
        assert extract_page_numbers("[Page 0] cover [Page 1] intro") == [1]

    def test_malformed_markers_are_ignored(self):
        content = "[page 4] [Page four] [Page 5 ] Page 6 [Page 8]"
        assert extract_page_numbers(content) == [8]

    @pytest.mark.parametrize("content", [
        "[Page 2][Page 1][Page 2][Page 10]",
        "intro [Page 99] body [Page 5] tail [Page 5][Page 42]",
        "no markers here",
    ])
    def test_output_is_strictly_ascending_subset_of_markers(self, content):
        pages = extract_page_numbers(content)
        cited = {int(n) for n in re.findall(r"\[Page (\d+)\]", content)}

        assert all(a < b for a, b in zip(pages, pages[1:]))
        assert set(pages) <= cited
