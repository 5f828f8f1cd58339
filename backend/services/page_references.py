"""Page marker extraction for retrieved chunk text."""
import re
from typing import List

PAGE_MARKER_PATTERN = re.compile(r"\[Page (\d+)\]")


def extract_page_numbers(content: str) -> List[int]:
    """
    Collect the page numbers cited by inline ``[Page N]`` markers.

    Args:
        content: Concatenated text of all retrieved chunks

    Returns:
        Unique positive page numbers in ascending order (empty if no markers)
    """
    pages = {int(match) for match in PAGE_MARKER_PATTERN.findall(content)}
    return sorted(page for page in pages if page > 0)
