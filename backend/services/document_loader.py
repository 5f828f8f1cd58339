"""Document loading service for PDF processing."""
import logging
import re
import fitz  # PyMuPDF

from models.document import Document, Page, GENERAL_DOCUMENT, QA_DOCUMENT

logger = logging.getLogger(__name__)

# Lines such as "Q: ...", "Question: ...", "Q1. ..."
QUESTION_LINE_PATTERN = re.compile(r"^\s*(?:q\d*\s*[:.)]|question\s*\d*\s*[:.)])", re.IGNORECASE)
MIN_QUESTION_LINES = 3


class DocumentLoader:
    """Loads and extracts text from uploaded PDF files."""

    def load_pdf(self, filepath: str, filename: str) -> Document:
        """
        Load a single PDF file and extract text page-by-page.

        Args:
            filepath: Full path to PDF file
            filename: Original name of the uploaded file

        Returns:
            Document object with extracted text

        Raises:
            ValueError: If the PDF has no pages
        """
        try:
            pdf_document = fitz.open(filepath)
            pages = []

            for page_num in range(len(pdf_document)):
                page = pdf_document[page_num]
                text = page.get_text()

                pages.append(Page(
                    page_number=page_num + 1,  # 1-indexed
                    text=text,
                    word_count=len(text.split())
                ))

            pdf_document.close()
        except Exception as e:
            logger.error(f"Failed to load PDF {filename}: {str(e)}")
            raise

        if not pages:
            raise ValueError(f"No content extracted from PDF {filename}")

        logger.info(f"Loaded {filename}: {len(pages)} pages")
        return Document(
            filename=filename,
            pages=pages,
            total_pages=len(pages)
        )


def detect_document_type(document: Document) -> str:
    """
    Classify a document as a question/answer collection or general text.

    Args:
        document: Loaded document

    Returns:
        "qa" when enough lines look like numbered or labelled questions,
        "general" otherwise
    """
    question_lines = sum(
        1
        for page in document.pages
        for line in page.text.splitlines()
        if QUESTION_LINE_PATTERN.match(line)
    )
    document_type = QA_DOCUMENT if question_lines >= MIN_QUESTION_LINES else GENERAL_DOCUMENT
    logger.debug(f"Detected {document_type} document ({question_lines} question lines)")
    return document_type
