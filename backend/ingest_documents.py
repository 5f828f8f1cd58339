"""
Document Ingestion Script for the PDF Chat RAG backend.

Indexes a local PDF outside the upload endpoint:
1. Loads the PDF and detects its document type
2. Registers it in the document store
3. Chunks it with "[Page N]" markers
4. Embeds the chunks and stores them in Supabase pgvector

Usage:
    python ingest_documents.py path/to/file.pdf [--pdf-id ID] [--replace]
"""
import argparse
import os
import sys
import logging
import secrets
from datetime import datetime, timezone
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from models.document import DocumentRecord
from services.document_loader import DocumentLoader, detect_document_type
from services.document_store import create_document_store
from services.chunking_engine import ChunkingEngine
from services.embedding_model import EmbeddingModel
from services.vector_store import VectorStore
from services.indexing_pipeline import IndexingPipeline, IndexingError

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Index a PDF for chat")
    parser.add_argument("pdf_path", help="Path to the PDF file")
    parser.add_argument("--pdf-id", help="Identifier to index under (random if omitted)")
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Delete existing chunks for --pdf-id before indexing"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main ingestion process."""
    args = parse_args(argv)

    if not os.path.exists(args.pdf_path):
        logger.error(f"File not found at path: {args.pdf_path}")
        return 1

    pdf_id = args.pdf_id or secrets.token_hex(16)
    filename = os.path.basename(args.pdf_path)

    try:
        logger.info("=" * 60)
        logger.info(f"Indexing {filename} as {pdf_id}")
        logger.info("=" * 60)

        document = DocumentLoader().load_pdf(args.pdf_path, filename)
        document_type = detect_document_type(document)
        logger.info(f"✓ Loaded {document.total_pages} pages ({document_type})")

        embedding_model = EmbeddingModel()
        vector_store = VectorStore(embedding_model)

        if args.replace:
            vector_store.delete_document(pdf_id)
            logger.info("✓ Removed existing chunks")

        document_store = create_document_store()
        if document_store.get(pdf_id) is None:
            document_store.put(pdf_id, DocumentRecord(
                pdf_id=pdf_id,
                filename=filename,
                uploaded_at=datetime.now(timezone.utc),
                document_type=document_type,
                file_path=os.path.abspath(args.pdf_path)
            ))

        pipeline = IndexingPipeline(ChunkingEngine(), vector_store)
        chunk_count = pipeline.index_document(pdf_id, document)

        logger.info(f"✓ Stored {chunk_count} chunks ({vector_store.count(pdf_id)} in database)")
        logger.info(f"Chat with it using pdf_id={pdf_id}")
        return 0

    except KeyboardInterrupt:
        logger.warning("Ingestion interrupted by user")
        return 1
    except (IndexingError, ValueError, RuntimeError) as e:
        logger.error(f"Ingestion failed: {str(e)}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
