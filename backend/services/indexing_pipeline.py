"""Background indexing of uploaded PDFs into the vector store."""
import logging
import time
from typing import Callable, List

from models.chunk import Chunk
from models.document import Document
from services.chunking_engine import ChunkingEngine
from services.vector_store import VectorStore
from config import INDEX_BATCH_SIZE, INDEX_MAX_RETRIES, INDEX_RETRY_DELAY

logger = logging.getLogger(__name__)


class IndexingError(Exception):
    """Raised when a document could not be fully indexed."""

    def __init__(self, pdf_id: str, message: str):
        self.pdf_id = pdf_id
        super().__init__(message)


class IndexingPipeline:
    """Chunk a loaded document and store it in batches, retrying failed batches."""

    def __init__(
        self,
        chunking_engine: ChunkingEngine,
        vector_store: VectorStore,
        batch_size: int = INDEX_BATCH_SIZE,
        max_retries: int = INDEX_MAX_RETRIES,
        retry_delay: float = INDEX_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the pipeline.

        Args:
            chunking_engine: Splits pages into "[Page N]"-tagged chunks
            vector_store: Destination for embedded chunks
            batch_size: Chunks embedded and upserted per call
            max_retries: Attempts per batch before giving up
            retry_delay: Base delay in seconds, multiplied by the attempt number
            sleep: Sleep function (replaceable in tests)
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self.chunking_engine = chunking_engine
        self.vector_store = vector_store
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.sleep = sleep

    def index_document(self, pdf_id: str, document: Document) -> int:
        """
        Chunk and store one document.

        Args:
            pdf_id: Identifier the chunks are partitioned under
            document: Loaded PDF

        Returns:
            Number of chunks stored

        Raises:
            IndexingError: If the document has no text or a batch keeps failing
        """
        chunks = self.chunking_engine.chunk_document(document, pdf_id)
        if not chunks:
            raise IndexingError(pdf_id, f"No text could be chunked from {document.filename}")

        total_batches = (len(chunks) + self.batch_size - 1) // self.batch_size
        for start in range(0, len(chunks), self.batch_size):
            batch_num = start // self.batch_size + 1
            logger.info(f"Processing batch {batch_num}/{total_batches} for {pdf_id}")
            self._store_batch(pdf_id, chunks[start:start + self.batch_size])

        logger.info(f"Indexed {len(chunks)} chunks for {document.filename}", extra={"pdf_id": pdf_id})
        return len(chunks)

    def _store_batch(self, pdf_id: str, batch: List[Chunk]) -> None:
        for attempt in range(1, self.max_retries + 1):
            try:
                self.vector_store.add_chunks(batch)
                return
            except RuntimeError as e:
                logger.error(f"Error storing batch (attempt {attempt}/{self.max_retries}): {e}")
                if attempt == self.max_retries:
                    raise IndexingError(
                        pdf_id,
                        f"Batch failed after {self.max_retries} attempts: {e}"
                    ) from e
                self.sleep(self.retry_delay * attempt)

    def run(self, pdf_id: str, document: Document) -> None:
        """Entry point for background tasks: index and log, never raise."""
        try:
            self.index_document(pdf_id, document)
        except IndexingError as e:
            logger.error(f"Indexing failed for {e.pdf_id}: {e}", extra={"pdf_id": e.pdf_id})
        except Exception as e:
            logger.error(f"Unexpected indexing error for {pdf_id}: {e}", exc_info=True)
