"""Document metadata stores keyed by pdf id."""
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from supabase import create_client, Client

from models.document import DocumentRecord, GENERAL_DOCUMENT
from config import SUPABASE_URL, SUPABASE_KEY

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """
    Append-only key-value store of uploaded document records.

    Records are written once at upload and only read afterwards, so the chat
    path can share a store across requests without locking.
    """

    @abstractmethod
    def get(self, pdf_id: str) -> Optional[DocumentRecord]:
        """Return the record for a pdf id, or None if unknown."""

    @abstractmethod
    def put(self, pdf_id: str, record: DocumentRecord) -> None:
        """Store a new record. Raises ValueError if the id already exists."""

    @abstractmethod
    def list_records(self) -> List[DocumentRecord]:
        """All records, oldest first."""

    def __contains__(self, pdf_id: str) -> bool:
        return self.get(pdf_id) is not None


class InMemoryDocumentStore(DocumentStore):
    """Process-local store used when Supabase is not configured."""

    def __init__(self):
        self._records: Dict[str, DocumentRecord] = {}
        self._lock = threading.Lock()

    def get(self, pdf_id: str) -> Optional[DocumentRecord]:
        return self._records.get(pdf_id)

    def put(self, pdf_id: str, record: DocumentRecord) -> None:
        with self._lock:
            if pdf_id in self._records:
                raise ValueError(f"Document {pdf_id} already exists")
            self._records[pdf_id] = record
        logger.info(f"Stored document record {pdf_id} ({record.filename})")

    def list_records(self) -> List[DocumentRecord]:
        return sorted(self._records.values(), key=lambda r: r.uploaded_at)


class SupabaseDocumentStore(DocumentStore):
    """Manages document records in a Supabase PostgreSQL table."""

    def __init__(
        self,
        supabase_url: str = SUPABASE_URL,
        supabase_key: str = SUPABASE_KEY,
        table_name: str = "documents"
    ):
        """
        Initialize the store with a Supabase client.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Table holding one row per uploaded PDF

        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

        self.table_name = table_name
        self.client: Client = create_client(supabase_url, supabase_key)
        logger.info(f"SupabaseDocumentStore initialized with table: {table_name}")

    def get(self, pdf_id: str) -> Optional[DocumentRecord]:
        try:
            result = self.client.table(self.table_name).select("*").eq("pdf_id", pdf_id).execute()
        except Exception as e:
            error_msg = f"Failed to load document {pdf_id}: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

        if not result.data:
            return None
        return self._to_record(result.data[0])

    def put(self, pdf_id: str, record: DocumentRecord) -> None:
        if self.get(pdf_id) is not None:
            raise ValueError(f"Document {pdf_id} already exists")

        try:
            self.client.table(self.table_name).insert({
                "pdf_id": pdf_id,
                "filename": record.filename,
                "uploaded_at": record.uploaded_at.isoformat(),
                "document_type": record.document_type,
                "file_path": record.file_path
            }).execute()
            logger.info(f"Stored document record {pdf_id} ({record.filename})")
        except Exception as e:
            error_msg = f"Failed to store document {pdf_id}: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

    def list_records(self) -> List[DocumentRecord]:
        try:
            result = self.client.table(self.table_name).select("*").order("uploaded_at", desc=False).execute()
        except Exception as e:
            error_msg = f"Failed to list documents: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

        return [self._to_record(row) for row in (result.data or [])]

    def _to_record(self, row: dict) -> DocumentRecord:
        return DocumentRecord(
            pdf_id=row["pdf_id"],
            filename=row["filename"],
            uploaded_at=self._parse_timestamp(row["uploaded_at"]),
            document_type=row.get("document_type") or GENERAL_DOCUMENT,
            file_path=row.get("file_path")
        )

    @staticmethod
    def _parse_timestamp(timestamp_str: str) -> datetime:
        """
        Parse timestamp string from Supabase, handling various formats.

        Supabase can return timestamps with more than six fractional digits,
        which datetime.fromisoformat() rejects on older interpreters.
        """
        timestamp_str = timestamp_str.replace("Z", "+00:00")

        if "." in timestamp_str:
            head, fraction = timestamp_str.split(".", 1)
            tz = ""
            for sign in ("+", "-"):
                if sign in fraction:
                    fraction, tz_rest = fraction.split(sign, 1)
                    tz = sign + tz_rest
                    break
            fraction = fraction[:6].ljust(6, "0")
            timestamp_str = f"{head}.{fraction}{tz}"

        return datetime.fromisoformat(timestamp_str)


def create_document_store() -> DocumentStore:
    """Supabase-backed store when credentials are set, in-memory otherwise."""
    if SUPABASE_URL and SUPABASE_KEY:
        return SupabaseDocumentStore()
    logger.warning("Supabase not configured, document records are kept in memory")
    return InMemoryDocumentStore()
