from psycopg.rows import dict_row

from docextract.database.connection import get_connection
from docextract.processor.exceptions import DocumentNotFoundError
from docextract.processor.models import Document, DocumentStatus


class DocumentsRepository:
    """Database operations for the documents table."""

    def find_by_id(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, user_id, filename, file_url, file_type, file_size,
                           status, error_message, source_id, created_at
                    FROM documents
                    WHERE id = %s::uuid
                    """,
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")

        return Document(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            filename=row["filename"] or "",
            file_url=row["file_url"] or "",
            file_type=row["file_type"] or "",
            file_size=int(row["file_size"] or 0),
            status=DocumentStatus(row["status"]),
            error_message=row["error_message"],
            source_id=row["source_id"],
            created_at=row["created_at"],
        )

    def mark_processing(self, document_id: str) -> None:
        """Move a document to 'processing' and clear any previous error."""
        self._update_status(document_id, DocumentStatus.PROCESSING, None)

    def mark_completed(self, document_id: str) -> None:
        self._update_status(document_id, DocumentStatus.COMPLETED, None)

    def mark_error(self, document_id: str, error_message: str) -> None:
        self._update_status(document_id, DocumentStatus.ERROR, error_message)

    def _update_status(
        self,
        document_id: str,
        status: DocumentStatus,
        error_message: str | None,
    ) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET status = %s,
                        error_message = %s
                    WHERE id = %s::uuid
                    """,
                    (status.value, error_message, document_id),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()
