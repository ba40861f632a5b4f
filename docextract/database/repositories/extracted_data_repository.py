from typing import Any

from psycopg.types.json import Jsonb

from docextract.database.connection import get_connection


class ExtractedDataRepository:
    """Database operations for the extracted_data table.

    Rows are append-only: reprocessing a document inserts a new row.
    """

    def insert(
        self,
        document_id: str,
        content: dict[str, Any],
        markdown_content: str,
        csv_data: str,
    ) -> str:
        """Insert one extraction result and return the new row ID."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO extracted_data (document_id, content, markdown_content, csv_data)
                    VALUES (%s::uuid, %s, %s, %s)
                    RETURNING id
                    """,
                    (document_id, Jsonb(content), markdown_content, csv_data),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert into extracted_data returned no id for {document_id}")
        return str(row[0])
