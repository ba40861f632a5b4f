from psycopg.types.json import Jsonb

from docextract.database.connection import get_connection
from docextract.database.models import AuditLogRecord


class AuditLogRepository:
    """Append-only writes to the audit_logs table."""

    def insert(self, record: AuditLogRecord) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO audit_logs (
                        event_type, severity, user_id, user_email, ip_address,
                        user_agent, resource, resource_id, action, status,
                        error_message, metadata
                    )
                    VALUES (%s, %s, %s::uuid, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (
                        record.event_type,
                        record.severity,
                        record.user_id,
                        record.user_email,
                        record.ip_address,
                        record.user_agent,
                        record.resource,
                        record.resource_id,
                        record.action,
                        record.status,
                        record.error_message,
                        Jsonb(record.metadata) if record.metadata is not None else None,
                    ),
                )
            conn.commit()
