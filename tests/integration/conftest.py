import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from docextract.config.settings import Settings
from docextract.database.connection import close_pool, get_connection, init_pool

SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    id uuid PRIMARY KEY,
    user_id uuid NOT NULL,
    filename text,
    file_url text,
    file_type text,
    file_size bigint,
    status text NOT NULL DEFAULT 'pending',
    error_message text,
    source_id text,
    created_at timestamptz NOT NULL DEFAULT NOW()
);
CREATE TABLE IF NOT EXISTS extracted_data (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    document_id uuid NOT NULL REFERENCES documents (id) ON DELETE CASCADE,
    content jsonb,
    markdown_content text,
    csv_data text,
    created_at timestamptz NOT NULL DEFAULT NOW()
);
CREATE TABLE IF NOT EXISTS user_settings (
    user_id uuid PRIMARY KEY,
    notion_api_key text,
    default_source_id text,
    updated_at timestamptz NOT NULL DEFAULT NOW()
);
CREATE TABLE IF NOT EXISTS audit_logs (
    id bigserial PRIMARY KEY,
    event_type text NOT NULL,
    severity text NOT NULL,
    user_id uuid,
    user_email text,
    ip_address text,
    user_agent text,
    resource text,
    resource_id text,
    action text NOT NULL,
    status text NOT NULL,
    error_message text,
    metadata jsonb,
    created_at timestamptz NOT NULL DEFAULT NOW()
);
"""


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docextract_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run integration tests")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, str]], None, None]:
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "documents":
                    cur.execute("DELETE FROM documents WHERE id = %s::uuid", (row_id,))
                elif table == "user_settings":
                    cur.execute("DELETE FROM user_settings WHERE user_id = %s::uuid", (row_id,))
                elif table == "audit_logs":
                    cur.execute("DELETE FROM audit_logs WHERE user_id = %s::uuid", (row_id,))
        conn.commit()


@pytest.fixture
def seed_document(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, str]],
    user_id: str,
) -> str:
    document_id = str(uuid.uuid4())
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO documents (id, user_id, filename, file_url, file_type, file_size, source_id)
            VALUES (%s::uuid, %s::uuid, %s, %s, %s, %s, %s)
            """,
            (
                document_id,
                user_id,
                "invoice.pdf",
                f"https://project.supabase.co/storage/v1/object/public/documents/{user_id}/invoice.pdf",
                "application/pdf",
                2048,
                "abc123",
            ),
        )
    db_conn.commit()
    integration_cleanup.append(("documents", document_id))
    return document_id
