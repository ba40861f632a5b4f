from psycopg.rows import dict_row

from docextract.database.connection import get_connection
from docextract.database.models import UserSettingsRecord


class UserSettingsRepository:
    """Database operations for the user_settings table."""

    def find_by_user_id(self, user_id: str) -> UserSettingsRecord | None:
        """Return the user's settings row, or None if the user never saved any."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT user_id, notion_api_key, default_source_id, updated_at
                    FROM user_settings
                    WHERE user_id = %s::uuid
                    """,
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return UserSettingsRecord(
            user_id=str(row["user_id"]),
            notion_api_key=row["notion_api_key"],
            default_source_id=row["default_source_id"],
            updated_at=row["updated_at"],
        )

    def upsert(
        self,
        user_id: str,
        notion_api_key: str | None,
        default_source_id: str | None,
    ) -> None:
        """Insert or replace the user's settings row (one row per user)."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO user_settings (user_id, notion_api_key, default_source_id)
                    VALUES (%s::uuid, %s, %s)
                    ON CONFLICT (user_id) DO UPDATE
                    SET notion_api_key = EXCLUDED.notion_api_key,
                        default_source_id = EXCLUDED.default_source_id,
                        updated_at = NOW()
                    """,
                    (user_id, notion_api_key, default_source_id),
                )
            conn.commit()
