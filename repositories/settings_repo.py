"""
repositories/settings_repo.py
-----------------------------
Persistence of the category-keyed settings documents.
Each category is one row holding its JSON document as text.
"""

import json
import threading
from typing import Mapping, Optional

from db import executor
from exceptions import SettingsParseError
from utils.logger import get_logger

logger = get_logger(__name__)

CREATE_SETTINGS_SQL = """
    CREATE TABLE IF NOT EXISTS settings (
        id              SERIAL PRIMARY KEY,
        category        VARCHAR(50) NOT NULL UNIQUE,
        settings_data   TEXT NOT NULL,
        updated_at      TIMESTAMPTZ DEFAULT NOW()
    );
"""

_table_ready = False
_table_lock = threading.Lock()


def decode_document(category: str, data) -> dict:
    """
    Decode one stored settings document.

    Raises:
        SettingsParseError: If the stored text is not valid JSON.
    """
    if not isinstance(data, (str, bytes, bytearray)):
        return data
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SettingsParseError(category, str(e)) from e


class SettingsRepository:
    """Repository for the settings table."""

    def ensure_table(self) -> None:
        """Create the settings table on first use. Idempotent."""
        global _table_ready
        if _table_ready:
            return
        with _table_lock:
            if _table_ready:
                return
            executor.execute(CREATE_SETTINGS_SQL)
            _table_ready = True
            logger.info("Settings table ready.")

    def fetch_raw(self, categories: Optional[list[str]] = None) -> list[dict]:
        """
        Stored rows as `{'category', 'settings_data'}` dicts, undecoded.

        Args:
            categories: Restrict to these categories (None = all).
        """
        self.ensure_table()
        sql = "SELECT category, settings_data FROM settings"
        params = None
        if categories is not None:
            sql += " WHERE category = ANY(%s)"
            params = (list(categories),)
        return executor.fetch_all(sql + " ORDER BY category;", params)

    def upsert_many(self, documents: Mapping[str, str]) -> None:
        """
        Insert or replace several categories atomically.

        Args:
            documents: Category → already serialized JSON text.
        """
        self.ensure_table()
        sql = """
            INSERT INTO settings (category, settings_data)
            VALUES (%s, %s)
            ON CONFLICT (category)
            DO UPDATE SET settings_data = EXCLUDED.settings_data, updated_at = NOW();
        """
        with executor.transaction() as tx:
            for category, text in documents.items():
                tx.execute(sql, (category, text))
        logger.info(f"Saved settings categories: {', '.join(documents)}")

    def delete(self, category: str) -> bool:
        self.ensure_table()
        result = executor.execute("DELETE FROM settings WHERE category = %s;", (category,))
        return result.rowcount > 0


def reset_table_flag() -> None:
    """Forget that the table was created (tests, or after dropping the schema)."""
    global _table_ready
    _table_ready = False
