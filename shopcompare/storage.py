# shopcompare/storage.py
import datetime
import os
import sqlite3
from contextlib import closing
from typing import Dict, Optional

import pytz
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from .errors import PersistenceError
from .logger import get_logger

logger = get_logger(__name__)

DB_PATH = os.getenv("DB_PATH", "/data/shopcompare.sqlite3")
STORAGE_WRITE_ATTEMPTS = int(os.getenv("STORAGE_WRITE_ATTEMPTS", "3"))

PRODUCTS_KEY = "saved_products"
WISHLIST_KEY = "saved_wishlist"
USER_KEY = "current_user"
DIGEST_BASELINE_KEY = "digest_baseline"
DIGEST_LAST_SENT_KEY = "digest_last_sent"
DIGEST_SEEN_DEALS_KEY = "digest_seen_deals"


def now_utc_iso() -> str:
    return datetime.datetime.now(tz=pytz.UTC).isoformat()


_retry_locked = retry(
    retry=retry_if_exception_type(sqlite3.OperationalError),
    wait=wait_exponential_jitter(initial=0.05, max=1),
    stop=stop_after_attempt(STORAGE_WRITE_ATTEMPTS),
    reraise=True,
)


class SqliteKeyValueStore:
    """
    String key -> string value store on a single sqlite table.
    Multi-key writes share one transaction, so either every key is written or none.
    """

    def __init__(self, db_path: str = DB_PATH):
        self.db_path = db_path

    def _connect(self):
        os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        return sqlite3.connect(self.db_path)

    def ensure_db(self):
        try:
            self._create_table()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Cannot initialize {self.db_path}: {e}") from e

    @_retry_locked
    def _create_table(self):
        with closing(self._connect()) as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at TEXT
                )
            """
            )
            con.commit()

    def get(self, key: str) -> Optional[str]:
        try:
            with closing(self._connect()) as con:
                row = con.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Cannot read key {key!r}: {e}") from e
        return row[0] if row else None

    def set_many(self, values: Dict[str, str]):
        try:
            self._write(values)
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(
                f"Cannot write keys {sorted(values)}: {e}"
            ) from e
        logger.debug("Persisted keys %s", sorted(values))

    def set(self, key: str, value: str):
        self.set_many({key: value})

    def delete(self, *keys: str):
        try:
            self._remove(keys)
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Cannot delete keys {sorted(keys)}: {e}") from e

    @_retry_locked
    def _write(self, values: Dict[str, str]):
        ts = now_utc_iso()
        with closing(self._connect()) as con:
            # Connection as context manager commits, or rolls back on error
            with con:
                for key, value in values.items():
                    con.execute(
                        """
                        INSERT INTO kv (key, value, updated_at)
                        VALUES (?,?,?)
                        ON CONFLICT(key) DO UPDATE SET
                            value=excluded.value,
                            updated_at=excluded.updated_at
                    """,
                        (key, value, ts),
                    )

    @_retry_locked
    def _remove(self, keys):
        with closing(self._connect()) as con:
            with con:
                for key in keys:
                    con.execute("DELETE FROM kv WHERE key=?", (key,))

