"""SQLite transaction store."""
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional

from ledgerflow.config.settings import get_settings
from ledgerflow.utils.logger import get_home_dir, get_logger
from ledgerflow.utils.exceptions import StorageError
from .models import PersistedTransaction

logger = get_logger()

COLUMNS = (
    "id", "user_id", "date", "time", "user", "description", "bank", "account_id",
    "original_description", "amount", "type", "account_type", "category",
    "file_source", "created_at", "updated_at"
)


class TransactionStore:
    """Bulk insert and per-user listing of committed transactions."""

    def __init__(self, db_path: Optional[Path] = None):
        if db_path is None:
            db_path = get_home_dir() / get_settings().database_file
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS transactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    date TEXT NOT NULL,
                    time TEXT,
                    user TEXT,
                    description TEXT NOT NULL,
                    bank TEXT,
                    account_id TEXT,
                    original_description TEXT,
                    amount REAL NOT NULL,
                    type TEXT NOT NULL CHECK (type IN ('credit', 'expense')),
                    account_type TEXT NOT NULL DEFAULT 'bank_account',
                    category TEXT,
                    file_source TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_user ON transactions(user_id)")
            conn.commit()

    def insert_many(self, records: Iterable[PersistedTransaction]) -> List[PersistedTransaction]:
        """
        Insert a batch of records in one transaction.

        Records without timestamps are stamped with the current time; ids are
        assigned by the database and written back onto the records.
        """
        records = list(records)
        now = datetime.now()

        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                for record in records:
                    record.created_at = record.created_at or now
                    record.updated_at = record.updated_at or record.created_at
                    cursor.execute(
                        f"INSERT INTO transactions ({', '.join(COLUMNS[1:])}) "
                        f"VALUES ({', '.join('?' for _ in COLUMNS[1:])})",
                        (
                            record.user_id,
                            record.date.isoformat(),
                            record.time,
                            record.user,
                            record.description,
                            record.bank,
                            record.account_id,
                            record.original_description,
                            record.amount,
                            record.type,
                            record.account_type,
                            record.category,
                            record.file_source,
                            record.created_at.isoformat(),
                            record.updated_at.isoformat()
                        )
                    )
                    record.id = cursor.lastrowid
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to insert transactions: {e}")

        logger.info(f"Saved {len(records)} transactions")
        return records

    def list_for_user(self, user_id: int) -> List[PersistedTransaction]:
        """All transactions of one user, in insertion order."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"SELECT {', '.join(COLUMNS)} FROM transactions WHERE user_id = ? ORDER BY id",
                    (user_id,)
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list transactions for user {user_id}: {e}")

        return [self._row_to_record(dict(zip(COLUMNS, row))) for row in rows]

    @staticmethod
    def _row_to_record(row: dict) -> PersistedTransaction:
        row["date"] = date.fromisoformat(row["date"])
        row["created_at"] = datetime.fromisoformat(row["created_at"])
        row["updated_at"] = datetime.fromisoformat(row["updated_at"])
        return PersistedTransaction(**row)
