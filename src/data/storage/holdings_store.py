"""SQLite-backed store for the holdings list.

The whole list is kept as one JSON array in a key-value table, addressed
by a namespace and a key. Every save rewrites the full record; there is no
incremental persistence.
"""

import json
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

from src.portfolio.base import Holding, new_holding_id
from src.utils.exceptions import StorageError
from src.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_NAMESPACE = "portfolio_data"
DEFAULT_KEY = "stocks"


def holding_to_record(holding: Holding) -> Dict[str, Any]:
    """Serialize a holding using the stored field names."""
    return {
        "id": holding.id,
        "name": holding.name,
        "ticker": holding.ticker,
        "quantity": float(holding.quantity),
        "avgBuyPrice": float(holding.avg_buy_price),
        "currentPrice": float(holding.current_price),
        "sector": holding.sector,
    }


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def holding_from_record(record: Dict[str, Any]) -> Holding:
    """Deserialize a stored holding.

    Missing numeric fields default to 0, missing text fields to "".
    A record without an id gets a fresh one.
    """
    holding_id = record.get("id")
    if not holding_id:
        holding_id = new_holding_id()
        logger.warning("Stored holding %s has no id, assigned %s", record.get("ticker"), holding_id)

    return Holding(
        id=str(holding_id),
        name=str(record.get("name") or ""),
        ticker=str(record.get("ticker") or ""),
        quantity=_as_float(record.get("quantity")),
        avg_buy_price=_as_float(record.get("avgBuyPrice")),
        current_price=_as_float(record.get("currentPrice")),
        sector=str(record.get("sector") or ""),
    )


class HoldingsStore:
    """Persists the holdings list in SQLite.

    Attributes:
        db_path: Path to the SQLite database file.
        namespace: Storage namespace of the record.
        key: Key of the record inside the namespace.
    """

    def __init__(
        self,
        db_path: str | Path,
        namespace: str = DEFAULT_NAMESPACE,
        key: str = DEFAULT_KEY,
    ):
        self.db_path = str(db_path)
        self.namespace = namespace
        self.key = key
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._local = threading.local()
        self.create_tables()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a thread-local database connection."""
        if not hasattr(self._local, "connection"):
            self._local.connection = sqlite3.connect(self.db_path)
        return self._local.connection

    def create_tables(self) -> None:
        """Create the key-value table if it doesn't exist."""
        schema_path = Path(__file__).parent / "schema.sql"
        try:
            schema = schema_path.read_text(encoding="utf-8")
            conn = self._get_connection()
            conn.executescript(schema)
            conn.commit()
            logger.info("Holdings store initialized at %s", self.db_path)
        except (OSError, sqlite3.Error) as e:
            logger.error("Failed to create tables: %s", e)
            raise StorageError(f"Database initialization failed: {e}") from e

    def load(self) -> List[Holding]:
        """Load the stored holdings list.

        Returns:
            Holdings in stored order, or an empty list if nothing is stored.

        Raises:
            StorageError: If the database fails or the record is not a JSON array
        """
        query = "SELECT value FROM kv_store WHERE namespace = ? AND key = ?"
        conn = self._get_connection()
        try:
            row = conn.execute(query, (self.namespace, self.key)).fetchone()
        except sqlite3.Error as e:
            logger.error("Failed to load holdings: %s", e)
            raise StorageError(f"Failed to load holdings: {e}") from e

        if row is None:
            return []

        try:
            records = json.loads(row[0])
        except json.JSONDecodeError as e:
            logger.error("Stored holdings record is not valid JSON: %s", e)
            raise StorageError(f"Corrupt holdings record: {e}") from e

        if records is None:
            return []
        if not isinstance(records, list):
            raise StorageError(
                f"Corrupt holdings record: expected a list, got {type(records).__name__}"
            )

        holdings = [holding_from_record(r) for r in records if isinstance(r, dict)]
        logger.info("Loaded %d holdings from %s/%s", len(holdings), self.namespace, self.key)
        return holdings

    def save(self, holdings: Sequence[Holding]) -> None:
        """Overwrite the stored record with the full holdings list.

        Raises:
            StorageError: If the write fails
        """
        payload = json.dumps([holding_to_record(h) for h in holdings])
        upsert_sql = """
            INSERT INTO kv_store (namespace, key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(namespace, key) DO UPDATE SET
            value=excluded.value,
            updated_at=excluded.updated_at
        """

        conn = self._get_connection()
        try:
            with conn:
                conn.execute(
                    upsert_sql,
                    (self.namespace, self.key, payload, datetime.now().isoformat()),
                )
            logger.debug("Saved %d holdings", len(holdings))
        except sqlite3.Error as e:
            logger.error("Failed to save holdings: %s", e)
            raise StorageError(f"Failed to save holdings: {e}") from e

    def clear(self) -> None:
        """Delete the stored record."""
        conn = self._get_connection()
        try:
            with conn:
                conn.execute(
                    "DELETE FROM kv_store WHERE namespace = ? AND key = ?",
                    (self.namespace, self.key),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to clear holdings: {e}") from e

    def close(self) -> None:
        """Close the thread-local connection."""
        if hasattr(self._local, "connection"):
            self._local.connection.close()
            del self._local.connection
