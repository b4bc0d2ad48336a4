"""
SQLite-backed document store and simple migration system.

Documents are JSON objects grouped into named collections and stored
in a single ``documents`` table.  Each document is addressed by a
24 character hexadecimal identifier (``_id``) built the same way as a
MongoDB ObjectId: a four byte timestamp followed by eight random
bytes.  ``Collection`` exposes the handful of primitives the services
need (find one, find matching, insert, partial update, delete).

``init_db`` creates the schema on application start.  Applied
migration versions are stored in the ``migrations`` table and new
migrations are executed in order.
"""

import json
import logging
import os
import sqlite3
import time
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .config import settings


logger = logging.getLogger(__name__)


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # events_service_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection with ``Row`` results."""
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit.

    The transaction is committed when the block finishes normally and
    rolled back if it raises.
    """
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


MIGRATIONS: List[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS documents (
            collection TEXT NOT NULL,
            id TEXT NOT NULL,
            body TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (collection, id)
        );
        """,
    ),
    (
        2,
        """
        -- Listing a collection returns documents in insertion order.
        CREATE INDEX IF NOT EXISTS idx_documents_collection_created
            ON documents(collection, created_at);
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations."""
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying database migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version


def generate_object_id() -> str:
    """Return a new 24 character hexadecimal document identifier."""
    timestamp = int(time.time()).to_bytes(4, "big")
    return (timestamp + os.urandom(8)).hex()


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dump(document: Dict[str, Any]) -> str:
    body = {key: value for key, value in document.items() if key != "_id"}
    return json.dumps(body, default=_json_default, ensure_ascii=False)


def _load(row: sqlite3.Row) -> Dict[str, Any]:
    document = json.loads(row["body"])
    document["_id"] = row["id"]
    return document


class Collection:
    """A named set of JSON documents.

    Every method opens its own connection, so instances are cheap and
    can be created per request.  Datetime values are stored as ISO 8601
    strings and come back as strings.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def find_one(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document with ``doc_id`` or ``None``."""
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT id, body FROM documents WHERE collection = ? AND id = ?",
                (self.name, doc_id),
            ).fetchone()
        return _load(row) if row else None

    def find(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Return all documents whose top-level fields equal ``filters``.

        Without filters the whole collection is returned.  Results are in
        insertion order.
        """
        with get_cursor() as cursor:
            rows = cursor.execute(
                "SELECT id, body FROM documents WHERE collection = ? "
                "ORDER BY created_at, rowid",
                (self.name,),
            ).fetchall()
        documents = [_load(row) for row in rows]
        if not filters:
            return documents
        return [
            doc for doc in documents
            if all(doc.get(key) == value for key, value in filters.items())
        ]

    def find_first(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        matches = self.find(filters)
        return matches[0] if matches else None

    def insert_one(self, document: Dict[str, Any]) -> str:
        """Store ``document`` and return its generated ``_id``."""
        doc_id = generate_object_id()
        with get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO documents (collection, id, body) VALUES (?, ?, ?)",
                (self.name, doc_id, _dump(document)),
            )
        logger.debug("Inserted %s/%s", self.name, doc_id)
        return doc_id

    def update_one(self, doc_id: str, set_fields: Dict[str, Any]) -> bool:
        """Overwrite the given top-level fields of a document.

        Returns ``False`` if no document matched ``doc_id``.
        """
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT id, body FROM documents WHERE collection = ? AND id = ?",
                (self.name, doc_id),
            ).fetchone()
            if not row:
                return False
            document = _load(row)
            document.update(set_fields)
            cursor.execute(
                "UPDATE documents SET body = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE collection = ? AND id = ?",
                (_dump(document), self.name, doc_id),
            )
        return True

    def delete_one(self, doc_id: str) -> bool:
        """Delete a document.  Returns ``False`` if nothing was deleted."""
        with get_cursor() as cursor:
            cursor.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (self.name, doc_id),
            )
            deleted = cursor.rowcount > 0
        return deleted
