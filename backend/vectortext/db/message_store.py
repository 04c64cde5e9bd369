"""Message persistence used by the indexer and the similarity scan."""

from __future__ import annotations

import sqlite3
from typing import Iterator, Protocol, Sequence

from vectortext.core.errors import CorpusReadError, EmbeddingPersistenceError
from vectortext.core.logging import get_logger
from vectortext.db.sqlite import SQLiteDatabase
from vectortext.models.entities import Message, PendingMessage, StoredEmbedding

logger = get_logger(__name__)

_CORPUS_PAGE_SIZE = 500


class MessageStore(Protocol):
    """Operations the search core needs from the message store."""

    def iter_all_bodies(self) -> Iterator[str]:
        ...

    def list_pending(self, version: int) -> list[int]:
        ...

    def fetch_pending(self, message_ids: Sequence[int]) -> list[PendingMessage]:
        ...

    def iter_embedded_batches(self, batch_size: int) -> Iterator[list[StoredEmbedding]]:
        ...

    def update_embedding(self, message_id: int, embedding: str, version: int, indexed_at: int) -> None:
        ...


class SQLiteMessageStore:
    """SQLite-backed implementation of :class:`MessageStore`."""

    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db

    def add_message(self, thread_id: int, sender: str, body: str, timestamp: int) -> int:
        with self.db.transaction() as cursor:
            cursor.execute(
                "INSERT INTO messages (thread_id, address, body, date) VALUES (?, ?, ?, ?)",
                [thread_id, sender, body, timestamp],
            )
            return int(cursor.lastrowid)

    def get_message(self, message_id: int) -> Message | None:
        rows = self.db.query(
            """
            SELECT id, thread_id, address, body, date, embedding, embedding_version, last_indexed
            FROM messages WHERE id = ?
            """,
            [message_id],
        )
        if not rows:
            return None
        row = rows[0]
        return Message(
            id=row["id"],
            thread_id=row["thread_id"],
            sender=row["address"],
            body=row["body"],
            timestamp=row["date"],
            embedding=row["embedding"],
            embedding_version=row["embedding_version"],
            last_indexed=row["last_indexed"],
        )

    def count_messages(self) -> int:
        row = self.db.query("SELECT COUNT(*) AS count FROM messages")[0]
        return int(row["count"])

    def count_embedded(self) -> int:
        row = self.db.query(
            "SELECT COUNT(*) AS count FROM messages WHERE embedding IS NOT NULL AND embedding != ''"
        )[0]
        return int(row["count"])

    def iter_all_bodies(self) -> Iterator[str]:
        last_id = 0
        while True:
            try:
                rows = self.db.query(
                    "SELECT id, body FROM messages WHERE id > ? ORDER BY id LIMIT ?",
                    [last_id, _CORPUS_PAGE_SIZE],
                )
            except sqlite3.Error as exc:
                raise CorpusReadError(f"Unable to read message bodies: {exc}") from exc
            if not rows:
                return
            for row in rows:
                yield row["body"] or ""
            last_id = rows[-1]["id"]

    def list_pending(self, version: int) -> list[int]:
        """Ids of messages with a missing or stale embedding, newest first."""
        try:
            rows = self.db.query(
                """
                SELECT id FROM messages
                WHERE embedding IS NULL OR embedding = '' OR embedding_version != ?
                ORDER BY date DESC, id DESC
                """,
                [version],
            )
        except sqlite3.Error as exc:
            raise CorpusReadError(f"Unable to list messages needing embeddings: {exc}") from exc
        return [row["id"] for row in rows]

    def fetch_pending(self, message_ids: Sequence[int]) -> list[PendingMessage]:
        """Bodies for one write batch, in the order of ``message_ids``.

        Ids deleted since they were listed are left out.
        """
        if not message_ids:
            return []
        placeholders = ", ".join("?" for _ in message_ids)
        try:
            rows = self.db.query(
                f"SELECT id, body FROM messages WHERE id IN ({placeholders})", list(message_ids)
            )
        except sqlite3.Error as exc:
            raise CorpusReadError(f"Unable to read pending message bodies: {exc}") from exc
        bodies = {row["id"]: row["body"] or "" for row in rows}
        return [
            PendingMessage(id=message_id, body=bodies[message_id])
            for message_id in message_ids
            if message_id in bodies
        ]

    def iter_embedded_batches(self, batch_size: int) -> Iterator[list[StoredEmbedding]]:
        # Keyset pagination keeps batches stable while the indexer writes.
        last_id = 0
        while True:
            try:
                rows = self.db.query(
                    """
                    SELECT id, thread_id, address, date, body, embedding FROM messages
                    WHERE id > ? AND embedding IS NOT NULL AND embedding != ''
                    ORDER BY id
                    LIMIT ?
                    """,
                    [last_id, batch_size],
                )
            except sqlite3.Error as exc:
                raise CorpusReadError(f"Unable to read stored embeddings: {exc}") from exc
            if not rows:
                return
            yield [
                StoredEmbedding(
                    message_id=row["id"],
                    thread_id=row["thread_id"],
                    sender=row["address"],
                    timestamp=row["date"],
                    body=row["body"] or "",
                    embedding=row["embedding"],
                )
                for row in rows
            ]
            last_id = rows[-1]["id"]

    def update_embedding(self, message_id: int, embedding: str, version: int, indexed_at: int) -> None:
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    "UPDATE messages SET embedding = ?, embedding_version = ?, last_indexed = ? WHERE id = ?",
                    [embedding, version, indexed_at, message_id],
                )
                updated = cursor.rowcount
        except sqlite3.Error as exc:
            raise EmbeddingPersistenceError(message_id, str(exc)) from exc
        if updated == 0:
            raise EmbeddingPersistenceError(message_id, "message no longer exists")


__all__ = ["MessageStore", "SQLiteMessageStore"]
