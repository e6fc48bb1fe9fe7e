"""
Event Repository — interaction event stores.

Two implementations with the same interface:
  InMemoryEventRepository — list-backed, per workspace
  SqliteEventRepository   — sqlite3-backed, JSON payloads

Sequence numbers are assigned per workspace, starting at 1.
All sqlite writes are transaction-wrapped; append_event retries
on IntegrityError (concurrent sequence conflict).
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

from collab_kernel.domain_types import InteractionEvent

logger = logging.getLogger(__name__)

# Max retries for concurrent sequence conflicts
_MAX_RETRIES: int = 3

_INIT_SQL = """
CREATE TABLE IF NOT EXISTS events (
    workspace_id  TEXT NOT NULL,
    sequence      INTEGER NOT NULL,
    message_id    TEXT NOT NULL,
    channel_id    TEXT,
    payload_json  TEXT NOT NULL,
    stored_at     TEXT NOT NULL,
    PRIMARY KEY (workspace_id, sequence)
);

CREATE INDEX IF NOT EXISTS idx_events_message
    ON events(workspace_id, message_id);
"""


def reconstruct_event(event_dict: Any) -> InteractionEvent:
    """
    Rebuild an InteractionEvent from its stored dict.

    Raises ValueError for payloads that are not objects or lack a
    message_id.
    """
    if not isinstance(event_dict, Mapping):
        raise ValueError(
            f"Stored event must be an object, got {type(event_dict).__name__}"
        )
    if not event_dict.get("message_id"):
        raise ValueError("Stored event is missing message_id")
    return InteractionEvent.from_dict(event_dict)


class InMemoryEventRepository:
    """List-backed store. Process-local, lost on restart."""

    def __init__(self) -> None:
        self._events: Dict[str, List[InteractionEvent]] = {}
        self._lock = threading.Lock()

    def append_event(self, workspace_id: str, event: InteractionEvent) -> int:
        with self._lock:
            stream = self._events.setdefault(workspace_id, [])
            stream.append(event)
            return len(stream)

    def append_batch(
        self, workspace_id: str, events: Iterable[InteractionEvent],
    ) -> List[int]:
        with self._lock:
            stream = self._events.setdefault(workspace_id, [])
            base = len(stream)
            batch = list(events)
            stream.extend(batch)
            return [base + i for i in range(1, len(batch) + 1)]

    def load_events(self, workspace_id: str) -> List[InteractionEvent]:
        with self._lock:
            return list(self._events.get(workspace_id, []))

    def count_events(self, workspace_id: str) -> int:
        with self._lock:
            return len(self._events.get(workspace_id, []))

    def replace_events(
        self, workspace_id: str, events: Iterable[InteractionEvent],
    ) -> None:
        with self._lock:
            self._events[workspace_id] = list(events)

    def clear(self, workspace_id: str) -> int:
        with self._lock:
            removed = len(self._events.get(workspace_id, []))
            self._events[workspace_id] = []
            return removed

    def close(self) -> None:
        pass


class SqliteEventRepository:
    """
    Append-oriented event store backed by sqlite3.

    Thread-safety: one shared connection guarded by a lock, so the
    repository can be used from FastAPI's worker threads.
    """

    def __init__(self, db_path: Union[str, Path] = ":memory:") -> None:
        self._db_path = str(db_path)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        if self._db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        with self._lock:
            self._conn.executescript(_INIT_SQL)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def append_event(self, workspace_id: str, event: InteractionEvent) -> int:
        """
        Append a single event. Assigns next sequence atomically.
        Returns the assigned sequence number.
        """
        for attempt in range(_MAX_RETRIES):
            try:
                with self._lock, self._conn:
                    seq = self._next_sequence(workspace_id)
                    self._insert(workspace_id, seq, event)
                return seq
            except sqlite3.IntegrityError:
                if attempt == _MAX_RETRIES - 1:
                    raise
                logger.debug(
                    "Sequence conflict for workspace %r, retrying (%d)",
                    workspace_id, attempt + 1,
                )

        raise RuntimeError("append_event: exhausted retries")  # pragma: no cover

    def append_batch(
        self, workspace_id: str, events: Iterable[InteractionEvent],
    ) -> List[int]:
        """
        Append multiple events inside a single transaction.
        If any insert fails, the entire batch is rolled back.
        """
        sequences: List[int] = []
        with self._lock, self._conn:
            base_seq = self._next_sequence(workspace_id)
            for i, event in enumerate(events):
                seq = base_seq + i
                self._insert(workspace_id, seq, event)
                sequences.append(seq)
        return sequences

    def replace_events(
        self, workspace_id: str, events: Iterable[InteractionEvent],
    ) -> None:
        """Replace all events of a workspace, renumbering from 1."""
        with self._lock, self._conn:
            self._conn.execute(
                "DELETE FROM events WHERE workspace_id = ?", (workspace_id,),
            )
            for seq, event in enumerate(events, 1):
                self._insert(workspace_id, seq, event)

    def clear(self, workspace_id: str) -> int:
        with self._lock, self._conn:
            cursor = self._conn.execute(
                "DELETE FROM events WHERE workspace_id = ?", (workspace_id,),
            )
            return cursor.rowcount

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def load_events(self, workspace_id: str) -> List[InteractionEvent]:
        """Load events ordered by sequence."""
        with self._lock:
            rows = self._conn.execute(
                """
                SELECT payload_json
                FROM events
                WHERE workspace_id = ?
                ORDER BY sequence
                """,
                (workspace_id,),
            ).fetchall()
        return [reconstruct_event(json.loads(row[0])) for row in rows]

    def count_events(self, workspace_id: str) -> int:
        with self._lock:
            cursor = self._conn.execute(
                "SELECT COUNT(*) FROM events WHERE workspace_id = ?",
                (workspace_id,),
            )
            return cursor.fetchone()[0]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _insert(self, workspace_id: str, seq: int, event: InteractionEvent) -> None:
        event_dict = event.to_dict()
        self._conn.execute(
            """
            INSERT INTO events
                (workspace_id, sequence, message_id, channel_id,
                 payload_json, stored_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                workspace_id,
                seq,
                event_dict["message_id"],
                event_dict["channel_id"] or None,
                json.dumps(event_dict, ensure_ascii=False),
                datetime.now(timezone.utc).isoformat(),
            ),
        )

    def _next_sequence(self, workspace_id: str) -> int:
        """
        Compute next sequence. MUST be called inside a transaction.
        """
        cursor = self._conn.execute(
            "SELECT COALESCE(MAX(sequence), 0) FROM events WHERE workspace_id = ?",
            (workspace_id,),
        )
        return cursor.fetchone()[0] + 1

    def close(self) -> None:
        with self._lock:
            self._conn.close()
