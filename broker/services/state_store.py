"""Durable state store - query counter, inquiry ledger and recent-topic index."""

import json
from datetime import datetime
import os
from abc import ABC, abstractmethod
from pathlib import Path

from ..db.connection import DatabaseConnection
from ..errors import PersistenceFailure
from ..models.inquiry import InquiryRecord, InquiryStatus, RecentTopicEntry, StateSnapshot
from ..utils.clock import ensure_utc
from ..utils.logger import get_app_logger


class BaseStateStore(ABC):
    """Abstract durable key-value store for broker state."""

    @abstractmethod
    def load(self) -> StateSnapshot:
        """
        Load persisted state.

        Returns:
            Stored snapshot, or an empty snapshot when nothing was persisted

        Raises:
            PersistenceFailure: If stored state exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, snapshot: StateSnapshot) -> None:
        """
        Replace persisted state with ``snapshot``.

        Raises:
            PersistenceFailure: If the write fails
        """
        pass

    def close(self) -> None:
        """Release resources held by the store."""
        pass


class JsonFileStateStore(BaseStateStore):
    """State persisted as a single JSON document, replaced atomically."""

    def __init__(self, path: str = "./data/query_state.json"):
        self.path = Path(path)
        self.logger = get_app_logger()

    def load(self) -> StateSnapshot:
        if not self.path.exists():
            self.logger.warning(f"No state file found at {self.path}, starting fresh")
            return StateSnapshot()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            snapshot = StateSnapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceFailure(f"Failed to load state from {self.path}: {e}") from e

        self.logger.info(
            f"State loaded: counter={snapshot.counter}, "
            f"inquiries={len(snapshot.inquiries)}, recent_topics={len(snapshot.recent_topics)}"
        )
        return snapshot

    def save(self, snapshot: StateSnapshot) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceFailure(f"Failed to save state to {self.path}: {e}") from e


class DuckDBStateStore(BaseStateStore):
    """State persisted in DuckDB tables, rewritten in one transaction per save."""

    COUNTER_KEY = "query_counter"

    def __init__(self, db_path: str = "./data/broker.db"):
        self.db = DatabaseConnection(db_path)
        self.logger = get_app_logger()

    def load(self) -> StateSnapshot:
        conn = self.db.conn
        try:
            row = conn.execute(
                "SELECT value FROM broker_meta WHERE name = ?", [self.COUNTER_KEY]
            ).fetchone()
            counter = int(row[0]) if row else 0

            inquiries = {}
            for seq, topic, body, issued_at, status, responses in conn.execute("""
                SELECT sequence_number, topic, body, issued_at, status, responses
                FROM inquiries
                ORDER BY sequence_number
            """).fetchall():
                inquiries[int(seq)] = InquiryRecord(
                    sequence_number=int(seq),
                    topic=topic,
                    body=body,
                    issued_at=ensure_utc(datetime.fromisoformat(issued_at)),
                    status=InquiryStatus(status),
                    responses=json.loads(responses) if responses else []
                )

            recent_topics = {}
            for topic, body, issued_at, seq in conn.execute("""
                SELECT topic, body, issued_at, sequence_number FROM recent_topics
            """).fetchall():
                recent_topics[topic] = RecentTopicEntry(
                    topic=topic,
                    body=body,
                    issued_at=ensure_utc(datetime.fromisoformat(issued_at)),
                    sequence_number=int(seq)
                )
        except Exception as e:
            raise PersistenceFailure(f"Failed to load state from {self.db.db_path}: {e}") from e

        self.logger.info(
            f"State loaded from DuckDB: counter={counter}, "
            f"inquiries={len(inquiries)}, recent_topics={len(recent_topics)}"
        )
        return StateSnapshot(counter=counter, inquiries=inquiries, recent_topics=recent_topics)

    def save(self, snapshot: StateSnapshot) -> None:
        conn = self.db.conn
        try:
            conn.execute("BEGIN TRANSACTION")
            conn.execute("DELETE FROM broker_meta")
            conn.execute("DELETE FROM inquiries")
            conn.execute("DELETE FROM recent_topics")

            conn.execute(
                "INSERT INTO broker_meta (name, value) VALUES (?, ?)",
                [self.COUNTER_KEY, snapshot.counter]
            )
            if snapshot.inquiries:
                conn.executemany(
                    """
                    INSERT INTO inquiries (sequence_number, topic, body, issued_at, status, responses)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        [
                            r.sequence_number, r.topic, r.body, r.issued_at.isoformat(),
                            r.status.value, json.dumps(r.responses)
                        ]
                        for r in snapshot.inquiries.values()
                    ]
                )
            if snapshot.recent_topics:
                conn.executemany(
                    """
                    INSERT INTO recent_topics (topic, body, issued_at, sequence_number)
                    VALUES (?, ?, ?, ?)
                    """,
                    [
                        [e.topic, e.body, e.issued_at.isoformat(), e.sequence_number]
                        for e in snapshot.recent_topics.values()
                    ]
                )
            conn.execute("COMMIT")
        except Exception as e:
            try:
                conn.execute("ROLLBACK")
            except Exception:
                self.logger.debug("Rollback failed after save error")
            raise PersistenceFailure(f"Failed to save state to {self.db.db_path}: {e}") from e

    def close(self) -> None:
        self.db.close()


def build_state_store(settings) -> BaseStateStore:
    """
    Create the configured state store.

    Args:
        settings: Application settings instance

    Returns:
        State store instance

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = settings.state_backend.lower()
    if backend == "json":
        return JsonFileStateStore(settings.state_file)
    if backend == "duckdb":
        return DuckDBStateStore(settings.database_path)
    raise ValueError(f"Unknown state backend: {settings.state_backend}. Available: json, duckdb")
