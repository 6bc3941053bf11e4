"""Database connection and schema management."""

import duckdb
from typing import Optional
from pathlib import Path
from ..utils.logger import get_app_logger


class DatabaseConnection:
    """DuckDB connection manager."""

    def __init__(self, db_path: str = "./data/broker.db"):
        """
        Initialize database connection.

        Args:
            db_path: Path to DuckDB database file
        """
        self.db_path = db_path
        self.logger = get_app_logger()
        self.conn: Optional[duckdb.DuckDBPyConnection] = None

        # Ensure database directory exists
        db_dir = Path(db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

        self._connect()
        self._init_schema()

    def _connect(self):
        """Connect to DuckDB database."""
        try:
            self.conn = duckdb.connect(self.db_path)
            self.logger.info(f"Connected to DuckDB at {self.db_path}")
        except Exception as e:
            self.logger.error(f"Failed to connect to DuckDB: {e}")
            raise

    def _init_schema(self):
        """Initialize database schema."""
        try:
            # Tables hold a full snapshot; uniqueness is owned by the in-memory stores

            # Key/value table for the query counter
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS broker_meta (
                    name VARCHAR NOT NULL,
                    value BIGINT NOT NULL
                )
            """)

            # Inquiry ledger
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS inquiries (
                    sequence_number BIGINT NOT NULL,
                    topic VARCHAR NOT NULL,
                    body VARCHAR NOT NULL,
                    issued_at VARCHAR NOT NULL,
                    status VARCHAR NOT NULL,
                    responses VARCHAR
                )
            """)

            # Recent topic index, one row per keyword
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS recent_topics (
                    topic VARCHAR NOT NULL,
                    body VARCHAR NOT NULL,
                    issued_at VARCHAR NOT NULL,
                    sequence_number BIGINT NOT NULL
                )
            """)

            self.logger.info("Database schema initialized successfully")

        except Exception as e:
            self.logger.error(f"Failed to initialize database schema: {e}")
            raise

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.logger.info("Database connection closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
