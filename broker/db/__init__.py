"""Database package - DuckDB connection and schema."""

from .connection import DatabaseConnection

__all__ = [
    "DatabaseConnection",
]
