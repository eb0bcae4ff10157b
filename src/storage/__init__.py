"""Storage layer: shared asyncpg connection pool."""

from src.storage.database import Database

__all__ = ["Database"]
