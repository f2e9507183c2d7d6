"""
Database connection management

Features:
1. Single shared aiosqlite connection
2. Unit-of-work context manager with rollback on error
"""
import logging
from pathlib import Path
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import aiosqlite

from storefront.config import get_settings
from storefront.db.schema import SCHEMA_SQL

logger = logging.getLogger(__name__)

# Shared connection (singleton is enough for a single event loop)
_db_connection: aiosqlite.Connection | None = None


async def init_db(db_path: Optional[Path] = None) -> None:
    """Open the database and create tables"""
    global _db_connection

    if _db_connection is not None:
        await close_db()

    path = Path(db_path or get_settings().db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    _db_connection = await aiosqlite.connect(path)
    _db_connection.row_factory = aiosqlite.Row

    await _db_connection.executescript(SCHEMA_SQL)
    await _db_connection.commit()

    logger.info("[DB] database ready: %s", path)


async def close_db() -> None:
    """Close the database connection"""
    global _db_connection

    if _db_connection:
        await _db_connection.close()
        _db_connection = None
        logger.info("[DB] connection closed")


async def get_db() -> aiosqlite.Connection:
    """Get the database connection, opening it on first use"""
    if _db_connection is None:
        await init_db()

    return _db_connection


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[aiosqlite.Connection, None]:
    """Shared connection for one unit of work; uncommitted writes roll back on error"""
    db = await get_db()
    try:
        yield db
    except Exception:
        await db.rollback()
        logger.warning("[DB] rolled back after error")
        raise
