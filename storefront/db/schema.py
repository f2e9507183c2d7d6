"""
Database schema

Tables:
1. local_storage - key/value records kept between requests (saved delivery address)
"""

SCHEMA_SQL = """
-- ============ Local storage ============

CREATE TABLE IF NOT EXISTS local_storage (
    storage_key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at REAL DEFAULT (strftime('%s', 'now'))
);
"""
