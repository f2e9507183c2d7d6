"""
Database module

Features:
1. SQLite connection management
2. Schema definition and initialisation
"""
from storefront.db.connection import get_db, init_db, close_db

__all__ = ["get_db", "init_db", "close_db"]
