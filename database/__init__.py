"""
Database package for the listing availability service.

This package provides modular database operations:
- connection: Database connection management (get_db, close_db, init_db, write_transaction)
- schema: Table creation and indexes
- seed: Initial seed data

All functions are re-exported from this module.
"""

from database.connection import get_db, close_db, init_db, write_transaction
from database.schema import drop_tables, create_tables, create_indexes
from database.seed import seed_database

__all__ = [
    # Connection
    'get_db',
    'close_db',
    'init_db',
    'write_transaction',
    # Schema
    'drop_tables',
    'create_tables',
    'create_indexes',
    # Seed
    'seed_database',
]
