"""
Database module for pkeeper.

Provides the SQLAlchemy engine helpers and table models backing the auth stores.
"""

from db.engine import Base, create_db_engine, create_session_factory, init_db

__all__ = ["Base", "create_db_engine", "create_session_factory", "init_db"]
