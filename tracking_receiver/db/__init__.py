"""Database package — declarative base, engine and session factory."""

from tracking_receiver.db.base import Base, create_engine, create_session_factory, create_tables

__all__ = [
    "Base",
    "create_engine",
    "create_session_factory",
    "create_tables",
]
