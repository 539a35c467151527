"""Database configuration and utilities."""

from .session import Base, Database, build_engine, get_db

__all__ = ["Base", "Database", "build_engine", "get_db"]
