"""Database layer: SQLModel entities, repositories and session management."""

from .base import Base, utc_now
from .utils import create_all, create_engine, create_sessionmaker

__all__ = ["Base", "utc_now", "create_all", "create_engine", "create_sessionmaker"]
