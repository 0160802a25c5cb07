"""Repositories over the SQLModel entities."""

from .base import AsyncBaseRepository, QueryBuilder, SQLModelRepository
from .bundle import RepositoryBundle, build_repositories

__all__ = ["AsyncBaseRepository", "QueryBuilder", "SQLModelRepository", "RepositoryBundle", "build_repositories"]
