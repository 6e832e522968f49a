"""Repositories for board persistence logic."""

from .base import RepositoryError, SQLAlchemyRepository, repository_method
from .lists import ListRepository

__all__ = [
    "ListRepository",
    "RepositoryError",
    "SQLAlchemyRepository",
    "repository_method",
]
