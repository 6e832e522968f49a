"""Shared route utilities."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from flask import Response, current_app, jsonify

from src.db.session import Database
from src.models.repositories import ListRepository, RepositoryError

T = TypeVar("T")


def error_response(
    status_code: int,
    message: str,
    details: dict[str, Any] | None = None,
):
    """Return a standardized JSON error response."""

    payload = {
        "error": {
            "code": status_code,
            "message": message,
            "details": details or {},
        }
    }
    return jsonify(payload), status_code


def repository_error_response(error: RepositoryError):
    """Log a repository error and convert it into an API response."""

    current_app.logger.exception("repository error: %s", error)
    return error_response(error.status_code, error.message, error.details)


def get_database() -> Database:
    return current_app.extensions["database"]


def execute_list_repo(
    transaction_name: str, handler: Callable[[ListRepository], T]
) -> tuple[T | None, Response | tuple | None]:
    """Run ``handler`` inside a transaction, mapping repository errors."""

    try:
        with get_database().transaction(name=transaction_name) as session:
            return handler(ListRepository(session)), None
    except RepositoryError as exc:
        return None, repository_error_response(exc)
