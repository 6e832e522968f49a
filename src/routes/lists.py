"""Board list endpoints, including card ordering."""

from __future__ import annotations

import uuid

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from src.models.repositories import ListRepository
from src.routes.helpers import error_response, execute_list_repo
from src.schemas.board_list import (
    BoardListCreateSchema,
    BoardListSchema,
    CardInsertSchema,
    CardOrderSchema,
)

lists_bp = Blueprint("lists", __name__)

list_schema = BoardListSchema()
lists_schema = BoardListSchema(many=True)
create_schema = BoardListCreateSchema()
order_schema = CardOrderSchema()
insert_schema = CardInsertSchema()


def _load(schema, payload):
    if payload is None:
        raise ValidationError({"_schema": ["missing request body"]})
    return schema.load(payload)


@lists_bp.post("/lists")
def create_list():
    """Create a list on a board."""

    try:
        data = _load(create_schema, request.get_json(silent=True))
    except ValidationError as exc:
        return error_response(422, "invalid payload", exc.messages)

    board_list, error = execute_list_repo(
        "lists.create", lambda repo: repo.create_list(**data)
    )
    if error:
        return error
    return jsonify({"list": list_schema.dump(board_list)}), 201


@lists_bp.get("/lists/<uuid:public_id>")
def get_list(public_id: uuid.UUID):
    """Return a single list with its ordered cards."""

    board_list, error = execute_list_repo(
        "lists.get", lambda repo: repo.get_by_public_id(public_id)
    )
    if error:
        return error
    if board_list is None:
        return error_response(404, "list not found")
    return jsonify({"list": list_schema.dump(board_list)})


@lists_bp.get("/boards/<uuid:board_public_id>/lists")
def list_board_lists(board_public_id: uuid.UUID):
    """Return the lists of a board in creation order."""

    items, error = execute_list_repo(
        "lists.for_board", lambda repo: repo.list_for_board(board_public_id)
    )
    if error:
        return error
    return jsonify({"items": lists_schema.dump(items)})


@lists_bp.put("/lists/<uuid:public_id>/cards")
def set_card_order(public_id: uuid.UUID):
    """Replace the card order of a list."""

    try:
        data = _load(order_schema, request.get_json(silent=True))
    except ValidationError as exc:
        return error_response(422, "invalid payload", exc.messages)

    def handler(repo: ListRepository):
        board_list = repo.get_by_public_id(public_id)
        if board_list is None:
            return None
        return repo.set_card_order(board_list, data["card_ids"])

    board_list, error = execute_list_repo("lists.set_cards", handler)
    if error:
        return error
    if board_list is None:
        return error_response(404, "list not found")
    return jsonify({"list": list_schema.dump(board_list)})


@lists_bp.post("/lists/<uuid:public_id>/cards")
def add_card(public_id: uuid.UUID):
    """Insert a card into a list."""

    try:
        data = _load(insert_schema, request.get_json(silent=True))
    except ValidationError as exc:
        return error_response(422, "invalid payload", exc.messages)

    def handler(repo: ListRepository):
        board_list = repo.get_by_public_id(public_id)
        if board_list is None:
            return None
        return repo.add_card(
            board_list, data["card_id"], position=data["position"]
        )

    board_list, error = execute_list_repo("lists.add_card", handler)
    if error:
        return error
    if board_list is None:
        return error_response(404, "list not found")
    return jsonify({"list": list_schema.dump(board_list)}), 201


@lists_bp.delete("/lists/<uuid:public_id>/cards/<uuid:card_id>")
def remove_card(public_id: uuid.UUID, card_id: uuid.UUID):
    """Remove a card from a list."""

    def handler(repo: ListRepository):
        board_list = repo.get_by_public_id(public_id)
        if board_list is None:
            return None, False
        return board_list, repo.remove_card(board_list, card_id)

    result, error = execute_list_repo("lists.remove_card", handler)
    if error:
        return error
    board_list, removed = result
    if board_list is None:
        return error_response(404, "list not found")
    if not removed:
        return error_response(404, "card not in list")
    return jsonify({"list": list_schema.dump(board_list)})


@lists_bp.delete("/lists/<uuid:public_id>")
def delete_list(public_id: uuid.UUID):
    """Delete a list."""

    def handler(repo: ListRepository) -> bool:
        board_list = repo.get_by_public_id(public_id)
        if board_list is None:
            return False
        repo.delete_list(board_list)
        return True

    deleted, error = execute_list_repo("lists.delete", handler)
    if error:
        return error
    if not deleted:
        return error_response(404, "list not found")
    return "", 204
