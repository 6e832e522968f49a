"""Board list Marshmallow schemas."""
from __future__ import annotations

from marshmallow import Schema, fields
from marshmallow.validate import Length, Range


class BoardListSchema(Schema):
    """Schema for serializing ``BoardList`` ORM instances."""

    public_id = fields.UUID(required=True)
    board_public_id = fields.UUID(required=True)
    board_internal_id = fields.Integer(allow_none=True)
    title = fields.String(required=True)
    card_ids = fields.List(fields.UUID(), required=True)
    created_at = fields.DateTime(allow_none=True)


class BoardListCreateSchema(Schema):
    """Payload accepted when creating a list."""

    board_public_id = fields.UUID(required=True)
    board_internal_id = fields.Integer(allow_none=True, load_default=None)
    title = fields.String(required=True, validate=Length(min=1, max=255))
    card_ids = fields.List(fields.UUID(), load_default=list)


class CardOrderSchema(Schema):
    """Full replacement of the card order of a list."""

    card_ids = fields.List(fields.UUID(), required=True)


class CardInsertSchema(Schema):
    """Single card insertion, appended unless ``position`` is given."""

    card_id = fields.UUID(required=True)
    position = fields.Integer(
        allow_none=True, load_default=None, validate=Range(min=0)
    )


__all__ = [
    "BoardListCreateSchema",
    "BoardListSchema",
    "CardInsertSchema",
    "CardOrderSchema",
]
