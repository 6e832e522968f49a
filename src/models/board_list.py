"""SQLAlchemy model for the lists of a project board."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.session import Base
from src.db.uuid_array import EMPTY_ARRAY, UUIDArray


class BoardList(Base):
    """A column of a board holding an ordered set of cards."""

    __tablename__ = "lists"
    __table_args__ = (
        Index("ix_lists_board_created", "board_public_id", "created_at"),
    )

    # SQLite only autoincrements INTEGER PRIMARY KEY columns.
    internal_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    public_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    board_public_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, nullable=False, index=True
    )
    board_internal_id: Mapped[int | None] = mapped_column(BigInteger())
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    card_ids: Mapped[list[uuid.UUID]] = mapped_column(
        UUIDArray(),
        nullable=False,
        default=list,
        server_default=text(f"'{EMPTY_ARRAY}'"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return (
            f"BoardList(public_id={self.public_id!s}, title={self.title!r}, "
            f"cards={len(self.card_ids or [])})"
        )


__all__ = ["BoardList"]
