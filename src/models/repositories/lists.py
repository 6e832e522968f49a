"""Repository helpers for board lists and their card ordering."""

from __future__ import annotations

import uuid
from typing import Iterable, Optional, Sequence

from sqlalchemy import select

from src.models.board_list import BoardList

from .base import SQLAlchemyRepository, repository_method


class ListRepository(SQLAlchemyRepository):
    """Manage ``BoardList`` records."""

    @repository_method
    def create_list(
        self,
        *,
        board_public_id: uuid.UUID,
        title: str,
        card_ids: Optional[Iterable[uuid.UUID]] = None,
        board_internal_id: Optional[int] = None,
        public_id: Optional[uuid.UUID] = None,
    ) -> BoardList:
        board_list = BoardList(
            public_id=public_id or uuid.uuid4(),
            board_public_id=board_public_id,
            board_internal_id=board_internal_id,
            title=title,
            card_ids=list(card_ids or []),
        )
        self.session.add(board_list)
        self._flush()
        return board_list

    @repository_method
    def get_by_public_id(self, public_id: uuid.UUID) -> Optional[BoardList]:
        stmt = select(BoardList).where(BoardList.public_id == public_id)
        return self.session.execute(stmt).scalar_one_or_none()

    @repository_method
    def list_for_board(self, board_public_id: uuid.UUID) -> list[BoardList]:
        stmt = (
            select(BoardList)
            .where(BoardList.board_public_id == board_public_id)
            .order_by(BoardList.created_at.asc(), BoardList.internal_id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    @repository_method
    def set_card_order(
        self, board_list: BoardList, card_ids: Sequence[uuid.UUID]
    ) -> BoardList:
        """Replace the cards of ``board_list`` keeping the given order."""

        board_list.card_ids = list(card_ids)
        self._flush()
        return board_list

    @repository_method
    def add_card(
        self,
        board_list: BoardList,
        card_id: uuid.UUID,
        *,
        position: Optional[int] = None,
    ) -> BoardList:
        """Insert ``card_id`` at ``position`` (appended when omitted)."""

        cards = list(board_list.card_ids)
        if position is None:
            cards.append(card_id)
        else:
            cards.insert(position, card_id)
        # Assign a new list so the ORM sees the change.
        board_list.card_ids = cards
        self._flush()
        return board_list

    @repository_method
    def remove_card(self, board_list: BoardList, card_id: uuid.UUID) -> bool:
        """Remove every occurrence of ``card_id``; return whether any existed."""

        cards = [card for card in board_list.card_ids if card != card_id]
        if len(cards) == len(board_list.card_ids):
            return False
        board_list.card_ids = cards
        self._flush()
        return True

    @repository_method
    def delete_list(self, board_list: BoardList) -> None:
        self.session.delete(board_list)
        self._flush()


__all__ = ["ListRepository"]
