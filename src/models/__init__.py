"""Model exports for convenience."""

from src.db.session import Base
from src.models.board_list import BoardList

__all__ = ["Base", "BoardList"]
