"""create lists table"""

from alembic import op
import sqlalchemy as sa

from src.db.uuid_array import UUIDArray


revision = "202610190001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "lists",
        sa.Column(
            "internal_id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("public_id", sa.Uuid(), nullable=False),
        sa.Column("board_public_id", sa.Uuid(), nullable=False),
        sa.Column("board_internal_id", sa.BigInteger()),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column(
            "card_ids",
            UUIDArray(),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("public_id", name="uq_lists_public_id"),
    )
    op.create_index("ix_lists_board_public_id", "lists", ["board_public_id"])
    op.create_index(
        "ix_lists_board_created", "lists", ["board_public_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_lists_board_created", table_name="lists")
    op.drop_index("ix_lists_board_public_id", table_name="lists")
    op.drop_table("lists")
