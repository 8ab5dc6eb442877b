"""
Add collections, collection_members and collection_bookmarks tables.

The owner is stored on collections.owner_id and never in collection_members.
Both join tables use composite primary keys, so a user can be a member of a
collection once and a bookmark can be in a collection once.

Revision ID: 8d52e07b6a1f
Revises: 3f1c9a7d2b40
Create Date: 2026-10-12 09:31:07.880512
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d52e07b6a1f"
down_revision: str | Sequence[str] | None = "3f1c9a7d2b40"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "collections",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("is_public", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_collections_owner_id"), "collections", ["owner_id"], unique=False)

    op.create_table(
        "collection_members",
        sa.Column("collection_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("collection_id", "user_id"),
    )
    op.create_index(
        "ix_collection_members_user_id", "collection_members", ["user_id"], unique=False,
    )

    op.create_table(
        "collection_bookmarks",
        sa.Column("collection_id", sa.Integer(), nullable=False),
        sa.Column("bookmark_id", sa.Integer(), nullable=False),
        sa.Column(
            "added_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["collection_id"], ["collections.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["bookmark_id"], ["bookmarks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("collection_id", "bookmark_id"),
    )
    op.create_index(
        "ix_collection_bookmarks_bookmark_id",
        "collection_bookmarks",
        ["bookmark_id"],
        unique=False,
    )
    op.create_index(
        "ix_collection_bookmarks_collection_id_added_at",
        "collection_bookmarks",
        ["collection_id", "added_at"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(
        "ix_collection_bookmarks_collection_id_added_at", table_name="collection_bookmarks",
    )
    op.drop_index("ix_collection_bookmarks_bookmark_id", table_name="collection_bookmarks")
    op.drop_table("collection_bookmarks")
    op.drop_index("ix_collection_members_user_id", table_name="collection_members")
    op.drop_table("collection_members")
    op.drop_index(op.f("ix_collections_owner_id"), table_name="collections")
    op.drop_table("collections")
