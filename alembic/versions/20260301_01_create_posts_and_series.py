"""Create posts and post_series_items tables.

Revision ID: 20260301_01
Revises:
Create Date: 2026-03-01 00:00:00
"""

# pylint: disable=invalid-name,missing-module-docstring

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20260301_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create posts and post_series_items."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table("posts"):
        op.create_table(
            "posts",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("slug", sa.String(length=200), nullable=True),
            sa.Column("title", sa.String(length=200), nullable=False),
            sa.Column("excerpt", sa.Text(), nullable=False, server_default=""),
            sa.Column("content", sa.Text(), nullable=False, server_default=""),
            sa.Column("category", sa.String(length=50), nullable=False),
            sa.Column("tags", sa.JSON(), nullable=True),
            sa.Column(
                "tags_searchable", sa.Text(), nullable=False, server_default=""
            ),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            ),
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
                nullable=False,
            ),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_posts_slug"), "posts", ["slug"], unique=True)
        op.create_index(op.f("ix_posts_category"), "posts", ["category"], unique=False)
        op.create_index(
            op.f("ix_posts_created_at"), "posts", ["created_at"], unique=False
        )

    if not inspector.has_table("post_series_items"):
        op.create_table(
            "post_series_items",
            sa.Column("post_id", sa.String(length=36), nullable=False),
            sa.Column("series_slug", sa.String(length=80), nullable=False),
            sa.Column("series_title", sa.String(length=120), nullable=False),
            sa.Column("position", sa.Integer(), nullable=True),
            sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("post_id"),
        )
        op.create_index(
            op.f("ix_post_series_items_series_slug"),
            "post_series_items",
            ["series_slug"],
            unique=False,
        )


def downgrade():
    """Drop post_series_items and posts."""
    op.drop_index(
        op.f("ix_post_series_items_series_slug"), table_name="post_series_items"
    )
    op.drop_table("post_series_items")
    op.drop_index(op.f("ix_posts_created_at"), table_name="posts")
    op.drop_index(op.f("ix_posts_category"), table_name="posts")
    op.drop_index(op.f("ix_posts_slug"), table_name="posts")
    op.drop_table("posts")
