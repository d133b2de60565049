"""Initial schema — categories, movies, app_users

Revision ID: 0001
Revises: —
Create Date: 2025-01-01 00:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

classification_type = sa.Enum(
    "SEVEN", "THIRTEEN", "SIXTEEN", "EIGHTEEN",
    name="classification_type",
)
user_role = sa.Enum("Admin", "Registered", name="user_role")


def upgrade() -> None:
    # ── categories ────────────────────────────────────────────────────────────
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_categories_name", "categories", ["name"], unique=True)

    # ── movies ────────────────────────────────────────────────────────────────
    op.create_table(
        "movies",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("duration", sa.Integer, nullable=False),
        sa.Column("image_path", sa.String(500), nullable=True),
        sa.Column("image_local_path", sa.String(500), nullable=True),
        sa.Column("classification", classification_type, nullable=False),
        sa.Column(
            "category_id",
            sa.Integer,
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("duration > 0", name="chk_movies_duration_positive"),
    )
    op.create_index("ix_movies_name", "movies", ["name"])
    op.create_index("ix_movies_category_id", "movies", ["category_id"])

    # ── app_users ─────────────────────────────────────────────────────────────
    op.create_table(
        "app_users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_name", sa.String(256), nullable=False),
        sa.Column("name", sa.String(256), nullable=True),
        sa.Column("email", sa.String(256), nullable=True),
        sa.Column("password_hash", sa.String, nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="Registered"),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_app_users_user_name", "app_users", ["user_name"], unique=True)
    # Case-insensitive lookups on login
    op.create_index(
        "ix_app_users_user_name_lower",
        "app_users",
        [sa.text("lower(user_name)")],
        unique=True,
    )


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("app_users")
    op.drop_table("movies")
    op.drop_table("categories")
    user_role.drop(op.get_bind(), checkfirst=True)
    classification_type.drop(op.get_bind(), checkfirst=True)
