"""Create livestock table

Revision ID: 001_create_livestock
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

revision = "001_create_livestock"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create livestock table with lookup indexes."""
    op.create_table(
        "livestock",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", sa.String(length=7), nullable=False),
        sa.Column("tag_number", sa.String(length=20), nullable=True),
        sa.Column("breed", sa.String(length=100), nullable=True),
        sa.Column("sex", sa.String(length=7), nullable=False, server_default="unknown"),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("weight_kg", sa.Numeric(10, 2), nullable=True),
        sa.Column("status", sa.String(length=8), nullable=False, server_default="active"),
        sa.Column("dam_id", sa.String(length=36), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
            onupdate=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["dam_id"], ["livestock.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("tag_number"),
    )

    op.create_index(op.f("ix_livestock_type"), "livestock", ["type"], unique=False)
    op.create_index(op.f("ix_livestock_sex"), "livestock", ["sex"], unique=False)
    op.create_index(op.f("ix_livestock_status"), "livestock", ["status"], unique=False)
    op.create_index(op.f("ix_livestock_dam_id"), "livestock", ["dam_id"], unique=False)


def downgrade() -> None:
    """Drop livestock table."""
    op.drop_index(op.f("ix_livestock_dam_id"), table_name="livestock")
    op.drop_index(op.f("ix_livestock_status"), table_name="livestock")
    op.drop_index(op.f("ix_livestock_sex"), table_name="livestock")
    op.drop_index(op.f("ix_livestock_type"), table_name="livestock")
    op.drop_table("livestock")
