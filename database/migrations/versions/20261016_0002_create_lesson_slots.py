"""create lesson slots

Revision ID: 20261016_0002
Revises: 20261016_0001
Create Date: 2026-10-16 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261016_0002"
down_revision = "20261016_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "lesson_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("group_id", sa.String(length=50), nullable=False),
        sa.Column("day", sa.String(length=20), nullable=False),
        sa.Column("slot_id", sa.Integer(), nullable=False),
        sa.Column("disciplina", sa.String(length=200), nullable=True),
        sa.Column("professor", sa.String(length=200), nullable=True),
        sa.Column("turma", sa.String(length=100), nullable=True),
        sa.Column("updated_by_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("group_id", "day", "slot_id", name="uq_lesson_slots_group_day_slot"),
    )
    op.create_index("ix_lesson_slots_group_id", "lesson_slots", ["group_id"])


def downgrade() -> None:
    op.drop_index("ix_lesson_slots_group_id", table_name="lesson_slots")
    op.drop_table("lesson_slots")
