"""create audit entries and timetable snapshots

Revision ID: 20261016_0003
Revises: 20261016_0002
Create Date: 2026-10-16 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261016_0003"
down_revision = "20261016_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "audit_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("change_type", sa.String(length=20), nullable=False),
        sa.Column("table_name", sa.String(length=50), nullable=False),
        sa.Column("record_id", sa.Integer(), nullable=True),
        sa.Column("group_id", sa.String(length=50), nullable=True),
        sa.Column("day", sa.String(length=20), nullable=True),
        sa.Column("slot_id", sa.Integer(), nullable=True),
        sa.Column("field_changed", sa.String(length=50), nullable=True),
        sa.Column("previous_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("timestamp", sa.String(length=40), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
    )
    op.create_index("ix_audit_entries_timestamp", "audit_entries", ["timestamp"])
    op.create_index("ix_audit_entries_slot", "audit_entries", ["group_id", "day", "slot_id"])
    op.create_index("ix_audit_entries_user_id", "audit_entries", ["user_id"])

    op.create_table(
        "timetable_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_timetable_snapshots_user_id", "timetable_snapshots", ["user_id"])
    op.create_index("ix_timetable_snapshots_created_at", "timetable_snapshots", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_timetable_snapshots_created_at", table_name="timetable_snapshots")
    op.drop_index("ix_timetable_snapshots_user_id", table_name="timetable_snapshots")
    op.drop_table("timetable_snapshots")
    op.drop_index("ix_audit_entries_user_id", table_name="audit_entries")
    op.drop_index("ix_audit_entries_slot", table_name="audit_entries")
    op.drop_index("ix_audit_entries_timestamp", table_name="audit_entries")
    op.drop_table("audit_entries")
