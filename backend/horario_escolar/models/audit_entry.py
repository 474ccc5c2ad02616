from enum import Enum

from sqlalchemy import Enum as SAEnum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from horario_escolar.db.base import Base


class ChangeType(str, Enum):
    criar = "criar"
    atualizar = "atualizar"
    deletar = "deletar"
    limpar = "limpar"


class AuditEntry(Base):
    """Append-only change history. Rows are inserted and read, never updated or deleted."""

    __tablename__ = "audit_entries"
    __table_args__ = (
        Index("ix_audit_entries_timestamp", "timestamp"),
        Index("ix_audit_entries_slot", "group_id", "day", "slot_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    change_type: Mapped[ChangeType] = mapped_column(
        SAEnum(ChangeType, name="change_type", native_enum=False, length=20), nullable=False
    )
    table_name: Mapped[str] = mapped_column(String(50), nullable=False)
    record_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    group_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    day: Mapped[str | None] = mapped_column(String(20), nullable=True)
    slot_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    field_changed: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # JSON text; SQL NULL means the value was null.
    previous_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # ISO-8601 UTC string so date filters can compare lexicographically.
    timestamp: Mapped[str] = mapped_column(String(40), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
