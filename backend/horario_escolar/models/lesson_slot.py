from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from horario_escolar.db.base import Base


class LessonSlot(Base):
    """One cell of the live timetable. Empty fields are stored as NULL, never as ''."""

    __tablename__ = "lesson_slots"
    __table_args__ = (
        UniqueConstraint("group_id", "day", "slot_id", name="uq_lesson_slots_group_day_slot"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    day: Mapped[str] = mapped_column(String(20), nullable=False)
    slot_id: Mapped[int] = mapped_column(Integer, nullable=False)
    disciplina: Mapped[str | None] = mapped_column(String(200), nullable=True)
    professor: Mapped[str | None] = mapped_column(String(200), nullable=True)
    turma: Mapped[str | None] = mapped_column(String(100), nullable=True)
    updated_by_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
