from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from horario_escolar.core.exceptions import PersistenceError, TimetableValidationError, UnknownGroupError
from horario_escolar.models.audit_entry import ChangeType
from horario_escolar.models.lesson_slot import LessonSlot
from horario_escolar.models.user import User
from horario_escolar.schemas.timetable import (
    GroupTimetable,
    LessonContent,
    SchoolLayout,
    SlotDefinition,
    SlotSaveResult,
    Timetable,
)
from horario_escolar.services.audit import record_change

logger = logging.getLogger(__name__)

# Audited in this order when one save touches several fields.
AUDITED_FIELDS = ("disciplina", "professor", "turma")
FIELD_LABELS = {"disciplina": "Disciplina alterada", "professor": "Professor alterado", "turma": "Turma alterada"}


def _row_content(row: LessonSlot) -> LessonContent | None:
    if not (row.disciplina or row.professor or row.turma):
        return None
    return LessonContent(disciplina=row.disciplina, professor=row.professor, turma=row.turma)


def _row_values(row: LessonSlot) -> dict[str, str | None]:
    return {"disciplina": row.disciplina, "professor": row.professor, "turma": row.turma}


def _summary(values: dict[str, Any]) -> str:
    return " - ".join(values.get(field) or "" for field in AUDITED_FIELDS)


def empty_group_timetable(slots: list[SlotDefinition], days: list[str]) -> GroupTimetable:
    """Every teachable slot of every day set to ``None``; break slots are left out."""
    return {day: {slot.id: None for slot in slots if slot.tipo == "aula"} for day in days}


def resolve_slot(layout: SchoolLayout, group_id: str, day: str, slot_id: int) -> SlotDefinition:
    try:
        slots = layout.slots_for(group_id)
    except UnknownGroupError as exc:
        raise TimetableValidationError(
            f"Grupo inválido: {group_id}", details={"field": "grupoId", "value": group_id}
        ) from exc
    if day not in layout.dias_semana:
        raise TimetableValidationError(f"Dia inválido: {day}", details={"field": "dia", "value": day})
    for slot in slots:
        if slot.id == slot_id:
            return slot
    raise TimetableValidationError(
        f"Horário {slot_id} não existe no grupo {group_id}", details={"field": "slotId", "value": slot_id}
    )


def _find_row(db: Session, group_id: str, day: str, slot_id: int) -> LessonSlot | None:
    query = select(LessonSlot).where(
        LessonSlot.group_id == group_id,
        LessonSlot.day == day,
        LessonSlot.slot_id == slot_id,
    )
    return db.execute(query).scalar_one_or_none()


def read_full_timetable(db: Session, layout: SchoolLayout) -> Timetable:
    timetable: Timetable = {
        group.id: empty_group_timetable(layout.slots_for(group.id), layout.dias_semana)
        for group in layout.grupos
    }
    rows = db.execute(
        select(LessonSlot).order_by(LessonSlot.group_id, LessonSlot.day, LessonSlot.slot_id)
    ).scalars()
    for row in rows:
        day_slots = timetable.get(row.group_id, {}).get(row.day)
        # Rows left behind by a layout change are not part of the timetable.
        if day_slots is None or row.slot_id not in day_slots:
            continue
        day_slots[row.slot_id] = _row_content(row)
    return timetable


def read_group_timetable(db: Session, layout: SchoolLayout, group_id: str) -> GroupTimetable:
    group_timetable = empty_group_timetable(layout.slots_for(group_id), layout.dias_semana)
    rows = db.execute(
        select(LessonSlot).where(LessonSlot.group_id == group_id).order_by(LessonSlot.day, LessonSlot.slot_id)
    ).scalars()
    for row in rows:
        day_slots = group_timetable.get(row.day)
        if day_slots is None or row.slot_id not in day_slots:
            continue
        day_slots[row.slot_id] = _row_content(row)
    return group_timetable


def stranded_lessons(db: Session, layout: SchoolLayout) -> list[LessonSlot]:
    """Occupied rows whose group, day or teachable slot does not exist in ``layout``."""
    teachable = {
        (group.id, day, slot.id)
        for group in layout.grupos
        for slot in layout.slots_for(group.id)
        if slot.tipo == "aula"
        for day in layout.dias_semana
    }
    rows = db.execute(
        select(LessonSlot).order_by(LessonSlot.group_id, LessonSlot.day, LessonSlot.slot_id)
    ).scalars()
    return [
        row
        for row in rows
        if _row_content(row) is not None and (row.group_id, row.day, row.slot_id) not in teachable
    ]


def upsert_slot(
    db: Session,
    layout: SchoolLayout,
    *,
    group_id: str,
    day: str,
    slot_id: int,
    content: LessonContent,
    user: User,
) -> SlotSaveResult:
    """Write one slot and its audit entries to the session. The caller commits.

    When another writer creates the same slot between the lookup and the
    insert, the session is rolled back and the save becomes an update of
    that row, so the last save wins.
    """
    slot = resolve_slot(layout, group_id, day, slot_id)
    if slot.tipo != "aula":
        raise TimetableValidationError(
            f"Horário {slot_id} do grupo {group_id} é um intervalo e não pode receber aula",
            details={"field": "slotId", "value": slot_id},
        )

    new_values = content.storage_values()
    row = _find_row(db, group_id, day, slot_id)

    if row is None:
        user_id = user.id
        row = LessonSlot(group_id=group_id, day=day, slot_id=slot_id, updated_by_id=user_id, **new_values)
        db.add(row)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            logger.info(
                "SLOT INSERT RACE | group=%s | day=%s | slot=%s | user_id=%s", group_id, day, slot_id, user_id
            )
            row = _find_row(db, group_id, day, slot_id)
            if row is None:
                raise
        else:
            record_change(
                db,
                user_id=user_id,
                change_type=ChangeType.criar,
                record_id=row.id,
                group_id=group_id,
                day=day,
                slot_id=slot_id,
                new_value=content.model_dump(),
                details=f"Horário criado: {_summary(new_values)}",
            )
            return SlotSaveResult(id=row.id, criado=True)

    old_values = _row_values(row)
    for field in AUDITED_FIELDS:
        before, after = old_values[field], new_values[field]
        if before == after:
            continue
        record_change(
            db,
            user_id=user.id,
            change_type=ChangeType.atualizar,
            record_id=row.id,
            group_id=group_id,
            day=day,
            slot_id=slot_id,
            field_changed=field,
            previous_value=before,
            new_value=after,
            details=f'{FIELD_LABELS[field]} de "{before or "vazio"}" para "{after or "vazio"}"',
        )
    for field, value in new_values.items():
        setattr(row, field, value)
    row.updated_by_id = user.id
    return SlotSaveResult(id=row.id, criado=False)


def clear_slot(
    db: Session,
    layout: SchoolLayout,
    *,
    group_id: str,
    day: str,
    slot_id: int,
    user: User,
) -> bool:
    """Empty one slot. Returns whether it had content (and so was audited)."""
    resolve_slot(layout, group_id, day, slot_id)
    row = _find_row(db, group_id, day, slot_id)
    if row is None:
        return False
    had_content = _row_content(row) is not None
    if had_content:
        previous = _row_values(row)
        record_change(
            db,
            user_id=user.id,
            change_type=ChangeType.limpar,
            record_id=row.id,
            group_id=group_id,
            day=day,
            slot_id=slot_id,
            previous_value=previous,
            details=f"Horário limpo: {_summary(previous)}",
        )
    row.disciplina = None
    row.professor = None
    row.turma = None
    row.updated_by_id = user.id
    return had_content


def clear_group(db: Session, layout: SchoolLayout, group_id: str, *, user: User) -> int:
    """Empty every slot of a group, one ``limpar`` entry per occupied slot."""
    layout.slots_for(group_id)
    rows = db.execute(
        select(LessonSlot).where(LessonSlot.group_id == group_id).order_by(LessonSlot.day, LessonSlot.slot_id)
    ).scalars().all()
    cleared = 0
    for row in rows:
        if _row_content(row) is not None:
            previous = _row_values(row)
            record_change(
                db,
                user_id=user.id,
                change_type=ChangeType.limpar,
                record_id=row.id,
                group_id=group_id,
                day=row.day,
                slot_id=row.slot_id,
                previous_value=previous,
                details=f"Grupo limpo: {_summary(previous)}",
            )
            cleared += 1
        row.disciplina = None
        row.professor = None
        row.turma = None
        row.updated_by_id = user.id
    return cleared


def validate_full_timetable(layout: SchoolLayout, timetable: Timetable) -> None:
    """Reject content for unknown groups, days, slots or break slots before a replace starts."""
    for group_id, group_timetable in timetable.items():
        for day, day_slots in group_timetable.items():
            for slot_id, content in day_slots.items():
                if content is None or content.is_empty():
                    continue
                slot = resolve_slot(layout, group_id, day, slot_id)
                if slot.tipo != "aula":
                    raise TimetableValidationError(
                        f"Horário {slot_id} do grupo {group_id} é um intervalo e não pode receber aula",
                        details={"grupoId": group_id, "dia": day, "slotId": slot_id},
                    )


def replace_timetable(
    db: Session,
    layout: SchoolLayout,
    timetable: Timetable,
    *,
    user: User,
    audit_details: str,
    audit_new_value: dict,
) -> int:
    """Swap the whole live timetable for ``timetable`` in one transaction.

    Writes exactly one coarse audit entry. On any database error the session is
    rolled back and ``PersistenceError`` is raised, so nothing partial is left.
    Returns the number of occupied slots written.
    """
    validate_full_timetable(layout, timetable)
    written = 0
    try:
        db.execute(delete(LessonSlot))
        for group_id, group_timetable in timetable.items():
            for day, day_slots in group_timetable.items():
                for slot_id, content in day_slots.items():
                    if content is None or content.is_empty():
                        continue
                    db.add(
                        LessonSlot(
                            group_id=group_id,
                            day=day,
                            slot_id=slot_id,
                            updated_by_id=user.id,
                            **content.storage_values(),
                        )
                    )
                    written += 1
        db.flush()
        record_change(
            db,
            user_id=user.id,
            change_type=ChangeType.atualizar,
            new_value=audit_new_value,
            details=audit_details,
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("TIMETABLE REPLACE ROLLED BACK | user_id=%s | details=%s", user.id, audit_details)
        raise PersistenceError("Não foi possível substituir o horário; nenhuma alteração foi aplicada") from exc
    return written
