import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from horario_escolar.api.deps import get_current_user, get_db, get_layout, require_editor
from horario_escolar.models.user import User
from horario_escolar.schemas.grades import GroupGrades
from horario_escolar.schemas.timetable import (
    GroupClearResult,
    GroupTimetable,
    SchoolLayout,
    SlotClearResult,
    SlotReference,
    SlotSaveRequest,
    SlotSaveResult,
    Timetable,
)
from horario_escolar.services.activity import mirror_activity
from horario_escolar.services.grade_views import build_class_grade, build_teacher_grade
from horario_escolar.services.timetable_store import (
    clear_group,
    clear_slot,
    read_full_timetable,
    read_group_timetable,
    upsert_slot,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/horarios", response_model=Timetable)
def get_timetable(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> Timetable:
    return read_full_timetable(db, layout)


@router.get("/horarios/{grupo_id}", response_model=GroupTimetable)
def get_group_timetable(
    grupo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> GroupTimetable:
    return read_group_timetable(db, layout, grupo_id)


@router.get("/horarios/{grupo_id}/grades", response_model=GroupGrades)
def get_group_grades(
    grupo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> GroupGrades:
    slots = layout.slots_for(grupo_id)
    group_timetable = read_group_timetable(db, layout, grupo_id)
    return GroupGrades(
        grupo_id=grupo_id,
        professores=build_teacher_grade(group_timetable, slots, layout.dias_semana),
        turmas=build_class_grade(group_timetable, slots, layout.dias_semana),
    )


@router.post("/horarios", response_model=SlotSaveResult)
def save_slot(
    payload: SlotSaveRequest,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> SlotSaveResult:
    result = upsert_slot(
        db,
        layout,
        group_id=payload.grupo_id,
        day=payload.dia,
        slot_id=payload.slot_id,
        content=payload.content(),
        user=current_user,
    )
    db.commit()
    return result


@router.delete("/horarios", response_model=SlotClearResult)
def delete_slot(
    payload: SlotReference = Body(...),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> SlotClearResult:
    cleared = clear_slot(
        db,
        layout,
        group_id=payload.grupo_id,
        day=payload.dia,
        slot_id=payload.slot_id,
        user=current_user,
    )
    db.commit()
    return SlotClearResult(limpo=cleared)


@router.delete("/horarios/grupo/{grupo_id}", response_model=GroupClearResult)
def delete_group(
    grupo_id: str,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> GroupClearResult:
    cleared = clear_group(db, layout, grupo_id, user=current_user)
    db.commit()
    logger.info("GROUP CLEARED | group_id=%s | user_id=%s | slots=%s", grupo_id, current_user.id, cleared)
    mirror_activity(
        db,
        user=current_user,
        action="Horário do grupo limpo",
        message=f"{cleared} aulas removidas",
        group_id=grupo_id,
        entity_type="horarios",
        entity_id=grupo_id,
    )
    return GroupClearResult(grupo_id=grupo_id, slots_limpos=cleared)
