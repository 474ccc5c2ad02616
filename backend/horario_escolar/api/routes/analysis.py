from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from horario_escolar.api.deps import get_current_user, get_db, get_layout
from horario_escolar.models.user import User
from horario_escolar.schemas.analysis import (
    ConflictReport,
    DashboardStats,
    DraftGroupTimetable,
    DraftTimetable,
    QualityReport,
)
from horario_escolar.schemas.timetable import SchoolLayout
from horario_escolar.services.analysis import TimetableAnalyzer, dashboard_stats
from horario_escolar.services.timetable_store import read_full_timetable, read_group_timetable

router = APIRouter()


@router.get("/analise/conflitos", response_model=ConflictReport)
def live_conflicts(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> ConflictReport:
    return TimetableAnalyzer(read_full_timetable(db, layout), layout).detect_teacher_conflicts()


@router.post("/analise/conflitos", response_model=ConflictReport)
def draft_conflicts(
    payload: DraftTimetable,
    current_user: User = Depends(get_current_user),
    layout: SchoolLayout = Depends(get_layout),
) -> ConflictReport:
    return TimetableAnalyzer(payload.horarios, layout).detect_teacher_conflicts()


@router.get("/analise/alertas/{grupo_id}", response_model=QualityReport)
def live_alerts(
    grupo_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> QualityReport:
    timetable = {grupo_id: read_group_timetable(db, layout, grupo_id)}
    return TimetableAnalyzer(timetable, layout).class_alerts(grupo_id)


@router.post("/analise/alertas/{grupo_id}", response_model=QualityReport)
def draft_alerts(
    grupo_id: str,
    payload: DraftGroupTimetable,
    current_user: User = Depends(get_current_user),
    layout: SchoolLayout = Depends(get_layout),
) -> QualityReport:
    return TimetableAnalyzer({grupo_id: payload.horario}, layout).class_alerts(grupo_id)


@router.get("/analise/painel", response_model=DashboardStats)
def live_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> DashboardStats:
    return dashboard_stats(read_full_timetable(db, layout), layout)


@router.post("/analise/painel", response_model=DashboardStats)
def draft_dashboard(
    payload: DraftTimetable,
    current_user: User = Depends(get_current_user),
    layout: SchoolLayout = Depends(get_layout),
) -> DashboardStats:
    return dashboard_stats(payload.horarios, layout)
