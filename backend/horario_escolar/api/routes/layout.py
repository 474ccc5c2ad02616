import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from horario_escolar.api.deps import get_current_user, get_db, get_layout, require_editor
from horario_escolar.models.user import User
from horario_escolar.schemas.timetable import SchoolLayout
from horario_escolar.services.activity import mirror_activity
from horario_escolar.services.layout import save_school_layout

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/configuracao", response_model=SchoolLayout)
def read_layout(
    current_user: User = Depends(get_current_user),
    layout: SchoolLayout = Depends(get_layout),
) -> SchoolLayout:
    return layout


@router.put("/configuracao", response_model=SchoolLayout)
def update_layout(
    payload: SchoolLayout,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> SchoolLayout:
    layout = save_school_layout(db, payload, user=current_user)
    db.commit()
    logger.info("SCHOOL LAYOUT UPDATED | user_id=%s | groups=%s", current_user.id, [g.id for g in layout.grupos])
    mirror_activity(
        db,
        user=current_user,
        action="Configuração atualizada",
        message=f"{len(layout.grupos)} grupos, {len(layout.dias_semana)} dias",
        entity_type="configuracao",
    )
    return layout
