from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from horario_escolar.api.deps import get_current_user, get_db, get_layout, require_editor
from horario_escolar.models.user import User
from horario_escolar.schemas.timetable import SchoolLayout
from horario_escolar.schemas.transfer import ExportBundle, ImportRequest, ImportResult
from horario_escolar.services.activity import mirror_activity
from horario_escolar.services.transfer import build_export, import_timetable

router = APIRouter()


@router.get("/exportar", response_model=ExportBundle)
def export_timetable(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> ExportBundle:
    return build_export(db, layout)


@router.post("/importar", response_model=ImportResult)
def import_timetable_endpoint(
    payload: ImportRequest,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> ImportResult:
    result = import_timetable(db, layout, payload, user=current_user)
    mirror_activity(
        db,
        user=current_user,
        action="Horário importado",
        message=f"{result.aulas_importadas} aulas em {len(result.grupos)} grupos",
        entity_type="horarios",
    )
    return result
