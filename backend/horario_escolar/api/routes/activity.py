from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from horario_escolar.api.deps import get_db, require_roles
from horario_escolar.models.activity_log import ActivityLog
from horario_escolar.models.user import EDITOR_ROLES, User, UserRole
from horario_escolar.schemas.activity import ActivityLogOut

router = APIRouter()


@router.get("/logs", response_model=list[ActivityLogOut])
def list_activity_logs(
    grupo_id: str | None = Query(default=None, alias="grupoId"),
    current_user: User = Depends(require_roles(*EDITOR_ROLES, UserRole.coordenacao)),
    db: Session = Depends(get_db),
) -> list[ActivityLogOut]:
    query = select(ActivityLog)
    if grupo_id:
        query = query.where(ActivityLog.group_id == grupo_id)
    query = query.order_by(ActivityLog.created_at.desc()).limit(500)
    return list(db.execute(query).scalars())
