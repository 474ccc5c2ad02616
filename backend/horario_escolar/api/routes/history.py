from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from horario_escolar.api.deps import get_current_user, get_db
from horario_escolar.core.config import get_settings
from horario_escolar.models.user import User
from horario_escolar.schemas.audit import AuditEntryOut, AuditStatistics
from horario_escolar.services.audit import audit_statistics, parse_audit_filters, query_audit, slot_history

settings = get_settings()
router = APIRouter()


# Query values stay strings so that malformed filters are dropped instead of rejected with 422.
@router.get("/historico", response_model=list[AuditEntryOut])
def list_history(
    grupo_id: str | None = Query(default=None, alias="grupoId"),
    dia: str | None = Query(default=None),
    slot_id: str | None = Query(default=None, alias="slotId"),
    usuario_id: str | None = Query(default=None, alias="usuarioId"),
    tipo_alteracao: str | None = Query(default=None, alias="tipoAlteracao"),
    data_inicio: str | None = Query(default=None, alias="dataInicio"),
    data_fim: str | None = Query(default=None, alias="dataFim"),
    limite: str | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[AuditEntryOut]:
    filters = parse_audit_filters(
        group_id=grupo_id,
        day=dia,
        slot_id=slot_id,
        user_id=usuario_id,
        change_type=tipo_alteracao,
        date_from=data_inicio,
        date_to=data_fim,
        limit=limite,
    )
    if filters.limit is None:
        filters.limit = settings.audit_query_default_limit
    return query_audit(db, filters)


@router.get("/historico/estatisticas", response_model=AuditStatistics)
def history_statistics(
    data_inicio: str | None = Query(default=None, alias="dataInicio"),
    data_fim: str | None = Query(default=None, alias="dataFim"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AuditStatistics:
    return audit_statistics(db, date_from=data_inicio, date_to=data_fim)


@router.get("/historico/horario/{grupo_id}/{dia}/{slot_id}", response_model=list[AuditEntryOut])
def history_for_slot(
    grupo_id: str,
    dia: str,
    slot_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[AuditEntryOut]:
    return slot_history(db, group_id=grupo_id, day=dia, slot_id=slot_id)
