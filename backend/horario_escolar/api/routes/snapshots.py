import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from horario_escolar.api.deps import get_current_user, get_db, get_layout, require_editor
from horario_escolar.core.config import get_settings
from horario_escolar.models.user import User
from horario_escolar.schemas.snapshot import (
    RestoreResult,
    SnapshotCreate,
    SnapshotCreated,
    SnapshotDiff,
    SnapshotOut,
    SnapshotSummary,
)
from horario_escolar.schemas.timetable import SchoolLayout
from horario_escolar.services.activity import mirror_activity
from horario_escolar.services.snapshots import (
    create_snapshot,
    delete_snapshot,
    diff_snapshot_with_live,
    get_snapshot,
    list_snapshots,
    restore_snapshot,
)
from horario_escolar.services.timetable_store import read_full_timetable, validate_full_timetable

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/snapshots", response_model=SnapshotCreated, status_code=status.HTTP_201_CREATED)
def create_snapshot_endpoint(
    payload: SnapshotCreate,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> SnapshotCreated:
    if payload.dados is None:
        timetable = read_full_timetable(db, layout)
    else:
        validate_full_timetable(layout, payload.dados)
        timetable = payload.dados

    snapshot = create_snapshot(
        db,
        name=payload.nome,
        description=payload.descricao,
        timetable=timetable,
        user=current_user,
    )
    db.commit()
    db.refresh(snapshot)
    logger.info("SNAPSHOT CREATED | snapshot_id=%s | user_id=%s", snapshot.id, current_user.id)
    mirror_activity(
        db,
        user=current_user,
        action="Snapshot criado",
        message=f'Versão "{snapshot.name}" salva',
        entity_type="snapshot",
        entity_id=str(snapshot.id),
    )
    return SnapshotCreated(
        id=snapshot.id,
        nome=snapshot.name,
        descricao=snapshot.description,
        criado_em=snapshot.created_at,
    )


@router.get("/snapshots", response_model=list[SnapshotSummary])
def list_snapshots_endpoint(
    limite: int | None = Query(default=None, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[SnapshotSummary]:
    limit = min(limite or settings.snapshot_list_default_limit, settings.snapshot_list_max_limit)
    return list_snapshots(db, limit=limit)


@router.get("/snapshots/{snapshot_id}", response_model=SnapshotOut)
def get_snapshot_endpoint(
    snapshot_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SnapshotOut:
    snapshot = get_snapshot(db, snapshot_id)
    if snapshot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Snapshot não encontrado")
    return snapshot


@router.delete("/snapshots/{snapshot_id}")
def delete_snapshot_endpoint(
    snapshot_id: int,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> dict:
    delete_snapshot(db, snapshot_id)
    db.commit()
    logger.info("SNAPSHOT DELETED | snapshot_id=%s | user_id=%s", snapshot_id, current_user.id)
    return {"success": True}


@router.get("/snapshots/{snapshot_id}/diff", response_model=SnapshotDiff)
def diff_snapshot_endpoint(
    snapshot_id: int,
    grupo_id: str = Query(..., alias="grupoId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> SnapshotDiff:
    diff = diff_snapshot_with_live(db, layout, snapshot_id=snapshot_id, group_id=grupo_id)
    if diff is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Snapshot não encontrado")
    return diff


@router.post("/snapshots/{snapshot_id}/restaurar", response_model=RestoreResult)
def restore_snapshot_endpoint(
    snapshot_id: int,
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
    layout: SchoolLayout = Depends(get_layout),
) -> RestoreResult:
    result = restore_snapshot(db, layout, snapshot_id=snapshot_id, user=current_user)
    mirror_activity(
        db,
        user=current_user,
        action="Snapshot restaurado",
        message=f'Versão "{result.nome}" restaurada ({result.aulas_restauradas} aulas)',
        entity_type="snapshot",
        entity_id=str(result.snapshot_id),
    )
    return result
