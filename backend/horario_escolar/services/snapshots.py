"""Named full copies of the timetable, their field-level diff against the live
timetable, and restore.

The diff walks the *live* layout of the group. If slots were added, removed or
retyped after the snapshot was taken, lesson numbers may not line up with what
the snapshot author saw.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from horario_escolar.core.exceptions import ResourceNotFoundError
from horario_escolar.models.timetable_snapshot import TimetableSnapshot
from horario_escolar.models.user import User
from horario_escolar.schemas.snapshot import (
    RestoreResult,
    SnapshotDiff,
    SnapshotDiffEntry,
    SnapshotOut,
    SnapshotSummary,
)
from horario_escolar.schemas.timetable import (
    CONTENT_FIELDS,
    GroupTimetable,
    SchoolLayout,
    SlotDefinition,
    Timetable,
    parse_timetable,
    serialize_timetable,
)
from horario_escolar.schemas.user import UserRef
from horario_escolar.services.grade_views import iter_lessons
from horario_escolar.services.timetable_store import read_group_timetable, replace_timetable

logger = logging.getLogger(__name__)


def _owner(user: User) -> UserRef:
    return UserRef(id=user.id, nome=user.name, perfil=user.role)


def create_snapshot(
    db: Session,
    *,
    name: str,
    description: str | None,
    timetable: Timetable,
    user: User,
) -> TimetableSnapshot:
    # serialize_timetable builds new dicts, so later edits to ``timetable`` do not leak in.
    snapshot = TimetableSnapshot(
        name=name,
        description=description,
        payload=serialize_timetable(timetable),
        user_id=user.id,
    )
    db.add(snapshot)
    db.flush()
    return snapshot


def list_snapshots(db: Session, *, limit: int) -> list[SnapshotSummary]:
    query = (
        select(TimetableSnapshot, User)
        .join(User, TimetableSnapshot.user_id == User.id)
        .order_by(TimetableSnapshot.created_at.desc(), TimetableSnapshot.id.desc())
        .limit(limit)
    )
    return [
        SnapshotSummary(
            id=snapshot.id,
            nome=snapshot.name,
            descricao=snapshot.description,
            criado_em=snapshot.created_at,
            usuario=_owner(user),
        )
        for snapshot, user in db.execute(query).all()
    ]


def get_snapshot(db: Session, snapshot_id: int) -> SnapshotOut | None:
    query = (
        select(TimetableSnapshot, User)
        .join(User, TimetableSnapshot.user_id == User.id)
        .where(TimetableSnapshot.id == snapshot_id)
    )
    row = db.execute(query).first()
    if row is None:
        return None
    snapshot, user = row
    return SnapshotOut(
        id=snapshot.id,
        nome=snapshot.name,
        descricao=snapshot.description,
        criado_em=snapshot.created_at,
        usuario=_owner(user),
        dados=parse_timetable(snapshot.payload),
    )


def delete_snapshot(db: Session, snapshot_id: int) -> None:
    snapshot = db.get(TimetableSnapshot, snapshot_id)
    if snapshot is None:
        raise ResourceNotFoundError("Snapshot", snapshot_id)
    db.delete(snapshot)


def diff_group(
    snapshot_group: GroupTimetable,
    live_group: GroupTimetable,
    slots: Sequence[SlotDefinition],
    days: Sequence[str],
) -> list[SnapshotDiffEntry]:
    """Field-by-field differences, snapshot value in ``de`` and live value in ``para``.

    Missing slots and missing fields both compare as ``""``.
    """
    diffs: list[SnapshotDiffEntry] = []
    for day in days:
        snapshot_day = snapshot_group.get(day, {})
        live_day = live_group.get(day, {})
        for number, slot in iter_lessons(slots):
            snapshot_content = snapshot_day.get(slot.id)
            live_content = live_day.get(slot.id)
            for field in CONTENT_FIELDS:
                before = getattr(snapshot_content, field, "") if snapshot_content is not None else ""
                after = getattr(live_content, field, "") if live_content is not None else ""
                if before != after:
                    diffs.append(SnapshotDiffEntry(dia=day, aula=number, campo=field, de=before, para=after))
    return diffs


def diff_snapshot_with_live(
    db: Session,
    layout: SchoolLayout,
    *,
    snapshot_id: int,
    group_id: str,
) -> SnapshotDiff | None:
    snapshot = get_snapshot(db, snapshot_id)
    if snapshot is None:
        return None
    slots = layout.slots_for(group_id)
    live_group = read_group_timetable(db, layout, group_id)
    diffs = diff_group(snapshot.dados.get(group_id, {}), live_group, slots, layout.dias_semana)
    return SnapshotDiff(snapshot_id=snapshot_id, grupo_id=group_id, diferencas=diffs)


def restore_snapshot(db: Session, layout: SchoolLayout, *, snapshot_id: int, user: User) -> RestoreResult:
    """Replace the live timetable of every group with the snapshot, atomically."""
    snapshot = get_snapshot(db, snapshot_id)
    if snapshot is None:
        raise ResourceNotFoundError("Snapshot", snapshot_id)

    written = replace_timetable(
        db,
        layout,
        snapshot.dados,
        user=user,
        audit_details=f'Snapshot restaurado: "{snapshot.nome}" (salvo em {snapshot.criado_em.isoformat()})',
        audit_new_value={"snapshotId": snapshot.id, "nome": snapshot.nome},
    )
    logger.info(
        "SNAPSHOT RESTORED | snapshot_id=%s | user_id=%s | slots=%s", snapshot.id, user.id, written
    )
    return RestoreResult(
        snapshot_id=snapshot.id,
        nome=snapshot.nome,
        grupos=sorted(snapshot.dados),
        aulas_restauradas=written,
    )
