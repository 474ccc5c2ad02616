from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
from typing import Any

from sqlalchemy import Select, distinct, func, select
from sqlalchemy.orm import Session

from horario_escolar.models.audit_entry import AuditEntry, ChangeType
from horario_escolar.models.user import User
from horario_escolar.schemas.audit import AuditEntryOut, AuditStatistics, ChangeTypeCount, UserChangeCount
from horario_escolar.schemas.user import UserRef

TIMETABLE_TABLE = "horarios"
TOP_USERS_LIMIT = 10


def utc_timestamp() -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix, e.g. ``2025-03-01T10:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _dump_value(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def _load_value(raw: str | None) -> Any:
    if raw is None:
        return None
    return json.loads(raw)


def record_change(
    db: Session,
    *,
    user_id: str | None,
    change_type: ChangeType,
    table_name: str = TIMETABLE_TABLE,
    record_id: int | None = None,
    group_id: str | None = None,
    day: str | None = None,
    slot_id: int | None = None,
    field_changed: str | None = None,
    previous_value: Any = None,
    new_value: Any = None,
    details: str | None = None,
) -> AuditEntry:
    """Append one audit entry to the session and flush it.

    The flush makes a dangling ``user_id`` fail here instead of at commit time.
    """
    if not user_id:
        raise ValueError("Audit entries must be attributed to a user")
    entry = AuditEntry(
        change_type=change_type,
        table_name=table_name,
        record_id=record_id,
        group_id=group_id,
        day=day,
        slot_id=slot_id,
        field_changed=field_changed,
        previous_value=_dump_value(previous_value),
        new_value=_dump_value(new_value),
        user_id=user_id,
        timestamp=utc_timestamp(),
        details=details,
    )
    db.add(entry)
    db.flush()
    return entry


@dataclass
class AuditFilters:
    group_id: str | None = None
    day: str | None = None
    slot_id: int | None = None
    user_id: str | None = None
    change_type: ChangeType | None = None
    date_from: str | None = None
    date_to: str | None = None
    limit: int | None = None


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def _positive_int(value: str | int | None) -> int | None:
    if value is None:
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def parse_audit_filters(
    *,
    group_id: str | None = None,
    day: str | None = None,
    slot_id: str | int | None = None,
    user_id: str | None = None,
    change_type: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    limit: str | int | None = None,
) -> AuditFilters:
    """Build filters from raw query values. Blank or malformed values mean "no filter"."""
    parsed_type: ChangeType | None = None
    cleaned_type = _clean_text(change_type)
    if cleaned_type is not None:
        try:
            parsed_type = ChangeType(cleaned_type)
        except ValueError:
            parsed_type = None

    return AuditFilters(
        group_id=_clean_text(group_id),
        day=_clean_text(day),
        slot_id=_positive_int(slot_id),
        user_id=_clean_text(user_id),
        change_type=parsed_type,
        date_from=_clean_text(date_from),
        date_to=_clean_text(date_to),
        limit=_positive_int(limit),
    )


def _apply_date_range(query: Select, date_from: str | None, date_to: str | None) -> Select:
    if date_from:
        query = query.where(AuditEntry.timestamp >= date_from)
    if date_to:
        query = query.where(AuditEntry.timestamp <= date_to)
    return query


def to_entry_out(entry: AuditEntry, user: User) -> AuditEntryOut:
    return AuditEntryOut(
        id=entry.id,
        tipo_alteracao=entry.change_type,
        tabela=entry.table_name,
        registro_id=entry.record_id,
        grupo_id=entry.group_id,
        dia=entry.day,
        slot_id=entry.slot_id,
        campo_alterado=entry.field_changed,
        valor_anterior=_load_value(entry.previous_value),
        valor_novo=_load_value(entry.new_value),
        usuario=UserRef(id=user.id, nome=user.name, perfil=user.role),
        timestamp=entry.timestamp,
        detalhes=entry.details,
    )


def query_audit(db: Session, filters: AuditFilters) -> list[AuditEntryOut]:
    query = select(AuditEntry, User).join(User, AuditEntry.user_id == User.id)
    if filters.group_id:
        query = query.where(AuditEntry.group_id == filters.group_id)
    if filters.day:
        query = query.where(AuditEntry.day == filters.day)
    if filters.slot_id is not None:
        query = query.where(AuditEntry.slot_id == filters.slot_id)
    if filters.user_id:
        query = query.where(AuditEntry.user_id == filters.user_id)
    if filters.change_type is not None:
        query = query.where(AuditEntry.change_type == filters.change_type)
    query = _apply_date_range(query, filters.date_from, filters.date_to)
    query = query.order_by(AuditEntry.timestamp.desc(), AuditEntry.id.desc())
    if filters.limit:
        query = query.limit(filters.limit)
    return [to_entry_out(entry, user) for entry, user in db.execute(query).all()]


def slot_history(db: Session, *, group_id: str, day: str, slot_id: int) -> list[AuditEntryOut]:
    return query_audit(db, AuditFilters(group_id=group_id, day=day, slot_id=slot_id))


def audit_statistics(db: Session, *, date_from: str | None = None, date_to: str | None = None) -> AuditStatistics:
    date_from = _clean_text(date_from)
    date_to = _clean_text(date_to)

    totals_query = _apply_date_range(
        select(
            func.count(AuditEntry.id),
            func.count(distinct(AuditEntry.user_id)),
            func.count(distinct(AuditEntry.group_id)),
            func.min(AuditEntry.timestamp),
            func.max(AuditEntry.timestamp),
        ),
        date_from,
        date_to,
    )
    total, users, groups, first, last = db.execute(totals_query).one()

    by_type_query = _apply_date_range(
        select(AuditEntry.change_type, func.count(AuditEntry.id)),
        date_from,
        date_to,
    ).group_by(AuditEntry.change_type)
    by_type = [
        ChangeTypeCount(tipo=change_type, quantidade=count)
        for change_type, count in db.execute(by_type_query).all()
    ]

    quantity = func.count(AuditEntry.id).label("quantidade")
    by_user_query = (
        _apply_date_range(
            select(User.name, User.role, quantity)
            .select_from(AuditEntry)
            .join(User, AuditEntry.user_id == User.id),
            date_from,
            date_to,
        )
        .group_by(User.id, User.name, User.role)
        .order_by(quantity.desc(), User.name.asc())
        .limit(TOP_USERS_LIMIT)
    )
    by_user = [
        UserChangeCount(nome=name, perfil=role, quantidade=count)
        for name, role, count in db.execute(by_user_query).all()
    ]

    return AuditStatistics(
        total_alteracoes=total or 0,
        total_usuarios=users or 0,
        total_grupos=groups or 0,
        primeira_alteracao=first,
        ultima_alteracao=last,
        por_tipo=by_type,
        por_usuario=by_user,
    )
