from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from horario_escolar.models.activity_log import ActivityLog
from horario_escolar.models.user import User

logger = logging.getLogger(__name__)

ROLE_LABELS = {
    "direcao": "Direção",
    "vice_direcao": "Vice-direção",
    "coordenacao": "Coordenação",
    "goe": "GOE",
    "aoe": "AOE",
    "professor": "Professor",
}


def user_label(user: User) -> str:
    return f"{user.name} ({ROLE_LABELS.get(user.role.value, user.role.value)})"


def mirror_activity(
    db: Session,
    *,
    user: User | None,
    action: str,
    message: str,
    group_id: str | None = None,
    entity_type: str | None = None,
    entity_id: str | None = None,
    details: dict | None = None,
) -> bool:
    """Best-effort coarse log, committed on its own after the primary change.

    Failures are logged and swallowed; callers must not report the mirror as written.
    """
    record = ActivityLog(
        user_id=user.id if user is not None else None,
        user_label=user_label(user) if user is not None else None,
        action=action,
        message=message,
        group_id=group_id,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details or {},
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("ACTIVITY MIRROR FAILED | action=%s | user_id=%s", action, record.user_id)
        return False
    return True
