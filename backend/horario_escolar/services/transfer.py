from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy.orm import Session

from horario_escolar.models.user import User
from horario_escolar.schemas.timetable import SchoolLayout
from horario_escolar.schemas.transfer import EXPORT_FORMAT_VERSION, ExportBundle, ImportRequest, ImportResult
from horario_escolar.services.timetable_store import read_full_timetable, replace_timetable

logger = logging.getLogger(__name__)


def build_export(db: Session, layout: SchoolLayout) -> ExportBundle:
    return ExportBundle(
        versao=EXPORT_FORMAT_VERSION,
        exportado_em=datetime.now(timezone.utc),
        configuracao=layout,
        horarios=read_full_timetable(db, layout),
    )


def import_timetable(db: Session, layout: SchoolLayout, request: ImportRequest, *, user: User) -> ImportResult:
    """Replace the live timetable with an uploaded bundle.

    Only ``horarios`` is applied. A bundled ``configuracao`` that differs from
    the live layout is logged and otherwise ignored.
    """
    if request.configuracao is not None and request.configuracao != layout:
        logger.warning("IMPORT LAYOUT IGNORED | user_id=%s | bundled layout differs from live layout", user.id)

    written = replace_timetable(
        db,
        layout,
        request.horarios,
        user=user,
        audit_details=f"Horário importado ({len(request.horarios)} grupos)",
        audit_new_value={"importado": True, "versao": request.versao},
    )
    logger.info("TIMETABLE IMPORTED | user_id=%s | slots=%s", user.id, written)
    return ImportResult(grupos=sorted(request.horarios), aulas_importadas=written)
