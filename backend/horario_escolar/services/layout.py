from __future__ import annotations

from sqlalchemy.orm import Session

from horario_escolar.core.exceptions import TimetableValidationError
from horario_escolar.models.school_setting import SchoolSetting
from horario_escolar.models.user import User
from horario_escolar.schemas.timetable import SchoolLayout
from horario_escolar.services.timetable_store import stranded_lessons

LAYOUT_SETTING_KEY = "school_layout"

DEFAULT_SCHOOL_LAYOUT: dict = {
    "grupos": [
        {
            "id": "fund2",
            "nome": "6º ao 8º ano",
            "descricao": "Intervalo às 9h30 (após a 3ª aula)",
        },
        {
            "id": "medio",
            "nome": "9º ano e Ensino Médio",
            "descricao": "Intervalo às 10h20 (após a 4ª aula)",
        },
    ],
    "slotsPorGrupo": {
        "fund2": [
            {"id": 1, "label": "07:00 - 07:50 (Aula 1)", "tipo": "aula"},
            {"id": 2, "label": "07:50 - 08:40 (Aula 2)", "tipo": "aula"},
            {"id": 3, "label": "08:40 - 09:30 (Aula 3)", "tipo": "aula"},
            {"id": 4, "label": "09:30 - 09:50 (Intervalo)", "tipo": "intervalo"},
            {"id": 5, "label": "09:50 - 10:40 (Aula 4)", "tipo": "aula"},
            {"id": 6, "label": "10:40 - 11:30 (Aula 5)", "tipo": "aula"},
            {"id": 7, "label": "11:30 - 12:20 (Aula 6)", "tipo": "aula"},
        ],
        "medio": [
            {"id": 1, "label": "07:00 - 07:50 (Aula 1)", "tipo": "aula"},
            {"id": 2, "label": "07:50 - 08:40 (Aula 2)", "tipo": "aula"},
            {"id": 3, "label": "08:40 - 09:30 (Aula 3)", "tipo": "aula"},
            {"id": 4, "label": "09:30 - 10:20 (Aula 4)", "tipo": "aula"},
            {"id": 5, "label": "10:20 - 10:40 (Intervalo)", "tipo": "intervalo"},
            {"id": 6, "label": "10:40 - 11:30 (Aula 5)", "tipo": "aula"},
            {"id": 7, "label": "11:30 - 12:20 (Aula 6)", "tipo": "aula"},
        ],
    },
    "diasSemana": ["Segunda", "Terça", "Quarta", "Quinta", "Sexta"],
}


def default_school_layout() -> SchoolLayout:
    return SchoolLayout.model_validate(DEFAULT_SCHOOL_LAYOUT)


def load_school_layout(db: Session) -> SchoolLayout:
    record = db.get(SchoolSetting, LAYOUT_SETTING_KEY)
    if record is None:
        return default_school_layout()
    return SchoolLayout.model_validate(record.value)


def save_school_layout(db: Session, layout: SchoolLayout, *, user: User) -> SchoolLayout:
    """Store ``layout`` as the live configuration. The caller commits.

    A layout that would remove a group, day or slot holding a lesson, or turn
    such a slot into a break, is rejected; the lesson has to be cleared first.
    """
    stranded = stranded_lessons(db, layout)
    if stranded:
        raise TimetableValidationError(
            f"A configuração deixaria {len(stranded)} aula(s) fora do horário; limpe esses horários antes",
            details={
                "ocupados": [
                    {"grupoId": row.group_id, "dia": row.day, "slotId": row.slot_id} for row in stranded
                ]
            },
        )

    value = layout.model_dump(by_alias=True, mode="json")
    record = db.get(SchoolSetting, LAYOUT_SETTING_KEY)
    if record is None:
        record = SchoolSetting(key=LAYOUT_SETTING_KEY, value=value, updated_by_id=user.id)
        db.add(record)
    else:
        record.value = value
        record.updated_by_id = user.id
    return layout
