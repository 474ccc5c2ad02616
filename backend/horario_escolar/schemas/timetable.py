from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from horario_escolar.core.exceptions import UnknownGroupError

SlotType = Literal["aula", "intervalo"]
ContentField = Literal["turma", "disciplina", "professor"]

# Order used when comparing or auditing the three content fields.
CONTENT_FIELDS: tuple[ContentField, ...] = ("turma", "disciplina", "professor")


class LessonContent(BaseModel):
    """Subject, teacher and class of one occupied slot. Missing values are ''."""

    disciplina: str = Field(default="", max_length=200)
    professor: str = Field(default="", max_length=200)
    turma: str = Field(default="", max_length=100)

    @field_validator("disciplina", "professor", "turma", mode="before")
    @classmethod
    def none_as_empty(cls, value: str | None) -> str:
        if value is None:
            return ""
        return value

    def is_empty(self) -> bool:
        return not (self.disciplina or self.professor or self.turma)

    def storage_values(self) -> dict[str, str | None]:
        return {
            "disciplina": self.disciplina or None,
            "professor": self.professor or None,
            "turma": self.turma or None,
        }


# day -> slotId -> content
GroupTimetable = dict[str, dict[int, LessonContent | None]]
# groupId -> day -> slotId -> content
Timetable = dict[str, GroupTimetable]

timetable_adapter: TypeAdapter[Timetable] = TypeAdapter(Timetable)


def parse_timetable(raw: dict) -> Timetable:
    return timetable_adapter.validate_python(raw)


def serialize_timetable(timetable: Timetable) -> dict:
    """JSON-ready copy with string slot keys, suitable for a JSON column."""
    return timetable_adapter.dump_python(timetable, mode="json")


class SlotDefinition(BaseModel):
    id: int = Field(ge=1)
    label: str = Field(default="", max_length=100)
    tipo: SlotType


class GroupInfo(BaseModel):
    id: str = Field(min_length=1, max_length=50)
    nome: str = Field(min_length=1, max_length=200)
    descricao: str = Field(default="", max_length=500)


class SchoolLayout(BaseModel):
    grupos: list[GroupInfo] = Field(min_length=1)
    slots_por_grupo: dict[str, list[SlotDefinition]] = Field(alias="slotsPorGrupo")
    dias_semana: list[str] = Field(alias="diasSemana", min_length=1)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("dias_semana")
    @classmethod
    def validate_days(cls, value: list[str]) -> list[str]:
        days = [day.strip() for day in value]
        if any(not day for day in days):
            raise ValueError("Dias da semana não podem ser vazios")
        if len(set(days)) != len(days):
            raise ValueError("Dias da semana repetidos")
        return days

    @model_validator(mode="after")
    def validate_groups_and_slots(self) -> "SchoolLayout":
        group_ids = [group.id for group in self.grupos]
        if len(set(group_ids)) != len(group_ids):
            raise ValueError("Ids de grupo repetidos")
        for group_id in group_ids:
            slots = self.slots_por_grupo.get(group_id)
            if not slots:
                raise ValueError(f"Grupo '{group_id}' não tem horários definidos")
            slot_ids = [slot.id for slot in slots]
            if len(set(slot_ids)) != len(slot_ids):
                raise ValueError(f"Grupo '{group_id}' tem ids de horário repetidos")
        return self

    def group(self, group_id: str) -> GroupInfo:
        for group in self.grupos:
            if group.id == group_id:
                return group
        raise UnknownGroupError(group_id)

    def slots_for(self, group_id: str) -> list[SlotDefinition]:
        self.group(group_id)
        return self.slots_por_grupo[group_id]


class SlotReference(BaseModel):
    grupo_id: str = Field(alias="grupoId", min_length=1, max_length=50)
    dia: str = Field(min_length=1, max_length=20)
    slot_id: int = Field(alias="slotId", ge=1)

    model_config = ConfigDict(populate_by_name=True)


class SlotSaveRequest(SlotReference):
    disciplina: str | None = Field(default=None, max_length=200)
    professor: str | None = Field(default=None, max_length=200)
    turma: str | None = Field(default=None, max_length=100)

    def content(self) -> LessonContent:
        return LessonContent(disciplina=self.disciplina, professor=self.professor, turma=self.turma)


class SlotSaveResult(BaseModel):
    id: int
    criado: bool


class SlotClearResult(BaseModel):
    success: bool = True
    limpo: bool


class GroupClearResult(BaseModel):
    grupo_id: str = Field(alias="grupoId")
    slots_limpos: int = Field(alias="slotsLimpos")

    model_config = ConfigDict(populate_by_name=True)
