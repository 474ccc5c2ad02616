from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from horario_escolar.schemas.timetable import ContentField, Timetable
from horario_escolar.schemas.user import UserRef


class SnapshotCreate(BaseModel):
    nome: str = Field(min_length=1, max_length=200)
    descricao: str | None = Field(default=None, max_length=2000)
    # Omitted means "capture the live timetable".
    dados: Timetable | None = None

    @field_validator("nome")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Nome da versão é obrigatório")
        return trimmed

    @field_validator("descricao")
    @classmethod
    def normalize_description(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class SnapshotCreated(BaseModel):
    id: int
    nome: str
    descricao: str | None
    criado_em: datetime = Field(alias="criadoEm")

    model_config = ConfigDict(populate_by_name=True)


class SnapshotSummary(SnapshotCreated):
    usuario: UserRef


class SnapshotOut(SnapshotSummary):
    dados: Timetable


class SnapshotDiffEntry(BaseModel):
    dia: str
    aula: int
    campo: ContentField
    de: str
    para: str


class SnapshotDiff(BaseModel):
    snapshot_id: int = Field(alias="snapshotId")
    grupo_id: str = Field(alias="grupoId")
    diferencas: list[SnapshotDiffEntry]

    model_config = ConfigDict(populate_by_name=True)


class RestoreResult(BaseModel):
    snapshot_id: int = Field(alias="snapshotId")
    nome: str
    grupos: list[str]
    aulas_restauradas: int = Field(alias="aulasRestauradas")

    model_config = ConfigDict(populate_by_name=True)
