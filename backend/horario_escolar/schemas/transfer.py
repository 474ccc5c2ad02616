from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from horario_escolar.schemas.timetable import SchoolLayout, Timetable

EXPORT_FORMAT_VERSION = "1.0"


class ExportBundle(BaseModel):
    versao: str = EXPORT_FORMAT_VERSION
    exportado_em: datetime = Field(alias="exportadoEm")
    configuracao: SchoolLayout
    horarios: Timetable

    model_config = ConfigDict(populate_by_name=True)


class ImportRequest(BaseModel):
    """Accepts a full export bundle or just ``{"horarios": ...}``. The layout part is not applied."""

    horarios: Timetable
    configuracao: SchoolLayout | None = None
    versao: str | None = None


class ImportResult(BaseModel):
    grupos: list[str]
    aulas_importadas: int = Field(alias="aulasImportadas")

    model_config = ConfigDict(populate_by_name=True)
