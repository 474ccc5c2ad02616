from pydantic import BaseModel, ConfigDict, Field

from horario_escolar.schemas.timetable import GroupTimetable, Timetable


class ConflictOccurrence(BaseModel):
    grupo: str
    turma: str
    disciplina: str


class TeacherConflict(BaseModel):
    dia: str
    num_aula: int = Field(alias="numAula")
    professor: str
    ocorrencias: list[ConflictOccurrence]

    model_config = ConfigDict(populate_by_name=True)


class ConflictReport(BaseModel):
    conflitos: list[TeacherConflict]


class ClassAlert(BaseModel):
    turma: str
    mensagens: list[str]


class QualityReport(BaseModel):
    grupo_id: str = Field(alias="grupoId")
    alertas: list[ClassAlert]

    model_config = ConfigDict(populate_by_name=True)


class DraftTimetable(BaseModel):
    """A what-if timetable posted by the simulator instead of reading the live one."""

    horarios: Timetable


class DraftGroupTimetable(BaseModel):
    horario: GroupTimetable


class WorkloadItem(BaseModel):
    nome: str
    aulas: int


class DayOccupancy(BaseModel):
    dia: str
    aulas: int


class GroupOccupancy(BaseModel):
    grupo_id: str = Field(alias="grupoId")
    grupo: str
    aulas: int

    model_config = ConfigDict(populate_by_name=True)


class DashboardStats(BaseModel):
    """Totals, top workloads and occupancy of a timetable. ``taxaOcupacao`` is a percentage."""

    total_aulas: int = Field(alias="totalAulas")
    total_professores: int = Field(alias="totalProfessores")
    total_turmas: int = Field(alias="totalTurmas")
    total_disciplinas: int = Field(alias="totalDisciplinas")
    grupos_com_horario: int = Field(alias="gruposComHorario")
    carga_professores: list[WorkloadItem] = Field(alias="cargaProfessores")
    carga_turmas: list[WorkloadItem] = Field(alias="cargaTurmas")
    carga_disciplinas: list[WorkloadItem] = Field(alias="cargaDisciplinas")
    ocupacao_por_dia: list[DayOccupancy] = Field(alias="ocupacaoPorDia")
    ocupacao_por_grupo: list[GroupOccupancy] = Field(alias="ocupacaoPorGrupo")
    media_aulas_por_dia: float = Field(alias="mediaAulasPorDia")
    taxa_ocupacao: float = Field(alias="taxaOcupacao")

    model_config = ConfigDict(populate_by_name=True)
