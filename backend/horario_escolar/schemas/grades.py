from pydantic import BaseModel, ConfigDict, Field


class TeacherLesson(BaseModel):
    disciplina: str
    turma: str


class ClassLesson(BaseModel):
    disciplina: str
    professor: str


# teacher -> day -> lessonNumber -> lesson
TeacherGrade = dict[str, dict[str, dict[int, TeacherLesson]]]
# turma -> day -> lessonNumber -> lesson
ClassGrade = dict[str, dict[str, dict[int, ClassLesson]]]


class GroupGrades(BaseModel):
    grupo_id: str = Field(alias="grupoId")
    professores: TeacherGrade
    turmas: ClassGrade

    model_config = ConfigDict(populate_by_name=True)
