"""Teacher-centric and class-centric projections of one group's timetable.

Lesson numbers count only ``aula`` slots: with the layout
``[aula 1, aula 2, aula 3, intervalo 4, aula 5]`` raw slot 5 is lesson 4.
Everything here is a pure function of its arguments.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from horario_escolar.schemas.grades import ClassGrade, ClassLesson, TeacherGrade, TeacherLesson
from horario_escolar.schemas.timetable import GroupTimetable, LessonContent, SlotDefinition


def iter_lessons(slots: Sequence[SlotDefinition]) -> Iterator[tuple[int, SlotDefinition]]:
    """Yield ``(lesson_number, slot)`` for the teachable slots, in layout order."""
    lesson_number = 0
    for slot in slots:
        if slot.tipo != "aula":
            continue
        lesson_number += 1
        yield lesson_number, slot


def lesson_numbers(slots: Sequence[SlotDefinition]) -> dict[int, int]:
    return {slot.id: number for number, slot in iter_lessons(slots)}


def lesson_count(slots: Sequence[SlotDefinition]) -> int:
    return sum(1 for slot in slots if slot.tipo == "aula")


def slot_id_for_lesson(slots: Sequence[SlotDefinition], lesson_number: int) -> int | None:
    for number, slot in iter_lessons(slots):
        if number == lesson_number:
            return slot.id
    return None


def _content_at(group_timetable: GroupTimetable, day: str, slot_id: int) -> LessonContent | None:
    return group_timetable.get(day, {}).get(slot_id)


def build_teacher_grade(
    group_timetable: GroupTimetable,
    slots: Sequence[SlotDefinition],
    days: Sequence[str],
) -> TeacherGrade:
    grade: TeacherGrade = {}
    for day in days:
        for number, slot in iter_lessons(slots):
            content = _content_at(group_timetable, day, slot.id)
            if content is None:
                continue
            teacher = content.professor.strip()
            if not teacher:
                continue
            grade.setdefault(teacher, {}).setdefault(day, {})[number] = TeacherLesson(
                disciplina=content.disciplina,
                turma=content.turma,
            )
    return grade


def build_class_grade(
    group_timetable: GroupTimetable,
    slots: Sequence[SlotDefinition],
    days: Sequence[str],
) -> ClassGrade:
    grade: ClassGrade = {}
    for day in days:
        for number, slot in iter_lessons(slots):
            content = _content_at(group_timetable, day, slot.id)
            if content is None:
                continue
            turma = content.turma.strip()
            if not turma:
                continue
            grade.setdefault(turma, {}).setdefault(day, {})[number] = ClassLesson(
                disciplina=content.disciplina,
                professor=content.professor,
            )
    return grade
