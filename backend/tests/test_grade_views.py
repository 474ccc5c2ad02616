from horario_escolar.schemas.timetable import LessonContent
from horario_escolar.services.grade_views import (
    build_class_grade,
    build_teacher_grade,
    lesson_count,
    lesson_numbers,
    slot_id_for_lesson,
)


def test_lesson_numbers_skip_breaks(small_layout):
    slots = small_layout.slots_for("fund2")

    assert lesson_numbers(slots) == {1: 1, 2: 2, 3: 3, 5: 4}
    assert lesson_count(slots) == 4
    assert slot_id_for_lesson(slots, 4) == 5
    assert slot_id_for_lesson(slots, 5) is None


def test_teacher_grade_uses_lesson_numbers(small_layout):
    slots = small_layout.slots_for("fund2")
    group_timetable = {
        "Segunda": {
            1: LessonContent(disciplina="Matemática", professor="Alice", turma="6A"),
            5: LessonContent(disciplina="Ciências", professor="Alice", turma="7B"),
        }
    }

    grade = build_teacher_grade(group_timetable, slots, small_layout.dias_semana)

    assert set(grade) == {"Alice"}
    assert grade["Alice"]["Segunda"][1].disciplina == "Matemática"
    assert grade["Alice"]["Segunda"][4].turma == "7B"
    assert "Terça" not in grade["Alice"]


def test_blank_teacher_never_appears_in_teacher_grade(small_layout):
    slots = small_layout.slots_for("fund2")
    group_timetable = {
        "Segunda": {
            1: LessonContent(disciplina="Artes", professor="   ", turma="6A"),
            2: LessonContent(disciplina="História", professor="", turma="6A"),
        }
    }

    assert build_teacher_grade(group_timetable, slots, small_layout.dias_semana) == {}
    # The class view still sees both lessons.
    class_grade = build_class_grade(group_timetable, slots, small_layout.dias_semana)
    assert sorted(class_grade["6A"]["Segunda"]) == [1, 2]


def test_teacher_key_is_trimmed(small_layout):
    slots = small_layout.slots_for("fund2")
    group_timetable = {
        "Segunda": {1: LessonContent(disciplina="Geografia", professor="  Bruno ", turma="8C")},
        "Terça": {2: LessonContent(disciplina="Geografia", professor="Bruno", turma="8C")},
    }

    grade = build_teacher_grade(group_timetable, slots, small_layout.dias_semana)

    assert list(grade) == ["Bruno"]
    assert set(grade["Bruno"]) == {"Segunda", "Terça"}


def test_content_on_break_slot_is_ignored(small_layout):
    slots = small_layout.slots_for("fund2")
    group_timetable = {"Segunda": {4: LessonContent(disciplina="Recreio", professor="Carla", turma="6A")}}

    assert build_teacher_grade(group_timetable, slots, small_layout.dias_semana) == {}
    assert build_class_grade(group_timetable, slots, small_layout.dias_semana) == {}
