import pytest

from horario_escolar.core.exceptions import UnknownGroupError
from horario_escolar.schemas.grades import ClassLesson
from horario_escolar.schemas.timetable import LessonContent, SchoolLayout
from horario_escolar.services.analysis import TimetableAnalyzer, dashboard_stats, has_hole, repeated_subject_runs
from horario_escolar.services.layout import default_school_layout


def lesson(disciplina="Matemática", professor="Alice"):
    return ClassLesson(disciplina=disciplina, professor=professor)


@pytest.fixture
def two_group_layout():
    return default_school_layout()


def test_teacher_in_two_groups_at_same_lesson_is_one_conflict(two_group_layout):
    timetable = {
        "fund2": {"Segunda": {2: LessonContent(disciplina="Matemática", professor="Alice", turma="6A")}},
        "medio": {"Segunda": {2: LessonContent(disciplina="Física", professor="Alice", turma="1EM")}},
    }

    report = TimetableAnalyzer(timetable, two_group_layout).detect_teacher_conflicts()

    assert len(report.conflitos) == 1
    conflict = report.conflitos[0]
    assert (conflict.dia, conflict.num_aula, conflict.professor) == ("Segunda", 2, "Alice")
    assert [(o.grupo, o.turma) for o in conflict.ocorrencias] == [
        ("6º ao 8º ano", "6A"),
        ("9º ano e Ensino Médio", "1EM"),
    ]


def test_conflict_detection_does_not_depend_on_input_order(two_group_layout):
    forward = {
        "fund2": {"Segunda": {2: LessonContent(disciplina="Matemática", professor="Alice", turma="6A")}},
        "medio": {"Segunda": {2: LessonContent(disciplina="Física", professor="Alice", turma="1EM")}},
    }
    backward = {"medio": forward["medio"], "fund2": forward["fund2"]}

    first = TimetableAnalyzer(forward, two_group_layout).detect_teacher_conflicts()
    second = TimetableAnalyzer(backward, two_group_layout).detect_teacher_conflicts()

    assert first == second


def test_conflicts_compare_lesson_numbers_not_clock_time(two_group_layout):
    # fund2 slot 5 is lesson 4 (after the break), medio slot 4 is lesson 4 (before the break).
    # They run at different times of day but share a lesson number, so they are reported.
    timetable = {
        "fund2": {"Terça": {5: LessonContent(disciplina="Inglês", professor="Bia", turma="7A")}},
        "medio": {"Terça": {4: LessonContent(disciplina="Inglês", professor="Bia", turma="2EM")}},
    }

    report = TimetableAnalyzer(timetable, two_group_layout).detect_teacher_conflicts()

    assert [(c.dia, c.num_aula) for c in report.conflitos] == [("Terça", 4)]


def test_conflicts_sorted_by_day_then_lesson_then_teacher():
    group_ids = ["g1", "g2", "g3", "g4"]
    layout = SchoolLayout.model_validate(
        {
            "grupos": [{"id": group_id, "nome": group_id.upper()} for group_id in group_ids],
            "slotsPorGrupo": {
                group_id: [{"id": 1, "tipo": "aula"}, {"id": 2, "tipo": "aula"}] for group_id in group_ids
            },
            "diasSemana": ["Segunda", "Terça", "Quarta"],
        }
    )

    def content(teacher):
        return LessonContent(disciplina="Matemática", professor=teacher, turma="6A")

    timetable = {
        "g1": {"Quarta": {1: content("Zé")}, "Segunda": {2: content("Bia"), 1: content("Zé")}},
        "g2": {"Quarta": {1: content("Zé")}, "Segunda": {2: content("Bia"), 1: content("Zé")}},
        "g3": {"Segunda": {2: content("Ana")}},
        "g4": {"Segunda": {2: content("Ana")}},
    }

    report = TimetableAnalyzer(timetable, layout).detect_teacher_conflicts()

    assert [(c.dia, c.num_aula, c.professor) for c in report.conflitos] == [
        ("Segunda", 1, "Zé"),
        ("Segunda", 2, "Ana"),
        ("Segunda", 2, "Bia"),
        ("Quarta", 1, "Zé"),
    ]


def test_blank_teacher_is_never_a_conflict(two_group_layout):
    timetable = {
        "fund2": {"Segunda": {1: LessonContent(disciplina="Matemática", professor="  ", turma="6A")}},
        "medio": {"Segunda": {1: LessonContent(disciplina="Física", professor="", turma="1EM")}},
    }

    assert TimetableAnalyzer(timetable, two_group_layout).detect_teacher_conflicts().conflitos == []


def test_hole_detection():
    assert has_hole([lesson(), None, lesson()])
    assert not has_hole([None, lesson(), lesson()])
    assert not has_hole([lesson(), lesson(), None])
    assert not has_hole([])
    assert not has_hole([None, None, None])


def test_each_run_of_three_is_flagged():
    vector = [lesson("Matemática")] * 3 + [lesson("Artes")] * 3
    assert repeated_subject_runs(vector) == ["Matemática", "Artes"]


def test_subject_flagged_twice_for_two_separate_runs():
    vector = [lesson("Matemática")] * 3 + [lesson("Artes")] + [lesson("Matemática")] * 3
    assert repeated_subject_runs(vector) == ["Matemática", "Matemática"]


def test_runs_shorter_than_threshold_and_blank_subjects_are_not_flagged():
    vector = [lesson("Matemática"), lesson("Matemática"), None, lesson(" "), lesson(" "), lesson(" ")]
    assert repeated_subject_runs(vector) == []


def test_class_alerts_for_hole_with_break_in_between(small_layout):
    # Raw slots 1, 3 and 5 are lessons 1, 3 and 4; lesson 2 is free.
    math = LessonContent(disciplina="Matemática", professor="Alice", turma="6A")
    timetable = {"fund2": {"Segunda": {1: math, 3: math, 5: math}}}

    report = TimetableAnalyzer(timetable, small_layout).class_alerts("fund2")

    assert report.grupo_id == "fund2"
    assert [alert.turma for alert in report.alertas] == ["6A"]
    assert report.alertas[0].mensagens == ["Dia Segunda: há buracos entre aulas."]


def test_break_slot_is_not_a_hole(small_layout):
    math = LessonContent(disciplina="Matemática", professor="Alice", turma="6A")
    timetable = {"fund2": {"Segunda": {1: math, 2: math, 3: math, 5: math}}}

    report = TimetableAnalyzer(timetable, small_layout).class_alerts("fund2")

    assert report.alertas[0].mensagens == ['Dia Segunda: muitas aulas seguidas da disciplina "Matemática".']


def test_classes_without_messages_are_omitted_and_sorted(small_layout):
    timetable = {
        "fund2": {
            "Segunda": {
                1: LessonContent(disciplina="Artes", professor="Bia", turma="7B"),
                3: LessonContent(disciplina="Artes", professor="Bia", turma="7B"),
                2: LessonContent(disciplina="Matemática", professor="Alice", turma="6A"),
            },
            "Terça": {
                1: LessonContent(disciplina="História", professor="Caio", turma="6C"),
                3: LessonContent(disciplina="História", professor="Caio", turma="6C"),
            },
        }
    }

    report = TimetableAnalyzer(timetable, small_layout).class_alerts("fund2")

    assert [alert.turma for alert in report.alertas] == ["6C", "7B"]
    assert report.alertas[0].mensagens == ["Dia Terça: há buracos entre aulas."]


def test_unknown_group_raises():
    layout = SchoolLayout.model_validate(
        {
            "grupos": [{"id": "fund2", "nome": "Fundamental"}],
            "slotsPorGrupo": {"fund2": [{"id": 1, "tipo": "aula"}]},
            "diasSemana": ["Segunda"],
        }
    )

    with pytest.raises(UnknownGroupError):
        TimetableAnalyzer({}, layout).class_alerts("medio")


def test_missing_fields_never_raise(small_layout):
    timetable = {"fund2": {"Segunda": {1: LessonContent(), 2: None}}}

    analyzer = TimetableAnalyzer(timetable, small_layout)

    assert analyzer.class_alerts("fund2").alertas == []
    assert analyzer.detect_teacher_conflicts().conflitos == []


def test_dashboard_counts_lessons_on_teachable_slots_only(small_layout):
    timetable = {
        "fund2": {
            "Segunda": {
                1: LessonContent(disciplina="Matemática", professor="Alice", turma="6A"),
                2: LessonContent(disciplina="Matemática", professor=" Alice ", turma="6A"),
                3: LessonContent(disciplina="Artes", professor="", turma="7B"),
                4: LessonContent(disciplina="Recreio"),
            },
            "Terça": {
                1: LessonContent(disciplina="História", professor="Bruno", turma="6A"),
                5: LessonContent(),
            },
            "Domingo": {1: LessonContent(disciplina="Plantão")},
        },
        "medio": {"Segunda": {1: LessonContent(disciplina="Física", professor="Carla", turma="1EM")}},
    }

    stats = dashboard_stats(timetable, small_layout)

    assert (stats.total_aulas, stats.total_professores, stats.total_turmas, stats.total_disciplinas) == (4, 2, 2, 3)
    assert stats.grupos_com_horario == 1
    assert [(item.nome, item.aulas) for item in stats.carga_professores] == [("Alice", 2), ("Bruno", 1)]
    assert [(item.nome, item.aulas) for item in stats.carga_turmas] == [("6A", 3), ("7B", 1)]
    assert [(item.nome, item.aulas) for item in stats.carga_disciplinas] == [
        ("Matemática", 2),
        ("Artes", 1),
        ("História", 1),
    ]
    assert [(item.dia, item.aulas) for item in stats.ocupacao_por_dia] == [("Segunda", 3), ("Terça", 1)]
    assert [(item.grupo_id, item.grupo, item.aulas) for item in stats.ocupacao_por_grupo] == [("fund2", "6º ao 8º ano", 4)]
    assert stats.media_aulas_por_dia == 2.0
    assert stats.taxa_ocupacao == 50.0


def test_dashboard_workloads_keep_the_ten_busiest(two_group_layout):
    monday = {slot_id: LessonContent(disciplina="Matemática", professor=f"Prof {slot_id:02d}") for slot_id in (1, 2, 3, 5, 6, 7)}
    tuesday = {slot_id: LessonContent(disciplina="Física", professor=f"Prof {slot_id + 10:02d}") for slot_id in (1, 2, 3, 5, 6, 7)}
    tuesday[1] = LessonContent(disciplina="Física", professor="Prof 07")

    stats = dashboard_stats({"fund2": {"Segunda": monday, "Terça": tuesday}}, two_group_layout)

    assert stats.total_professores == 11
    assert len(stats.carga_professores) == 10
    assert (stats.carga_professores[0].nome, stats.carga_professores[0].aulas) == ("Prof 07", 2)
    assert [(item.grupo_id, item.aulas) for item in stats.ocupacao_por_grupo] == [("fund2", 12), ("medio", 0)]


def test_dashboard_of_empty_timetable(two_group_layout):
    stats = dashboard_stats({}, two_group_layout)

    assert stats.total_aulas == 0
    assert stats.grupos_com_horario == 0
    assert stats.carga_professores == []
    assert [item.aulas for item in stats.ocupacao_por_dia] == [0, 0, 0, 0, 0]
    assert stats.taxa_ocupacao == 0.0
