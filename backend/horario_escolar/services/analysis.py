from collections import Counter, defaultdict
from collections.abc import Sequence
from typing import Dict, List, Optional, Tuple

from horario_escolar.schemas.analysis import (
    ClassAlert,
    ConflictOccurrence,
    ConflictReport,
    DashboardStats,
    DayOccupancy,
    GroupOccupancy,
    QualityReport,
    TeacherConflict,
    WorkloadItem,
)
from horario_escolar.schemas.grades import ClassLesson
from horario_escolar.schemas.timetable import SchoolLayout, Timetable
from horario_escolar.services.grade_views import build_class_grade, iter_lessons, lesson_count

REPETITION_THRESHOLD = 3
DASHBOARD_TOP_LIMIT = 10


def has_hole(vector: Sequence[Optional[ClassLesson]]) -> bool:
    """True when an interior lesson is free while the class has lessons before and after it."""
    for i in range(1, len(vector) - 1):
        if vector[i] is not None:
            continue
        before = any(item is not None for item in vector[:i])
        after = any(item is not None for item in vector[i + 1:])
        if before and after:
            return True
    return False


def repeated_subject_runs(
    vector: Sequence[Optional[ClassLesson]],
    threshold: int = REPETITION_THRESHOLD,
) -> List[str]:
    """Subjects that occupy ``threshold`` or more consecutive lessons, once per run."""
    flagged: List[str] = []
    current = ""
    count = 0
    for lesson in vector:
        subject = lesson.disciplina.strip() if lesson is not None else ""
        if subject and subject == current:
            count += 1
            continue
        if current and count >= threshold:
            flagged.append(current)
        current = subject
        count = 1 if subject else 0
    if current and count >= threshold:
        flagged.append(current)
    return flagged


class TimetableAnalyzer:
    """Conflict and quality checks over a multi-group timetable (live or draft).

    Teacher clashes are compared by lesson number, not clock time: groups with
    different break positions can report a clash between lessons that do not
    overlap on the wall clock, and miss ones that do.
    """

    def __init__(self, timetable: Timetable, layout: SchoolLayout):
        self.timetable = timetable
        self.layout = layout
        self.days: List[str] = layout.dias_semana

    def detect_teacher_conflicts(self) -> ConflictReport:
        occurrences: Dict[Tuple[str, int, str], List[ConflictOccurrence]] = defaultdict(list)

        for group in self.layout.grupos:
            group_timetable = self.timetable.get(group.id)
            if not group_timetable:
                continue
            slots = self.layout.slots_for(group.id)
            for day in self.days:
                day_slots = group_timetable.get(day, {})
                for number, slot in iter_lessons(slots):
                    content = day_slots.get(slot.id)
                    if content is None:
                        continue
                    teacher = content.professor.strip()
                    if not teacher:
                        continue
                    occurrences[(day, number, teacher)].append(
                        ConflictOccurrence(
                            grupo=group.nome,
                            turma=content.turma,
                            disciplina=content.disciplina,
                        )
                    )

        day_order = {day: index for index, day in enumerate(self.days)}
        conflicts = [
            TeacherConflict(dia=day, num_aula=number, professor=teacher, ocorrencias=items)
            for (day, number, teacher), items in occurrences.items()
            if len(items) > 1
        ]
        conflicts.sort(key=lambda c: (day_order.get(c.dia, len(day_order)), c.num_aula, c.professor))
        return ConflictReport(conflitos=conflicts)

    def class_alerts(self, group_id: str) -> QualityReport:
        slots = self.layout.slots_for(group_id)
        group_timetable = self.timetable.get(group_id, {})
        class_grade = build_class_grade(group_timetable, slots, self.days)
        total_lessons = lesson_count(slots)

        alerts: List[ClassAlert] = []
        for turma in sorted(class_grade):
            messages: List[str] = []
            for day in self.days:
                lessons = class_grade[turma].get(day, {})
                vector = [lessons.get(number) for number in range(1, total_lessons + 1)]

                if has_hole(vector):
                    messages.append(f"Dia {day}: há buracos entre aulas.")
                for subject in repeated_subject_runs(vector):
                    messages.append(f'Dia {day}: muitas aulas seguidas da disciplina "{subject}".')

            if messages:
                alerts.append(ClassAlert(turma=turma, mensagens=messages))

        return QualityReport(grupo_id=group_id, alertas=alerts)


def top_workloads(counts: Counter, limit: int = DASHBOARD_TOP_LIMIT) -> List[WorkloadItem]:
    """Most frequent names first, ties in alphabetical order."""
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [WorkloadItem(nome=name, aulas=total) for name, total in ranked[:limit]]


def dashboard_stats(timetable: Timetable, layout: SchoolLayout) -> DashboardStats:
    """Overview figures for a timetable (live or draft).

    A lesson is a teachable slot with any content. Teacher, class and subject
    names are trimmed before counting and blank ones are skipped. Groups, days
    and slots outside ``layout`` are ignored.
    """
    teachers: Counter = Counter()
    classes: Counter = Counter()
    subjects: Counter = Counter()
    per_day: Counter = Counter()
    per_group: List[GroupOccupancy] = []
    days = layout.dias_semana
    teachable_slots = 0

    for group in layout.grupos:
        lessons = list(iter_lessons(layout.slots_for(group.id)))
        teachable_slots += len(lessons) * len(days)
        group_timetable = timetable.get(group.id, {})
        group_total = 0
        for day in days:
            day_slots = group_timetable.get(day, {})
            for _, slot in lessons:
                content = day_slots.get(slot.id)
                if content is None or content.is_empty():
                    continue
                group_total += 1
                per_day[day] += 1
                for counter, value in (
                    (teachers, content.professor),
                    (classes, content.turma),
                    (subjects, content.disciplina),
                ):
                    name = value.strip()
                    if name:
                        counter[name] += 1
        per_group.append(GroupOccupancy(grupo_id=group.id, grupo=group.nome, aulas=group_total))

    total = sum(item.aulas for item in per_group)
    return DashboardStats(
        total_aulas=total,
        total_professores=len(teachers),
        total_turmas=len(classes),
        total_disciplinas=len(subjects),
        grupos_com_horario=sum(1 for item in per_group if item.aulas),
        carga_professores=top_workloads(teachers),
        carga_turmas=top_workloads(classes),
        carga_disciplinas=top_workloads(subjects),
        ocupacao_por_dia=[DayOccupancy(dia=day, aulas=per_day[day]) for day in days],
        ocupacao_por_grupo=per_group,
        media_aulas_por_dia=round(total / len(days), 1) if days else 0.0,
        taxa_ocupacao=round(total * 100 / teachable_slots, 1) if teachable_slots else 0.0,
    )
